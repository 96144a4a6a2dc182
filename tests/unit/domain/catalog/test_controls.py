"""Tests for filter control parameter editing."""

import pytest

from cardscope.domain.catalog.model.facet import FacetDefinition, MemberState, Mode
from cardscope.domain.catalog.model.registry import FacetRegistry
from cardscope.domain.catalog.service.controls import (
    clear_filters,
    cycle_member,
    member_state,
    remove_value,
    set_containment_mode,
    set_member,
    set_range,
    toggle_value,
)


@pytest.fixture
def keywords(registry: FacetRegistry) -> FacetDefinition:
    return registry.get("keywords")


@pytest.fixture
def types(registry: FacetRegistry) -> FacetDefinition:
    return registry.get("primary_types")


@pytest.fixture
def cost(registry: FacetRegistry) -> FacetDefinition:
    return registry.get("cost")


@pytest.fixture
def xp(registry: FacetRegistry) -> FacetDefinition:
    return registry.get("xp")


class TestTriStateMembers:
    def test_cycle_goes_neutral_include_exclude_neutral(self, keywords: FacetDefinition):
        params: dict[str, str] = {}

        params = cycle_member(params, keywords, "Guard")
        assert params == {"keywords_inc": "Guard"}

        params = cycle_member(params, keywords, "Guard")
        assert params == {"keywords_exc": "Guard"}

        params = cycle_member(params, keywords, "Guard")
        assert params == {}

    def test_member_is_never_on_both_lists(self, keywords: FacetDefinition):
        params = {"keywords_inc": "Guard,Arcane", "keywords_exc": "Guard"}

        out = set_member(params, keywords, "Guard", MemberState.EXCLUDE)

        assert out == {"keywords_inc": "Arcane", "keywords_exc": "Guard"}
        assert member_state(out, keywords, "Guard") is MemberState.EXCLUDE

    def test_input_is_not_mutated(self, keywords: FacetDefinition):
        params = {"keywords_inc": "Guard"}

        set_member(params, keywords, "Arcane", MemberState.INCLUDE)

        assert params == {"keywords_inc": "Guard"}

    def test_pagination_is_dropped(self, keywords: FacetDefinition):
        out = set_member({"offset": "72", "limit": "72"}, keywords, "Guard", MemberState.INCLUDE)

        assert out == {"keywords_inc": "Guard"}


class TestContainmentModes:
    def test_default_mode_with_empty_list_is_not_persisted(self, types: FacetDefinition):
        out = set_containment_mode({}, types, MemberState.INCLUDE, Mode.AND)

        assert out == {}

    def test_non_default_mode_is_persisted(self, types: FacetDefinition):
        out = set_containment_mode({}, types, MemberState.INCLUDE, Mode.OR)

        assert out == {"primary_types_inc_mode": "or"}

    def test_default_mode_kept_while_list_non_empty(self, types: FacetDefinition):
        params = {"primary_types_exc": "Event"}

        out = set_containment_mode(params, types, MemberState.EXCLUDE, Mode.OR)

        assert out == {"primary_types_exc": "Event", "primary_types_exc_mode": "or"}

    def test_emptying_a_list_drops_its_default_mode(self, types: FacetDefinition):
        params = {"primary_types_inc": "Ally", "primary_types_inc_mode": "and"}

        out = set_member(params, types, "Ally", MemberState.NEUTRAL)

        assert out == {}


class TestToggleAndRemove:
    def test_toggle_adds_then_removes(self):
        out = toggle_value({"sets": "Core"}, "sets", "Expansion")
        assert out == {"sets": "Core,Expansion"}

        out = toggle_value(out, "sets", "Core")
        assert out == {"sets": "Expansion"}

        assert toggle_value(out, "sets", "Expansion") == {}

    def test_remove_single_value(self):
        out = remove_value({"keywords_inc": "Guard,Arcane"}, "keywords_inc", "Guard")

        assert out == {"keywords_inc": "Arcane"}

    def test_remove_whole_param(self):
        out = remove_value({"q": "bolt", "cost_max": "3"}, "q")

        assert out == {"cost_max": "3"}

    def test_clear_keeps_sort(self):
        params = {"q": "bolt", "sort_by": "cost", "sort_dir": "desc", "offset": "24"}

        assert clear_filters(params) == {"sort_by": "cost", "sort_dir": "desc"}


class TestSetRange:
    def test_bounds_at_absolute_limits_are_removed(self, cost: FacetDefinition):
        out = set_range({"cost_min": "2", "cost_max": "5"}, cost, lo=0, hi=16)

        assert out == {}

    def test_bounds_are_clamped_and_swapped(self, cost: FacetDefinition):
        out = set_range({}, cost, lo=20, hi=3)

        assert out == {"cost_min": "3"}

    def test_untouched_bound_is_kept(self, cost: FacetDefinition):
        out = set_range({"cost_min": "2"}, cost, hi=6)

        assert out == {"cost_min": "2", "cost_max": "6"}

    def test_fractional_bound(self, cost: FacetDefinition):
        assert set_range({}, cost, hi=2.5) == {"cost_max": "2.5"}

    def test_only_null_clears_other_flags(self, xp: FacetDefinition):
        params = {"xp_include_null": "1", "xp_only_variable": "1"}

        out = set_range(params, xp, only_null=True)

        assert out == {"xp_only_null": "1"}

    def test_only_variable_clears_other_flags(self, xp: FacetDefinition):
        params = {"xp_only_null": "1", "xp_include_variable": "1"}

        out = set_range(params, xp, only_variable=True)

        assert out == {"xp_only_variable": "1"}

    def test_include_null_cleared_when_zero_leaves_range(self, cost: FacetDefinition):
        out = set_range({"cost_include_null": "1"}, cost, lo=3)

        assert out == {"cost_min": "3"}

    def test_include_null_kept_while_zero_in_range(self, cost: FacetDefinition):
        out = set_range({}, cost, hi=4, include_null=True)

        assert out == {"cost_max": "4", "cost_include_null": "1"}

    def test_variable_flags_ignored_without_variable_field(self, cost: FacetDefinition):
        out = set_range({}, cost, hi=4, include_variable=True)

        assert out == {"cost_max": "4"}

    def test_rejects_non_range_facet(self, keywords: FacetDefinition):
        with pytest.raises(ValueError):
            set_range({}, keywords, lo=1)
