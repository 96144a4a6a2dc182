"""Parameter editing for filter controls.

Every function takes the current parameter map and returns a new one; the
input is never mutated. Pagination keys are always dropped from the output
since any filter change restarts paging.
"""

from collections.abc import Mapping

from cardscope.domain.catalog.model.facet import FacetDefinition, FacetKind, MemberState, Mode
from cardscope.domain.catalog.model.filter_state import PAGINATION_KEYS, FilterState
from cardscope.domain.catalog.service.compiler import (
    SORT_BY_PARAM,
    SORT_DIR_PARAM,
    is_set,
    parse_number,
    split_csv,
)
from cardscope.domain.shared.error import CompileError

Params = dict[str, str]

_CYCLE = {
    MemberState.NEUTRAL: MemberState.INCLUDE,
    MemberState.INCLUDE: MemberState.EXCLUDE,
    MemberState.EXCLUDE: MemberState.NEUTRAL,
}


def _copy(params: Mapping[str, str]) -> Params:
    return {
        k: v
        for k, v in params.items()
        if k not in PAGINATION_KEYS and v is not None and str(v).strip()
    }


def _put_list(params: Params, key: str, values: list[str]) -> None:
    if values:
        params[key] = ",".join(values)
    else:
        params.pop(key, None)


def _put_flag(params: Params, key: str, on: bool) -> None:
    if on:
        params[key] = "1"
    else:
        params.pop(key, None)


def _fmt(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


# =============================================================================
# Tri-state members
# =============================================================================


def member_state(params: Mapping[str, str], facet: FacetDefinition, value: str) -> MemberState:
    if value in split_csv(params.get(facet.include_param)):
        return MemberState.INCLUDE
    if value in split_csv(params.get(facet.exclude_param)):
        return MemberState.EXCLUDE
    return MemberState.NEUTRAL


def set_member(
    params: Mapping[str, str], facet: FacetDefinition, value: str, state: MemberState
) -> Params:
    """Place ``value`` in exactly one of include, exclude or neither."""
    out = _copy(params)
    include = [v for v in split_csv(out.get(facet.include_param)) if v != value]
    exclude = [v for v in split_csv(out.get(facet.exclude_param)) if v != value]
    if state is MemberState.INCLUDE:
        include.append(value)
    elif state is MemberState.EXCLUDE:
        exclude.append(value)
    _put_list(out, facet.include_param, include)
    _put_list(out, facet.exclude_param, exclude)
    if facet.kind is FacetKind.CONTAINMENT:
        _tidy_modes(out, facet)
    return out


def cycle_member(params: Mapping[str, str], facet: FacetDefinition, value: str) -> Params:
    """Advance a member neutral -> include -> exclude -> neutral."""
    return set_member(params, facet, value, _CYCLE[member_state(params, facet, value)])


# =============================================================================
# Multi-selects
# =============================================================================


def toggle_value(params: Mapping[str, str], key: str, value: str) -> Params:
    """Add ``value`` to the CSV list under ``key``, or remove it if present."""
    out = _copy(params)
    values = split_csv(out.get(key))
    if value in values:
        values.remove(value)
    else:
        values.append(value)
    _put_list(out, key, values)
    return out


def _tidy_modes(params: Params, facet: FacetDefinition) -> None:
    """Drop mode flags that are default while their list is empty."""
    for side, list_param in (
        (MemberState.INCLUDE, facet.include_param),
        (MemberState.EXCLUDE, facet.exclude_param),
    ):
        key = facet.mode_param(side)
        if key in params and params[key] == facet.default_mode(side) and not params.get(list_param):
            del params[key]


def set_containment_mode(
    params: Mapping[str, str], facet: FacetDefinition, side: MemberState, mode: Mode
) -> Params:
    """Set a side's combinator; persisted only when non-default or its list is non-empty."""
    out = _copy(params)
    key = facet.mode_param(side)
    list_param = facet.include_param if side is MemberState.INCLUDE else facet.exclude_param
    if mode is facet.default_mode(side) and not out.get(list_param):
        out.pop(key, None)
    else:
        out[key] = mode.value
    return out


# =============================================================================
# Ranges
# =============================================================================


def _read_bound(params: Mapping[str, str], facet: FacetDefinition, param: str) -> float | None:
    try:
        return parse_number(params.get(param), facet.key)
    except CompileError:
        return None


def set_range(
    params: Mapping[str, str],
    facet: FacetDefinition,
    lo: float | None = None,
    hi: float | None = None,
    *,
    include_null: bool | None = None,
    only_null: bool | None = None,
    include_variable: bool | None = None,
    only_variable: bool | None = None,
) -> Params:
    """Update a range facet. Arguments left as None keep their current value.

    Bounds are clamped to the facet's absolute bounds and swapped when
    inverted; a bound equal to its absolute limit is removed. Sentinel flags
    are mutually exclusive: only-null clears the inclusion flags and
    only-variable, only-variable clears the rest, and include-null is kept
    only while the range admits zero.
    """
    bounds = facet.bounds
    if bounds is None:
        raise ValueError(f"{facet.key} is not a range facet")
    out = _copy(params)

    cur_lo = _read_bound(out, facet, facet.min_param)
    cur_hi = _read_bound(out, facet, facet.max_param)
    new_lo = bounds.clamp(lo if lo is not None else (cur_lo if cur_lo is not None else bounds.lo))
    new_hi = bounds.clamp(hi if hi is not None else (cur_hi if cur_hi is not None else bounds.hi))
    if new_lo > new_hi:
        new_lo, new_hi = new_hi, new_lo

    if new_lo > bounds.lo:
        out[facet.min_param] = _fmt(new_lo)
    else:
        out.pop(facet.min_param, None)
    if new_hi < bounds.hi:
        out[facet.max_param] = _fmt(new_hi)
    else:
        out.pop(facet.max_param, None)

    state = FilterState.from_params(out)
    flags = {
        "include_null": is_set(state, facet.include_null_param),
        "only_null": is_set(state, facet.only_null_param),
        "include_variable": is_set(state, facet.include_variable_param),
        "only_variable": is_set(state, facet.only_variable_param),
    }
    requested = {
        "include_null": include_null,
        "only_null": only_null,
        "include_variable": include_variable,
        "only_variable": only_variable,
    }
    for name, value in requested.items():
        if value is not None:
            flags[name] = value

    if not facet.supports_null:
        flags["include_null"] = flags["only_null"] = False
    if not facet.variable_field:
        flags["include_variable"] = flags["only_variable"] = False

    if only_null:
        flags.update(include_null=False, include_variable=False, only_variable=False)
    elif only_variable:
        flags.update(include_null=False, include_variable=False, only_null=False)
    elif flags["only_null"]:
        flags.update(include_null=False, include_variable=False, only_variable=False)
    elif flags["only_variable"]:
        flags.update(include_null=False, include_variable=False)

    if not new_lo <= 0 <= new_hi:
        flags["include_null"] = False

    _put_flag(out, facet.include_null_param, flags["include_null"])
    _put_flag(out, facet.only_null_param, flags["only_null"])
    _put_flag(out, facet.include_variable_param, flags["include_variable"])
    _put_flag(out, facet.only_variable_param, flags["only_variable"])
    return out


# =============================================================================
# Chips
# =============================================================================


def remove_value(params: Mapping[str, str], key: str, value: str | None = None) -> Params:
    """Remove one value from a CSV parameter, or the whole parameter."""
    out = _copy(params)
    if value is None:
        out.pop(key, None)
        return out
    _put_list(out, key, [v for v in split_csv(out.get(key)) if v != value])
    return out


def clear_filters(params: Mapping[str, str]) -> Params:
    """Drop every filter, keeping the sort selection."""
    return {k: v for k, v in _copy(params).items() if k in (SORT_BY_PARAM, SORT_DIR_PARAM)}
