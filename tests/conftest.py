"""Global test fixtures."""

import logfire
import pytest

from cardscope.domain.catalog.model.card import Card
from cardscope.domain.catalog.model.registry import FacetRegistry, default_registry
from cardscope.domain.catalog.service.compiler import FacetCompiler

# Spans are created but never exported
logfire.configure(send_to_logfire=False, console=False)


@pytest.fixture
def registry() -> FacetRegistry:
    return default_registry()


@pytest.fixture
def compiler(registry: FacetRegistry) -> FacetCompiler:
    return FacetCompiler(registry=registry)


@pytest.fixture
def catalog() -> list[Card]:
    """Four cards covering nulls, empty arrays and variable XP."""
    return [
        Card(
            card_id="ABC-001",
            name="Guard Dog",
            set="Core",
            set_sort=1,
            card_location="Deck",
            effect="Draw 1 card.",
            highlight_effect=None,
            cost=2,
            xp_value=0,
            xp_is_variable=False,
            wcs_tier=3,
            attack_count=1,
            primary_types=["Ally"],
            symbols=["paw"],
            keywords=["Guard"],
            subtypes=["Beast"],
        ),
        Card(
            card_id="ABC-002",
            name="Fire Bolt",
            set="Core",
            set_sort=1,
            card_location="Hand",
            effect="Deal 3 damage. Discard a card.",
            highlight_effect="Draw on kill",
            cost=None,
            xp_value=None,
            xp_is_variable=False,
            wcs_tier=None,
            attack_count=2,
            primary_types=["Event"],
            symbols=[],
            keywords=[],
            subtypes=None,
        ),
        Card(
            card_id="ABC-003",
            name="Arcane Study",
            set="Expansion",
            set_sort=2,
            card_location="Deck",
            effect="Search your deck.",
            highlight_effect=None,
            cost=0,
            xp_value=None,
            xp_is_variable=True,
            wcs_tier=5,
            attack_count=0,
            primary_types=["Skill", "Event"],
            symbols=["star"],
            keywords=["Arcane", "Guard"],
            subtypes=["Ritual"],
        ),
        Card(
            card_id="ABC-004",
            name="Blank Slate",
            set="Expansion",
            set_sort=2,
            card_location=None,
            effect=None,
            highlight_effect=None,
            cost=5,
            xp_value=3,
            xp_is_variable=False,
            wcs_tier=7,
            attack_count=None,
            primary_types=[],
            symbols=None,
            keywords=None,
            subtypes=None,
        ),
    ]


@pytest.fixture
def numbered_cards():
    """Factory for ``n`` cards with ids ABC-000, ABC-001, ... in catalog order."""

    def make(n: int) -> list[Card]:
        return [
            Card(card_id=f"ABC-{i:03d}", name=f"Card {i}", set="Core", set_sort=1, cost=i % 7)
            for i in range(n)
        ]

    return make
