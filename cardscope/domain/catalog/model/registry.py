"""Facet registry - the static catalog of supported filter dimensions."""

from collections.abc import Iterator

from cardscope.domain.catalog.model.facet import FacetDefinition, FacetKind, RangeBounds
from cardscope.domain.catalog.model.plan import Direction, Nulls, SortKey
from cardscope.domain.shared.model.value import ValueObject

NONE_SENTINEL = "__none__"


class SortField(ValueObject):
    """One component of a named sort option.

    Directed fields follow the requested direction; undirected ones are
    always ascending.
    """

    field: str
    directed: bool = True
    nulls: Nulls = Nulls.LAST

    def key(self, direction: Direction) -> SortKey:
        return SortKey(
            field=self.field,
            direction=direction if self.directed else Direction.ASC,
            nulls=self.nulls,
        )


class FacetRegistry:
    """Registry of facets in declaration order, plus sort options.

    Declaration order fixes the order of compiled predicates. ``tiebreaker``
    is appended to every ordering and must end in a unique field.
    """

    def __init__(
        self,
        facets: list[FacetDefinition],
        sorts: dict[str, tuple[SortField, ...]],
        tiebreaker: tuple[SortKey, ...],
    ) -> None:
        keys = [f.key for f in facets]
        if len(set(keys)) != len(keys):
            raise ValueError(f"Duplicate facet keys: {keys}")
        self._facets = {f.key: f for f in facets}
        self._sorts = sorts
        self.tiebreaker = tiebreaker

    def get(self, key: str) -> FacetDefinition | None:
        """Get a facet by key."""
        return self._facets.get(key)

    def __contains__(self, key: str) -> bool:
        return key in self._facets

    def __iter__(self) -> Iterator[FacetDefinition]:
        return iter(self._facets.values())

    def __len__(self) -> int:
        return len(self._facets)

    def keys(self) -> list[str]:
        """List facet keys in declaration order."""
        return list(self._facets)

    def sort_options(self) -> list[str]:
        return list(self._sorts)

    def sort_keys(self, sort_by: str, direction: Direction) -> tuple[SortKey, ...]:
        """Keys for a named sort option; empty for unknown names."""
        return tuple(f.key(direction) for f in self._sorts.get(sort_by, ()))

    def param_keys(self) -> set[str]:
        """Every parameter any facet reads."""
        return {p for f in self for p in f.param_keys()}


CARD_FACETS: list[FacetDefinition] = [
    FacetDefinition(
        key="sets",
        kind=FacetKind.SET_MEMBERSHIP,
        fields=("set",),
        label="Set",
        legacy_params=("set",),
    ),
    FacetDefinition(
        key="primary_types",
        kind=FacetKind.CONTAINMENT,
        fields=("primary_types",),
        label="Type",
        array=True,
        empty_sentinel=NONE_SENTINEL,
        legacy_params=("primary_type", "primary_types"),
    ),
    FacetDefinition(
        key="card_location",
        kind=FacetKind.EXACT,
        fields=("card_location",),
        label="Location",
    ),
    FacetDefinition(
        key="symbols",
        kind=FacetKind.SET_MEMBERSHIP,
        fields=("symbols",),
        label="Symbol",
        array=True,
        csv=False,
        empty_sentinel=NONE_SENTINEL,
    ),
    FacetDefinition(
        key="keywords",
        kind=FacetKind.TRI_STATE,
        fields=("keywords",),
        label="Keyword",
        array=True,
        legacy_params=("keywords",),
    ),
    FacetDefinition(
        key="subtypes",
        kind=FacetKind.TRI_STATE,
        fields=("subtypes",),
        label="Sub-type",
        array=True,
        legacy_params=("subtypes",),
    ),
    FacetDefinition(
        key="cost",
        kind=FacetKind.RANGE,
        fields=("cost",),
        label="Cost",
        bounds=RangeBounds(lo=0, hi=16),
        supports_null=True,
    ),
    FacetDefinition(
        key="xp",
        kind=FacetKind.RANGE,
        fields=("xp_value",),
        label="XP",
        bounds=RangeBounds(lo=-2, hi=10),
        supports_null=True,
        variable_field="xp_is_variable",
    ),
    FacetDefinition(
        key="wcs_tier",
        kind=FacetKind.RANGE,
        fields=("wcs_tier",),
        label="WCS tier",
        bounds=RangeBounds(lo=2, hi=7),
    ),
    FacetDefinition(
        key="attack_multi",
        kind=FacetKind.FLAG,
        fields=("attack_count",),
        label="Multiple attacks",
        threshold=1,
    ),
    FacetDefinition(
        key="q",
        kind=FacetKind.SEARCH,
        fields=("name", "effect"),
        label="Search",
    ),
    FacetDefinition(
        key="name",
        kind=FacetKind.TEXT,
        fields=("name",),
        label="Name",
    ),
    FacetDefinition(
        key="effect",
        kind=FacetKind.TEXT,
        fields=("effect", "highlight_effect"),
        label="Effect",
        scope_param="effect_scope",
    ),
]

CARD_SORTS: dict[str, tuple[SortField, ...]] = {
    "name": (SortField(field="name"),),
    "cost": (SortField(field="cost"),),
    # Variable XP stays at the end regardless of direction
    "xp": (SortField(field="xp_is_variable", directed=False), SortField(field="xp_value")),
}

CARD_TIEBREAKER: tuple[SortKey, ...] = (
    SortKey(field="set_sort"),
    SortKey(field="card_id"),
)


def default_registry() -> FacetRegistry:
    """Registry for the card catalog."""
    return FacetRegistry(CARD_FACETS, CARD_SORTS, CARD_TIEBREAKER)
