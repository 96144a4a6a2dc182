"""Facet definitions - the filter dimensions a catalog supports."""

from enum import StrEnum

from cardscope.domain.shared.model.value import ValueObject


class FacetKind(StrEnum):
    """How a facet's raw parameter values turn into predicates."""

    TEXT = "text-include-exclude-phrase"
    TRI_STATE = "tri-state-multi"
    CONTAINMENT = "multi-select-containment"
    RANGE = "range-with-sentinels"
    SET_MEMBERSHIP = "set-membership"
    EXACT = "exact-match"
    SEARCH = "search"
    FLAG = "flag"


class Mode(StrEnum):
    """Combinator mode for one side of a containment facet."""

    AND = "and"
    OR = "or"


class TextScope(StrEnum):
    """Which field(s) a scoped text facet targets."""

    PRIMARY = ""
    HIGHLIGHT = "highlight"
    ALL = "all"


class MemberState(StrEnum):
    """State of one member of a tri-state facet."""

    NEUTRAL = "neutral"
    INCLUDE = "include"
    EXCLUDE = "exclude"


class RangeBounds(ValueObject):
    """Absolute bounds of a range facet."""

    lo: float
    hi: float

    def clamp(self, value: float) -> float:
        return min(max(value, self.lo), self.hi)


class FacetDefinition(ValueObject):
    """One filter dimension.

    Parameter names are derived from ``key`` according to ``kind``:

    - text: ``{key}_include``, ``{key}_exclude``, ``{key}_phrase`` (+ ``scope_param``)
    - tri-state: ``{key}_inc``, ``{key}_exc``
    - containment: ``{key}_inc``, ``{key}_exc``, ``{key}_inc_mode``, ``{key}_exc_mode``
    - range: ``{key}_min``, ``{key}_max``, ``{key}_include_null``, ``{key}_only_null``,
      ``{key}_include_variable``, ``{key}_only_variable``
    - set-membership, exact, search, flag: ``{key}``

    ``legacy_params`` are older single-list parameters folded into the
    include side (or the value list) of the facet.
    """

    key: str
    kind: FacetKind
    fields: tuple[str, ...]
    label: str = ""
    legacy_params: tuple[str, ...] = ()

    # Array-valued field (containment / tri-state / set-membership on arrays)
    array: bool = False
    # Literal token meaning "array field is empty"
    empty_sentinel: str | None = None
    # Set-membership: value is a comma separated list
    csv: bool = True

    # Range facets
    bounds: RangeBounds | None = None
    supports_null: bool = False
    variable_field: str | None = None

    # Text facets
    scope_param: str | None = None

    # Flag facets: field > threshold when the flag is set
    threshold: float = 0

    @property
    def field(self) -> str:
        """Primary target field."""
        return self.fields[0]

    @property
    def include_param(self) -> str:
        if self.kind is FacetKind.TEXT:
            return f"{self.key}_include"
        return f"{self.key}_inc"

    @property
    def exclude_param(self) -> str:
        if self.kind is FacetKind.TEXT:
            return f"{self.key}_exclude"
        return f"{self.key}_exc"

    @property
    def phrase_param(self) -> str:
        return f"{self.key}_phrase"

    def mode_param(self, side: MemberState) -> str:
        suffix = "inc" if side is MemberState.INCLUDE else "exc"
        return f"{self.key}_{suffix}_mode"

    def default_mode(self, side: MemberState) -> Mode:
        return Mode.AND if side is MemberState.INCLUDE else Mode.OR

    @property
    def min_param(self) -> str:
        return f"{self.key}_min"

    @property
    def max_param(self) -> str:
        return f"{self.key}_max"

    @property
    def include_null_param(self) -> str:
        return f"{self.key}_include_null"

    @property
    def only_null_param(self) -> str:
        return f"{self.key}_only_null"

    @property
    def include_variable_param(self) -> str:
        return f"{self.key}_include_variable"

    @property
    def only_variable_param(self) -> str:
        return f"{self.key}_only_variable"

    def param_keys(self) -> tuple[str, ...]:
        """Every parameter this facet reads."""
        match self.kind:
            case FacetKind.TEXT:
                keys = [self.include_param, self.exclude_param, self.phrase_param]
                if self.scope_param:
                    keys.append(self.scope_param)
            case FacetKind.TRI_STATE:
                keys = [self.include_param, self.exclude_param]
            case FacetKind.CONTAINMENT:
                keys = [
                    self.include_param,
                    self.exclude_param,
                    self.mode_param(MemberState.INCLUDE),
                    self.mode_param(MemberState.EXCLUDE),
                ]
            case FacetKind.RANGE:
                keys = [self.min_param, self.max_param]
                if self.supports_null:
                    keys += [self.include_null_param, self.only_null_param]
                if self.variable_field:
                    keys += [self.include_variable_param, self.only_variable_param]
            case _:
                keys = [self.key]
        return (*keys, *self.legacy_params)
