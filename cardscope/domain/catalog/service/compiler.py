"""FacetCompiler - turns a FilterState into a QueryPlan.

Predicates are emitted facet by facet in registry declaration order, so two
states with the same active facets always compile to the same plan shape.
A facet whose value cannot be interpreted is dropped, never fatal.
"""

import logging
import math
from collections.abc import Iterable, Iterator

from cardscope.domain.catalog.model.facet import (
    FacetDefinition,
    FacetKind,
    MemberState,
    Mode,
    TextScope,
)
from cardscope.domain.catalog.model.filter_state import FilterState
from cardscope.domain.catalog.model.plan import (
    Combinator,
    Condition,
    Direction,
    Op,
    PageWindow,
    Predicate,
    QueryPlan,
    SortKey,
)
from cardscope.domain.catalog.model.registry import FacetRegistry
from cardscope.domain.shared.error import CompileError
from cardscope.domain.shared.service import Service

logger = logging.getLogger(__name__)

SORT_BY_PARAM = "sort_by"
SORT_DIR_PARAM = "sort_dir"

_TRUTHY = frozenset({"1", "true"})
_SCOPE_ALIASES = {"highlight-only": TextScope.HIGHLIGHT}


def split_csv(raw: str | None) -> list[str]:
    """Split a comma separated value into trimmed, unique, non-empty items."""
    if not raw:
        return []
    return list(dict.fromkeys(s.strip() for s in raw.split(",") if s.strip()))


def is_set(state: FilterState, param: str) -> bool:
    return (state.get(param) or "").strip().lower() in _TRUTHY


def parse_number(raw: str | None, facet: str) -> float | None:
    """Parse a numeric bound; None when absent."""
    if raw is None or not raw.strip():
        return None
    try:
        value = float(raw)
    except ValueError as e:
        raise CompileError(f"Not a number: {raw!r}", facet=facet) from e
    if not math.isfinite(value):
        raise CompileError(f"Not a finite number: {raw!r}", facet=facet)
    return value


def _num(value: float) -> int | float:
    return int(value) if float(value).is_integer() else value


class FacetCompiler(Service):
    """Compiles filter states against a facet registry."""

    registry: FacetRegistry

    def compile(self, state: FilterState, *, offset: int = 0, limit: int = 72) -> QueryPlan:
        return QueryPlan(
            predicates=tuple(self.predicates(state)),
            ordering=self.ordering(state),
            window=PageWindow(offset=offset, limit=limit),
        )

    def predicates(self, state: FilterState) -> list[Predicate]:
        compiled: list[Predicate] = []
        for facet in self.registry:
            try:
                compiled.extend(self._compile_facet(facet, state))
            except CompileError as e:
                logger.debug("Dropping facet %s: %s", facet.key, e.message)
        return compiled

    def _compile_facet(self, facet: FacetDefinition, state: FilterState) -> Iterable[Predicate]:
        match facet.kind:
            case FacetKind.TEXT:
                return list(self._text(facet, state))
            case FacetKind.SEARCH:
                return list(self._search(facet, state))
            case FacetKind.TRI_STATE:
                return list(self._tri_state(facet, state))
            case FacetKind.CONTAINMENT:
                return list(self._containment(facet, state))
            case FacetKind.SET_MEMBERSHIP:
                return list(self._set_membership(facet, state))
            case FacetKind.EXACT:
                return list(self._exact(facet, state))
            case FacetKind.FLAG:
                return list(self._flag(facet, state))
            case FacetKind.RANGE:
                return list(self._range(facet, state))
        raise CompileError(f"Unsupported facet kind: {facet.kind}", facet=facet.key)

    def ordering(self, state: FilterState) -> tuple[SortKey, ...]:
        """Requested ordering followed by the catalog tiebreaker.

        The tiebreaker ends in a unique field, so the ordering is total and
        offset paging never duplicates or skips rows.
        """
        sort_by = (state.get(SORT_BY_PARAM) or "").strip().lower()
        raw_dir = (state.get(SORT_DIR_PARAM) or "").strip().lower()
        direction = Direction.DESC if raw_dir == "desc" else Direction.ASC
        requested = self.registry.sort_keys(sort_by, direction)
        used = {k.field for k in requested}
        tail = tuple(k for k in self.registry.tiebreaker if k.field not in used)
        return requested + tail

    # -------------------------------------------------------------------------
    # Text
    # -------------------------------------------------------------------------

    def _text(self, facet: FacetDefinition, state: FilterState) -> Iterator[Predicate]:
        fields = self._scoped_fields(facet, state)

        for word in split_csv(state.get(facet.include_param)):
            yield self._any_field(facet, fields, word)

        # Excluded words must be absent from every targeted field
        for word in split_csv(state.get(facet.exclude_param)):
            yield Predicate(
                facet=facet.key,
                combinator=Combinator.AND,
                terms=tuple(
                    Condition(field=f, op=Op.NOT_CONTAINS_TEXT, value=word) for f in fields
                ),
            )

        phrase = (state.get(facet.phrase_param) or "").strip()
        if phrase:
            yield self._any_field(facet, fields, phrase)

    def _scoped_fields(self, facet: FacetDefinition, state: FilterState) -> tuple[str, ...]:
        if not facet.scope_param or len(facet.fields) < 2:
            return facet.fields[:1]
        raw = (state.get(facet.scope_param) or "").strip().lower()
        scope = _SCOPE_ALIASES.get(raw)
        if scope is None:
            try:
                scope = TextScope(raw)
            except ValueError:
                logger.debug("Unknown scope %r for %s, using primary field", raw, facet.key)
                scope = TextScope.PRIMARY
        match scope:
            case TextScope.HIGHLIGHT:
                return facet.fields[1:2]
            case TextScope.ALL:
                return facet.fields[:2]
            case _:
                return facet.fields[:1]

    def _any_field(
        self, facet: FacetDefinition, fields: tuple[str, ...], term: str
    ) -> Predicate:
        return Predicate(
            facet=facet.key,
            combinator=Combinator.OR if len(fields) > 1 else Combinator.AND,
            terms=tuple(Condition(field=f, op=Op.CONTAINS_TEXT, value=term) for f in fields),
        )

    def _search(self, facet: FacetDefinition, state: FilterState) -> Iterator[Predicate]:
        term = (state.get(facet.key) or "").strip()
        if term:
            yield self._any_field(facet, facet.fields, term)

    # -------------------------------------------------------------------------
    # Tri-state and containment
    # -------------------------------------------------------------------------

    def _members(self, facet: FacetDefinition, state: FilterState) -> tuple[list[str], list[str]]:
        """Include and exclude members; a member listed on both sides is included."""
        legacy = [v for p in facet.legacy_params for v in split_csv(state.get(p))]
        include = list(dict.fromkeys(split_csv(state.get(facet.include_param)) + legacy))
        exclude = [v for v in split_csv(state.get(facet.exclude_param)) if v not in include]
        return include, exclude

    def _tri_state(self, facet: FacetDefinition, state: FilterState) -> Iterator[Predicate]:
        include, exclude = self._members(facet, state)
        for value in include:
            yield Predicate(
                facet=facet.key,
                terms=(Condition(field=facet.field, op=Op.ARRAY_CONTAINS, value=(value,)),),
            )
        for value in exclude:
            yield Predicate(
                facet=facet.key,
                terms=(Condition(field=facet.field, op=Op.ARRAY_NOT_CONTAINS, value=(value,)),),
            )

    def _containment(self, facet: FacetDefinition, state: FilterState) -> Iterator[Predicate]:
        include, exclude = self._members(facet, state)
        if include:
            mode = self._mode(facet, state, MemberState.INCLUDE)
            yield self._containment_group(facet, include, mode, negate=False)
        if exclude:
            mode = self._mode(facet, state, MemberState.EXCLUDE)
            yield self._containment_group(facet, exclude, mode, negate=True)

    def _mode(self, facet: FacetDefinition, state: FilterState, side: MemberState) -> Mode:
        raw = (state.get(facet.mode_param(side)) or "").strip().lower()
        try:
            return Mode(raw)
        except ValueError:
            return facet.default_mode(side)

    def _containment_group(
        self, facet: FacetDefinition, values: list[str], mode: Mode, *, negate: bool
    ) -> Predicate:
        """Include side: AND = must contain all, OR = must contain any.

        Exclude side: AND = dropped when it contains all, OR = dropped when
        it contains any; the kept-record test is the De Morgan dual.
        """
        terms: list[Condition] = []
        rest = [v for v in values if v != facet.empty_sentinel]
        if len(rest) != len(values):
            terms.append(
                Condition(field=facet.field, op=Op.ARRAY_NOT_EMPTY if negate else Op.ARRAY_EMPTY)
            )
        if rest:
            if mode is Mode.AND:
                op = Op.ARRAY_NOT_CONTAINS if negate else Op.ARRAY_CONTAINS
            else:
                op = Op.ARRAY_NOT_OVERLAPS if negate else Op.ARRAY_OVERLAPS
            terms.append(Condition(field=facet.field, op=op, value=tuple(rest)))

        any_matches = mode is Mode.OR
        combinator = Combinator.AND if any_matches == negate else Combinator.OR
        return Predicate(facet=facet.key, combinator=combinator, terms=tuple(terms))

    # -------------------------------------------------------------------------
    # Set membership, exact match, flags
    # -------------------------------------------------------------------------

    def _set_membership(self, facet: FacetDefinition, state: FilterState) -> Iterator[Predicate]:
        if facet.csv:
            raw = [v for p in (facet.key, *facet.legacy_params) for v in split_csv(state.get(p))]
            values = list(dict.fromkeys(raw))
        else:
            value = (state.get(facet.key) or "").strip()
            values = [value] if value else []
        if not values:
            return

        if facet.empty_sentinel is not None and facet.empty_sentinel in values:
            empty = Condition(field=facet.field, op=Op.ARRAY_EMPTY)
            yield Predicate(facet=facet.key, terms=(empty,))
            return

        if facet.array:
            condition = Condition(field=facet.field, op=Op.ARRAY_CONTAINS, value=tuple(values))
        else:
            condition = Condition(field=facet.field, op=Op.IN, value=tuple(values))
        yield Predicate(facet=facet.key, terms=(condition,))

    def _exact(self, facet: FacetDefinition, state: FilterState) -> Iterator[Predicate]:
        value = (state.get(facet.key) or "").strip()
        if value:
            exact = Condition(field=facet.field, op=Op.EQ, value=value)
            yield Predicate(facet=facet.key, terms=(exact,))

    def _flag(self, facet: FacetDefinition, state: FilterState) -> Iterator[Predicate]:
        if is_set(state, facet.key):
            yield Predicate(
                facet=facet.key,
                terms=(Condition(field=facet.field, op=Op.GT, value=_num(facet.threshold)),),
            )

    # -------------------------------------------------------------------------
    # Ranges
    # -------------------------------------------------------------------------

    def range_bounds(self, facet: FacetDefinition, state: FilterState) -> tuple[float, float]:
        """Requested [lo, hi], coerced into the facet's absolute bounds."""
        bounds = facet.bounds
        if bounds is None:
            raise CompileError("Range facet without bounds", facet=facet.key)

        def read(param: str, default: float) -> float:
            try:
                value = parse_number(state.get(param), facet.key)
            except CompileError as e:
                logger.debug("Ignoring %s: %s", param, e.message)
                value = None
            return default if value is None else bounds.clamp(value)

        lo = read(facet.min_param, bounds.lo)
        hi = read(facet.max_param, bounds.hi)
        return (lo, hi) if lo <= hi else (hi, lo)

    def _range(self, facet: FacetDefinition, state: FilterState) -> Iterator[Predicate]:
        """Precedence: only-null > only-variable > range (+ null/variable inclusion)."""
        field = facet.field
        variable = facet.variable_field

        if facet.supports_null and is_set(state, facet.only_null_param):
            terms = [Condition(field=field, op=Op.IS_NULL)]
            if variable:
                terms.append(Condition(field=variable, op=Op.EQ, value=False))
            yield Predicate(facet=facet.key, terms=tuple(terms))
            return

        if variable and is_set(state, facet.only_variable_param):
            flagged = Condition(field=variable, op=Op.EQ, value=True)
            yield Predicate(facet=facet.key, terms=(flagged,))
            return

        lo, hi = self.range_bounds(facet, state)
        bounds = facet.bounds
        assert bounds is not None

        numeric: list[Condition] = []
        if lo > bounds.lo:
            numeric.append(Condition(field=field, op=Op.GTE, value=_num(lo)))
        if hi < bounds.hi:
            numeric.append(Condition(field=field, op=Op.LTE, value=_num(hi)))
        if not numeric:
            # Full absolute range: no filter at all, inclusion flags are subsumed
            return
        if variable:
            numeric.insert(0, Condition(field=variable, op=Op.EQ, value=False))

        # Null counts as zero, so it only qualifies while zero is in range
        include_null = facet.supports_null and is_set(state, facet.include_null_param)
        include_null = include_null and lo <= 0 <= hi
        include_variable = bool(variable) and is_set(state, facet.include_variable_param)

        if not include_null and not include_variable:
            yield Predicate(facet=facet.key, terms=tuple(numeric))
            return

        branches: list[Condition | Predicate] = [Predicate(facet=facet.key, terms=tuple(numeric))]
        if include_null:
            null_terms = [Condition(field=field, op=Op.IS_NULL)]
            if variable:
                null_terms.append(Condition(field=variable, op=Op.EQ, value=False))
            branches.append(Predicate(facet=facet.key, terms=tuple(null_terms)))
        if include_variable and variable:
            branches.append(Condition(field=variable, op=Op.EQ, value=True))
        yield Predicate(facet=facet.key, combinator=Combinator.OR, terms=tuple(branches))

