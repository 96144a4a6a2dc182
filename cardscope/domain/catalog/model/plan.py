"""Query plans - predicates, ordering and a page window.

A plan expresses query intent independent of any storage engine. Card source
adapters translate it into SQL, in-memory predicates, or anything else.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import Field

from cardscope.domain.shared.model.value import ValueObject


class Combinator(StrEnum):
    AND = "and"
    OR = "or"


class Op(StrEnum):
    """Condition operators.

    Text operators are case-insensitive substring matches. Array operators
    take a tuple value: CONTAINS means every value is present, OVERLAPS means
    at least one is.
    """

    CONTAINS_TEXT = "ilike"
    NOT_CONTAINS_TEXT = "not_ilike"
    EQ = "eq"
    IN = "in"
    GT = "gt"
    GTE = "gte"
    LTE = "lte"
    IS_NULL = "is_null"
    ARRAY_CONTAINS = "array_contains"
    ARRAY_NOT_CONTAINS = "array_not_contains"
    ARRAY_OVERLAPS = "array_overlaps"
    ARRAY_NOT_OVERLAPS = "array_not_overlaps"
    ARRAY_EMPTY = "array_empty"
    ARRAY_NOT_EMPTY = "array_not_empty"


class Condition(ValueObject):
    """A single field test."""

    field: str
    op: Op
    value: Any = None

    def describe(self) -> str:
        if self.op in (Op.IS_NULL, Op.ARRAY_EMPTY, Op.ARRAY_NOT_EMPTY):
            return f"{self.field} {self.op.value}"
        return f"{self.field} {self.op.value} {self.value!r}"


class Predicate(ValueObject):
    """A group of terms joined by one combinator, tagged with its facet.

    Terms are conditions or nested predicates. The plan ANDs its top-level
    predicates together.
    """

    facet: str
    combinator: Combinator = Combinator.AND
    terms: tuple[Condition | Predicate, ...]

    @property
    def fields(self) -> tuple[str, ...]:
        """Referenced fields, in first-seen order."""
        seen: dict[str, None] = {}
        for term in self.terms:
            if isinstance(term, Condition):
                seen.setdefault(term.field)
            else:
                for name in term.fields:
                    seen.setdefault(name)
        return tuple(seen)

    def describe(self) -> str:
        parts = [t.describe() for t in self.terms]
        if len(parts) == 1:
            return parts[0]
        joiner = f" {self.combinator.value.upper()} "
        return "(" + joiner.join(parts) + ")"


Predicate.model_rebuild()


class Direction(StrEnum):
    ASC = "asc"
    DESC = "desc"


class Nulls(StrEnum):
    FIRST = "first"
    LAST = "last"


class SortKey(ValueObject):
    field: str
    direction: Direction = Direction.ASC
    nulls: Nulls = Nulls.LAST


class PageWindow(ValueObject):
    offset: int = Field(default=0, ge=0)
    limit: int = Field(default=72, ge=1)


class QueryPlan(ValueObject):
    """Ordered predicates, a total ordering, and a page window.

    Predicate order never changes the result set; only ``ordering`` affects
    result order.
    """

    predicates: tuple[Predicate, ...] = ()
    ordering: tuple[SortKey, ...] = ()
    window: PageWindow = PageWindow()

    def with_window(self, offset: int, limit: int) -> QueryPlan:
        return self.model_copy(update={"window": PageWindow(offset=offset, limit=limit)})

    def describe(self) -> list[str]:
        lines = [p.describe() for p in self.predicates]
        order = ", ".join(
            f"{k.field} {k.direction.value} nulls {k.nulls.value}" for k in self.ordering
        )
        lines.append(f"ORDER BY {order}")
        lines.append(f"OFFSET {self.window.offset} LIMIT {self.window.limit}")
        return lines
