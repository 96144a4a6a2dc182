"""SQL CardSource - translates query plans into SQLAlchemy Core statements."""

import logging
from collections.abc import Sequence
from typing import Any

from sqlalchemy import (
    ColumnElement,
    Select,
    and_,
    exists,
    false,
    func,
    not_,
    or_,
    select,
    true,
    type_coerce,
)
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.ext.asyncio import AsyncEngine
from sqlalchemy.types import Text

from cardscope.domain.catalog.model.card import Card, CardPage
from cardscope.domain.catalog.model.plan import (
    Combinator,
    Condition,
    Direction,
    Nulls,
    Op,
    Predicate,
    QueryPlan,
    SortKey,
)
from cardscope.domain.catalog.port.card_source import CardSource
from cardscope.infrastructure.persistence.database import row_to_card
from cardscope.infrastructure.persistence.tables import ARRAY_COLUMNS, cards_table

logger = logging.getLogger(__name__)


def _like_pattern(term: str) -> str:
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class PlanTranslator:
    """Builds WHERE and ORDER BY clauses for one SQL dialect.

    PostgreSQL arrays use the native ``@>``, ``&&`` and ``cardinality``;
    other dialects store arrays as JSON and go through ``json_each``.
    """

    def __init__(self, dialect: str) -> None:
        self.dialect = dialect

    @property
    def native_arrays(self) -> bool:
        return self.dialect == "postgresql"

    def column(self, field: str) -> Any:
        try:
            return cards_table.c[field]
        except KeyError:
            raise ValueError(f"Unknown card field: {field}") from None

    def where(self, plan: QueryPlan) -> list[ColumnElement[bool]]:
        return [self.term(p) for p in plan.predicates]

    def term(self, term: Condition | Predicate) -> ColumnElement[bool]:
        if isinstance(term, Condition):
            return self.condition(term)
        parts = [self.term(t) for t in term.terms]
        if len(parts) == 1:
            return parts[0]
        return or_(*parts) if term.combinator is Combinator.OR else and_(*parts)

    def condition(self, cond: Condition) -> ColumnElement[bool]:
        col = self.column(cond.field)
        if cond.field in ARRAY_COLUMNS:
            return self._array_condition(col, cond)
        match cond.op:
            case Op.CONTAINS_TEXT:
                return col.ilike(_like_pattern(str(cond.value)), escape="\\")
            case Op.NOT_CONTAINS_TEXT:
                return col.not_ilike(_like_pattern(str(cond.value)), escape="\\")
            case Op.EQ:
                if isinstance(cond.value, bool):
                    return col.is_(true()) if cond.value else col.is_(false())
                return col == cond.value
            case Op.IN:
                return col.in_(list(cond.value))
            case Op.GT:
                return col > cond.value
            case Op.GTE:
                return col >= cond.value
            case Op.LTE:
                return col <= cond.value
            case Op.IS_NULL:
                return col.is_(None)
        raise ValueError(f"Operator {cond.op} does not apply to {cond.field}")

    def _array_condition(self, col: Any, cond: Condition) -> ColumnElement[bool]:
        values = list(cond.value or ())
        # A missing array is an empty array
        match cond.op:
            case Op.ARRAY_CONTAINS:
                return self._contains_all(col, values)
            case Op.ARRAY_NOT_CONTAINS:
                return or_(col.is_(None), not_(self._contains_all(col, values)))
            case Op.ARRAY_OVERLAPS:
                return self._contains_any(col, values)
            case Op.ARRAY_NOT_OVERLAPS:
                return or_(col.is_(None), not_(self._contains_any(col, values)))
            case Op.ARRAY_EMPTY:
                return func.coalesce(self._length(col), 0) == 0
            case Op.ARRAY_NOT_EMPTY:
                return func.coalesce(self._length(col), 0) > 0
        raise ValueError(f"Operator {cond.op} does not apply to array {cond.field}")

    def _length(self, col: Any) -> Any:
        if self.native_arrays:
            return func.cardinality(col)
        return func.json_array_length(col)

    def _member(self, col: Any, values: list[str]) -> ColumnElement[bool]:
        elements = func.json_each(col).table_valued("value")
        cond = elements.c.value == values[0] if len(values) == 1 else elements.c.value.in_(values)
        return exists(select(elements.c.value).where(cond))

    def _contains_all(self, col: Any, values: list[str]) -> ColumnElement[bool]:
        if self.native_arrays:
            return type_coerce(col, ARRAY(Text)).contains(values)
        return and_(*[self._member(col, [v]) for v in values])

    def _contains_any(self, col: Any, values: list[str]) -> ColumnElement[bool]:
        if self.native_arrays:
            return type_coerce(col, ARRAY(Text)).overlap(values)
        return self._member(col, values)

    def order_by(self, ordering: Sequence[SortKey]) -> list[Any]:
        clauses = []
        for key in ordering:
            col = self.column(key.field)
            clause = col.desc() if key.direction is Direction.DESC else col.asc()
            clause = clause.nulls_first() if key.nulls is Nulls.FIRST else clause.nulls_last()
            clauses.append(clause)
        return clauses

    def items_statement(self, plan: QueryPlan) -> Select:
        return (
            select(cards_table)
            .where(*self.where(plan))
            .order_by(*self.order_by(plan.ordering))
            .offset(plan.window.offset)
            .limit(plan.window.limit)
        )

    def count_statement(self, plan: QueryPlan) -> Select:
        return select(func.count()).select_from(cards_table).where(*self.where(plan))


class SqlCardSource(CardSource):
    """Card source backed by the ``cards`` table.

    Count and items run inside one connection with the same WHERE clause.
    """

    def __init__(self, engine: AsyncEngine) -> None:
        self._engine = engine
        self._translator = PlanTranslator(engine.dialect.name)

    async def execute(self, plan: QueryPlan) -> CardPage:
        async with self._engine.connect() as conn:
            total = (await conn.execute(self._translator.count_statement(plan))).scalar_one()
            result = await conn.execute(self._translator.items_statement(plan))
            rows = result.mappings().all()
        return CardPage(items=tuple(row_to_card(dict(r)) for r in rows), total=total)

    async def get(self, card_id: str) -> Card | None:
        stmt = select(cards_table).where(cards_table.c.card_id == card_id)
        async with self._engine.connect() as conn:
            row = (await conn.execute(stmt)).mappings().first()
        return row_to_card(dict(row)) if row else None

    async def get_many(self, card_ids: Sequence[str]) -> list[Card]:
        if not card_ids:
            return []
        stmt = select(cards_table).where(cards_table.c.card_id.in_(list(card_ids)))
        async with self._engine.connect() as conn:
            rows = (await conn.execute(stmt)).mappings().all()
        by_id = {r["card_id"]: row_to_card(dict(r)) for r in rows}
        return [by_id[i] for i in card_ids if i in by_id]
