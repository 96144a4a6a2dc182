"""In-memory CardSource - evaluates query plans in Python."""

import json
import logging
from collections.abc import Iterable, Sequence
from functools import cmp_to_key
from pathlib import Path
from typing import Any

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

logger = logging.getLogger(__name__)


def _array(value: Any) -> list[Any]:
    # Missing arrays behave as empty arrays
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def matches_condition(card: Card, cond: Condition) -> bool:
    """SQL-like test of one condition; a null scalar fails every comparison."""
    value = card.value(cond.field)
    match cond.op:
        case Op.IS_NULL:
            return value is None
        case Op.ARRAY_CONTAINS:
            arr = _array(value)
            return all(v in arr for v in cond.value)
        case Op.ARRAY_NOT_CONTAINS:
            arr = _array(value)
            return not all(v in arr for v in cond.value)
        case Op.ARRAY_OVERLAPS:
            arr = _array(value)
            return any(v in arr for v in cond.value)
        case Op.ARRAY_NOT_OVERLAPS:
            arr = _array(value)
            return not any(v in arr for v in cond.value)
        case Op.ARRAY_EMPTY:
            return not _array(value)
        case Op.ARRAY_NOT_EMPTY:
            return bool(_array(value))

    if value is None:
        return False
    match cond.op:
        case Op.CONTAINS_TEXT:
            return str(cond.value).lower() in str(value).lower()
        case Op.NOT_CONTAINS_TEXT:
            return str(cond.value).lower() not in str(value).lower()
        case Op.EQ:
            return value == cond.value
        case Op.IN:
            return value in cond.value
        case Op.GT:
            return value > cond.value
        case Op.GTE:
            return value >= cond.value
        case Op.LTE:
            return value <= cond.value
    raise ValueError(f"Unsupported operator: {cond.op}")


def matches(card: Card, term: Condition | Predicate) -> bool:
    if isinstance(term, Condition):
        return matches_condition(card, term)
    results = (matches(card, t) for t in term.terms)
    return any(results) if term.combinator is Combinator.OR else all(results)


def _compare(a: Card, b: Card, ordering: Sequence[SortKey]) -> int:
    for key in ordering:
        va, vb = a.value(key.field), b.value(key.field)
        if va == vb:
            continue
        # Null placement is independent of direction
        if va is None or vb is None:
            a_first = (va is None) == (key.nulls is Nulls.FIRST)
            return -1 if a_first else 1
        result = -1 if va < vb else 1
        return -result if key.direction is Direction.DESC else result
    return 0


class InMemoryCardSource(CardSource):
    """Card source over a list held in memory.

    One filter pass feeds both the total and the returned window.
    """

    def __init__(self, cards: Iterable[Card] = ()) -> None:
        self._cards: dict[str, Card] = {}
        for card in cards:
            self._cards[card.card_id] = card

    @classmethod
    def from_json_file(cls, path: str | Path) -> "InMemoryCardSource":
        rows = json.loads(Path(path).expanduser().read_text())
        # Same default the cards table applies to the column
        cards = [
            Card.model_validate({**row, "xp_is_variable": bool(row.get("xp_is_variable"))})
            for row in rows
        ]
        logger.info("Loaded %d cards from %s", len(cards), path)
        return cls(cards)

    def __len__(self) -> int:
        return len(self._cards)

    async def execute(self, plan: QueryPlan) -> CardPage:
        hits = [c for c in self._cards.values() if all(matches(c, p) for p in plan.predicates)]
        hits.sort(key=cmp_to_key(lambda a, b: _compare(a, b, plan.ordering)))
        start = plan.window.offset
        return CardPage(items=tuple(hits[start : start + plan.window.limit]), total=len(hits))

    async def get(self, card_id: str) -> Card | None:
        return self._cards.get(card_id)

    async def get_many(self, card_ids: Sequence[str]) -> list[Card]:
        return [self._cards[i] for i in card_ids if i in self._cards]
