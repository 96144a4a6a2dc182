"""Port for the queryable card collection."""

from abc import abstractmethod
from collections.abc import Sequence
from typing import Protocol

from cardscope.domain.catalog.model.card import Card, CardPage
from cardscope.domain.catalog.model.plan import QueryPlan
from cardscope.domain.shared.port import Port


class CardSource(Port, Protocol):
    """A single record collection that can run query plans.

    ``execute`` must apply the same predicates to the count and to the
    returned page.
    """

    @abstractmethod
    async def execute(self, plan: QueryPlan) -> CardPage: ...

    @abstractmethod
    async def get(self, card_id: str) -> Card | None: ...

    @abstractmethod
    async def get_many(self, card_ids: Sequence[str]) -> list[Card]:
        """Cards for the given ids in input order; unknown ids are skipped."""
        ...
