"""Fakes for the browse ports: a recording fetcher and a one-column grid."""

import asyncio
from collections.abc import Callable, Sequence

import pytest

from cardscope.domain.browse.model.restore import RenderedNode, Viewport
from cardscope.domain.catalog.model.card import Card, CardPage
from cardscope.domain.catalog.model.filter_state import FilterState
from cardscope.domain.catalog.service.compiler import FacetCompiler
from cardscope.domain.catalog.service.executor import QueryExecutor
from cardscope.infrastructure.memory.batch_fetcher import CatalogBatchFetcher
from cardscope.infrastructure.memory.card_source import InMemoryCardSource


class RecordingFetcher(CatalogBatchFetcher):
    """Catalog fetcher that records every request and can be held at a gate."""

    def __init__(self, compiler: FacetCompiler, cards: list[Card]) -> None:
        super().__init__(compiler, QueryExecutor(source=InMemoryCardSource(cards)))
        self.calls: list[tuple[str, int, int]] = []
        self.gate: asyncio.Event | None = None
        self.on_fetch: Callable[[], None] | None = None

    async def fetch(self, state: FilterState, offset: int, limit: int) -> CardPage:
        self.calls.append((state.canonical_key, offset, limit))
        if self.on_fetch:
            self.on_fetch()
        if self.gate is not None:
            await self.gate.wait()
        return await super().fetch(state, offset, limit)

    @property
    def windows(self) -> list[tuple[int, int]]:
        return [(offset, limit) for _, offset, limit in self.calls]


class FixedPageFetcher:
    """Returns the same page for every request."""

    def __init__(self, page: CardPage) -> None:
        self.page = page
        self.calls = 0

    async def fetch(self, state: FilterState, offset: int, limit: int) -> CardPage:
        self.calls += 1
        return self.page


class FakeScrollContainer:
    def __init__(self, height: float = 800) -> None:
        self.height = height
        self.scroll_top: float = 0

    def viewport(self) -> Viewport:
        return Viewport(top=self.scroll_top, bottom=self.scroll_top + self.height)


class GridNodes:
    """Renders every loaded card in one column of fixed-height rows."""

    def __init__(self, ids: Callable[[], Sequence[str]], row_height: float = 100) -> None:
        self._ids = ids
        self.row_height = row_height

    def nodes(self, container: FakeScrollContainer) -> list[RenderedNode]:
        return [
            RenderedNode(card_id=card_id, top=i * self.row_height, bottom=(i + 1) * self.row_height)
            for i, card_id in enumerate(self._ids())
        ]


@pytest.fixture
def recording_fetcher(compiler: FacetCompiler, numbered_cards):
    """Factory for a RecordingFetcher over ``n`` numbered cards."""

    def make(n: int) -> RecordingFetcher:
        return RecordingFetcher(compiler, numbered_cards(n))

    return make


@pytest.fixture
def fixed_fetcher():
    def make(page: CardPage) -> FixedPageFetcher:
        return FixedPageFetcher(page)

    return make


@pytest.fixture
def scroll_container():
    def make(height: float = 800) -> FakeScrollContainer:
        return FakeScrollContainer(height)

    return make


@pytest.fixture
def grid():
    def make(ids: Callable[[], Sequence[str]], row_height: float = 100) -> GridNodes:
        return GridNodes(ids, row_height)

    return make
