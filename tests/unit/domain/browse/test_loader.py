"""Tests for IncrementalLoadController."""

import asyncio

import pytest

from cardscope.domain.browse.service.load_policy import LoadSizePolicy
from cardscope.domain.browse.service.loader import IncrementalLoadController, LoadState
from cardscope.domain.catalog.model.card import Card, CardPage
from cardscope.domain.catalog.model.filter_state import FilterState
from cardscope.domain.shared.error import ExecutionError

EVERYTHING = FilterState()
GUARDS = FilterState.from_params({"keywords_inc": "Guard"})


class FailingFetcher:
    async def fetch(self, state: FilterState, offset: int, limit: int) -> CardPage:
        raise ExecutionError("server unavailable")


class MalformedFetcher:
    """Fails the way a fetcher does on an undecodable response."""

    def __init__(self) -> None:
        self.calls = 0

    async def fetch(self, state: FilterState, offset: int, limit: int) -> CardPage:
        self.calls += 1
        raise KeyError("items")


class TestLoadMore:
    @pytest.mark.asyncio
    async def test_batch_sizes_grow(self, recording_fetcher):
        fetcher = recording_fetcher(500)
        controller = IncrementalLoadController(fetcher)
        controller.reset(EVERYTHING)

        for _ in range(4):
            await controller.load_more()

        assert fetcher.windows == [(0, 24), (24, 72), (96, 72), (168, 144)]
        assert len(controller.collection) == 312
        assert controller.collection.total == 500
        assert controller.state is LoadState.IDLE

    @pytest.mark.asyncio
    async def test_nothing_loads_before_reset(self, recording_fetcher):
        fetcher = recording_fetcher(10)
        controller = IncrementalLoadController(fetcher)

        assert await controller.load_more() == 0
        assert fetcher.calls == []

    @pytest.mark.asyncio
    async def test_exhausted_when_total_reached(self, recording_fetcher):
        fetcher = recording_fetcher(30)
        controller = IncrementalLoadController(fetcher)
        controller.reset(EVERYTHING)

        await controller.load_more()
        await controller.load_more()
        added = await controller.load_more()

        assert added == 0
        assert len(controller.collection) == 30
        assert controller.state is LoadState.EXHAUSTED
        assert len(fetcher.calls) == 2

    @pytest.mark.asyncio
    async def test_empty_page_ends_loading(self, fixed_fetcher):
        fetcher = fixed_fetcher(CardPage(items=(), total=50))
        controller = IncrementalLoadController(fetcher)
        controller.reset(EVERYTHING)

        await controller.load_more()
        await controller.load_more()

        assert controller.state is LoadState.EXHAUSTED
        assert fetcher.calls == 1

    @pytest.mark.asyncio
    async def test_batch_of_known_cards_ends_loading(self, fixed_fetcher):
        page = CardPage(items=(Card(card_id="A"), Card(card_id="B")), total=50)
        fetcher = fixed_fetcher(page)
        controller = IncrementalLoadController(fetcher)
        controller.reset(EVERYTHING)

        assert await controller.load_more() == 2
        assert await controller.load_more() == 0

        assert controller.state is LoadState.EXHAUSTED
        assert controller.collection.ids == ["A", "B"]

    @pytest.mark.asyncio
    async def test_failure_stops_loading(self):
        controller = IncrementalLoadController(FailingFetcher())
        controller.reset(EVERYTHING)

        assert await controller.load_more() == 0

        assert controller.state is LoadState.FAILED
        assert controller.collection.total_known
        assert controller.collection.total == 0
        assert not controller.can_load
        assert not controller.in_flight

    @pytest.mark.asyncio
    async def test_unexpected_error_releases_the_slot(self):
        fetcher = MalformedFetcher()
        controller = IncrementalLoadController(fetcher)
        controller.reset(EVERYTHING)

        with pytest.raises(KeyError):
            await controller.load_more()

        assert not controller.in_flight
        assert controller.state is LoadState.IDLE
        assert controller.can_load

        with pytest.raises(KeyError):
            await controller.on_proximity()
        assert fetcher.calls == 2

    @pytest.mark.asyncio
    async def test_cancelled_batch_releases_the_slot(self, recording_fetcher):
        fetcher = recording_fetcher(100)
        fetcher.gate = asyncio.Event()
        controller = IncrementalLoadController(fetcher)
        controller.reset(EVERYTHING)

        task = asyncio.create_task(controller.load_more())
        await asyncio.sleep(0)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert not controller.in_flight
        assert len(controller.collection) == 0

        fetcher.gate.set()
        assert await controller.load_more() == 72
        assert fetcher.windows == [(0, 24), (0, 72)]

    @pytest.mark.asyncio
    async def test_batch_cap(self, recording_fetcher):
        fetcher = recording_fetcher(500)
        controller = IncrementalLoadController(fetcher, max_batches=2)
        controller.reset(EVERYTHING)

        for _ in range(3):
            await controller.load_more()

        assert len(fetcher.calls) == 2
        assert controller.state is LoadState.EXHAUSTED

    @pytest.mark.asyncio
    async def test_one_batch_in_flight(self, recording_fetcher):
        fetcher = recording_fetcher(100)
        fetcher.gate = asyncio.Event()
        controller = IncrementalLoadController(fetcher)
        controller.reset(EVERYTHING)

        first = asyncio.create_task(controller.load_more())
        await asyncio.sleep(0)
        assert controller.in_flight
        assert controller.state is LoadState.LOADING

        assert await controller.load_more() == 0
        assert await controller.on_proximity() == 0

        fetcher.gate.set()
        assert await first == 24
        assert len(fetcher.calls) == 1


class TestReset:
    @pytest.mark.asyncio
    async def test_same_key_keeps_collection(self, recording_fetcher):
        controller = IncrementalLoadController(recording_fetcher(100))
        controller.reset(FilterState.from_params({"q": "card", "sets": "Core"}))
        await controller.load_more()

        changed = controller.reset(FilterState.from_params({"sets": "Core", "q": "card"}))

        assert not changed
        assert len(controller.collection) == 24

    @pytest.mark.asyncio
    async def test_new_key_clears(self, recording_fetcher):
        controller = IncrementalLoadController(recording_fetcher(100))
        controller.reset(EVERYTHING)
        await controller.load_more()

        assert controller.reset(GUARDS)

        assert len(controller.collection) == 0
        assert controller.batches_taken == 0
        assert controller.state is LoadState.IDLE

    @pytest.mark.asyncio
    async def test_stale_batch_is_dropped(self, recording_fetcher):
        fetcher = recording_fetcher(100)
        fetcher.gate = asyncio.Event()
        controller = IncrementalLoadController(fetcher)
        controller.reset(EVERYTHING)

        stale = asyncio.create_task(controller.load_more())
        await asyncio.sleep(0)
        controller.reset(FilterState.from_params({"sets": "Core"}))
        fetcher.gate.set()

        assert await stale == 0
        assert len(controller.collection) == 0
        assert controller.state is LoadState.IDLE

        assert await controller.load_more() == 24
        assert fetcher.calls[-1] == ("sets=Core", 0, 24)


class TestLoadUntil:
    @pytest.mark.asyncio
    async def test_batches_clamped_to_target(self, recording_fetcher):
        fetcher = recording_fetcher(500)
        controller = IncrementalLoadController(fetcher, LoadSizePolicy(restore_batch_max=50))
        controller.reset(EVERYTHING)

        loaded = await controller.load_until(130)

        assert loaded == 130
        assert fetcher.windows == [(0, 50), (50, 50), (100, 30)]
        assert not controller.restoring

    @pytest.mark.asyncio
    async def test_single_request_under_restore_cap(self, recording_fetcher):
        fetcher = recording_fetcher(500)
        controller = IncrementalLoadController(fetcher)
        controller.reset(EVERYTHING)

        await controller.load_until(130)

        assert fetcher.windows == [(0, 130)]

    @pytest.mark.asyncio
    async def test_stops_when_results_run_out(self, recording_fetcher):
        controller = IncrementalLoadController(recording_fetcher(40))
        controller.reset(EVERYTHING)

        assert await controller.load_until(130) == 40
        assert controller.state is LoadState.EXHAUSTED

    @pytest.mark.asyncio
    async def test_proximity_ignored_while_restoring(self, recording_fetcher):
        fetcher = recording_fetcher(500)
        fetcher.gate = asyncio.Event()
        controller = IncrementalLoadController(fetcher)
        controller.reset(EVERYTHING)

        restore = asyncio.create_task(controller.load_until(130))
        await asyncio.sleep(0)
        assert controller.restoring

        assert await controller.on_proximity() == 0

        fetcher.gate.set()
        assert await restore == 130
        assert fetcher.windows == [(0, 130)]

    @pytest.mark.asyncio
    async def test_proximity_loads_next_batch(self, recording_fetcher):
        fetcher = recording_fetcher(500)
        controller = IncrementalLoadController(fetcher)
        controller.reset(EVERYTHING)
        await controller.load_more()

        assert await controller.on_proximity() == 72
