"""Tests for BrowseSession wiring."""

import asyncio

import pytest

from cardscope.application.browse import BrowseSession
from cardscope.config import BrowseConfig
from cardscope.domain.browse.model.restore import RestoreOutcome
from cardscope.infrastructure.memory.parameter_source import InMemoryParameterSource
from cardscope.infrastructure.memory.session_store import InMemorySessionStore


@pytest.fixture
def make_session(recording_fetcher, grid, scroll_container):
    store = InMemorySessionStore()

    def make(params: InMemoryParameterSource, config: BrowseConfig | None = None):
        fetcher = recording_fetcher(300)
        container = scroll_container()
        session = BrowseSession(
            fetcher,
            container,
            grid(lambda: session.controller.collection.ids),
            params,
            store=store,
            config=config,
        )
        return session, container, fetcher

    return make


class TestBrowseSession:
    @pytest.mark.asyncio
    async def test_batch_sizes_follow_config(self, make_session):
        config = BrowseConfig(first_batch=10, middle_batch=20)
        session, _, fetcher = make_session(InMemoryParameterSource(), config)

        await session.enter()
        await session.controller.on_proximity()

        assert fetcher.windows == [(0, 10), (10, 20)]

    @pytest.mark.asyncio
    async def test_leave_and_return_restores_position(self, make_session):
        params = InMemoryParameterSource({"sets": "Core", "offset": "24"})
        session, container, _ = make_session(params)
        await session.enter()
        await session.controller.on_proximity()
        container.scroll_top = 5030
        session.leave()

        returning, restored, fetcher = make_session(params)
        outcome = await returning.enter()

        assert outcome is RestoreOutcome.ANCHORED
        assert fetcher.windows == [(0, 96)]
        assert restored.scroll_top == 5030

    @pytest.mark.asyncio
    async def test_text_writer_pushes_new_navigation(self, make_session):
        params = InMemoryParameterSource({"sets": "Core"})
        session, _, _ = make_session(params, BrowseConfig(text_debounce_ms=10))

        writer = session.text_writer("q")
        writer.set_draft("card 1")
        await asyncio.sleep(0.05)
        outcome = await session.enter()

        assert params.current() == {"sets": "Core", "q": "card 1"}
        assert outcome is RestoreOutcome.NONE
        assert session.controller.filter_state.canonical_key == "q=card+1&sets=Core"
