"""IncrementalLoadController - batch fetching for one filter state at a time."""

import logging
from enum import StrEnum

from cardscope.domain.browse.model.collection import LoadedCollection
from cardscope.domain.browse.port.batch_fetcher import BatchFetcher
from cardscope.domain.browse.service.load_policy import LoadSizePolicy
from cardscope.domain.catalog.model.filter_state import FilterState
from cardscope.domain.shared.error import ExecutionError

logger = logging.getLogger(__name__)

DEFAULT_MAX_BATCHES = 100


class LoadState(StrEnum):
    IDLE = "idle"
    LOADING = "loading"
    EXHAUSTED = "exhausted"
    FAILED = "failed"


class IncrementalLoadController:
    """Requests successive batches and merges them into a LoadedCollection.

    At most one batch is in flight per filter state, and batches are merged
    in increasing offset order. ``reset`` to a different filter state
    invalidates any in-flight batch: its result is dropped on arrival.
    """

    def __init__(
        self,
        fetcher: BatchFetcher,
        policy: LoadSizePolicy | None = None,
        max_batches: int = DEFAULT_MAX_BATCHES,
    ) -> None:
        self._fetcher = fetcher
        self._policy = policy or LoadSizePolicy()
        self._max_batches = max_batches

        self.collection = LoadedCollection()
        self.filter_state: FilterState | None = None
        self.state = LoadState.IDLE
        self.batches_taken = 0
        self._generation = 0
        self._in_flight = False
        self._restoring = False

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    @property
    def generation(self) -> int:
        """Bumped by every reset to a different filter state."""
        return self._generation

    @property
    def restoring(self) -> bool:
        return self._restoring

    @property
    def can_load(self) -> bool:
        return (
            self.filter_state is not None
            and self.state not in (LoadState.EXHAUSTED, LoadState.FAILED)
            and not self.collection.complete
            and self.batches_taken < self._max_batches
        )

    def reset(self, filter_state: FilterState) -> bool:
        """Switch to ``filter_state``. Synchronous: nothing stale can merge afterwards.

        Returns False (and keeps everything) when the canonical key is unchanged.
        """
        if self.filter_state is not None and self.filter_state == filter_state:
            return False
        self.filter_state = filter_state
        self.collection.clear()
        self.state = LoadState.IDLE
        self.batches_taken = 0
        self._generation += 1
        self._in_flight = False
        self._restoring = False
        return True

    async def load_more(self, until_count: int | None = None) -> int:
        """Fetch and merge the next batch. Returns the number of cards added.

        ``until_count`` clamps the batch to the remaining distance to that
        count. Does nothing while a batch is in flight or loading has ended.
        """
        if self._in_flight or not self.can_load:
            return 0
        state = self.filter_state
        assert state is not None

        offset = len(self.collection)
        remaining = until_count - offset if until_count is not None else None
        if remaining is not None and remaining <= 0:
            return 0
        limit = self._policy.batch_size(self.batches_taken, remaining)

        generation = self._generation
        self._in_flight = True
        self.state = LoadState.LOADING
        self.batches_taken += 1
        try:
            page = await self._fetcher.fetch(state, offset, limit)
        except ExecutionError as e:
            if generation != self._generation:
                logger.debug("Ignoring failure of a stale batch for %s", state.canonical_key)
                return 0
            self.collection.observe_total(0)
            self.state = LoadState.FAILED
            logger.warning("Loading stopped for %r: %s", state.canonical_key, e.message)
            return 0
        finally:
            # A reset already cleared the flag for the new state
            if generation == self._generation:
                self._in_flight = False
                if self.state is LoadState.LOADING:
                    self.state = LoadState.IDLE

        if generation != self._generation:
            logger.debug("Dropping stale batch at offset %d for %r", offset, state.canonical_key)
            return 0

        added = self.collection.merge(page.items)
        self.collection.observe_total(page.total)

        if not page.items or self.collection.complete:
            self.state = LoadState.EXHAUSTED
        elif added == 0:
            logger.warning("Batch at offset %d added nothing; stopping", offset)
            self.state = LoadState.EXHAUSTED
        elif self.batches_taken >= self._max_batches:
            logger.warning(
                "Batch cap (%d) reached for %r with %d of %d loaded",
                self._max_batches,
                state.canonical_key,
                len(self.collection),
                page.total,
            )
            self.state = LoadState.EXHAUSTED
        else:
            self.state = LoadState.IDLE
        return added

    async def on_proximity(self) -> int:
        """The user is near the end of the rendered items."""
        if self._restoring or self._in_flight:
            return 0
        return await self.load_more()

    async def load_until(self, count: int) -> int:
        """Load batches until ``count`` cards are present or loading ends.

        Proximity triggers are ignored meanwhile. Returns the loaded count.
        """
        generation = self._generation
        self._restoring = True
        try:
            while len(self.collection) < count and self.can_load:
                added = await self.load_more(until_count=count)
                if generation != self._generation or added == 0:
                    break
        finally:
            if generation == self._generation:
                self._restoring = False
        return len(self.collection)
