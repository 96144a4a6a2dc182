"""ScrollPositionPersistor - remembers and restores the list viewport."""

import logging

from pydantic import ValidationError as PydanticValidationError

from cardscope.domain.browse.model.restore import (
    RestoreOutcome,
    ScrollRestoreRecord,
    find_anchor,
)
from cardscope.domain.browse.port.session_store import SessionStore
from cardscope.domain.browse.port.viewport import RenderedNodeQuery, ScrollContainer
from cardscope.domain.browse.service.debounce import SCROLL_SETTLE_SECONDS, Debouncer
from cardscope.domain.browse.service.loader import IncrementalLoadController
from cardscope.domain.catalog.model.filter_state import FilterState

logger = logging.getLogger(__name__)

DEFAULT_NAMESPACE = "cardsGridRestore"


class ScrollPositionPersistor:
    """Captures the anchored scroll position per filter state and replays it.

    A record is written on every settled scroll and right before navigating
    to a detail view, and consumed once on re-entry. Persistence is
    suppressed while a restoration is replaying batches.
    """

    def __init__(
        self,
        controller: IncrementalLoadController,
        store: SessionStore,
        container: ScrollContainer,
        nodes: RenderedNodeQuery,
        *,
        namespace: str = DEFAULT_NAMESPACE,
        settle_delay: float = SCROLL_SETTLE_SECONDS,
    ) -> None:
        self._controller = controller
        self._store = store
        self._container = container
        self._nodes = nodes
        self._namespace = namespace
        self._debouncer = Debouncer(settle_delay, self.persist_now)
        self._suppressed = False
        self._restore_generation: int | None = None

    @property
    def suppressed(self) -> bool:
        return self._suppressed

    def storage_key(self, canonical_key: str) -> str:
        return f"{self._namespace}:{canonical_key}"

    def capture(self) -> ScrollRestoreRecord | None:
        """Snapshot the current position; None before any filter state or load."""
        state = self._controller.filter_state
        loaded = len(self._controller.collection)
        if state is None or loaded == 0:
            return None
        viewport = self._container.viewport()
        anchor = find_anchor(self._nodes.nodes(self._container), viewport)
        return ScrollRestoreRecord(
            canonical_key=state.canonical_key,
            scroll_offset=max(0.0, self._container.scroll_top),
            loaded_count=loaded,
            anchor_card_id=anchor.card_id if anchor else None,
            anchor_pixel_offset=anchor.top - viewport.top if anchor else None,
        )

    def persist_now(self) -> ScrollRestoreRecord | None:
        if self._suppressed:
            return None
        record = self.capture()
        if record is None:
            return None
        key = self.storage_key(record.canonical_key)
        self._store.set(key, record.model_dump_json(by_alias=True))
        return record

    def on_scroll_settled(self) -> None:
        """Scroll event hook; persists once scrolling pauses."""
        if not self._suppressed:
            self._debouncer.trigger()

    def before_navigate(self) -> ScrollRestoreRecord | None:
        """Persist immediately before leaving for a detail view."""
        self._debouncer.cancel()
        return self.persist_now()

    def close(self) -> None:
        self._debouncer.cancel()

    def _consume(self, state: FilterState) -> ScrollRestoreRecord | None:
        raw = self._store.pop(self.storage_key(state.canonical_key))
        if raw is None:
            return None
        try:
            record = ScrollRestoreRecord.model_validate_json(raw)
        except PydanticValidationError:
            logger.info("Discarding unreadable scroll record for %r", state.canonical_key)
            return None
        if record.canonical_key != state.canonical_key:
            return None
        return record

    async def enter(self, state: FilterState) -> RestoreOutcome:
        """Show the list for ``state``, restoring the remembered position if any."""
        self._debouncer.cancel()
        if self._controller.reset(state):
            # A restore still replaying belongs to the previous state
            self._restore_generation = None
            self._suppressed = False
        record = self._consume(state)
        if record is None:
            if len(self._controller.collection) == 0:
                await self._controller.load_more()
            return RestoreOutcome.NONE

        generation = self._controller.generation
        self._restore_generation = generation
        self._suppressed = True
        try:
            loaded = await self._controller.load_until(record.loaded_count)
            if self._controller.generation != generation:
                logger.debug("Restore for %r superseded", state.canonical_key)
                return RestoreOutcome.STALE
            if loaded < record.loaded_count:
                logger.info(
                    "Restored %d of %d remembered cards for %r",
                    loaded,
                    record.loaded_count,
                    state.canonical_key,
                )
            return self._apply(record)
        finally:
            if self._restore_generation == generation:
                self._restore_generation = None
                self._suppressed = False

    def _apply(self, record: ScrollRestoreRecord) -> RestoreOutcome:
        viewport = self._container.viewport()
        if record.anchor_card_id is not None and record.anchor_pixel_offset is not None:
            for node in self._nodes.nodes(self._container):
                if node.card_id == record.anchor_card_id:
                    delta = (node.top - viewport.top) - record.anchor_pixel_offset
                    self._container.scroll_top = self._container.scroll_top + delta
                    return RestoreOutcome.ANCHORED
        logger.info("Anchor %s not rendered, using raw offset", record.anchor_card_id)
        self._container.scroll_top = record.scroll_offset
        return RestoreOutcome.RAW_OFFSET
