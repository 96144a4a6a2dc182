"""Trailing-edge debouncing for typing and scroll events."""

import asyncio
import logging
from collections.abc import Callable, Mapping

from cardscope.domain.browse.port.parameter_source import ParameterSource
from cardscope.domain.catalog.model.filter_state import PAGINATION_KEYS

logger = logging.getLogger(__name__)

TEXT_DEBOUNCE_SECONDS = 0.35
SCROLL_SETTLE_SECONDS = 0.15


class Debouncer:
    """Runs ``callback`` once, ``delay`` seconds after the last trigger.

    Must be triggered from inside a running event loop.
    """

    def __init__(self, delay: float, callback: Callable[[], object]) -> None:
        self.delay = delay
        self._callback = callback
        self._handle: asyncio.TimerHandle | None = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def trigger(self) -> None:
        self.cancel()
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self.delay, self._fire)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def flush(self) -> None:
        """Fire now if a call is pending."""
        if self._handle is not None:
            self.cancel()
            self._callback()

    def _fire(self) -> None:
        self._handle = None
        self._callback()


class DebouncedParamWriter:
    """Commits a draft text value to one parameter once typing pauses.

    The commit is skipped when the value already matches, so re-typing the
    same text does not produce a new navigation.
    """

    def __init__(
        self, source: ParameterSource, key: str, delay: float = TEXT_DEBOUNCE_SECONDS
    ) -> None:
        self._source = source
        self._key = key
        self._draft = ""
        self._debouncer = Debouncer(delay, self.commit)

    @property
    def draft(self) -> str:
        return self._draft

    @property
    def pending(self) -> bool:
        return self._debouncer.pending

    def set_draft(self, value: str) -> None:
        self._draft = value
        self._debouncer.trigger()

    def flush(self) -> None:
        self._debouncer.flush()

    def cancel(self) -> None:
        self._debouncer.cancel()

    def commit(self) -> bool:
        current: Mapping[str, str] = self._source.current()
        value = self._draft.strip()
        if (current.get(self._key) or "").strip() == value:
            return False
        params = {k: v for k, v in current.items() if k not in PAGINATION_KEYS}
        if value:
            params[self._key] = value
        else:
            params.pop(self._key, None)
        logger.debug("Committing %s=%r", self._key, value)
        self._source.push(params)
        return True
