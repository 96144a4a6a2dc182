"""Client-side browse wiring for one result list."""

from collections.abc import Mapping

from cardscope.config import BrowseConfig
from cardscope.domain.browse.model.restore import RestoreOutcome
from cardscope.domain.browse.port.batch_fetcher import BatchFetcher
from cardscope.domain.browse.port.parameter_source import ParameterSource
from cardscope.domain.browse.port.session_store import SessionStore
from cardscope.domain.browse.port.viewport import RenderedNodeQuery, ScrollContainer
from cardscope.domain.browse.service.debounce import DebouncedParamWriter
from cardscope.domain.browse.service.load_policy import LoadSizePolicy
from cardscope.domain.browse.service.loader import IncrementalLoadController
from cardscope.domain.browse.service.scroll import ScrollPositionPersistor
from cardscope.domain.catalog.model.filter_state import FilterState
from cardscope.infrastructure.memory.session_store import InMemorySessionStore


class BrowseSession:
    """Owns the load controller and scroll persistor of a result list.

    ``enter`` is called on every filter-affecting navigation with the
    current parameter map; the session store outlives individual lists.
    """

    def __init__(
        self,
        fetcher: BatchFetcher,
        container: ScrollContainer,
        nodes: RenderedNodeQuery,
        params: ParameterSource,
        store: SessionStore | None = None,
        config: BrowseConfig | None = None,
    ) -> None:
        self.config = config or BrowseConfig()
        self.params = params
        self.store = store or InMemorySessionStore()
        self.controller = IncrementalLoadController(
            fetcher,
            LoadSizePolicy(
                first_batch=self.config.first_batch,
                middle_batch=self.config.middle_batch,
                middle_batches_until=self.config.middle_batches_until,
                later_batch=self.config.later_batch,
                restore_batch_max=self.config.restore_batch_max,
            ),
            max_batches=self.config.max_batches,
        )
        self.persistor = ScrollPositionPersistor(
            self.controller,
            self.store,
            container,
            nodes,
            namespace=self.config.restore_namespace,
            settle_delay=self.config.scroll_settle_ms / 1000,
        )

    async def enter(self, params: Mapping[str, str] | None = None) -> RestoreOutcome:
        """Show the list for ``params`` (default: the current navigation state)."""
        state = FilterState.from_params(params if params is not None else self.params.current())
        return await self.persistor.enter(state)

    def text_writer(self, key: str) -> DebouncedParamWriter:
        """Debounced writer for a free-text filter parameter."""
        return DebouncedParamWriter(self.params, key, delay=self.config.text_debounce_ms / 1000)

    def leave(self) -> None:
        """Navigating to a detail view."""
        self.persistor.before_navigate()
        self.persistor.close()
