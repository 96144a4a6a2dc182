"""DI providers for in-memory adapters."""

import logging

from dishka import provide

from cardscope.config import Config
from cardscope.domain.catalog.port.card_source import CardSource
from cardscope.domain.catalog.port.page_cache import PageCache
from cardscope.infrastructure.memory.card_source import InMemoryCardSource
from cardscope.infrastructure.memory.page_cache import InMemoryPageCache
from cardscope.util.di.base import Provider
from cardscope.util.di.scope import Scope

logger = logging.getLogger(__name__)


class PageCacheProvider(Provider):
    page_cache = provide(InMemoryPageCache, scope=Scope.APP, provides=PageCache)


class MemoryCardSourceProvider(Provider):
    """Card source held in memory, loaded from ``catalog.seed_file``."""

    @provide(scope=Scope.APP)
    def get_card_source(self, config: Config) -> CardSource:
        if config.catalog.seed_file:
            return InMemoryCardSource.from_json_file(config.catalog.seed_file)
        logger.warning("No catalog.seed_file configured; serving an empty catalog")
        return InMemoryCardSource()
