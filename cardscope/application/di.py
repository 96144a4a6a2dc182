from dishka import AsyncContainer, from_context, make_async_container
from starlette.requests import Request

from cardscope.config import Config
from cardscope.domain.catalog.util.di import CatalogProvider
from cardscope.infrastructure.memory.di import MemoryCardSourceProvider, PageCacheProvider
from cardscope.infrastructure.persistence.di import PersistenceProvider
from cardscope.util.di.base import Provider
from cardscope.util.di.scope import Scope


class RequestProvider(Provider):
    request = from_context(provides=Request, scope=Scope.UOW)


def card_source_provider(config: Config) -> Provider:
    """Provider for the configured catalog backend."""
    if config.catalog.backend == "sql":
        return PersistenceProvider()
    return MemoryCardSourceProvider()


def create_container(
    config: Config | None = None, source: Provider | None = None
) -> AsyncContainer:
    if config is None:
        # Pydantic Settings populates from env vars at runtime
        config = Config()  # type: ignore[call-arg]

    return make_async_container(
        CatalogProvider(),
        PageCacheProvider(),
        source or card_source_provider(config),
        RequestProvider(),
        context={Config: config},
        scopes=Scope,  # type: ignore[arg-type]  # Custom scope class
    )
