from typing import AsyncIterable

from dishka import provide
from sqlalchemy.ext.asyncio import AsyncEngine

from cardscope.config import Config
from cardscope.domain.catalog.port.card_source import CardSource
from cardscope.infrastructure.persistence.card_source import SqlCardSource
from cardscope.infrastructure.persistence.database import create_db_engine
from cardscope.util.di.base import Provider
from cardscope.util.di.scope import Scope


class PersistenceProvider(Provider):
    @provide(scope=Scope.APP)
    async def get_engine(self, config: Config) -> AsyncIterable[AsyncEngine]:
        engine = create_db_engine(config)
        yield engine
        await engine.dispose()

    @provide(scope=Scope.APP)
    def get_card_source(self, engine: AsyncEngine) -> CardSource:
        return SqlCardSource(engine)
