import logging

from pydantic import Field

from cardscope.domain.catalog.model.card import Card
from cardscope.domain.catalog.model.filter_state import FilterState
from cardscope.domain.catalog.port.page_cache import PageCache
from cardscope.domain.catalog.service.compiler import FacetCompiler
from cardscope.domain.catalog.service.executor import QueryExecutor
from cardscope.domain.shared.query import Query, QueryHandler, Result

logger = logging.getLogger(__name__)


class BrowseCards(Query):
    params: list[tuple[str, str]] = []
    offset: int = Field(default=0, ge=0)
    limit: int = Field(default=72, ge=1)


class CardList(Result):
    items: list[Card]
    total: int
    offset: int
    limit: int
    cache_key: str = Field(default="", exclude=True)


def page_key(state: FilterState, offset: int, limit: int) -> str:
    """Cache key for one page window of a filter state."""
    return f"{state.canonical_key}&offset={offset}&limit={limit}"


class BrowseCardsHandler(QueryHandler[BrowseCards, CardList]):
    compiler: FacetCompiler
    executor: QueryExecutor
    page_cache: PageCache | None = None

    async def run(self, cmd: BrowseCards) -> CardList:
        state = FilterState.from_params(cmd.params)
        key = page_key(state, cmd.offset, cmd.limit)

        page = self.page_cache.get(key) if self.page_cache else None
        if page is None:
            plan = self.compiler.compile(state, offset=cmd.offset, limit=cmd.limit)
            page = await self.executor.execute(plan)
            if self.page_cache:
                self.page_cache.put(key, page)
        else:
            logger.debug("Page cache hit: %s", key)

        return CardList(
            items=list(page.items),
            total=page.total,
            offset=cmd.offset,
            limit=cmd.limit,
            cache_key=key,
        )
