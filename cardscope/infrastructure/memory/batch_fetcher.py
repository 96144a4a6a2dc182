from cardscope.domain.browse.port.batch_fetcher import BatchFetcher
from cardscope.domain.catalog.model.card import CardPage
from cardscope.domain.catalog.model.filter_state import FilterState
from cardscope.domain.catalog.service.compiler import FacetCompiler
from cardscope.domain.catalog.service.executor import QueryExecutor


class CatalogBatchFetcher(BatchFetcher):
    """Fetches batches in-process through the compiler and executor."""

    def __init__(self, compiler: FacetCompiler, executor: QueryExecutor) -> None:
        self._compiler = compiler
        self._executor = executor

    async def fetch(self, state: FilterState, offset: int, limit: int) -> CardPage:
        plan = self._compiler.compile(state, offset=offset, limit=limit)
        return await self._executor.execute(plan)
