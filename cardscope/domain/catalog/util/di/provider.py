from dishka import from_context, provide

from cardscope.config import Config
from cardscope.domain.catalog.model.registry import FacetRegistry, default_registry
from cardscope.domain.catalog.port.card_source import CardSource
from cardscope.domain.catalog.port.page_cache import PageCache
from cardscope.domain.catalog.query.browse_cards import BrowseCardsHandler
from cardscope.domain.catalog.query.explain_plan import ExplainPlanHandler
from cardscope.domain.catalog.query.get_card import GetCardHandler
from cardscope.domain.catalog.query.get_cards import GetCardsHandler
from cardscope.domain.catalog.service.compiler import FacetCompiler
from cardscope.domain.catalog.service.executor import QueryExecutor
from cardscope.util.di.base import Provider
from cardscope.util.di.scope import Scope


class CatalogProvider(Provider):
    """DI provider for the facet registry, compiler, executor and query handlers."""

    config = from_context(provides=Config, scope=Scope.APP)

    @provide(scope=Scope.APP)
    def get_registry(self) -> FacetRegistry:
        return default_registry()

    @provide(scope=Scope.APP)
    def get_compiler(self, registry: FacetRegistry) -> FacetCompiler:
        return FacetCompiler(registry=registry)

    @provide(scope=Scope.APP)
    def get_executor(self, source: CardSource) -> QueryExecutor:
        return QueryExecutor(source=source)

    # Query Handlers
    @provide(scope=Scope.UOW)
    def get_browse_cards_handler(
        self,
        compiler: FacetCompiler,
        executor: QueryExecutor,
        page_cache: PageCache,
        config: Config,
    ) -> BrowseCardsHandler:
        return BrowseCardsHandler(
            compiler=compiler,
            executor=executor,
            page_cache=page_cache if config.catalog.cache_pages else None,
        )

    explain_plan_handler = provide(ExplainPlanHandler, scope=Scope.UOW)
    get_card_handler = provide(GetCardHandler, scope=Scope.UOW)
    get_cards_handler = provide(GetCardsHandler, scope=Scope.UOW)
