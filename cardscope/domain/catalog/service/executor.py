"""QueryExecutor - runs compiled plans against the card source."""

import logging

import logfire

from cardscope.domain.catalog.model.card import CardPage
from cardscope.domain.catalog.model.plan import QueryPlan
from cardscope.domain.catalog.port.card_source import CardSource
from cardscope.domain.shared.error import ExecutionError
from cardscope.domain.shared.service import Service

logger = logging.getLogger(__name__)


class QueryExecutor(Service):
    """Applies a plan to the card source. Failures surface as ExecutionError, never retried."""

    source: CardSource

    async def execute(self, plan: QueryPlan) -> CardPage:
        with logfire.span(
            "execute query plan",
            predicates=len(plan.predicates),
            offset=plan.window.offset,
            limit=plan.window.limit,
        ):
            try:
                page = await self.source.execute(plan)
            except ExecutionError:
                raise
            except Exception as e:
                logger.warning("Card source failed: %s", e)
                raise ExecutionError(f"Card source failed: {e}") from e

        logger.debug(
            "Plan returned %d of %d cards at offset %d",
            len(page.items),
            page.total,
            plan.window.offset,
        )
        return page
