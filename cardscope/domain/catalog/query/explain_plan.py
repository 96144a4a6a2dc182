from cardscope.domain.catalog.model.filter_state import FilterState
from cardscope.domain.catalog.model.plan import QueryPlan
from cardscope.domain.catalog.service.compiler import FacetCompiler
from cardscope.domain.shared.query import Query, QueryHandler, Result


class ExplainPlan(Query):
    params: list[tuple[str, str]] = []
    offset: int = 0
    limit: int = 72


class PlanExplanation(Result):
    canonical_key: str
    plan: QueryPlan
    lines: list[str]


class ExplainPlanHandler(QueryHandler[ExplainPlan, PlanExplanation]):
    compiler: FacetCompiler

    async def run(self, cmd: ExplainPlan) -> PlanExplanation:
        state = FilterState.from_params(cmd.params)
        plan = self.compiler.compile(state, offset=cmd.offset, limit=cmd.limit)
        return PlanExplanation(
            canonical_key=state.canonical_key,
            plan=plan,
            lines=plan.describe(),
        )
