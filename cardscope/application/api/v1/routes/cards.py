"""Card browsing REST routes."""

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter, Query, Request, Response

from cardscope.config import Config
from cardscope.domain.catalog.model.card import Card
from cardscope.domain.catalog.model.filter_state import IGNORED_KEYS
from cardscope.domain.catalog.query.browse_cards import BrowseCards, BrowseCardsHandler, CardList
from cardscope.domain.catalog.query.explain_plan import (
    ExplainPlan,
    ExplainPlanHandler,
    PlanExplanation,
)
from cardscope.domain.catalog.query.get_card import GetCard, GetCardHandler
from cardscope.domain.catalog.query.get_cards import CardBatch, GetCards, GetCardsHandler

router = APIRouter(prefix="/cards", tags=["Cards"], route_class=DishkaRoute)

CACHE_KEY_HEADER = "X-Cards-Cache-Key"


def _filter_params(request: Request) -> list[tuple[str, str]]:
    return [(k, v) for k, v in request.query_params.multi_items() if k not in IGNORED_KEYS]


def _window(config: Config, offset: int, limit: int | None) -> tuple[int, int]:
    return offset, min(limit or config.catalog.default_limit, config.catalog.max_limit)


@router.get("", response_model=CardList)
async def browse_cards(
    request: Request,
    response: Response,
    handler: FromDishka[BrowseCardsHandler],
    config: FromDishka[Config],
    offset: int = Query(0, ge=0),
    limit: int | None = Query(None, ge=1),
) -> CardList:
    offset, limit = _window(config, offset, limit)
    result = await handler.run(
        BrowseCards(params=_filter_params(request), offset=offset, limit=limit)
    )
    response.headers[CACHE_KEY_HEADER] = result.cache_key
    return result


@router.get("/plan", response_model=PlanExplanation)
async def explain_plan(
    request: Request,
    handler: FromDishka[ExplainPlanHandler],
    config: FromDishka[Config],
    offset: int = Query(0, ge=0),
    limit: int | None = Query(None, ge=1),
) -> PlanExplanation:
    offset, limit = _window(config, offset, limit)
    return await handler.run(
        ExplainPlan(params=_filter_params(request), offset=offset, limit=limit)
    )


@router.post("/batch", response_model=CardBatch)
async def get_cards(
    body: GetCards,
    handler: FromDishka[GetCardsHandler],
) -> CardBatch:
    return await handler.run(body)


@router.get("/{card_id}", response_model=Card)
async def get_card(
    card_id: str,
    handler: FromDishka[GetCardHandler],
) -> Card:
    result = await handler.run(GetCard(card_id=card_id))
    return result.card
