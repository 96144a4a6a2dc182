from cardscope.domain.catalog.model.card import Card, normalize_card_id
from cardscope.domain.catalog.port.card_source import CardSource
from cardscope.domain.shared.error import ValidationError
from cardscope.domain.shared.query import Query, QueryHandler, Result

MAX_BATCH_IDS = 100


class GetCards(Query):
    ids: list[str]


class CardBatch(Result):
    items: list[Card]


class GetCardsHandler(QueryHandler[GetCards, CardBatch]):
    """Batch lookup; results follow the requested order, unknown ids are skipped."""

    source: CardSource

    async def run(self, cmd: GetCards) -> CardBatch:
        if len(cmd.ids) > MAX_BATCH_IDS:
            raise ValidationError(f"At most {MAX_BATCH_IDS} ids per request", field="ids")
        ids = list(dict.fromkeys(normalize_card_id(i) for i in cmd.ids if i.strip()))
        if not ids:
            return CardBatch(items=[])
        return CardBatch(items=await self.source.get_many(ids))
