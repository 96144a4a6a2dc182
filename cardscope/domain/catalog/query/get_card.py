from cardscope.domain.catalog.model.card import Card, normalize_card_id
from cardscope.domain.catalog.port.card_source import CardSource
from cardscope.domain.shared.error import NotFoundError
from cardscope.domain.shared.query import Query, QueryHandler, Result


class GetCard(Query):
    card_id: str


class CardDetail(Result):
    card: Card


class GetCardHandler(QueryHandler[GetCard, CardDetail]):
    source: CardSource

    async def run(self, cmd: GetCard) -> CardDetail:
        card_id = normalize_card_id(cmd.card_id)
        card = await self.source.get(card_id)
        if card is None:
            raise NotFoundError(f"Card not found: {card_id}")
        return CardDetail(card=card)
