"""HTTP adapter for the BatchFetcher port."""

import httpx

from cardscope.domain.browse.port.batch_fetcher import BatchFetcher
from cardscope.domain.catalog.model.card import Card, CardPage
from cardscope.domain.catalog.model.filter_state import FilterState
from cardscope.domain.shared.error import ExecutionError

CARDS_PATH = "/api/v1/cards"


class HttpBatchFetcher(BatchFetcher):
    """Fetches batches from a cardscope server using httpx."""

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    async def fetch(self, state: FilterState, offset: int, limit: int) -> CardPage:
        params = [*state.entries, ("offset", str(offset)), ("limit", str(limit))]
        try:
            response = await self._client.get(CARDS_PATH, params=params)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise ExecutionError(f"Card request failed: {e}") from e
        # pydantic's ValidationError and JSON decode errors are ValueErrors
        try:
            data = response.json()
            return CardPage(
                items=tuple(Card.model_validate(item) for item in data["items"]),
                total=data["total"],
            )
        except (ValueError, KeyError, TypeError) as e:
            raise ExecutionError(f"Malformed card response: {e!r}") from e
