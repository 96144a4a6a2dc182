"""Tests for the card REST routes."""

from collections.abc import Sequence

import pytest
from dishka import provide
from fastapi.testclient import TestClient

from cardscope.application.api.rest.app import create_app
from cardscope.application.api.v1.routes.cards import CACHE_KEY_HEADER
from cardscope.application.di import create_container
from cardscope.config import CatalogConfig, Config
from cardscope.domain.catalog.model.card import Card, CardPage
from cardscope.domain.catalog.model.plan import QueryPlan
from cardscope.domain.catalog.port.card_source import CardSource
from cardscope.infrastructure.memory.card_source import InMemoryCardSource
from cardscope.util.di.base import Provider
from cardscope.util.di.scope import Scope


class StaticCardSourceProvider(Provider):
    def __init__(self, source: CardSource) -> None:
        super().__init__()
        self._source = source

    @provide(scope=Scope.APP)
    def get_card_source(self) -> CardSource:
        return self._source


class BrokenCardSource:
    async def execute(self, plan: QueryPlan) -> CardPage:
        raise ConnectionError("database is down")

    async def get(self, card_id: str) -> Card | None:
        raise ConnectionError("database is down")

    async def get_many(self, card_ids: Sequence[str]) -> list[Card]:
        raise ConnectionError("database is down")


def make_client(source: CardSource, **catalog) -> TestClient:
    config = Config(catalog=CatalogConfig(**catalog))
    container = create_container(config, source=StaticCardSourceProvider(source))
    return TestClient(create_app(config, container))


@pytest.fixture
def client(catalog: list[Card]):
    with make_client(InMemoryCardSource(catalog)) as client:
        yield client


class TestBrowseRoute:
    def test_filters_and_sets_cache_key(self, client: TestClient):
        response = client.get("/api/v1/cards", params={"keywords_inc": "Guard", "limit": 10})

        assert response.status_code == 200
        body = response.json()
        assert [c["card_id"] for c in body["items"]] == ["ABC-001", "ABC-003"]
        assert body["total"] == 2
        assert body["limit"] == 10
        assert "cache_key" not in body
        assert response.headers[CACHE_KEY_HEADER] == "keywords_inc=Guard&offset=0&limit=10"

    def test_cards_pass_through_unchanged(self, client: TestClient):
        body = client.get("/api/v1/cards", params={"q": "bolt"}).json()

        (card,) = body["items"]
        assert card["highlight_effect"] == "Draw on kill"
        assert card["keywords"] == []
        assert card["cost"] is None

    def test_default_and_maximum_limit(self, client: TestClient):
        assert client.get("/api/v1/cards").json()["limit"] == 72
        assert client.get("/api/v1/cards", params={"limit": 1000}).json()["limit"] == 400

    def test_repeated_keys_keep_first_value(self, client: TestClient):
        response = client.get("/api/v1/cards?sets=Expansion&sets=Core")

        assert [c["card_id"] for c in response.json()["items"]] == ["ABC-003", "ABC-004"]

    def test_invalid_offset(self, client: TestClient):
        assert client.get("/api/v1/cards", params={"offset": -1}).status_code == 422

    def test_malformed_facet_is_ignored(self, client: TestClient):
        response = client.get("/api/v1/cards", params={"cost_min": "lots"})

        assert response.status_code == 200
        assert response.json()["total"] == 4

    def test_source_failure_is_503(self):
        with make_client(BrokenCardSource()) as client:
            response = client.get("/api/v1/cards")

        assert response.status_code == 503
        assert response.json()["code"] == "ExecutionError"


class TestPlanRoute:
    def test_explains_filter(self, client: TestClient):
        response = client.get(
            "/api/v1/cards/plan", params={"cost_only_null": "1", "cost_min": "5", "offset": 24}
        )

        body = response.json()
        assert body["canonical_key"] == "cost_min=5&cost_only_null=1"
        assert body["lines"][0] == "cost is_null"
        assert body["lines"][-1] == "OFFSET 24 LIMIT 72"


class TestCardRoutes:
    def test_get_card_normalizes_id(self, client: TestClient):
        response = client.get("/api/v1/cards/abc-004")

        assert response.status_code == 200
        assert response.json()["name"] == "Blank Slate"

    def test_missing_card_is_404(self, client: TestClient):
        response = client.get("/api/v1/cards/XYZ-999")

        assert response.status_code == 404
        assert response.json()["code"] == "NotFoundError"

    def test_batch_keeps_request_order(self, client: TestClient):
        response = client.post("/api/v1/cards/batch", json={"ids": ["ABC-003", "abc-001"]})

        assert [c["card_id"] for c in response.json()["items"]] == ["ABC-003", "ABC-001"]

    def test_batch_limit(self, client: TestClient):
        ids = [f"ABC-{i:03d}" for i in range(101)]

        response = client.post("/api/v1/cards/batch", json={"ids": ids})

        assert response.status_code == 422
        assert response.json()["field"] == "ids"


class TestPageCache:
    def test_repeat_request_is_served_from_cache(self, catalog: list[Card]):
        source = CountingSource(catalog)
        with make_client(source) as client:
            client.get("/api/v1/cards", params={"q": "bolt"})
            client.get("/api/v1/cards", params={"q": "bolt"})

        assert source.calls == 1

    def test_cache_can_be_disabled(self, catalog: list[Card]):
        source = CountingSource(catalog)
        with make_client(source, cache_pages=False) as client:
            client.get("/api/v1/cards", params={"q": "bolt"})
            client.get("/api/v1/cards", params={"q": "bolt"})

        assert source.calls == 2


class CountingSource(InMemoryCardSource):
    def __init__(self, cards: list[Card]) -> None:
        super().__init__(cards)
        self.calls = 0

    async def execute(self, plan: QueryPlan) -> CardPage:
        self.calls += 1
        return await super().execute(plan)


class TestHealth:
    def test_health(self, client: TestClient):
        assert client.get("/api/v1/health").json() == {"status": "ok"}
