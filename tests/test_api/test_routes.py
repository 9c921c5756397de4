"""Tests for the HTTP surface: status codes and plain-text bodies."""

from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from funding_relay.api import create_app
from funding_relay.config import AppSettings
from funding_relay.exceptions import PersistError, UpstreamFetchError
from funding_relay.handler import TickerRelay
from funding_relay.main import lifespan

PROJECT_ID = "test-project"


@pytest.fixture
def relay(mock_settings: AppSettings, mock_exchange: AsyncMock, mock_store: AsyncMock) -> TickerRelay:
    return TickerRelay(settings=mock_settings, exchange=mock_exchange, store=mock_store)


@pytest.fixture
def client(relay: TickerRelay) -> TestClient:
    """TestClient without lifespan: collaborators are mocks and need no connect."""
    return TestClient(create_app(relay))


class TestHealth:
    def test_health_ok(self, client: TestClient) -> None:
        response = client.get("/api/health")
        assert response.status_code == 200
        assert response.text == "OK"


class TestGetTicker:
    """GET /api/get-ticker responses."""

    def test_success(self, client: TestClient, mock_store: AsyncMock) -> None:
        response = client.get("/api/get-ticker", headers={"ProjectId": PROJECT_ID})
        assert response.status_code == 200
        assert response.text == "success"
        _, key, _ = mock_store.upsert_document.await_args.args
        assert key == "FX_BTC_JPY_T1"

    def test_header_name_case_insensitive(self, client: TestClient) -> None:
        response = client.get("/api/get-ticker", headers={"projectid": PROJECT_ID})
        assert response.status_code == 200

    def test_product_code_query_param(
        self, client: TestClient, mock_exchange: AsyncMock, ticker_factory
    ) -> None:
        mock_exchange.fetch_ticker.return_value = ticker_factory("FX_ETH_JPY")
        response = client.get(
            "/api/get-ticker",
            params={"product_code": "FX_ETH_JPY"},
            headers={"ProjectId": PROJECT_ID},
        )
        assert response.status_code == 200
        mock_exchange.fetch_ticker.assert_awaited_once_with("FX_ETH_JPY")

    def test_empty_product_code_uses_default(
        self, client: TestClient, mock_exchange: AsyncMock
    ) -> None:
        response = client.get(
            "/api/get-ticker?product_code=", headers={"ProjectId": PROJECT_ID}
        )
        assert response.status_code == 200
        mock_exchange.fetch_ticker.assert_awaited_once_with("FX_BTC_JPY")

    @pytest.mark.parametrize("method", ["POST", "PUT", "PATCH", "DELETE"])
    def test_non_get_405(
        self, client: TestClient, mock_exchange: AsyncMock, method: str
    ) -> None:
        response = client.request(method, "/api/get-ticker", headers={"ProjectId": PROJECT_ID})
        assert response.status_code == 405
        assert response.text == "Method Not Allowed"
        mock_exchange.fetch_ticker.assert_not_awaited()

    def test_missing_header_403(self, client: TestClient, mock_exchange: AsyncMock) -> None:
        response = client.get("/api/get-ticker")
        assert response.status_code == 403
        assert response.text == "Forbidden"
        mock_exchange.fetch_ticker.assert_not_awaited()

    def test_wrong_header_403(self, client: TestClient, mock_store: AsyncMock) -> None:
        response = client.get("/api/get-ticker", headers={"ProjectId": "nope"})
        assert response.status_code == 403
        mock_store.upsert_document.assert_not_awaited()

    def test_upstream_failure_502_then_recovers(
        self, client: TestClient, mock_exchange: AsyncMock, mock_store: AsyncMock, ticker
    ) -> None:
        mock_exchange.fetch_ticker.side_effect = [
            UpstreamFetchError("bitFlyer getticker failed: 500"),
            ticker,
        ]

        failed = client.get("/api/get-ticker", headers={"ProjectId": PROJECT_ID})
        assert failed.status_code == 502
        assert "bitFlyer" not in failed.text
        mock_store.upsert_document.assert_not_awaited()

        health = client.get("/api/health")
        assert health.status_code == 200

        retried = client.get("/api/get-ticker", headers={"ProjectId": PROJECT_ID})
        assert retried.status_code == 200
        assert retried.text == "success"

    def test_unexpected_exchange_error_502(
        self, relay: TickerRelay, mock_exchange: AsyncMock
    ) -> None:
        mock_exchange.fetch_ticker.side_effect = RuntimeError("session closed")
        client = TestClient(create_app(relay), raise_server_exceptions=False)
        response = client.get("/api/get-ticker", headers={"ProjectId": PROJECT_ID})
        assert response.status_code == 502
        assert response.text == "Bad Gateway"

    @pytest.mark.parametrize("method", ["TRACE", "PURGE"])
    def test_unrouted_verb_plain_text_405(self, client: TestClient, method: str) -> None:
        response = client.request(method, "/api/get-ticker")
        assert response.status_code == 405
        assert response.text == "Method Not Allowed"

    def test_unknown_path_still_404(self, client: TestClient) -> None:
        response = client.get("/api/nope")
        assert response.status_code == 404

    def test_persist_failure_500(self, client: TestClient, mock_store: AsyncMock) -> None:
        mock_store.upsert_document.side_effect = PersistError("deadline exceeded")
        response = client.get("/api/get-ticker", headers={"ProjectId": PROJECT_ID})
        assert response.status_code == 500
        assert response.text == "Internal Server Error"


class TestLifespan:
    """The lifespan connects and closes the shared collaborators."""

    def test_connect_and_close(
        self, relay: TickerRelay, mock_exchange: AsyncMock, mock_store: AsyncMock
    ) -> None:
        app = create_app(relay, lifespan=lifespan)
        with TestClient(app) as client:
            mock_exchange.connect.assert_awaited_once()
            mock_store.connect.assert_awaited_once()
            assert client.get("/api/health").text == "OK"
        mock_exchange.close.assert_awaited_once()
        mock_store.close.assert_awaited_once()
