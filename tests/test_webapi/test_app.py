"""Tests for FastAPI application endpoints."""

import sys
from decimal import Decimal
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient
from httpx import ASGITransport, AsyncClient

sys.path.append("src")

AUTH = {"Authorization": "Bearer test_endpoint_token"}


class TestFastAPIApp:
    """Test the FastAPI application endpoints."""

    @pytest.fixture
    def app(self, test_settings, isolated_store, mock_price_oracle):
        """Create test FastAPI app over the isolated store."""
        from papertrade.webapi.app import create_app

        return create_app(
            settings=test_settings, store=isolated_store, price_oracle=mock_price_oracle
        )

    @pytest.fixture
    def client(self, app):
        """Create test client."""
        return TestClient(app)

    @pytest.fixture
    def async_client(self, app):
        """Create async test client."""
        transport = ASGITransport(app=app)
        return AsyncClient(transport=transport, base_url="http://test")

    @pytest.fixture
    def account(self, client):
        response = client.post("/api/v1/accounts", json={"accountId": "alice"}, headers=AUTH)
        assert response.status_code == 201
        return response.json()["data"]

    def _trade(self, client, side, shares, price, symbol="AAPL", account_id="alice"):
        return client.post(
            f"/api/v1/accounts/{account_id}/trades",
            json={"symbol": symbol, "side": side, "shares": shares, "price": price},
            headers=AUTH,
        )

    # Authentication

    def test_requires_auth(self, client):
        """Endpoints reject requests without a bearer token."""
        response = client.get("/api/v1/leaderboard")
        assert response.status_code in (401, 403)
        assert response.json()["success"] is False

    def test_invalid_auth(self, client):
        headers = {"Authorization": "Bearer wrong_token"}
        response = client.get("/api/v1/leaderboard", headers=headers)
        assert response.status_code == 401
        assert response.json()["error"]["message"] == "Invalid authentication token"

    def test_unconfigured_token(self, test_settings, isolated_store, mock_price_oracle):
        from papertrade.webapi.app import create_app

        test_settings.endpoint_auth_token = None
        client = TestClient(
            create_app(test_settings, isolated_store, mock_price_oracle)
        )

        response = client.get("/api/v1/leaderboard", headers=AUTH)
        assert response.status_code == 500

    # Health

    def test_health_without_auth(self, client):
        response = client.get("/api/v1/health")

        assert response.status_code == 200
        body = response.json()
        assert body["health"]["status"] == "healthy"
        assert body["health"]["services"]["database"]["connectivity"] is True
        assert body["timestamp"].endswith("Z")

    def test_liveness(self, client):
        assert client.get("/api/v1/health/live").json() == {"status": "alive"}

    def test_request_id_header(self, client):
        response = client.get("/api/v1/health")
        assert response.headers.get("X-Request-ID")
        assert response.json()["request_id"] == response.headers["X-Request-ID"]

    def test_status(self, client):
        response = client.get("/api/v1/status", headers=AUTH)

        assert response.status_code == 200
        assert response.json()["data"]["trading"]["commission_per_trade"] == 4.95

    # Accounts

    def test_open_account(self, client, account):
        assert account["accountId"] == "alice"
        assert account["cashBalance"] == 100000.0
        assert account["startingBalance"] == 100000.0

    def test_open_duplicate_account(self, client, account):
        response = client.post("/api/v1/accounts", json={"accountId": "alice"}, headers=AUTH)

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "account_exists"

    def test_get_account(self, client, account):
        response = client.get("/api/v1/accounts/alice", headers=AUTH)

        assert response.status_code == 200
        assert response.json()["data"]["cashBalance"] == 100000.0

    def test_unknown_account(self, client):
        response = client.get("/api/v1/accounts/ghost", headers=AUTH)

        assert response.status_code == 404
        assert response.json()["error"]["type"] == "AccountNotFound"

    def test_unreadable_ledger(self, client, account, isolated_store):
        from sqlalchemy.exc import OperationalError

        error = OperationalError("SELECT", {}, Exception("unable to open database file"))
        with patch.object(isolated_store, "snapshot", side_effect=error):
            response = client.get("/api/v1/accounts/alice", headers=AUTH)

        assert response.status_code == 503
        assert response.json()["error"]["code"] == "storage_failure"

    # Trading

    def test_buy(self, client, account):
        response = self._trade(client, "buy", 10, 150)

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Successfully bought 10 shares of AAPL"
        data = body["data"]
        assert data["transactionId"] > 0
        assert data["side"] == "buy"
        assert data["cashBalance"] == pytest.approx(98495.05)
        assert data["holding"] == {
            "symbol": "AAPL",
            "shares": 10,
            "avgCost": 150.0,
            "costBasis": 1500.0,
        }

    def test_action_alias_and_sell_out(self, client, account):
        self._trade(client, "buy", 10, 150)
        response = client.post(
            "/api/v1/accounts/alice/trades",
            json={"symbol": "aapl", "action": "sell", "shares": 10, "pricePerShare": 170},
            headers=AUTH,
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["holding"] is None
        assert data["cashBalance"] == pytest.approx(98495.05 + 1700 - 4.95)

    def test_insufficient_funds(self, client, account):
        response = self._trade(client, "buy", 1000, 100)

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "insufficient_funds"
        assert Decimal(error["details"]["required"]) == Decimal("100004.95")

    def test_sell_without_position(self, client, account):
        response = self._trade(client, "sell", 1, 100)

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "no_position"

    def test_sell_too_many(self, client, account):
        self._trade(client, "buy", 2, 100)
        response = self._trade(client, "sell", 3, 100)

        assert response.status_code == 400
        assert response.json()["error"]["message"] == (
            "Insufficient shares (have 2, want to sell 3)"
        )

    def test_invalid_order_values(self, client, account):
        response = self._trade(client, "buy", 0, 100)
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "invalid_order"

        response = self._trade(client, "short", 1, 100)
        assert response.status_code == 400

        response = self._trade(client, "buy", 1, "1.00001")
        assert response.status_code == 400

    def test_malformed_body(self, client, account):
        response = self._trade(client, "buy", "ten", 100)

        assert response.status_code == 422
        assert response.json()["error"]["type"] == "ValidationError"

        response = self._trade(client, "buy", 1.5, 100)
        assert response.status_code == 422

    def test_trade_unknown_account(self, client):
        response = self._trade(client, "buy", 1, 100, account_id="ghost")
        assert response.status_code == 404

    # Portfolio and history

    def test_portfolio(self, client, account):
        self._trade(client, "buy", 1, 10, symbol="MSFT")
        self._trade(client, "buy", 2, 20, symbol="AAPL")

        data = client.get("/api/v1/accounts/alice/portfolio", headers=AUTH).json()["data"]

        assert data["count"] == 2
        assert [h["symbol"] for h in data["holdings"]] == ["AAPL", "MSFT"]

    def test_portfolio_summary(self, client, account):
        self._trade(client, "buy", 10, 150)

        response = client.get("/api/v1/accounts/alice/portfolio/summary", headers=AUTH)

        assert response.status_code == 200
        data = response.json()["data"]
        assert set(data) == {
            "cashBalance",
            "invested",
            "currentValue",
            "totalPortfolioValue",
            "totalReturn",
            "startingBalance",
            "numPositions",
        }
        assert data["invested"] == 1500.0
        assert data["currentValue"] == data["invested"]
        assert data["totalPortfolioValue"] == pytest.approx(99995.05)
        assert data["numPositions"] == 1

    def test_transactions(self, client, account):
        self._trade(client, "buy", 1, 10)
        self._trade(client, "buy", 1, 11)
        self._trade(client, "sell", 1, 12)

        response = client.get("/api/v1/accounts/alice/transactions?limit=2", headers=AUTH)

        data = response.json()["data"]
        assert data["count"] == 2
        assert [t["side"] for t in data["transactions"]] == ["sell", "buy"]
        assert data["transactions"][0]["pricePerShare"] == 12.0

    def test_transactions_negative_limit(self, client, account):
        response = client.get("/api/v1/accounts/alice/transactions?limit=-1", headers=AUTH)
        assert response.status_code == 422

    # Leaderboard

    def test_leaderboard(self, client):
        for account_id, balance in (("low", "500"), ("high", "900")):
            client.post(
                "/api/v1/accounts",
                json={"accountId": account_id, "startingBalance": balance},
                headers=AUTH,
            )

        data = client.get("/api/v1/leaderboard?limit=5", headers=AUTH).json()["data"]

        assert data["count"] == 2
        top = data["leaderboard"][0]
        assert top["rank"] == 1
        assert top["accountId"] == "high"
        assert top["totalValue"] == 900.0
        assert top["returnPercent"] == 0.0
        assert top["tradeCount"] == 0

    # Market data

    def test_quote(self, client, mock_price_oracle):
        response = client.get("/api/v1/market/quote/AAPL", headers=AUTH)

        assert response.status_code == 200
        assert response.json()["data"] == {
            "symbol": "AAPL",
            "price": 150.0,
            "previousClose": 148.0,
        }
        mock_price_oracle.get_quote.assert_called_once_with("AAPL")

    def test_quote_unavailable(self, client, mock_price_oracle):
        from papertrade.services.trading import QuoteUnavailable

        mock_price_oracle.get_quote.side_effect = QuoteUnavailable("NOPE", "not found")

        response = client.get("/api/v1/market/quote/NOPE", headers=AUTH)
        assert response.status_code == 502

    # Async client

    @pytest.mark.asyncio
    async def test_async_health(self, async_client):
        async with async_client as ac:
            response = await ac.get("/api/v1/health")
        assert response.status_code == 200
