"""
Tests for the FastAPI endpoints.
"""

import pytest
from fastapi.testclient import TestClient

import config
from backend.main import app, quote_provider
from quote_llm import QuoteServiceError


@pytest.fixture
def client():
    """Create a test client."""
    yield TestClient(app)
    app.dependency_overrides.clear()


def use_provider(provider):
    app.dependency_overrides[quote_provider] = lambda: provider


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"


class TestLevels:
    def test_levels(self, client):
        response = client.post("/levels", json={"base_price": 50000, "symbol": "btcusd"})
        assert response.status_code == 200
        data = response.json()
        assert data["symbol"] == "BTCUSD"
        assert data["base"] == 223
        assert data["raw_levels"] == [48841, 49284, 49729, 50176, 50625]
        assert data["adjusted_levels"] == [48841, 49285, 49729, 50177, 50625]
        assert data["labels"]["Base Level"] == 49729
        assert data["script"].startswith("//@version=5")
        assert data["provider"] == "direct"

    def test_price_too_low(self, client):
        response = client.post("/levels", json={"base_price": 3.9, "symbol": "SHIB"})
        assert response.status_code == 422
        assert response.json()["detail"] == "price too low for symbol SHIB (must be >= 4)"

    @pytest.mark.parametrize("body", [
        {"base_price": 0, "symbol": "AAPL"},
        {"base_price": -5, "symbol": "AAPL"},
        {"base_price": 100, "symbol": "   "},
        {"symbol": "AAPL"},
    ])
    def test_invalid_request(self, client, body):
        assert client.post("/levels", json=body).status_code == 422


class TestGenerate:
    def test_generate(self, client, fake_provider):
        use_provider(fake_provider(text="100"))
        response = client.post("/generate", json={"symbol": "aapl"})
        assert response.status_code == 200
        data = response.json()
        assert data["base_price"] == 100
        assert data["adjusted_levels"] == [65, 81, 101, 121, 145]
        assert data["provider"] == "fake"

    def test_unparseable_quote(self, client, fake_provider):
        use_provider(fake_provider(text="no idea"))
        response = client.post("/generate", json={"symbol": "ZZZ"})
        assert response.status_code == 422
        assert "ZZZ" in response.json()["detail"]

    def test_quote_too_low(self, client, fake_provider):
        use_provider(fake_provider(text="0.08"))
        response = client.post("/generate", json={"symbol": "doge"})
        assert response.status_code == 422
        assert "too low" in response.json()["detail"]

    def test_service_failure(self, client, fake_provider, caplog):
        use_provider(fake_provider(error=QuoteServiceError("down")))
        with caplog.at_level("ERROR", logger="backend.main"):
            response = client.post("/generate", json={"symbol": "AAPL"})
        assert response.status_code == 502
        assert response.json()["detail"] == "Price service unavailable. Please try again."
        records = [r for r in caplog.records if r.name == "backend.main"]
        assert len(records) == 1
        assert records[0].exc_info is None

    def test_unexpected_provider_failure(self, client, fake_provider):
        use_provider(fake_provider(error=ConnectionError("reset")))
        response = client.post("/generate", json={"symbol": "AAPL"})
        assert response.status_code == 502

    def test_overlong_quote_rejected(self, client, fake_provider):
        use_provider(fake_provider(text="9" * 400))
        response = client.post("/generate", json={"symbol": "BTC"})
        assert response.status_code == 422
        assert '"BTC"' in response.json()["detail"]

    def test_misconfigured_provider(self, client, monkeypatch):
        monkeypatch.setattr(config, "QUOTE_PROVIDER", "bloomberg")
        response = client.post("/generate", json={"symbol": "AAPL"})
        assert response.status_code == 500
        assert "misconfigured" in response.json()["detail"]
