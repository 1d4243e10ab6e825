"""
Shared pytest fixtures for the StockPulse test suite.

Provides:
  - ``store``: a fresh in-memory SQLite ``DataStore`` per test.
  - ``fake_av``: a scriptable stand-in for the Alpha Vantage HTTP API, served
    through ``httpx.MockTransport``.
  - ``fetcher`` / ``client``: the market data adapter and a FastAPI
    ``TestClient`` wired to the two fixtures above.
"""

from __future__ import annotations

import random
from datetime import date, timedelta
from typing import Any, Dict, List, Optional

import httpx
import pytest
from fastapi.testclient import TestClient

from stockpulse.config import Settings
from stockpulse.database import DataStore, create_db_manager
from stockpulse.main import create_app
from stockpulse.services.auth import AuthService
from stockpulse.services.data_fetcher import DataFetcher
from stockpulse.services.predictor import Predictor

AV_BASE_URL = "https://alphavantage.test/query"


def global_quote(
    symbol: str,
    price: str = "189.8400",
    change: str = "1.2300",
    change_percent: str = "0.6521%",
) -> Dict[str, Any]:
    """A GLOBAL_QUOTE payload shaped like Alpha Vantage's (all values strings)."""
    return {
        "Global Quote": {
            "01. symbol": symbol,
            "02. open": "188.0000",
            "03. high": "190.5000",
            "04. low": "187.2500",
            "05. price": price,
            "06. volume": "51234567",
            "07. latest trading day": "2024-05-17",
            "08. previous close": "188.6100",
            "09. change": change,
            "10. change percent": change_percent,
        }
    }


def daily_series(days: int) -> Dict[str, Any]:
    """TIME_SERIES_DAILY payload, newest first; the oldest close is 100.0, +1 per day."""
    start = date(2023, 1, 1)
    series = {}
    for age in range(days):
        day = start + timedelta(days=days - 1 - age)
        series[day.isoformat()] = {"4. close": f"{100 + days - 1 - age:.4f}"}
    return {"Meta Data": {}, "Time Series (Daily)": series}


def intraday_series(points: int) -> Dict[str, Any]:
    series = {}
    for i in range(points):
        minute = (points - i - 1) * 5
        ts = f"2024-05-17 {9 + minute // 60:02d}:{minute % 60:02d}:00"
        series[ts] = {"4. close": f"{200 + points - i - 1:.4f}"}
    return {"Meta Data": {}, "Time Series (5min)": series}


class FakeAlphaVantage:
    """Routes requests by ``function``/``symbol`` to canned payloads."""

    def __init__(self) -> None:
        self.quotes: Dict[str, Dict[str, Any]] = {}
        self.series: Dict[tuple, Dict[str, Any]] = {}
        self.status_codes: Dict[str, int] = {}
        self.requests: List[httpx.Request] = []

    def add_quote(self, symbol: str, **kwargs: str) -> None:
        self.quotes[symbol] = global_quote(symbol, **kwargs)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        params = request.url.params
        function = params.get("function")
        symbol = params.get("symbol", "")

        if symbol in self.status_codes:
            return httpx.Response(self.status_codes[symbol], text="upstream down")

        if function == "GLOBAL_QUOTE":
            payload = self.quotes.get(symbol, {"Global Quote": {}})
        else:
            payload = self.series.get((function, symbol), {"Meta Data": {}})
        return httpx.Response(200, json=payload)

    def last_params(self) -> httpx.QueryParams:
        return self.requests[-1].url.params


@pytest.fixture
def settings() -> Settings:
    return Settings(
        session_secret="test-secret",
        bcrypt_rounds=4,
        database_url="sqlite://",
        alpha_vantage_api_key="test-key",
        alpha_vantage_base_url=AV_BASE_URL,
        log_to_file=False,
    )


@pytest.fixture
def store() -> DataStore:
    return DataStore(create_db_manager("sqlite://"))


@pytest.fixture
def auth(store: DataStore, settings: Settings) -> AuthService:
    return AuthService(store, secret=settings.session_secret, bcrypt_rounds=settings.bcrypt_rounds)


@pytest.fixture
def fake_av() -> FakeAlphaVantage:
    fake = FakeAlphaVantage()
    fake.add_quote("AAPL")
    return fake


@pytest.fixture
def fetcher(fake_av: FakeAlphaVantage) -> DataFetcher:
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(fake_av.handler))
    return DataFetcher(api_key="test-key", base_url=AV_BASE_URL, http_client=http_client)


@pytest.fixture
def client(settings: Settings, store: DataStore, fetcher: DataFetcher) -> TestClient:
    app = create_app(
        settings=settings,
        store=store,
        fetcher=fetcher,
        predictor=Predictor(random.Random(1234)),
    )
    return TestClient(app)


def register(
    client: TestClient,
    name: str = "Ann",
    email: str = "ann@x.com",
    password: str = "secret1",
) -> Dict[str, str]:
    """Register a user and return ready-to-use auth headers."""
    response = client.post(
        "/api/auth/register",
        json={"name": name, "email": email, "password": password},
    )
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['token']}"}


def auth_headers(token: Optional[str]) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"} if token else {}
