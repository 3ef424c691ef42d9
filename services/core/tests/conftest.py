"""Shared stubs for Alphavantage tests (no network access)."""

from __future__ import annotations

import json
from collections import defaultdict, deque
from datetime import date, timedelta

import pytest
import requests

from avfeed.config import Settings
from avfeed.providers.alphavantage_rest import AlphavantageRESTClient


class StubResponse:
    def __init__(self, payload: object = None, status_code: int = 200, text: str | None = None):
        self._payload = payload
        self.status_code = status_code
        self.text = text if text is not None else json.dumps(payload)

    def json(self) -> object:
        if self._payload is None:
            # requests raises a ValueError subclass for undecodable bodies
            raise ValueError("Expecting value: line 1 column 1 (char 0)")
        return self._payload


class StubSession:
    """
    Stands in for requests.Session.

    Queue a response (or exception) per ticker with ``add``; each GET pops the
    next one, the last one is reused once the queue is down to one entry.
    """

    def __init__(self):
        self.headers: dict[str, str] = {}
        self.calls: list[dict[str, object]] = []
        self.closed = False
        self._responses: dict[str, deque] = defaultdict(deque)

    def add(self, ticker: str, response: StubResponse | Exception) -> None:
        self._responses[ticker].append(response)

    def get(self, url: str, params: dict[str, object], timeout: float | None = None) -> StubResponse:
        self.calls.append(dict(params))
        queue = self._responses[params["symbol"]]
        if not queue:
            raise requests.ConnectionError(f"no stub response for {params['symbol']}")
        item = queue.popleft() if len(queue) > 1 else queue[0]
        if isinstance(item, Exception):
            raise item
        return item

    def close(self) -> None:
        self.closed = True


def ohlcv(close: str, volume: str = "1000") -> dict[str, str]:
    return {
        "1. open": close,
        "2. high": close,
        "3. low": close,
        "4. close": close,
        "5. volume": volume,
    }


def intraday_payload(points: dict[str, str]) -> dict[str, object]:
    """points maps "YYYY-MM-DD HH:MM:SS" -> close; emitted newest first like Alphavantage."""
    series = {ts: ohlcv(close) for ts, close in sorted(points.items(), reverse=True)}
    return {
        "Meta Data": {"1. Information": "Intraday (1min) prices", "6. Time Zone": "US/Eastern"},
        "Time Series (1min)": series,
    }


def daily_payload(start: date, days: int) -> dict[str, object]:
    series = {}
    for i in reversed(range(days)):
        day = start + timedelta(days=i)
        series[day.isoformat()] = {
            "1. open": f"{100 + i}.1000",
            "2. high": f"{101 + i}.2000",
            "3. low": f"{99 + i}.3000",
            "4. close": f"{100 + i}.5000",
            "5. volume": str(1000 * (i + 1)),
        }
    return {"Meta Data": {"5. Time Zone": "US/Eastern"}, "Time Series (Daily)": series}


RATE_LIMIT_PAYLOAD = {
    "Note": "Thank you for using Alpha Vantage! Our standard API call frequency is 5 calls per minute."
}


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def session() -> StubSession:
    return StubSession()


@pytest.fixture
def client(session: StubSession) -> AlphavantageRESTClient:
    return AlphavantageRESTClient(api_key="demo-key", session=session)


@pytest.fixture
def settings() -> Settings:
    return Settings(alphavantage_api_key="demo-key", poll_interval_seconds=60.0)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
