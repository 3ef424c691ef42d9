"""Alphavantage REST client (blocking, one request per call)."""

from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal
from typing import Any

import requests

from ..config import DEFAULT_BASE_URL, DEFAULT_USER_AGENT, MIN_API_KEY_LENGTH


logger = logging.getLogger(__name__)

INTRADAY_FUNCTION = "TIME_SERIES_INTRADAY"
DAILY_FUNCTION = "TIME_SERIES_DAILY"
INTRADAY_INTERVAL = "1min"
INTRADAY_SERIES_KEY = f"Time Series ({INTRADAY_INTERVAL})"
DAILY_SERIES_KEY = "Time Series (Daily)"

OUTPUT_FULL = "full"
OUTPUT_COMPACT = "compact"

# Keys Alphavantage uses to explain why a time series is missing
_UPSTREAM_MESSAGE_KEYS = ("Error Message", "Note", "Information")


class AlphavantageError(RuntimeError):
    """Base class for Alphavantage adapter failures."""


class AlphavantageConfigError(AlphavantageError):
    """Raised when the adapter is constructed without a usable API key."""


class AlphavantageTransportError(AlphavantageError):
    """Raised on network errors, HTTP error statuses or undecodable payloads."""


class AlphavantageResponseError(AlphavantageError):
    """Raised when the expected time series is absent (invalid key or rate limit)."""


class AlphavantageRESTClient:
    """Issues time-series queries against the Alphavantage REST API."""

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        user_agent: str = DEFAULT_USER_AGENT,
        timeout: float | None = None,
        session: requests.Session | None = None,
    ):
        if not api_key or len(api_key) < MIN_API_KEY_LENGTH:
            raise AlphavantageConfigError(
                f"Alphavantage API key must be at least {MIN_API_KEY_LENGTH} characters"
            )
        self.api_key = api_key
        self.base_url = base_url
        self.timeout = timeout
        self._session = session or requests.Session()
        self._session.headers.update({"User-Agent": user_agent})

    def close(self) -> None:
        self._session.close()

    def build_params(self, function: str, ticker: str, output_size: str) -> dict[str, str]:
        params = {
            "function": function,
            "symbol": ticker,
            "outputsize": output_size,
            "apikey": self.api_key,
        }
        if function == INTRADAY_FUNCTION:
            params["interval"] = INTRADAY_INTERVAL
        return params

    def query(self, function: str, ticker: str, output_size: str) -> dict[str, Any]:
        """
        Execute one GET and return the decoded JSON object.

        Raises:
            AlphavantageTransportError: on network failure, HTTP status >= 400
                or a body that is not a JSON object
        """
        params = self.build_params(function, ticker, output_size)
        logger.debug(f"GET {self.base_url} function={function} symbol={ticker} outputsize={output_size}")

        try:
            response = self._session.get(self.base_url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            raise AlphavantageTransportError(f"Network error fetching {ticker}: {e}") from e

        if response.status_code >= 400:
            raise AlphavantageTransportError(
                f"Alphavantage API error {response.status_code} for {ticker}: {response.text[:200]}"
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise AlphavantageTransportError(f"Malformed JSON for {ticker}: {e}") from e

        if not isinstance(payload, dict):
            raise AlphavantageTransportError(f"Unexpected payload type for {ticker}: {type(payload).__name__}")
        return payload

    def fetch_series(self, function: str, ticker: str, output_size: str) -> dict[str, dict[str, str]]:
        """Query and extract the time-series mapping for ``function``."""
        payload = self.query(function, ticker, output_size)
        key = INTRADAY_SERIES_KEY if function == INTRADAY_FUNCTION else DAILY_SERIES_KEY
        return extract_series(payload, key, ticker)

    def fetch_intraday(self, ticker: str, output_size: str = OUTPUT_COMPACT) -> dict[str, dict[str, str]]:
        return self.fetch_series(INTRADAY_FUNCTION, ticker, output_size)

    def fetch_daily(self, ticker: str, output_size: str = OUTPUT_FULL) -> dict[str, dict[str, str]]:
        return self.fetch_series(DAILY_FUNCTION, ticker, output_size)


def extract_series(payload: dict[str, Any], key: str, ticker: str) -> dict[str, dict[str, str]]:
    """
    Return ``payload[key]`` or raise AlphavantageResponseError.

    Alphavantage answers rate-limited or unauthorised calls with HTTP 200 and a
    body holding only a "Note", "Information" or "Error Message" entry.
    """
    series = payload.get(key)
    if isinstance(series, dict):
        return series

    reason = next((str(payload[k]) for k in _UPSTREAM_MESSAGE_KEYS if k in payload), None)
    detail = reason or "invalid API key or API call limit reached"
    raise AlphavantageResponseError(f"Missing '{key}' in response for {ticker}: {detail}")


def parse_timestamp(raw: str) -> datetime:
    """Parse "2023-01-05" or "2023-01-05 16:00:00"."""
    try:
        return datetime.fromisoformat(raw.strip())
    except ValueError as e:
        raise AlphavantageTransportError(f"Unparseable timestamp '{raw}'") from e


def parse_ohlcv(values: dict[str, str]) -> tuple[Decimal, Decimal, Decimal, Decimal, int]:
    """
    Convert one series entry into (open, high, low, close, volume).

    Prices keep the exact digits sent by Alphavantage.
    """
    try:
        return (
            Decimal(values["1. open"]),
            Decimal(values["2. high"]),
            Decimal(values["3. low"]),
            Decimal(values["4. close"]),
            int(Decimal(values["5. volume"])),
        )
    except (KeyError, TypeError, ValueError, ArithmeticError) as e:
        raise AlphavantageTransportError(f"Malformed series entry {values!r}: {e}") from e
