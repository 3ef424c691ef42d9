"""Alphavantage live data queue and history provider for the host engine."""

from __future__ import annotations

import logging
import time
from datetime import datetime, tzinfo
from typing import Any, Callable, Iterable, Iterator
from zoneinfo import ZoneInfo

from ..backtest.alphavantage_history import AlphavantageHistoryFetcher
from ..config import Settings, get_settings
from ..providers.alphavantage_rest import (
    OUTPUT_COMPACT,
    OUTPUT_FULL,
    AlphavantageRESTClient,
    AlphavantageResponseError,
    AlphavantageTransportError,
    parse_ohlcv,
    parse_timestamp,
)
from ..types import HistoryRequest, Slice, Symbol, Tick, TickType
from .cadence import PollCadence
from .registry import SubscriptionRegistry


logger = logging.getLogger(__name__)


class AlphavantageDataQueueHandler:
    """
    Polls Alphavantage 1-minute intraday series for subscribed symbols.

    The host calls ``get_next_ticks`` from its own loop. A new polling cycle
    starts once ``poll_interval_seconds`` have elapsed since the previous one;
    symbols whose request failed stay queued and are retried on the next
    call. Only points strictly newer than a symbol's watermark are emitted.

    Also serves daily history through ``get_history``.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        client: AlphavantageRESTClient | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.settings = settings or get_settings()
        self._client = client or AlphavantageRESTClient(
            api_key=self.settings.alphavantage_api_key,
            base_url=self.settings.alphavantage_base_url,
            user_agent=self.settings.alphavantage_user_agent,
            timeout=self.settings.request_timeout_seconds,
        )
        self.exchange_tz = ZoneInfo(self.settings.exchange_time_zone)
        self._registry = SubscriptionRegistry()
        self._cadence = PollCadence(self.settings.poll_interval_seconds, clock=clock)
        self._history = AlphavantageHistoryFetcher(self._client, self.settings.exchange_time_zone)
        self.tick_count = 0  # total ticks emitted by get_next_ticks

    def __enter__(self) -> AlphavantageDataQueueHandler:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    @property
    def registry(self) -> SubscriptionRegistry:
        return self._registry

    def seconds_until_next_cycle(self) -> float:
        return self._cadence.seconds_until_due()

    @property
    def data_point_count(self) -> int:
        """Total number of bars emitted by get_history."""
        return self._history.data_point_count

    # Host provider contract

    def initialize(
        self,
        job: Any,
        data_provider: Any,
        cache_provider: Any,
        map_file_provider: Any,
        factor_file_provider: Any,
        status_update: Callable[[int], None] | None,
    ) -> None:
        return

    def subscribe(self, job: Any, symbols: Iterable[Symbol]) -> None:
        self._registry.subscribe(symbols)

    def unsubscribe(self, job: Any, symbols: Iterable[Symbol]) -> None:
        self._registry.unsubscribe(symbols)

    def is_subscribed(self, symbol: Symbol | str) -> bool:
        return self._registry.is_subscribed(symbol)

    def get_next_ticks(self) -> list[Tick]:
        if self._cadence.try_start():
            queued = self._registry.enqueue_all()
            logger.debug(f"Starting poll cycle with {queued} pending symbol(s)")

        ticks: list[Tick] = []
        for symbol in self._registry.pending():
            try:
                ticks.extend(self._poll_symbol(symbol))
            except Exception as e:
                # Symbol stays pending; the rest of the batch still runs
                logger.warning(f"Unexpected error polling {symbol}, will retry: {e}", exc_info=True)

        self.tick_count += len(ticks)
        return ticks

    def get_history(
        self,
        requests: Iterable[HistoryRequest],
        time_zone: tzinfo | str | None = None,
    ) -> Iterator[Slice]:
        for request in requests:
            yield from self._history.fetch_request(request, time_zone)

    # Polling

    def _poll_symbol(self, symbol: Symbol) -> list[Tick]:
        """
        Fetch one symbol and return its unseen ticks in upstream order.

        The whole response is parsed before the watermark moves, so a
        malformed entry leaves the symbol pending with its watermark intact.
        """
        watermark = self._registry.watermark(symbol)
        output_size = OUTPUT_FULL if watermark is None else OUTPUT_COMPACT

        try:
            series = self._client.fetch_intraday(symbol.ticker, output_size)
            ticks = [self._to_tick(symbol, ts, values) for ts, values in series.items()]
        except AlphavantageResponseError as e:
            # Treated as "no new data this cycle"
            self._registry.mark_done(symbol)
            logger.warning(f"No intraday data for {symbol}: {e}")
            return []
        except AlphavantageTransportError as e:
            logger.warning(f"Error polling {symbol}, will retry: {e}")
            return []

        self._registry.mark_done(symbol)
        if symbol not in self._registry:
            return []

        fresh = [t for t in ticks if watermark is None or t.time > watermark]
        if fresh:
            self._registry.advance(symbol, max(t.time for t in fresh))
        logger.debug(f"{symbol}: {len(fresh)} new of {len(ticks)} points")
        return fresh

    def _to_tick(self, symbol: Symbol, raw_ts: str, values: dict[str, str]) -> Tick:
        ts: datetime = parse_timestamp(raw_ts).replace(tzinfo=self.exchange_tz)
        _, _, _, close, volume = parse_ohlcv(values)
        return Tick(
            time=ts,
            symbol=symbol,
            value=close,
            bid_price=close,
            ask_price=close,
            quantity=volume,
            tick_type=TickType.TRADE,
        )
