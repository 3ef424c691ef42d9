"""
Historical daily bars from the Alphavantage TIME_SERIES_DAILY endpoint.

Only daily resolution is available; other resolutions yield nothing.
"""

from __future__ import annotations

import logging
from datetime import tzinfo
from typing import Iterator
from zoneinfo import ZoneInfo

from ..providers.alphavantage_rest import (
    OUTPUT_FULL,
    AlphavantageRESTClient,
    parse_ohlcv,
    parse_timestamp,
)
from ..types import HistoryRequest, Resolution, Slice, TradeBar
from ..utils.timeframes import resolution_to_timedelta, resolve_zone, to_exchange_date


logger = logging.getLogger(__name__)


class AlphavantageHistoryFetcher:
    """
    Turn HistoryRequests into daily TradeBar slices.

    Every request costs one full-history call; the date window is applied
    locally, inclusive on both ends and ignoring time of day.
    """

    def __init__(self, client: AlphavantageRESTClient, exchange_time_zone: str = "America/New_York"):
        self.client = client
        self.exchange_tz = ZoneInfo(exchange_time_zone)
        self.data_point_count = 0

    def fetch_request(self, request: HistoryRequest, time_zone: tzinfo | str | None = None) -> Iterator[Slice]:
        """
        Yield one Slice per in-window daily bar, oldest first.

        Args:
            request: Symbol, UTC window and resolution to fetch
            time_zone: Zone used to stamp slices (defaults to the exchange zone)

        Raises:
            AlphavantageResponseError: if the daily series is missing from the response
            AlphavantageTransportError: on network or payload errors
        """
        ticker = request.symbol.ticker

        if request.resolution != Resolution.DAILY:
            logger.error(
                f"History calls for Alphavantage only support daily resolution "
                f"(got {request.resolution.value} for {ticker})."
            )
            return

        start = to_exchange_date(request.start_time_utc, self.exchange_tz)
        end = to_exchange_date(request.end_time_utc, self.exchange_tz)
        slice_tz = resolve_zone(time_zone, self.exchange_tz)
        period = resolution_to_timedelta(Resolution.DAILY)

        logger.info(f"Submitting history request: {request.symbol.security_type.value}-{ticker}: {start}->{end}")
        series = self.client.fetch_daily(ticker, OUTPUT_FULL)

        bars = []
        for day_str, values in series.items():
            day = parse_timestamp(day_str)
            if day.date() < start or day.date() > end:
                continue
            open_, high, low, close, volume = parse_ohlcv(values)
            bars.append(TradeBar(
                time=day.replace(tzinfo=self.exchange_tz),
                symbol=request.symbol,
                open=open_,
                high=high,
                low=low,
                close=close,
                volume=volume,
                period=period,
            ))

        # Alphavantage lists newest first
        bars.sort(key=lambda b: b.time)
        logger.debug(f"{len(bars)} daily bars in window for {ticker}")

        for bar in bars:
            self.data_point_count += 1
            yield Slice.from_bars(bar.end_time.astimezone(slice_tz), [bar])
