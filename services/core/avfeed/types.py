"""Canonical market data types exchanged with the host engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from decimal import Decimal
from enum import Enum


class SecurityType(Enum):
    """Asset classes a symbol can belong to."""
    EQUITY = "equity"
    FOREX = "forex"
    CRYPTO = "crypto"
    INDEX = "index"


class Market:
    """Market identifiers."""
    USA = "usa"


class Resolution(Enum):
    """Granularity of requested data."""
    TICK = "tick"
    SECOND = "second"
    MINUTE = "minute"
    HOUR = "hour"
    DAILY = "daily"


class TickType(Enum):
    TRADE = "trade"
    QUOTE = "quote"


@dataclass(frozen=True)
class Symbol:
    """Tradable instrument identifier (ticker + market + asset class)."""
    ticker: str
    market: str = Market.USA
    security_type: SecurityType = SecurityType.EQUITY

    @classmethod
    def create(
        cls,
        ticker: str,
        security_type: SecurityType = SecurityType.EQUITY,
        market: str = Market.USA,
    ) -> Symbol:
        return cls(ticker=ticker.strip().upper(), market=market.lower(), security_type=security_type)

    def __str__(self) -> str:
        return self.ticker


@dataclass
class Tick:
    """Single point-in-time price/volume observation."""
    time: datetime
    symbol: Symbol
    value: Decimal  # last price
    bid_price: Decimal
    ask_price: Decimal
    quantity: int
    tick_type: TickType = TickType.TRADE

    @property
    def price(self) -> Decimal:
        return self.value

    @property
    def end_time(self) -> datetime:
        return self.time


@dataclass
class TradeBar:
    """OHLCV aggregate over ``period`` starting at ``time``."""
    time: datetime
    symbol: Symbol
    open: Decimal
    high: Decimal
    low: Decimal
    close: Decimal
    volume: int
    period: timedelta = timedelta(days=1)

    @property
    def end_time(self) -> datetime:
        return self.time + self.period


@dataclass
class Slice:
    """All bars sharing one timestamp."""
    time: datetime
    bars: dict[Symbol, TradeBar] = field(default_factory=dict)

    @classmethod
    def from_bars(cls, time: datetime, bars: list[TradeBar]) -> Slice:
        return cls(time=time, bars={bar.symbol: bar for bar in bars})

    def __len__(self) -> int:
        return len(self.bars)


@dataclass
class HistoryRequest:
    """Historical data request issued by the host."""
    symbol: Symbol
    # Aware values are converted to the exchange zone; naive values are taken as exchange-local
    start_time_utc: datetime
    end_time_utc: datetime
    resolution: Resolution = Resolution.DAILY
