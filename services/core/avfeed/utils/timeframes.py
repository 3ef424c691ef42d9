from __future__ import annotations

import re
from datetime import date, datetime, timedelta, tzinfo
from zoneinfo import ZoneInfo

from ..types import Resolution


INTERVAL_RE = re.compile(r"^(\d+)(s|m|h|d)$")

_ALIASES = {
    "tick": Resolution.TICK,
    "second": Resolution.SECOND,
    "minute": Resolution.MINUTE,
    "hour": Resolution.HOUR,
    "daily": Resolution.DAILY,
    "day": Resolution.DAILY,
}
_UNITS = {
    "s": Resolution.SECOND,
    "m": Resolution.MINUTE,
    "h": Resolution.HOUR,
    "d": Resolution.DAILY,
}
_PERIODS = {
    Resolution.TICK: timedelta(0),
    Resolution.SECOND: timedelta(seconds=1),
    Resolution.MINUTE: timedelta(minutes=1),
    Resolution.HOUR: timedelta(hours=1),
    Resolution.DAILY: timedelta(days=1),
}


def parse_resolution(text: str) -> Resolution:
    """Parse names like daily/minute or single-unit intervals like 1d/1m."""
    key = text.strip().lower()
    if key in _ALIASES:
        return _ALIASES[key]
    m = INTERVAL_RE.match(key)
    if not m or int(m.group(1)) != 1:
        raise ValueError(f"Unsupported resolution '{text}'. Use tick, second, minute, hour, daily or 1s,1m,1h,1d.")
    return _UNITS[m.group(2)]


def resolution_to_timedelta(resolution: Resolution) -> timedelta:
    return _PERIODS[resolution]


def resolve_zone(zone: tzinfo | str | None, default: tzinfo) -> tzinfo:
    if zone is None:
        return default
    if isinstance(zone, str):
        return ZoneInfo(zone)
    return zone


def to_exchange_date(moment: datetime, exchange_tz: tzinfo) -> date:
    """Calendar date of ``moment`` on the exchange. Naive values are taken as exchange-local."""
    if moment.tzinfo is None:
        return moment.date()
    return moment.astimezone(exchange_tz).date()
