"""Subscription set with per-symbol watermarks and a pending poll queue."""

from __future__ import annotations

import logging
import threading
from datetime import datetime
from typing import Iterable

from ..types import Symbol


logger = logging.getLogger(__name__)


class SubscriptionRegistry:
    """
    Tracks subscribed symbols and the newest timestamp emitted for each.

    A watermark of ``None`` means nothing has been seen yet. The pending queue
    is an insertion-ordered set of symbols still to be polled in the current
    cadence window.

    All methods take an internal lock so the host may subscribe/unsubscribe
    from another thread while the poll loop runs.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._watermarks: dict[Symbol, datetime | None] = {}
        self._pending: dict[Symbol, None] = {}

    def subscribe(self, symbols: Iterable[Symbol]) -> list[Symbol]:
        """Add new symbols with an empty watermark. Returns the ones actually added."""
        added = []
        with self._lock:
            for symbol in symbols:
                if symbol in self._watermarks:
                    continue
                self._watermarks[symbol] = None
                self._pending.setdefault(symbol, None)
                added.append(symbol)
        if added:
            logger.info(f"Subscribed: {[str(s) for s in added]}")
        return added

    def unsubscribe(self, symbols: Iterable[Symbol]) -> list[Symbol]:
        """Drop symbols (and their watermark). Absent symbols are ignored."""
        removed = []
        with self._lock:
            for symbol in symbols:
                if self._watermarks.pop(symbol, _MISSING) is _MISSING:
                    continue
                self._pending.pop(symbol, None)
                removed.append(symbol)
        if removed:
            logger.info(f"Unsubscribed: {[str(s) for s in removed]}")
        return removed

    def is_subscribed(self, symbol: Symbol | str) -> bool:
        """Accepts a Symbol or a bare ticker (case-insensitive)."""
        with self._lock:
            if isinstance(symbol, Symbol):
                return symbol in self._watermarks
            ticker = symbol.strip().upper()
            return any(s.ticker.upper() == ticker for s in self._watermarks)

    def symbols(self) -> list[Symbol]:
        with self._lock:
            return list(self._watermarks)

    def watermark(self, symbol: Symbol) -> datetime | None:
        with self._lock:
            return self._watermarks.get(symbol)

    def advance(self, symbol: Symbol, ts: datetime) -> bool:
        """
        Move the watermark of ``symbol`` forward to ``ts``.

        Returns False (and changes nothing) if the symbol is no longer
        subscribed or ``ts`` is not newer than the current watermark.
        """
        with self._lock:
            if symbol not in self._watermarks:
                return False
            current = self._watermarks[symbol]
            if current is not None and ts <= current:
                return False
            self._watermarks[symbol] = ts
            return True

    def enqueue_all(self) -> int:
        """Merge every subscribed symbol into the pending queue. Returns queue size."""
        with self._lock:
            for symbol in self._watermarks:
                self._pending.setdefault(symbol, None)
            return len(self._pending)

    def pending(self) -> list[Symbol]:
        """Snapshot of the pending queue in enqueue order."""
        with self._lock:
            return list(self._pending)

    def mark_done(self, symbol: Symbol) -> None:
        with self._lock:
            self._pending.pop(symbol, None)

    def __contains__(self, symbol: object) -> bool:
        with self._lock:
            return symbol in self._watermarks

    def __len__(self) -> int:
        with self._lock:
            return len(self._watermarks)


_MISSING = object()
