"""Protocols describing the host engine's data contracts."""

from __future__ import annotations

from datetime import tzinfo
from typing import Any, Callable, Iterable, Iterator, Protocol, runtime_checkable

from ..types import HistoryRequest, Slice, Symbol, Tick


@runtime_checkable
class LiveDataQueue(Protocol):
    """Pull-based source of live ticks."""

    def subscribe(self, job: Any, symbols: Iterable[Symbol]) -> None:
        """Start tracking ``symbols``. Subscribing twice is a no-op."""
        ...

    def unsubscribe(self, job: Any, symbols: Iterable[Symbol]) -> None:
        """Stop tracking ``symbols``. Unknown symbols are ignored."""
        ...

    def get_next_ticks(self) -> list[Tick]:
        """
        Return ticks that arrived since the previous call.

        Called repeatedly by the host scheduling loop; should never raise for
        a single failing symbol.
        """
        ...


@runtime_checkable
class HistoryProvider(Protocol):
    """Enumerable source of historical bars."""

    @property
    def data_point_count(self) -> int:
        """Total number of data points emitted so far."""
        ...

    def initialize(
        self,
        job: Any,
        data_provider: Any,
        cache_provider: Any,
        map_file_provider: Any,
        factor_file_provider: Any,
        status_update: Callable[[int], None] | None,
    ) -> None:
        ...

    def get_history(
        self,
        requests: Iterable[HistoryRequest],
        time_zone: tzinfo | None,
    ) -> Iterator[Slice]:
        """Lazily yield slices covering each request in turn."""
        ...
