"""
Command-line host loop for the Alphavantage feed.

Optionally prints daily history, then subscribes and polls for live ticks.

Usage:
    python -m avfeed.bootstrap.run_feed --symbols SPY,AAPL
    python -m avfeed.bootstrap.run_feed --symbols SPY --history_days 30 --iterations 0
    python -m avfeed.bootstrap.run_feed --symbols MSFT --sleep 5 --iterations 10
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from datetime import datetime, timedelta, timezone

from ..config import get_settings
from ..providers.alphavantage_rest import AlphavantageError
from ..streaming.queue_handler import AlphavantageDataQueueHandler
from ..types import HistoryRequest, Resolution, Symbol
from ..utils.timeframes import parse_resolution


logger = logging.getLogger("avfeed.run_feed")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Alphavantage feed - live poll loop and daily history",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m avfeed.bootstrap.run_feed --symbols SPY,AAPL
  python -m avfeed.bootstrap.run_feed --symbols SPY --history_days 30 --iterations 0
        """
    )
    parser.add_argument(
        "--symbols",
        default="SPY",
        help="Comma-separated equity tickers (default: SPY)"
    )
    parser.add_argument(
        "--history_days",
        type=int,
        default=0,
        help="Print this many days of bars before polling (default: 0 = skip)"
    )
    parser.add_argument(
        "--resolution",
        type=parse_resolution,
        default=Resolution.DAILY,
        help="History resolution: daily/1d, hour/1h, minute/1m, ... (only daily returns data; default: daily)"
    )
    parser.add_argument(
        "--iterations",
        type=int,
        default=-1,
        help="Number of get_next_ticks calls; -1 runs until interrupted (default: -1)"
    )
    parser.add_argument(
        "--sleep",
        type=float,
        default=1.0,
        help="Seconds between get_next_ticks calls (default: 1.0)"
    )
    parser.add_argument(
        "--api_key",
        default=None,
        help="Alphavantage API key (default: ALPHAVANTAGE_API_KEY from env/.env)"
    )
    return parser.parse_args(argv)


def print_history(
    handler: AlphavantageDataQueueHandler,
    symbols: list[Symbol],
    days: int,
    resolution: Resolution = Resolution.DAILY,
) -> int:
    end = datetime.now(timezone.utc)
    start = end - timedelta(days=days)
    requests = [HistoryRequest(s, start, end, resolution) for s in symbols]
    count = 0
    for data_slice in handler.get_history(requests, None):
        for symbol, bar in data_slice.bars.items():
            print(
                f"{bar.time:%Y-%m-%d} {symbol}: O={bar.open} H={bar.high} "
                f"L={bar.low} C={bar.close} V={bar.volume}"
            )
            count += 1
    return count


def run_loop(handler: AlphavantageDataQueueHandler, iterations: int, sleep_seconds: float) -> int:
    """
    Call get_next_ticks repeatedly, logging what arrives. Returns ticks seen.

    Sleeps ``sleep_seconds`` while failed symbols wait for a retry, otherwise
    until the next poll cycle is due.
    """
    done = 0
    while iterations < 0 or done < iterations:
        for tick in handler.get_next_ticks():
            logger.info(f"{tick.time:%Y-%m-%d %H:%M} {tick.symbol}: last={tick.value} qty={tick.quantity}")
        done += 1
        if iterations < 0 or done < iterations:
            if handler.registry.pending():
                time.sleep(sleep_seconds)
            else:
                time.sleep(max(sleep_seconds, handler.seconds_until_next_cycle()))
    return handler.tick_count


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    overrides = {"alphavantage_api_key": args.api_key} if args.api_key else {}
    try:
        settings = get_settings(**overrides)
    except AlphavantageError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    symbols = [Symbol.create(t) for t in settings.get_symbols(args.symbols)]
    if not symbols:
        print("No symbols given.", file=sys.stderr)
        return 2

    with AlphavantageDataQueueHandler(settings) as handler:
        if args.history_days > 0:
            try:
                count = print_history(handler, symbols, args.history_days, args.resolution)
                logger.info(f"Printed {count} {args.resolution.value} bars")
            except AlphavantageError as e:
                logger.error(f"History request failed: {e}")
                return 1

        handler.subscribe(None, symbols)
        logger.info(f"Polling {[str(s) for s in handler.registry.symbols()]} every {settings.poll_interval_seconds}s")
        try:
            total = run_loop(handler, args.iterations, args.sleep)
        except KeyboardInterrupt:
            logger.info("Interrupted.")
            total = handler.tick_count
        logger.info(f"Emitted {total} ticks")
    return 0


if __name__ == "__main__":
    sys.exit(main())
