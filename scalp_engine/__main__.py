"""CLI entry point for replaying recorded 1m bars through the engine.

Usage:
    python -m scalp_engine replay bars.csv
    python -m scalp_engine replay bars.csv --symbol QQQ --output alerts.jsonl
    python -m scalp_engine replay bars.csv -v
"""

import argparse
import asyncio
import csv
import logging
import sys
from collections import Counter
from datetime import datetime, timezone
from pathlib import Path

import orjson

from scalp_engine.aggregator import CandleAggregator
from scalp_engine.config import get_settings
from scalp_engine.models import Alert, Candle, CandleBuffer, Timeframe
from scalp_engine.service import AlertService

logger = logging.getLogger(__name__)

CSV_FIELDS = ("timestamp", "open", "high", "low", "close", "volume")


def parse_timestamp(value: str) -> datetime:
    """Parse ISO-8601 or epoch seconds to a timezone-aware datetime."""
    value = value.strip()
    try:
        return datetime.fromtimestamp(float(value), tz=timezone.utc)
    except ValueError:
        pass

    dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def read_candles(path: Path) -> list[Candle]:
    """Read 1m bars from a CSV file with a header row.

    Raises:
        ValueError: On a missing column or a malformed row
    """
    candles = []
    with path.open(newline="") as f:
        reader = csv.DictReader(f)
        missing = [name for name in CSV_FIELDS if name not in (reader.fieldnames or [])]
        if missing:
            raise ValueError(f"{path}: missing columns {', '.join(missing)}")

        for line_no, row in enumerate(reader, start=2):
            try:
                candles.append(
                    Candle(
                        timestamp=parse_timestamp(row["timestamp"]),
                        open=float(row["open"]),
                        high=float(row["high"]),
                        low=float(row["low"]),
                        close=float(row["close"]),
                        volume=float(row["volume"] or 0),
                    )
                )
            except (TypeError, ValueError) as e:
                raise ValueError(f"{path}:{line_no}: {e}") from e

    candles.sort(key=lambda c: c.timestamp)
    return candles


def format_alert(alert: Alert) -> str:
    push = "PUSH" if alert.should_push else "    "
    return (
        f"{alert.timestamp:%Y-%m-%d %H:%M} {push} {alert.type.value:<16} "
        f"{alert.symbol} @ {alert.entry_price:.2f} conf={alert.confidence:>3} "
        f"stop={alert.stop_loss:.2f} target={alert.target_price:.2f} | {alert.trigger_reason}"
    )


async def replay(candles: list[Candle], symbol: str) -> list[Alert]:
    """Feed 1m bars through the aggregator and the alert service in order."""
    settings = get_settings()
    service = AlertService(settings=settings)
    aggregator = CandleAggregator()
    buffers = {
        tf: CandleBuffer(symbol=symbol, timeframe=tf, max_size=settings.buffer_size)
        for tf in (Timeframe.M1, Timeframe.M2, Timeframe.M5)
    }

    alerts = []
    for candle in candles:
        buffers[Timeframe.M1].add(candle)
        for timeframe, bar in aggregator.add(candle).items():
            buffers[timeframe].add(bar)

        result = await service.process_bar(
            symbol,
            buffers[Timeframe.M1].window(),
            buffers[Timeframe.M2].window(),
            buffers[Timeframe.M5].window(),
            candle.close_time(Timeframe.M1),
        )
        if result.alert is not None:
            alerts.append(result.alert)
            print(format_alert(result.alert))

    return alerts


def print_summary(bars: int, alerts: list[Alert]) -> None:
    by_type = Counter(alert.type.value for alert in alerts)
    pushed = sum(1 for alert in alerts if alert.should_push)

    print()
    print(f"Bars processed: {bars:,}")
    print(f"Alerts:         {len(alerts)} ({pushed} pushed)")
    for alert_type, count in sorted(by_type.items()):
        print(f"  {alert_type:<16} {count:>4}")


def save_jsonl(alerts: list[Alert], path: Path) -> None:
    with path.open("wb") as f:
        for alert in alerts:
            f.write(orjson.dumps(alert.model_dump(mode="json")))
            f.write(b"\n")
    print(f"\nAlerts saved to {path}")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="scalp_engine",
        description="Multi-timeframe scalp signal engine",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m scalp_engine replay bars.csv
  python -m scalp_engine replay bars.csv --symbol QQQ --output alerts.jsonl
        """,
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    replay_parser = subparsers.add_parser(
        "replay",
        help="Replay 1m bars from a CSV file (timestamp,open,high,low,close,volume)",
    )
    replay_parser.add_argument("file", type=Path, help="CSV file of 1m bars")
    replay_parser.add_argument(
        "--symbol",
        type=str,
        default="SPY",
        help="Symbol stamped on alerts (default: SPY)",
    )
    replay_parser.add_argument(
        "--output", "-o",
        type=Path,
        default=None,
        help="Write alerts as JSON lines to this file",
    )
    replay_parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose logging",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    level = logging.DEBUG if args.verbose else get_settings().log_level.upper()
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    logging.getLogger("asyncio").setLevel(logging.WARNING)

    if not args.file.is_file():
        print(f"Error: {args.file} not found", file=sys.stderr)
        return 1

    try:
        candles = read_candles(args.file)
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    logger.info(f"Replaying {len(candles)} bars for {args.symbol} from {args.file}")
    alerts = asyncio.run(replay(candles, args.symbol))

    print_summary(len(candles), alerts)
    if args.output:
        save_jsonl(alerts, args.output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
