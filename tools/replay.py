#!/usr/bin/env python3
"""
Tick replay - run recorded prices through the candle/momentum pipeline.

CSV columns: timestamp,price (timestamp as ISO-8601 or epoch seconds).

Usage:
    python tools/replay.py --ticks ticks.csv
    python tools/replay.py --ticks ticks.csv --period 60 --adx-period 10
"""

import argparse
import csv
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator, List, Optional, Tuple

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from rich.console import Console
from rich.table import Table

from core.clock import ManualClock
from core.config import settings
from core.logging_utils import setup_logging
from core.models import Candle, MomentumKind, MomentumSignal
from logic.momentum import MomentumConfig
from logic.pipeline import SeriesPipeline

console = Console()

SIGNAL_STYLES = {
    MomentumKind.BULLISH: "green",
    MomentumKind.BEARISH: "red",
    MomentumKind.TREND_EXPIRING: "yellow",
    MomentumKind.NONE: "dim",
}


def parse_timestamp(raw: str) -> datetime:
    raw = raw.strip()
    try:
        return datetime.fromtimestamp(float(raw), tz=timezone.utc)
    except ValueError:
        ts = datetime.fromisoformat(raw.replace("Z", "+00:00"))
        return ts if ts.tzinfo else ts.replace(tzinfo=timezone.utc)


def load_ticks(path: Path) -> Iterator[Tuple[datetime, float]]:
    """Yield (timestamp, price) rows, skipping malformed lines."""
    with open(path, newline="") as f:
        for lineno, row in enumerate(csv.DictReader(f), start=2):
            try:
                yield parse_timestamp(row["timestamp"]), float(row["price"])
            except (KeyError, TypeError, ValueError) as e:
                console.print(f"[yellow]skip line {lineno}: {e}[/yellow]")


def replay(
    path: Path,
    period_seconds: float,
    config: MomentumConfig,
) -> List[Tuple[Candle, MomentumSignal, float]]:
    rows = []
    clock: Optional[ManualClock] = None
    last_ts: Optional[datetime] = None
    pipeline: Optional[SeriesPipeline] = None

    for ts, price in load_ticks(path):
        if clock is None:
            clock = ManualClock(start=ts)
            pipeline = SeriesPipeline(path.stem, period_seconds, config, clock)
        elif ts > last_ts:
            clock.advance((ts - last_ts).total_seconds())
        last_ts = ts if last_ts is None or ts > last_ts else last_ts

        signal = pipeline.on_tick(price)
        if signal is not None:
            rows.append((pipeline.last_candle, signal, pipeline.momentum.adx))

    if pipeline is not None:
        signal = pipeline.flush()
        if signal is not None:
            rows.append((pipeline.last_candle, signal, pipeline.momentum.adx))
    return rows


def render(rows: List[Tuple[Candle, MomentumSignal, float]], config: MomentumConfig) -> None:
    table = Table(
        title=f"Momentum replay (period {config.period}, entry {config.entry_threshold:.0f}"
              f" / exit {config.exit_threshold:.0f})",
        expand=True,
        show_edge=False,
        header_style="bold",
    )
    table.add_column("Bar", justify="right", width=5)
    table.add_column("Open", justify="right")
    table.add_column("High", justify="right")
    table.add_column("Low", justify="right")
    table.add_column("Close", justify="right")
    table.add_column("Ticks", justify="right", width=6)
    table.add_column("ADX", justify="right", width=7)
    table.add_column("+DI", justify="right", width=7)
    table.add_column("-DI", justify="right", width=7)
    table.add_column("Signal", width=16)

    for i, (candle, signal, adx) in enumerate(rows, start=1):
        warm = i >= config.warmup_periods
        table.add_row(
            str(i),
            f"{candle.open:.8g}",
            f"{candle.high:.8g}",
            f"{candle.low:.8g}",
            f"{candle.close:.8g}",
            f"{candle.volume:.0f}",
            f"{adx:.1f}" if warm else "-",
            f"{signal.plus_di:.1f}" if signal.plus_di is not None else "-",
            f"{signal.minus_di:.1f}" if signal.minus_di is not None else "-",
            signal.kind.value,
            style=SIGNAL_STYLES[signal.kind],
        )
    console.print(table)

    counts = {}
    for _, signal, _ in rows:
        counts[signal.kind] = counts.get(signal.kind, 0) + 1
    summary = ", ".join(f"{kind.value}={n}" for kind, n in counts.items()) or "no bars"
    console.print(f"[bold]{len(rows)} bars[/bold]  {summary}")


def main() -> int:
    parser = argparse.ArgumentParser(description="Replay ticks through the momentum pipeline")
    parser.add_argument("--ticks", type=Path, required=True, help="CSV with timestamp,price")
    parser.add_argument("--period", type=float, default=settings.candle_period_seconds,
                        help="Candle period in seconds")
    parser.add_argument("--adx-period", type=int, default=None,
                        help="Indicator period (default from settings)")
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    args = parser.parse_args()

    setup_logging(args.log_level, console=console)

    if not args.ticks.exists():
        console.print(f"[red]No such file: {args.ticks}[/red]")
        return 1

    config = settings.momentum_config()
    if args.adx_period is not None:
        config = MomentumConfig(
            period=args.adx_period,
            entry_threshold=config.entry_threshold,
            exit_threshold=config.exit_threshold,
            min_confirmation_bars=config.min_confirmation_bars,
        )
        config.validate()

    rows = replay(args.ticks, args.period, config)
    render(rows, config)
    return 0


if __name__ == "__main__":
    sys.exit(main())
