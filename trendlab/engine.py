# trendlab/engine.py
"""Compute indicators for one asset, print the signals, and export logs.

This module:
  1) Loads price history from ``<data-dir>/<ASSET>.csv`` (or generates a
     seeded simulated history with ``--simulate``).
  2) Builds an ``IndicatorConfig`` from explicitly passed flags only.
  3) Runs the RSI / MACD / Bollinger calculators and the signal synthesizer.
  4) Prints the summary and exports ``signals.log``, ``indicators.csv`` and
     ``indicators.png`` under ``logs/<ASSET>_<timestamp>/``.
  5) Optionally asks the chat model for commentary (``--ai analyze|signal``).
  6) Prepends the exact command line to ``signals.log``.
"""
from __future__ import annotations

import argparse
import datetime as dt
import logging
import shlex
import sys
from pathlib import Path
from typing import Any, Dict, List

from trendlab import report
from trendlab.config import DEFAULT_CONFIG, IndicatorConfig
from trendlab.data_downloader import SimulatedDownloader
from trendlab.data_feed import CSVFeed
from trendlab.panel import NOT_ENOUGH_DATA, TechnicalPanel
from trendlab.types import HistoricalPrice


# ───────────────────────────────────────── helpers ─────────────────────────────────────────
def _cmdline_str() -> str:
    """Return the exact command line used to invoke this process."""
    return " ".join(shlex.quote(x) for x in sys.argv)


def _prepend_command(log_path: Path, cmdline: str) -> None:
    """Prepend the exact command line to an exported log file."""
    if not log_path.exists():
        return
    original = log_path.read_text(encoding="utf-8", errors="replace")
    header = [
        "========== Command Line ==========",
        cmdline,
        "==================================",
        "\n",
    ]
    log_path.write_text("\n".join(header) + original, encoding="utf-8")


def _load_history(args: argparse.Namespace) -> List[HistoricalPrice]:
    csv_path = Path(args.data_dir) / f"{args.asset.upper()}.csv"
    if args.simulate:
        SimulatedDownloader(seed=args.seed).download(args.asset, days=args.days, out_csv=csv_path)
    if not csv_path.exists():
        sys.exit(f"Data file not found: {csv_path}")
    return list(CSVFeed(csv_path, asset=args.asset).stream())


# ────────────────────────────────────────── CLI ───────────────────────────────────────────
def _build_parser() -> argparse.ArgumentParser:
    """Create the CLI parser with data, indicator, and AI options."""
    p = argparse.ArgumentParser(description="Compute technical indicators and trading signals.")

    # Data options
    p.add_argument("--asset", default="SOL", help="Asset symbol (e.g., SOL, BONK, AAPL).")
    p.add_argument("--data-dir", default="data", help="Directory containing CSV data files.")
    p.add_argument("--simulate", action="store_true", help="Write a simulated history to the data dir first.")
    p.add_argument("--days", type=int, default=90, help="[simulate] days of history")
    p.add_argument("--seed", type=int, default=None, help="[simulate] random seed")
    p.add_argument("--out", default="logs", help="Parent directory for exported logs.")
    p.add_argument("--verbose", action="store_true", help="Enable INFO logging.")

    # Indicator windows
    p.add_argument("--rsi-period", type=int, default=None, help="RSI lookback (default 14)")
    p.add_argument("--macd-fast", type=int, default=None, help="MACD fast EMA (default 12)")
    p.add_argument("--macd-slow", type=int, default=None, help="MACD slow EMA (default 26)")
    p.add_argument("--macd-signal", type=int, default=None, help="MACD signal EMA (default 9)")
    p.add_argument("--bb-period", type=int, default=None, help="Bollinger window (default 20)")
    p.add_argument("--bb-std", type=float, default=None, help="Bollinger band width in σ (default 2)")
    p.add_argument("--min-points", type=int, default=None, help="Minimum history length (default 26)")

    # AI commentary
    p.add_argument("--ai", choices=("analyze", "signal"), default=None, help="Ask the chat model for commentary.")
    p.add_argument("--model", default="gpt-4o-mini", help="[ai] chat model name")
    p.add_argument("--market", choices=("crypto", "stocks"), default="crypto", help="[ai] market framing")

    return p


def _config_from_args(args: argparse.Namespace) -> IndicatorConfig:
    """Apply only the explicitly provided indicator flags to the defaults."""
    overrides: Dict[str, Any] = {
        "rsi_period": args.rsi_period,
        "macd_fast": args.macd_fast,
        "macd_slow": args.macd_slow,
        "macd_signal": args.macd_signal,
        "bb_period": args.bb_period,
        "bb_std": args.bb_std,
        "min_points": args.min_points,
    }
    try:
        return DEFAULT_CONFIG.replace(**overrides)
    except ValueError as exc:
        sys.exit(f"[error] invalid indicator settings: {exc}")


# ───────────────────────────────────────── runner ─────────────────────────────────────────
def run(argv: List[str] | None = None) -> None:
    """Run one indicator pass and export summary/logs."""
    args = _build_parser().parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    config = _config_from_args(args)
    history = _load_history(args)

    panel = TechnicalPanel(config=config)
    signals = panel.update(history)
    if not panel.ready:
        print(NOT_ENOUGH_DATA)
        sys.exit(1)

    bundle = panel.indicators
    asset = args.asset.upper()
    print(report.summary(bundle, signals, title=f"{asset} Technical Indicators"))

    ts = dt.datetime.now().strftime("%Y%m%d_%H%M%S")
    log_dir = Path(args.out) / f"{asset}_{ts}"
    report.export_logs(log_dir, asset, bundle, signals)
    _prepend_command(log_dir / "signals.log", _cmdline_str())

    if args.ai:
        from trendlab.analyst import AIAnalyst  # Local import keeps openai optional.

        try:
            commentary = AIAnalyst(market=args.market, model=args.model).analyze(
                asset, bundle, signals, action=args.ai
            )
        except Exception as exc:  # noqa: BLE001
            print(f"[warn] AI analysis failed: {exc}")
        else:
            print("\n----- AI Analysis -----")
            print(commentary)
            (log_dir / "analysis.txt").write_text(commentary, encoding="utf-8")

    print(f"\nLogs & chart saved to: {log_dir.resolve()}")


if __name__ == "__main__":
    run()
