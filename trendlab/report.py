"""Text summaries, tabular export, and indicator charts."""
from __future__ import annotations

import math
from pathlib import Path
from typing import Dict, List, Sequence

import matplotlib.pyplot as plt
import pandas as pd

from trendlab.types import IndicatorBundle, TradingSignal

_RULE = "=========================================="


# ─────────────────────────────────────────────────────────────── text ────
def signals_table(signals: Sequence[TradingSignal]) -> str:
    header = "\n----- Signals -----"
    if not signals:
        return f"{header}\nNo signals."
    body = "\n".join(
        f"{s.indicator:<16}: {s.signal.value.upper():<7} "
        f"{f'{s.strength:.0f}%' if s.strength > 0 else '-':>5}  {s.reason}"
        for s in signals
    )
    return f"{header}\n{body}"


def summary(bundle: IndicatorBundle, signals: Sequence[TradingSignal], title: str = "Technical Indicators") -> str:
    """Latest values of each series followed by the signal badges."""
    lines = [f"========== {title} =========="]
    if bundle.rsi:
        lines.append(f"RSI (latest)        : {bundle.rsi[-1].value:,.2f}")
    if bundle.macd:
        m = bundle.macd[-1]
        lines.append(f"MACD / Signal       : {m.macd:,.4f} / {m.signal:,.4f}")
        lines.append(f"Histogram           : {m.histogram:,.4f}")
    if bundle.bollinger:
        b = bundle.bollinger[-1]
        lines.append(f"Price               : {b.price:,.4f}")
        lines.append(f"Bands (L / M / U)   : {b.lower:,.4f} / {b.middle:,.4f} / {b.upper:,.4f}")
    lines.append(f"Rows (RSI/MACD/BB)  : {len(bundle.rsi)} / {len(bundle.macd)} / {len(bundle.bollinger)}")
    lines.append(_RULE)
    return "\n".join(lines) + signals_table(signals)


# ──────────────────────────────────────────────────────────── tabular ────
def _tail_aligned(values: List[float], length: int) -> List[float]:
    return [math.nan] * (length - len(values)) + values


def indicators_frame(bundle: IndicatorBundle) -> pd.DataFrame:
    """Merge the three series into one chart-ready frame.

    All series are suffixes of the same price history, so they are aligned
    by position from the most recent row rather than joined on ``date``
    (display labels can repeat for intraday data).
    """
    longest = max((bundle.rsi, bundle.macd, bundle.bollinger), key=len)
    n = len(longest)
    columns: Dict[str, List] = {"date": [p.date for p in longest]}
    columns["price"] = _tail_aligned([p.price for p in bundle.bollinger], n)
    columns["rsi"] = _tail_aligned([p.value for p in bundle.rsi], n)
    columns["macd"] = _tail_aligned([p.macd for p in bundle.macd], n)
    columns["macd_signal"] = _tail_aligned([p.signal for p in bundle.macd], n)
    columns["histogram"] = _tail_aligned([p.histogram for p in bundle.macd], n)
    columns["bb_upper"] = _tail_aligned([p.upper for p in bundle.bollinger], n)
    columns["bb_middle"] = _tail_aligned([p.middle for p in bundle.bollinger], n)
    columns["bb_lower"] = _tail_aligned([p.lower for p in bundle.bollinger], n)
    return pd.DataFrame(columns)


# ──────────────────────────────────────────────────────────── plotting ────
def save_chart(bundle: IndicatorBundle, dst_file: Path, title: str) -> None:
    """Three stacked panels: price with bands, RSI, MACD."""
    df = indicators_frame(bundle)
    x = range(len(df))

    plt.style.use("seaborn-v0_8-darkgrid")
    fig, (ax_bb, ax_rsi, ax_macd) = plt.subplots(
        3, 1, figsize=(13, 9), sharex=True, gridspec_kw={"height_ratios": [3, 1.3, 1.3]}
    )

    ax_bb.plot(x, df["price"], label="Price", linewidth=1.3, color="#1f77b4")
    ax_bb.plot(x, df["bb_upper"], label="Upper", linewidth=1.0, linestyle="--", color="#d62728")
    ax_bb.plot(x, df["bb_middle"], label="Middle", linewidth=1.0, linestyle=":", color="#7f7f7f")
    ax_bb.plot(x, df["bb_lower"], label="Lower", linewidth=1.0, linestyle="--", color="#2ca02c")
    ax_bb.fill_between(x, df["bb_lower"], df["bb_upper"], color="#1f77b4", alpha=0.08)
    ax_bb.set_title(title, fontsize=14, pad=10)
    ax_bb.set_ylabel("Price")
    ax_bb.legend(loc="upper left")

    ax_rsi.plot(x, df["rsi"], color="#9467bd", linewidth=1.2, label="RSI")
    for level, color in ((70, "#d62728"), (50, "#7f7f7f"), (30, "#2ca02c")):
        ax_rsi.axhline(level, color=color, linestyle="--", linewidth=0.8, alpha=0.6)
    ax_rsi.set_ylim(0, 100)
    ax_rsi.set_ylabel("RSI")

    colors = ["#2ca02c" if h >= 0 else "#d62728" for h in df["histogram"].fillna(0.0)]
    ax_macd.bar(x, df["histogram"].fillna(0.0), color=colors, alpha=0.5, label="Histogram")
    ax_macd.plot(x, df["macd"], color="#1f77b4", linewidth=1.2, label="MACD")
    ax_macd.plot(x, df["macd_signal"], color="#ff7f0e", linewidth=1.0, label="Signal")
    ax_macd.axhline(0, color="#7f7f7f", linestyle="--", linewidth=0.8)
    ax_macd.set_ylabel("MACD")
    ax_macd.legend(loc="upper left")

    step = max(1, len(df) // 10)
    ax_macd.set_xticks(list(x)[::step])
    ax_macd.set_xticklabels(list(df["date"])[::step], rotation=30, ha="right")

    fig.tight_layout()
    fig.savefig(dst_file, dpi=120)
    plt.close(fig)


def export_logs(
    dst_dir: Path,
    asset: str,
    bundle: IndicatorBundle,
    signals: Sequence[TradingSignal],
) -> None:
    """Write signals.log, indicators.csv and indicators.png into ``dst_dir``."""
    dst_dir.mkdir(parents=True, exist_ok=True)
    text = summary(bundle, signals, title=f"{asset} Technical Indicators")
    (dst_dir / "signals.log").write_text(text, encoding="utf-8")
    if bundle.empty:
        return
    indicators_frame(bundle).to_csv(dst_dir / "indicators.csv", index=False)
    save_chart(bundle, dst_dir / "indicators.png", title=f"{asset} Technical Indicators")
