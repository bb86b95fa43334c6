"""RSI, MACD and Bollinger Bands over a historical price series.

Every calculator returns rows aligned with a suffix of its input: the warm-up
observations that cannot carry a value are omitted, never zero-filled. Input
that is too short for a window yields an empty list instead of an error.

Conventions:
    * RSI uses Wilder smoothing (SMA seed, then ``(avg * (w - 1) + x) / w``).
    * EMAs are SMA-seeded with multiplier ``2 / (k + 1)``.
    * Bollinger Bands use the *population* standard deviation (divide by N).
    * Records with a non-finite price are skipped before any math runs
      (see ``trendlab.prices``).

Invalid *parameters* (non-positive windows, ``fast >= slow``, negative band
width) raise ``ValueError``; short or degenerate *data* never does.
"""
from __future__ import annotations

from typing import Any, Iterable, List, Mapping, Optional, Sequence

from trendlab.config import DEFAULT_CONFIG, IndicatorConfig
from trendlab.metrics import RollingWindow, ema, sma
from trendlab.prices import finite_prices, normalize_prices
from trendlab.types import (
    BollingerPoint,
    HistoricalPrice,
    IndicatorBundle,
    MACDLinePoint,
    MACDPoint,
    RSIPoint,
)

PriceInput = Iterable[HistoricalPrice | Mapping[str, Any]]


def _check_window(name: str, value: int) -> None:
    if int(value) < 1:
        raise ValueError(f"{name} must be >= 1 (got {value})")


# ─────────────────────────────────────────────────────────────────── RSI ────
def _rsi_value(avg_gain: float, avg_loss: float) -> float:
    if avg_loss == 0:
        return 100.0
    return 100.0 - 100.0 / (1.0 + avg_gain / avg_loss)


def calculate_rsi(data: PriceInput, period: int = 14) -> List[RSIPoint]:
    """Return Wilder's Relative Strength Index.

    Args:
        data: Ascending price history.
        period: Lookback window ``w``.

    Returns:
        One ``RSIPoint`` per observation from index ``w`` onwards, or an empty
        list when fewer than ``w + 1`` finite prices are available. An average
        loss of zero (including a flat series) gives 100.
    """
    _check_window("period", period)
    series = finite_prices(data)
    if len(series) < period + 1:
        return []

    prices = [r.price for r in series]
    gains: List[float] = []
    losses: List[float] = []
    for prev, cur in zip(prices, prices[1:]):
        delta = cur - prev
        gains.append(max(delta, 0.0))
        losses.append(max(-delta, 0.0))

    avg_gain = sma(gains[:period])
    avg_loss = sma(losses[:period])
    out = [RSIPoint(series[period].date, _rsi_value(avg_gain, avg_loss))]

    for i in range(period, len(gains)):
        avg_gain = (avg_gain * (period - 1) + gains[i]) / period
        avg_loss = (avg_loss * (period - 1) + losses[i]) / period
        out.append(RSIPoint(series[i + 1].date, _rsi_value(avg_gain, avg_loss)))

    return out


# ────────────────────────────────────────────────────────────────── MACD ────
def _line(series: Sequence[HistoricalPrice], fast: int, slow: int) -> List[MACDLinePoint]:
    _check_window("fast_period", fast)
    _check_window("slow_period", slow)
    if fast >= slow:
        raise ValueError("fast_period must be smaller than slow_period")

    prices = [r.price for r in series]
    slow_ema = ema(prices, slow)
    if not slow_ema:
        return []
    fast_ema = ema(prices, fast)

    # slow_ema[i] and fast_ema[i + offset] both belong to prices[i + slow - 1].
    offset = slow - fast
    return [
        MACDLinePoint(series[i + slow - 1].date, fast_ema[i + offset] - slow_ema[i])
        for i in range(len(slow_ema))
    ]


def macd_line(data: PriceInput, fast_period: int = 12, slow_period: int = 26) -> List[MACDLinePoint]:
    """Return the bare MACD line (fast EMA minus slow EMA).

    Available from ``slow_period`` observations, i.e. before the signal line
    can be computed. Empty when the input is shorter than ``slow_period``.
    """
    return _line(finite_prices(data), fast_period, slow_period)


def calculate_macd(
    data: PriceInput,
    fast_period: int = 12,
    slow_period: int = 26,
    signal_period: int = 9,
) -> List[MACDPoint]:
    """Return MACD, signal line and histogram.

    Needs ``slow_period + signal_period`` observations (35 with the
    defaults). The signal EMA's SMA seed is warm-up, so the first row is
    dated at input index ``slow_period + signal_period - 1``. Shorter input
    gives an empty list; ``macd_line`` still covers inputs from
    ``slow_period`` observations.

    Every row satisfies ``histogram == macd - signal``.
    """
    _check_window("signal_period", signal_period)
    series = finite_prices(data)
    line = _line(series, fast_period, slow_period)
    if len(series) < slow_period + signal_period:
        return []
    signal_ema = ema([p.value for p in line], signal_period)

    out: List[MACDPoint] = []
    # signal_ema[i] belongs to line[i + signal_period - 1]; skip the seed.
    for i in range(1, len(signal_ema)):
        point = line[i + signal_period - 1]
        sig = signal_ema[i]
        out.append(
            MACDPoint(
                date=point.date,
                macd=point.value,
                signal=sig,
                histogram=point.value - sig,
            )
        )
    return out


# ─────────────────────────────────────────────────────── Bollinger Bands ────
def calculate_bollinger_bands(
    data: PriceInput,
    period: int = 20,
    std_dev: float = 2.0,
) -> List[BollingerPoint]:
    """Return SMA middle band with ``± std_dev`` population-σ bands.

    A flat window (σ = 0) collapses all three bands onto the mean.
    Empty when fewer than ``period`` finite prices are available.
    """
    _check_window("period", period)
    if std_dev < 0:
        raise ValueError("std_dev must be non-negative")

    window = RollingWindow(period)
    out: List[BollingerPoint] = []
    for rec in finite_prices(data):
        window.push(rec.price)
        if not window.full:
            continue
        middle = window.sma()
        half_width = std_dev * window.std()
        out.append(
            BollingerPoint(
                date=rec.date,
                upper=middle + half_width,
                middle=middle,
                lower=middle - half_width,
                price=rec.price,
            )
        )
    return out


# ─────────────────────────────────────────────────────────────── bundle ────
def calculate_all_indicators(
    data: PriceInput,
    config: Optional[IndicatorConfig] = None,
) -> IndicatorBundle:
    """Normalize ``data`` and run the three calculators independently.

    Callers are expected to check ``len(data) >= config.min_points`` first;
    with less history the bundle simply carries empty (or partial) series.
    """
    cfg = config or DEFAULT_CONFIG
    series = normalize_prices(data)
    return IndicatorBundle(
        rsi=tuple(calculate_rsi(series, cfg.rsi_period)),
        macd=tuple(calculate_macd(series, cfg.macd_fast, cfg.macd_slow, cfg.macd_signal)),
        bollinger=tuple(calculate_bollinger_bands(series, cfg.bb_period, cfg.bb_std)),
    )
