"""Turn the latest indicator readings into BUY / SELL / NEUTRAL badges.

Each indicator is judged on its own; no composite verdict is produced.
Output order is fixed to RSI, MACD, Bollinger Bands so that a dashboard
layout stays stable between recomputes.

Strength scales (all capped at 100, 0 for NEUTRAL):
    * RSI: ``3 × distance`` past the oversold/overbought threshold.
    * MACD: ``50 × |histogram| / ref`` where ``ref`` is the mean absolute
      histogram over the last ``macd_strength_lookback`` rows, so a crossover
      as large as the recent average scores 50.
    * Bollinger: 50 for touching a band, plus ``500 ×`` the overshoot as a
      fraction of the band width.
"""
from __future__ import annotations

from typing import List, Optional, Sequence

from trendlab.config import DEFAULT_CONFIG, IndicatorConfig
from trendlab.types import (
    BollingerPoint,
    IndicatorBundle,
    MACDPoint,
    RSIPoint,
    Signal,
    TradingSignal,
)

_MAX_STRENGTH = 100.0


def _cap(value: float) -> float:
    return max(0.0, min(_MAX_STRENGTH, value))


def rsi_signal(series: Sequence[RSIPoint], config: IndicatorConfig = DEFAULT_CONFIG) -> Optional[TradingSignal]:
    """Oversold / overbought reading of the latest RSI value."""
    if not series:
        return None
    value = series[-1].value

    if value < config.rsi_oversold:
        return TradingSignal(
            indicator="RSI",
            signal=Signal.BUY,
            strength=_cap((config.rsi_oversold - value) * 3),
            reason=f"RSI at {value:.1f} - Oversold conditions",
        )
    if value > config.rsi_overbought:
        return TradingSignal(
            indicator="RSI",
            signal=Signal.SELL,
            strength=_cap((value - config.rsi_overbought) * 3),
            reason=f"RSI at {value:.1f} - Overbought conditions",
        )
    return TradingSignal(
        indicator="RSI",
        signal=Signal.NEUTRAL,
        strength=0.0,
        reason=f"RSI at {value:.1f} - Neutral zone",
    )


def _histogram_reference(series: Sequence[MACDPoint], lookback: int) -> float:
    recent = series[-lookback:]
    return sum(abs(p.histogram) for p in recent) / len(recent)


def macd_signal(series: Sequence[MACDPoint], config: IndicatorConfig = DEFAULT_CONFIG) -> Optional[TradingSignal]:
    """Histogram zero-line crossover between the previous and latest rows."""
    if not series:
        return None
    latest = series[-1]
    if len(series) < 2:
        return TradingSignal(
            indicator="MACD",
            signal=Signal.NEUTRAL,
            strength=0.0,
            reason="MACD history too short for a crossover",
        )
    previous = series[-2]

    ref = _histogram_reference(series, config.macd_strength_lookback)
    strength = _cap(50.0 * abs(latest.histogram) / ref) if ref > 0 else 0.0

    if previous.histogram < 0 <= latest.histogram:
        return TradingSignal(
            indicator="MACD",
            signal=Signal.BUY,
            strength=strength,
            reason="MACD crossover - Bullish signal",
        )
    if previous.histogram > 0 >= latest.histogram:
        return TradingSignal(
            indicator="MACD",
            signal=Signal.SELL,
            strength=strength,
            reason="MACD crossover - Bearish signal",
        )
    trend = "bullish" if latest.histogram > 0 else "bearish" if latest.histogram < 0 else "flat"
    return TradingSignal(
        indicator="MACD",
        signal=Signal.NEUTRAL,
        strength=0.0,
        reason=f"No MACD crossover - {trend} momentum",
    )


def bollinger_signal(
    series: Sequence[BollingerPoint],
    config: IndicatorConfig = DEFAULT_CONFIG,
) -> Optional[TradingSignal]:
    """Mean-reversion reading of the latest price against the bands."""
    if not series:
        return None
    latest = series[-1]
    width = latest.width

    # A collapsed band (flat prices) touches both sides at once.
    if width <= 0:
        return TradingSignal(
            indicator="Bollinger Bands",
            signal=Signal.NEUTRAL,
            strength=0.0,
            reason="Bands collapsed - no price dispersion",
        )
    if latest.price <= latest.lower:
        overshoot = (latest.lower - latest.price) / width
        return TradingSignal(
            indicator="Bollinger Bands",
            signal=Signal.BUY,
            strength=_cap(50.0 + overshoot * 500.0),
            reason="Price at or below lower band - Potential reversal",
        )
    if latest.price >= latest.upper:
        overshoot = (latest.price - latest.upper) / width
        return TradingSignal(
            indicator="Bollinger Bands",
            signal=Signal.SELL,
            strength=_cap(50.0 + overshoot * 500.0),
            reason="Price at or above upper band - Potential reversal",
        )
    return TradingSignal(
        indicator="Bollinger Bands",
        signal=Signal.NEUTRAL,
        strength=0.0,
        reason="Price within normal band range",
    )


def get_indicator_signals(
    bundle: IndicatorBundle,
    config: Optional[IndicatorConfig] = None,
) -> List[TradingSignal]:
    """Return at most one signal per indicator, ordered RSI, MACD, Bollinger.

    Indicators with an empty series are omitted. A new list is built on every
    call; the function keeps no state between calls.
    """
    cfg = config or DEFAULT_CONFIG
    candidates = (
        rsi_signal(bundle.rsi, cfg),
        macd_signal(bundle.macd, cfg),
        bollinger_signal(bundle.bollinger, cfg),
    )
    return [sig for sig in candidates if sig is not None]
