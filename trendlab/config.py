"""Indicator windows and signal thresholds.

Defaults match the conventional settings: RSI(14), MACD(12, 26, 9) and
Bollinger(20, 2σ). The command-line runner overrides individual fields from
explicitly passed flags only.
"""
from __future__ import annotations

import dataclasses
from typing import Any, Dict


@dataclasses.dataclass(slots=True, frozen=True)
class IndicatorConfig:
    """Tunable parameters shared by the calculators and the signal synthesizer.

    Attributes:
        rsi_period: Wilder RSI lookback.
        macd_fast: Fast EMA period.
        macd_slow: Slow EMA period.
        macd_signal: EMA period applied to the MACD line.
        bb_period: Bollinger moving-average window.
        bb_std: Band half-width in standard deviations.
        rsi_oversold: RSI level below which a BUY is emitted.
        rsi_overbought: RSI level above which a SELL is emitted.
        macd_strength_lookback: Histogram records averaged for the MACD
            strength reference.
        min_points: Smallest history the dashboard panel will analyse.
    """
    rsi_period: int = 14
    macd_fast: int = 12
    macd_slow: int = 26
    macd_signal: int = 9
    bb_period: int = 20
    bb_std: float = 2.0
    rsi_oversold: float = 30.0
    rsi_overbought: float = 70.0
    macd_strength_lookback: int = 9
    min_points: int = 26

    def validate(self) -> "IndicatorConfig":
        """Return ``self`` if the parameters are coherent.

        Raises:
            ValueError: On non-positive windows, ``macd_fast >= macd_slow``,
                negative ``bb_std`` or inverted RSI thresholds.
        """
        windows = {
            "rsi_period": self.rsi_period,
            "macd_fast": self.macd_fast,
            "macd_slow": self.macd_slow,
            "macd_signal": self.macd_signal,
            "bb_period": self.bb_period,
            "macd_strength_lookback": self.macd_strength_lookback,
            "min_points": self.min_points,
        }
        for name, value in windows.items():
            if int(value) < 1:
                raise ValueError(f"{name} must be >= 1 (got {value})")
        if self.macd_fast >= self.macd_slow:
            raise ValueError("macd_fast must be smaller than macd_slow")
        if self.bb_std < 0:
            raise ValueError("bb_std must be non-negative")
        if not 0 <= self.rsi_oversold < self.rsi_overbought <= 100:
            raise ValueError("expected 0 <= rsi_oversold < rsi_overbought <= 100")
        return self

    def replace(self, **overrides: Any) -> "IndicatorConfig":
        """Return a validated copy with non-``None`` overrides applied."""
        changes: Dict[str, Any] = {k: v for k, v in overrides.items() if v is not None}
        return dataclasses.replace(self, **changes).validate()


DEFAULT_CONFIG = IndicatorConfig()
