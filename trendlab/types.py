# types.py
"""Price records, indicator series rows, and trading signals."""
from __future__ import annotations

import dataclasses
from enum import Enum
from typing import Any, Dict, NewType, Optional, Tuple

# ───────────────────────────────────────────────────────────── primitives ────
Asset = NewType("Asset", str)          # e.g., "SOL", "BONK"
DateLabel = NewType("DateLabel", str)  # ISO-8601 date or display label ("Jan 5")


# ──────────────────────────────────────────────────────────────── signals ────
class Signal(Enum):
    """Discrete indicator verdicts."""
    BUY = "buy"
    SELL = "sell"
    NEUTRAL = "neutral"


# ─────────────────────────────────────────────────────── price observation ────
@dataclasses.dataclass(slots=True, frozen=True)
class HistoricalPrice:
    """One observation of an asset's closing price.

    Attributes:
        date: Label identifying the observation; series must be ascending.
        price: Closing price (may be ``None`` straight out of a CSV).
        volume: Traded volume (optional, unused by the indicators).
        timestamp: Epoch milliseconds (optional, used for ordering).
    """
    date: DateLabel
    price: Optional[float]
    volume: Optional[float] = None
    timestamp: Optional[int] = None


# ─────────────────────────────────────────────────────── indicator rows ────
@dataclasses.dataclass(slots=True, frozen=True)
class RSIPoint:
    date: DateLabel
    value: float

    def as_dict(self) -> Dict[str, Any]:
        return dataclasses.asdict(self)


@dataclasses.dataclass(slots=True, frozen=True)
class MACDLinePoint:
    """MACD line value before a signal line is available."""
    date: DateLabel
    value: float

    def as_dict(self) -> Dict[str, Any]:
        return dataclasses.asdict(self)


@dataclasses.dataclass(slots=True, frozen=True)
class MACDPoint:
    date: DateLabel
    macd: float
    signal: float
    histogram: float

    def as_dict(self) -> Dict[str, Any]:
        return dataclasses.asdict(self)


@dataclasses.dataclass(slots=True, frozen=True)
class BollingerPoint:
    date: DateLabel
    upper: float
    middle: float
    lower: float
    price: float

    @property
    def width(self) -> float:
        return self.upper - self.lower

    def as_dict(self) -> Dict[str, Any]:
        return dataclasses.asdict(self)


@dataclasses.dataclass(slots=True, frozen=True)
class IndicatorBundle:
    """RSI, MACD and Bollinger series computed from one price history."""
    rsi: Tuple[RSIPoint, ...] = ()
    macd: Tuple[MACDPoint, ...] = ()
    bollinger: Tuple[BollingerPoint, ...] = ()

    @property
    def empty(self) -> bool:
        return not (self.rsi or self.macd or self.bollinger)


# ─────────────────────────────────────────────────────── trading signal ────
@dataclasses.dataclass(slots=True, frozen=True)
class TradingSignal:
    """A single indicator's verdict on the latest bar.

    Attributes:
        indicator: "RSI", "MACD" or "Bollinger Bands".
        signal: BUY / SELL / NEUTRAL.
        strength: Confidence in [0, 100]; 0 when neutral.
        reason: Human-readable justification.
    """
    indicator: str
    signal: Signal
    strength: float
    reason: str

    def as_dict(self) -> Dict[str, Any]:
        """Return a JSON-friendly dict (signal rendered as its string value)."""
        return {
            "indicator": self.indicator,
            "signal": self.signal.value,
            "strength": self.strength,
            "reason": self.reason,
        }
