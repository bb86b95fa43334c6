# metrics.py
"""Moving-average and dispersion helpers shared by the indicators.

This module provides:
    * Simple moving average (SMA).
    * Population standard deviation.
    * Exponential moving average series (SMA-seeded).
    * ``RollingWindow`` helper for fixed-size trailing SMA / stddev.
"""
from __future__ import annotations

import math
from collections import deque
from typing import Deque, List, Sequence


def sma(values: Sequence[float]) -> float:
    """Return the simple moving average of ``values``.

    Args:
        values: Non-empty sequence of floats.

    The sum is exact (``math.fsum``) and the result is clamped to
    ``[min(values), max(values)]``, so a constant window averages to exactly
    its value.

    Raises:
        ZeroDivisionError: If ``values`` is empty.
    """
    mu = math.fsum(values) / len(values)
    return min(max(mu, min(values)), max(values))


def stddev(values: Sequence[float]) -> float:
    """Return the population standard deviation of ``values`` (divides by N).

    Raises:
        ZeroDivisionError: If ``values`` is empty (via ``sma``).
    """
    mu = sma(values)
    return (math.fsum((v - mu) ** 2 for v in values) / len(values)) ** 0.5


def ema(values: Sequence[float], period: int) -> List[float]:
    """Return the exponential moving average series of ``values``.

    The first element is the SMA of the first ``period`` values; each later
    element applies ``price * k + prev * (1 - k)`` with ``k = 2 / (period + 1)``.
    Element ``i`` of the result therefore lines up with ``values[i + period - 1]``.

    Args:
        values: Input series.
        period: Smoothing period (>= 1).

    Returns:
        ``len(values) - period + 1`` floats, or an empty list when the input
        is shorter than ``period``.
    """
    if period < 1 or len(values) < period:
        return []

    mult = 2.0 / (period + 1)
    out: List[float] = [sma(values[:period])]
    for price in values[period:]:
        out.append(price * mult + out[-1] * (1.0 - mult))
    return out


class RollingWindow:
    """Fixed-size rolling window storing recent floats.

    The window supports:
      * ``push`` to append a new value (dropping the oldest when full).
      * ``full`` property to indicate readiness (len == maxlen).
      * ``sma()`` and ``std()`` over the current contents.
    """

    def __init__(self, size: int) -> None:
        """Initialize a rolling window.

        Args:
            size: Maximum number of elements to retain (must be >= 1).
        """
        if size < 1:
            raise ValueError("window size must be >= 1")
        self._dq: Deque[float] = deque(maxlen=size)

    def push(self, value: float) -> None:
        """Append ``value`` to the window."""
        self._dq.append(value)

    @property
    def full(self) -> bool:
        """Return True if the window is filled to its maximum length."""
        return len(self._dq) == self._dq.maxlen

    def sma(self) -> float:
        """Return the simple moving average of the window."""
        return sma(self._dq)

    def std(self) -> float:
        """Return the population standard deviation of the window."""
        return stddev(self._dq)
