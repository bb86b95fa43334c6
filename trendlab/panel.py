"""Stateful front for a dashboard widget that shows indicators and signals.

The indicator functions themselves are pure; this class only remembers the
last history it analysed so that repeated ``update`` calls with the same
content neither recompute nor re-notify.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, List, Mapping, Optional

from trendlab import report
from trendlab.config import DEFAULT_CONFIG, IndicatorConfig
from trendlab.indicators import calculate_all_indicators
from trendlab.prices import normalize_prices
from trendlab.signals import get_indicator_signals
from trendlab.types import HistoricalPrice, IndicatorBundle, TradingSignal

logger = logging.getLogger(__name__)

SignalCallback = Callable[[List[TradingSignal]], None]

NOT_ENOUGH_DATA = "Not enough data for technical analysis"


class TechnicalPanel:
    """Recompute indicators on history changes and publish the signals.

    Args:
        on_signal_change: Called once per recompute with a freshly built
            list of signals. Not called while history is too short.
        config: Indicator windows, thresholds and ``min_points``.
    """

    def __init__(
        self,
        on_signal_change: Optional[SignalCallback] = None,
        config: Optional[IndicatorConfig] = None,
    ) -> None:
        self._on_signal_change = on_signal_change
        self._config = (config or DEFAULT_CONFIG).validate()

        self._history: Optional[List[HistoricalPrice]] = None
        self._indicators: Optional[IndicatorBundle] = None
        self._signals: List[TradingSignal] = []

    # ------------------------------------------------------------------ API --
    def update(self, history: Iterable[HistoricalPrice | Mapping[str, Any]]) -> List[TradingSignal]:
        """Feed a full price history and return the current signals.

        Returns:
            A copy of the current signal list (empty in the not-enough-data
            state).
        """
        series = normalize_prices(history)
        if series == self._history:
            return list(self._signals)
        self._history = series

        if len(series) < self._config.min_points:
            logger.info("%s (%d < %d points)", NOT_ENOUGH_DATA, len(series), self._config.min_points)
            self._indicators = None
            self._signals = []
            return []

        self._indicators = calculate_all_indicators(series, self._config)
        self._signals = get_indicator_signals(self._indicators, self._config)
        if self._on_signal_change is not None:
            self._on_signal_change(list(self._signals))
        return list(self._signals)

    @property
    def ready(self) -> bool:
        """True once enough history has been seen to compute indicators."""
        return self._indicators is not None

    @property
    def indicators(self) -> Optional[IndicatorBundle]:
        return self._indicators

    @property
    def signals(self) -> List[TradingSignal]:
        return list(self._signals)

    # --------------------------------------------------------------- render --
    def summary(self) -> str:
        """Return a fixed-width text rendering of the badges and latest values."""
        if self._indicators is None:
            return NOT_ENOUGH_DATA
        return report.summary(self._indicators, self._signals)
