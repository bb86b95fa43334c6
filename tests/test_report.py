import math

import pandas as pd

from trendlab import report  # type: ignore
from trendlab.indicators import calculate_all_indicators  # type: ignore
from trendlab.signals import get_indicator_signals  # type: ignore
from trendlab.types import HistoricalPrice, IndicatorBundle  # type: ignore


def test_indicators_frame_is_tail_aligned(zigzag):
    bundle = calculate_all_indicators(zigzag)
    df = report.indicators_frame(bundle)

    # RSI is the longest series (starts at index 14).
    assert len(df) == len(bundle.rsi)
    assert list(df["date"]) == [p.date for p in bundle.rsi]
    assert df["macd"].isna().sum() == len(bundle.rsi) - len(bundle.macd)
    assert df["histogram"].iloc[-1] == bundle.macd[-1].histogram
    assert df["bb_upper"].iloc[-1] == bundle.bollinger[-1].upper
    assert math.isnan(df["bb_middle"].iloc[0])


def test_indicators_frame_keeps_repeated_date_labels():
    # Intraday labels can repeat; rows stay positional instead of joining on date.
    series = [HistoricalPrice("10:00", 100.0 + (i % 5)) for i in range(40)]
    bundle = calculate_all_indicators(series)
    df = report.indicators_frame(bundle)
    assert len(df) == len(bundle.rsi)
    assert df["rsi"].iloc[-1] == bundle.rsi[-1].value
    assert df["bb_lower"].iloc[-1] == bundle.bollinger[-1].lower


def test_summary_signature_and_title(zigzag):
    bundle = calculate_all_indicators(zigzag)
    signals = get_indicator_signals(bundle)
    text = report.summary(bundle, signals, title="SOL Technical Indicators")
    assert text.splitlines()[0] == "========== SOL Technical Indicators =========="
    assert "RSI (latest)" in text
    assert "Technical Indicators" in report.summary(bundle, signals).splitlines()[0]


def test_signals_table_without_signals():
    assert "No signals." in report.signals_table([])


def test_export_logs_writes_all_artifacts(tmp_path, zigzag):
    bundle = calculate_all_indicators(zigzag)
    signals = get_indicator_signals(bundle)
    dst = tmp_path / "out"

    report.export_logs(dst, "TEST", bundle, signals)

    assert (dst / "indicators.png").stat().st_size > 0
    text = (dst / "signals.log").read_text(encoding="utf-8")
    assert "TEST Technical Indicators" in text
    frame = pd.read_csv(dst / "indicators.csv")
    assert list(frame.columns)[:3] == ["date", "price", "rsi"]


def test_export_logs_with_empty_bundle_skips_chart(tmp_path):
    report.export_logs(tmp_path, "TEST", IndicatorBundle(), [])
    assert (tmp_path / "signals.log").exists()
    assert not (tmp_path / "indicators.png").exists()
