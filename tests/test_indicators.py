import datetime as dt
import math

import pytest

from trendlab.config import IndicatorConfig  # type: ignore
from trendlab.data_downloader import SimulatedDownloader  # type: ignore
from trendlab.indicators import (  # type: ignore
    calculate_all_indicators,
    calculate_bollinger_bands,
    calculate_macd,
    calculate_rsi,
    macd_line,
)
from trendlab.metrics import ema  # type: ignore
from trendlab.types import HistoricalPrice  # type: ignore

SCENARIO_A = [44, 44.5, 43.5, 44.5, 45, 45.5, 46, 46.5, 47, 47.5, 48, 48.5, 49, 49.5, 50]


# ─────────────────────────────────────────────────────────────────── RSI ────
def test_rsi_scenario_a_single_upward_record(prices):
    series = prices(SCENARIO_A)
    out = calculate_rsi(series, 14)
    assert len(out) == 1
    assert out[0].date == series[14].date
    # gains 7.0, losses 1.0 over 14 deltas -> RS 7 -> RSI 87.5
    assert out[0].value == pytest.approx(87.5)
    assert 50 < out[0].value <= 100


def test_rsi_short_input_is_empty(prices):
    assert calculate_rsi(prices(SCENARIO_A[:14]), 14) == []


def test_rsi_bounds(zigzag):
    out = calculate_rsi(zigzag)
    assert len(out) == len(zigzag) - 14
    assert all(0.0 <= p.value <= 100.0 for p in out)


def _simulated(seed, symbol="DOGE", days=120):
    frame = SimulatedDownloader(seed=seed, end=dt.date(2024, 6, 30)).history(symbol, days=days)
    return [HistoricalPrice(row.date, row.price) for row in frame.itertuples()]


@pytest.mark.parametrize("seed", [1, 7, 42, 2024])
@pytest.mark.parametrize("symbol", ["DOGE", "BTC", "BONK"])
def test_bounds_and_ordering_on_random_walks(seed, symbol):
    series = _simulated(seed, symbol)
    bundle = calculate_all_indicators(series)
    assert len(bundle.rsi) == len(series) - 14
    assert all(0.0 <= p.value <= 100.0 for p in bundle.rsi)
    assert all(p.lower <= p.middle <= p.upper for p in bundle.bollinger)
    assert all(p.histogram == pytest.approx(p.macd - p.signal, abs=1e-9) for p in bundle.macd)


def test_rsi_monotone_series(prices):
    up = calculate_rsi(prices([float(i) for i in range(1, 40)]))
    down = calculate_rsi(prices([float(40 - i) for i in range(40)]))
    # No losses at all -> explicit zero-loss branch, never NaN.
    assert all(p.value == 100.0 for p in up)
    assert all(p.value == 0.0 for p in down)


def test_rsi_wilder_smoothing(prices):
    values = SCENARIO_A + [49.0]
    out = calculate_rsi(prices(values), 14)
    avg_gain = (0.5 * 13 + 0.0) / 14
    avg_loss = ((1.0 / 14) * 13 + 1.0) / 14
    expected = 100 - 100 / (1 + avg_gain / avg_loss)
    assert len(out) == 2
    assert out[1].value == pytest.approx(expected)


def test_rsi_skips_non_finite_prices(prices):
    series = prices(SCENARIO_A)
    with_gap = series[:5] + [HistoricalPrice("2024-01-05b", math.nan)] + series[5:]
    out = calculate_rsi(with_gap, 14)
    assert [p.value for p in out] == [p.value for p in calculate_rsi(series, 14)]


def test_rsi_rejects_bad_period(prices):
    with pytest.raises(ValueError):
        calculate_rsi(prices(SCENARIO_A), 0)


# ────────────────────────────────────────────────────────────────── MACD ────
def test_macd_fewer_than_26_points_is_empty(prices):
    series = prices([float(i) for i in range(20)])
    assert calculate_macd(series) == []
    assert macd_line(series) == []


def test_macd_line_without_signal_between_26_and_34(prices):
    series = prices([100 + math.sin(i / 3) for i in range(30)])
    line = macd_line(series)
    assert len(line) == 30 - 26 + 1
    assert line[0].date == series[25].date
    assert calculate_macd(series) == []


def test_macd_first_row_needs_35_points(prices):
    values = [100 + math.sin(i / 3) for i in range(35)]
    assert calculate_macd(prices(values[:34])) == []

    series = prices(values)
    out = calculate_macd(series)
    assert len(out) == 1
    assert out[0].date == series[34].date


def test_macd_histogram_identity_and_alignment(zigzag):
    out = calculate_macd(zigzag)
    assert len(out) == len(zigzag) - 34
    assert out[-1].date == zigzag[-1].date
    for row in out:
        assert row.histogram == pytest.approx(row.macd - row.signal, abs=1e-9)


def test_macd_matches_ema_definition(zigzag):
    closes = [p.price for p in zigzag]
    fast = ema(closes, 12)
    slow = ema(closes, 26)
    line = [fast[i + 14] - slow[i] for i in range(len(slow))]
    signal = ema(line, 9)
    out = calculate_macd(zigzag)
    assert out[-1].macd == pytest.approx(line[-1])
    assert out[-1].signal == pytest.approx(signal[-1])


def test_macd_rejects_fast_not_below_slow(zigzag):
    with pytest.raises(ValueError):
        calculate_macd(zigzag, fast_period=26, slow_period=12)


# ─────────────────────────────────────────────────────── Bollinger Bands ────
def test_bollinger_scenario_b_flat_series(prices):
    out = calculate_bollinger_bands(prices([100.0] * 20))
    assert len(out) == 1
    row = out[0]
    assert (row.middle, row.upper, row.lower, row.price) == (100.0, 100.0, 100.0, 100.0)


@pytest.mark.parametrize("price", [0.1, 0.00002345, 1.1, 64321.37])
def test_bollinger_flat_series_collapses_exactly(prices, price):
    (row,) = calculate_bollinger_bands(prices([price] * 20))
    assert row.upper == row.middle == row.lower == row.price == price


def test_bollinger_ordering_and_middle_is_sma(zigzag):
    out = calculate_bollinger_bands(zigzag)
    assert len(out) == len(zigzag) - 19
    for i, row in enumerate(out):
        window = [p.price for p in zigzag[i : i + 20]]
        assert row.lower <= row.middle <= row.upper
        assert row.middle == pytest.approx(sum(window) / 20)
        assert row.price == zigzag[i + 19].price


def test_bollinger_uses_population_stddev(prices):
    values = [float(v) for v in range(1, 21)]
    row = calculate_bollinger_bands(prices(values))[0]
    mean = sum(values) / 20
    sigma = math.sqrt(sum((v - mean) ** 2 for v in values) / 20)
    assert row.upper - row.middle == pytest.approx(2 * sigma)


def test_bollinger_short_input_is_empty(prices):
    assert calculate_bollinger_bands(prices([1.0] * 19)) == []


# ──────────────────────────────────────────────────────────────── bundle ────
def test_all_indicators_with_20_points_has_empty_macd(prices):
    bundle = calculate_all_indicators(prices([float(i) for i in range(1, 21)]))
    assert bundle.macd == ()
    assert len(bundle.rsi) == 6
    assert len(bundle.bollinger) == 1


def test_all_indicators_sorts_input_and_honours_config(zigzag):
    shuffled = list(reversed(zigzag))
    bundle = calculate_all_indicators(shuffled, IndicatorConfig(rsi_period=7, bb_period=10))
    assert bundle.rsi[-1].date == zigzag[-1].date
    assert len(bundle.rsi) == len(zigzag) - 7
    assert len(bundle.bollinger) == len(zigzag) - 9
    assert bundle.macd == tuple(calculate_macd(zigzag))
