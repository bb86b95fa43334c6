import datetime as dt

import pytest

from trendlab.data_downloader import CANONICAL_COLUMNS, SimulatedDownloader, yahoo_ticker  # type: ignore
from trendlab.data_feed import CSVFeed  # type: ignore
from trendlab.prices import is_ascending  # type: ignore


def test_simulated_download_is_seeded_and_feedable(tmp_path):
    end = dt.date(2024, 6, 30)
    a = SimulatedDownloader(seed=7, end=end).history("SOL", days=40)
    b = SimulatedDownloader(seed=7, end=end).history("SOL", days=40)
    assert list(a.columns) == CANONICAL_COLUMNS
    assert len(a) == 41
    assert a.equals(b)
    assert a["date"].iloc[-1] == "2024-06-30"

    path = SimulatedDownloader(seed=7, end=end).download("sol", days=40, out_csv=tmp_path / "SOL.csv")
    bars = list(CSVFeed(path).stream())
    assert len(bars) == 41
    assert all(b.price > 0 for b in bars)
    assert is_ascending(bars)


def test_simulated_rejects_intraday_and_bad_days(tmp_path):
    with pytest.raises(ValueError):
        SimulatedDownloader().history("SOL", days=10, interval="1h")
    with pytest.raises(ValueError):
        SimulatedDownloader().download("SOL", days=0, out_csv=tmp_path / "x.csv")


def test_yahoo_ticker_mapping():
    assert yahoo_ticker("sol") == "SOL-USD"
    assert yahoo_ticker("AAPL") == "AAPL"
