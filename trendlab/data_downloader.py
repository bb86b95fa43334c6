# data_downloader.py
"""Price-history CSV downloaders with an extensible provider interface.

This module provides:
    * BaseDownloader: Abstract façade for price-history providers.
    * YahooDownloader: Concrete implementation using `yfinance`.
    * SimulatedDownloader: Seeded random-walk history for offline use and for
      symbols no provider covers.

Every provider persists the same canonical CSV:
    asset, date, price, volume, timestamp

where ``date`` is ISO-8601 and ``timestamp`` is epoch milliseconds, so the
result can be fed straight into :class:`trendlab.data_feed.CSVFeed`.
"""
from __future__ import annotations

import abc
import datetime as dt
import logging
import math
import random
import sys
from pathlib import Path
from typing import Final, NewType

import pandas as pd

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# Type aliases / constants
# -----------------------------------------------------------------------------
CsvPath = NewType("CsvPath", Path)

CANONICAL_COLUMNS: Final[list[str]] = ["asset", "date", "price", "volume", "timestamp"]

# Short crypto symbols → Yahoo Finance tickers.
_YAHOO_TICKERS: Final[dict[str, str]] = {
    "BTC": "BTC-USD",
    "ETH": "ETH-USD",
    "SOL": "SOL-USD",
    "DOGE": "DOGE-USD",
    "ADA": "ADA-USD",
    "XRP": "XRP-USD",
    "DOT": "DOT-USD",
    "LINK": "LINK-USD",
    "BONK": "BONK-USD",
    "WIF": "WIF-USD",
}

# Anchor prices for the simulated random walk.
_BASE_PRICES: Final[dict[str, float]] = {
    "BTC": 90_000.0,
    "ETH": 3_300.0,
    "SOL": 160.0,
    "DOGE": 0.30,
    "AAPL": 185.0,
    "TSLA": 350.0,
    "NVDA": 900.0,
    "MSFT": 400.0,
}
_DEFAULT_BASE_PRICE: Final[float] = 100.0


def yahoo_ticker(symbol: str) -> str:
    """Return the Yahoo Finance ticker for ``symbol`` (passthrough if unknown)."""
    return _YAHOO_TICKERS.get(symbol.upper(), symbol.upper())


def _default_out(symbol: str) -> Path:
    return Path(f"data/{symbol.upper()}.csv")


# -----------------------------------------------------------------------------
# Abstract base
# -----------------------------------------------------------------------------
class BaseDownloader(abc.ABC):
    """Abstract façade for price-history providers."""

    @abc.abstractmethod
    def history(self, symbol: str, days: int, interval: str = "1d") -> pd.DataFrame:
        """Return a frame with the canonical columns, oldest row first.

        Args:
            symbol: Asset symbol (e.g., "SOL", "AAPL").
            days: Look-back window in days.
            interval: Bar interval (e.g., "1d", "1h").
        """
        raise NotImplementedError

    def download(
        self,
        symbol: str,
        days: int = 30,
        interval: str = "1d",
        out_csv: str | Path | None = None,
    ) -> CsvPath:
        """Fetch history for ``symbol`` and write the canonical CSV.

        Args:
            symbol: Asset symbol.
            days: Look-back window in days (must be >= 1).
            interval: Bar interval.
            out_csv: Output CSV path; defaults to "data/{SYMBOL}.csv".

        Returns:
            Path to the written CSV.

        Raises:
            ValueError: If ``days`` is not positive.
        """
        if days < 1:
            raise ValueError("days must be >= 1")
        frame = self.history(symbol, days, interval)

        out_path = CsvPath(Path(out_csv or _default_out(symbol)))
        out_path.parent.mkdir(parents=True, exist_ok=True)
        frame[CANONICAL_COLUMNS].to_csv(out_path, index=False)
        logger.info("Wrote %d rows for %s to %s", len(frame), symbol.upper(), out_path)
        return out_path


# -----------------------------------------------------------------------------
# Yahoo Finance implementation
# -----------------------------------------------------------------------------
class YahooDownloader(BaseDownloader):
    """Free Yahoo Finance downloader (no API key required)."""

    # ------------------------------- Helpers ---------------------------------
    @staticmethod
    def _flatten_columns(raw: pd.DataFrame) -> pd.DataFrame:
        """Return a DataFrame with single-level, lower-case columns.

        Handles both single-level and MultiIndex columns by selecting the
        level that contains the price field names.
        """
        fields = {"close", "adjclose", "volume"}
        if isinstance(raw.columns, pd.MultiIndex):
            level0 = {str(c).lower().replace(" ", "") for c in raw.columns.get_level_values(0)}
            level1 = {str(c).lower().replace(" ", "") for c in raw.columns.get_level_values(1)}
            if fields & level0:
                raw.columns = [c[0] for c in raw.columns]
            elif fields & level1:
                raw.columns = [c[1] for c in raw.columns]
            else:
                raise KeyError("Could not locate price field names in MultiIndex columns.")
        raw.columns = [str(c).lower().replace(" ", "") for c in raw.columns]
        return raw

    # ------------------------------- Main API --------------------------------
    def history(self, symbol: str, days: int, interval: str = "1d") -> pd.DataFrame:
        """Download ``days`` of history for ``symbol``.

        Raises:
            RuntimeError: If the provider returns an empty DataFrame.
            KeyError: If no close column can be located.
        """
        import yfinance as yf  # Local import keeps dependency optional.

        ticker = yahoo_ticker(symbol)
        raw = yf.download(
            tickers=ticker,
            period=f"{days}d",
            interval=interval,
            auto_adjust=False,
            progress=False,
            group_by="column",
        )
        if raw is None or raw.empty:
            raise RuntimeError(f"No data returned for symbol={symbol!r} (ticker={ticker!r})")

        flat = self._flatten_columns(raw)
        price_col = "close" if "close" in flat.columns else "adjclose"
        if price_col not in flat.columns:
            raise KeyError("No close column found in provider data.")

        index = pd.DatetimeIndex(flat.index)
        if index.tz is None:
            index = index.tz_localize("UTC")
        frame = pd.DataFrame(
            {
                "asset": symbol.upper(),
                "date": index.strftime("%Y-%m-%dT%H:%M:%S" if interval[-1] in "mh" else "%Y-%m-%d"),
                "price": flat[price_col].to_numpy(),
                "volume": flat["volume"].to_numpy() if "volume" in flat.columns else math.nan,
                "timestamp": index.asi8 // 1_000_000,
            }
        )
        return frame.reset_index(drop=True)


# -----------------------------------------------------------------------------
# Simulated provider
# -----------------------------------------------------------------------------
class SimulatedDownloader(BaseDownloader):
    """Deterministic (seeded) daily random walk around a per-symbol anchor.

    Each step applies a slow sinusoidal drift (±2 %) plus uniform noise
    (±1.5 %), giving a series with trend reversals for the indicators to
    react to.
    """

    def __init__(self, seed: int | None = None, end: dt.date | None = None) -> None:
        self._seed = seed
        self._end = end

    def history(self, symbol: str, days: int, interval: str = "1d") -> pd.DataFrame:
        if interval != "1d":
            raise ValueError("SimulatedDownloader only produces daily bars")
        rng = random.Random(self._seed)
        end = self._end or dt.date.today()
        base = _BASE_PRICES.get(symbol.upper(), _DEFAULT_BASE_PRICE)

        rows = []
        price = base
        for i in range(days, -1, -1):
            day = end - dt.timedelta(days=i)
            trend = math.sin(i / 7) * 0.02
            noise = (rng.random() - 0.5) * 0.03
            price *= 1 + trend + noise
            stamp = dt.datetime.combine(day, dt.time(), tzinfo=dt.timezone.utc)
            rows.append(
                {
                    "asset": symbol.upper(),
                    "date": day.isoformat(),
                    "price": price,
                    "volume": base * 500_000 * (0.5 + rng.random()),
                    "timestamp": int(stamp.timestamp() * 1000),
                }
            )
        return pd.DataFrame(rows, columns=CANONICAL_COLUMNS)


# -----------------------------------------------------------------------------
# CLI convenience
# -----------------------------------------------------------------------------
def _cli() -> None:
    """Command-line interface for ad-hoc history downloads."""
    import argparse

    parser = argparse.ArgumentParser(description="Download price history as CSV.")
    parser.add_argument("symbol", help="Asset symbol, e.g., SOL or AAPL")
    parser.add_argument("--days", type=int, default=90, help="Look-back window (days)")
    parser.add_argument("--interval", default="1d", help="1d, 1h, 5m …")
    parser.add_argument("--simulate", action="store_true", help="Generate a seeded random walk instead")
    parser.add_argument("--seed", type=int, default=None, help="Seed for --simulate")
    parser.add_argument("--out", metavar="PATH", help="Output CSV path")
    args = parser.parse_args()

    downloader: BaseDownloader = SimulatedDownloader(seed=args.seed) if args.simulate else YahooDownloader()
    try:
        path = downloader.download(
            symbol=args.symbol,
            days=args.days,
            interval=args.interval,
            out_csv=args.out,
        )
        print(f"Data saved → {path}")
    except Exception as err:  # Surface error and exit with non-zero status.
        sys.exit(f"Error: {err}")


if __name__ == "__main__":
    _cli()
