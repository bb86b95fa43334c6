# data_feed.py
"""CSV → HistoricalPrice feed.

This module defines a minimal CSV adapter that yields :class:`HistoricalPrice`
instances. It supports common column aliasing (``time``/``close`` exports from
exchanges and Yahoo as well as the canonical ``date``/``price`` layout) and
graceful handling of optional fields.
"""
from __future__ import annotations

import csv
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterator

from trendlab.types import Asset, DateLabel, HistoricalPrice

# -----------------------------------------------------------------------------
# Helper constants (canonical field → accepted aliases, in priority order)
# -----------------------------------------------------------------------------
_DATE_ALIASES: tuple[str, ...] = ("date", "time", "datetime")
_FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "price": ("price", "close", "adj_close", "adjclose", "adj close"),
    "volume": ("volume", "vol"),
    "timestamp": ("timestamp", "ts"),
}


# -----------------------------------------------------------------------------
# Base feed
# -----------------------------------------------------------------------------
class BaseFeed(ABC):
    """Abstract iterator producing :class:`HistoricalPrice` items."""

    @abstractmethod
    def stream(self) -> Iterator[HistoricalPrice]:
        """Yield successive observations."""
        raise NotImplementedError


# -----------------------------------------------------------------------------
# CSV feed
# -----------------------------------------------------------------------------
class CSVFeed(BaseFeed):
    """Lightweight CSV adapter for crypto/stock price histories."""

    def __init__(self, csv_path: str | Path, *, asset: str | None = None) -> None:
        """Initialize the feed.

        Args:
            csv_path: Path to a CSV file with a date column and a price column.
            asset: Optional asset symbol; if omitted, inferred from filename.
        """
        self._path = Path(csv_path)
        self._asset = Asset(asset or self._path.stem.upper())

    @property
    def asset(self) -> Asset:
        return self._asset

    # ------------------------------- helpers ---------------------------------
    @staticmethod
    def _norm(col: str) -> str:
        """Normalize a column name for matching (lowercase + strip separators)."""
        return col.lower().replace(" ", "").replace("_", "")

    def _header_map(self, header: list[str]) -> dict[str, str]:
        """Return a mapping from canonical → CSV column names.

        Raises:
            KeyError: If no date-like or no price-like column is present.
        """
        norm2raw = {self._norm(col): col for col in header}

        mapping: dict[str, str] = {}
        for alias in _DATE_ALIASES:
            if self._norm(alias) in norm2raw:
                mapping["date"] = norm2raw[self._norm(alias)]
                break
        for canon, aliases in _FIELD_ALIASES.items():
            for alias in aliases:
                key = self._norm(alias)
                if key in norm2raw:
                    mapping[canon] = norm2raw[key]
                    break

        if "date" not in mapping:
            # A bare timestamp column can still label the rows.
            if "timestamp" not in mapping:
                raise KeyError("'date' column missing in CSV")
            mapping["date"] = mapping["timestamp"]
        if "price" not in mapping:
            raise KeyError("'price' (or 'close') column missing in CSV")
        return mapping

    @staticmethod
    def _parse_float(raw_val: str | None) -> float | None:
        """Parse a string to float, returning None for blank or unparsable input."""
        if raw_val is None or not raw_val.strip():
            return None
        try:
            return float(raw_val)
        except ValueError:
            return None

    def _parse_int(self, raw_val: str | None) -> int | None:
        val = self._parse_float(raw_val)
        return int(val) if val is not None else None

    # --------------------------------- API -----------------------------------
    def stream(self) -> Iterator[HistoricalPrice]:
        """Yield :class:`HistoricalPrice` rows parsed from the CSV."""
        with self._path.open(newline="") as fh:
            reader = csv.DictReader(fh)
            mapping = self._header_map(reader.fieldnames or [])

            for row in reader:
                yield HistoricalPrice(
                    date=DateLabel(row[mapping["date"]]),
                    price=self._parse_float(row.get(mapping["price"])),
                    volume=self._parse_float(row.get(mapping.get("volume", ""))),
                    timestamp=self._parse_int(row.get(mapping.get("timestamp", ""))),
                )
