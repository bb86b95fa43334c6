import csv
from pathlib import Path
from typing import Iterable, List, Mapping

import pytest

from trendlab.types import HistoricalPrice  # type: ignore


def make_prices(values: Iterable[float], start: int = 1) -> List[HistoricalPrice]:
    """Build an ascending daily history from plain floats (2024-01-01 onwards)."""
    return [
        HistoricalPrice(date=f"2024-{1 + (i // 28):02d}-{1 + (i % 28):02d}", price=v)
        for i, v in enumerate(values, start=start - 1)
    ]


@pytest.fixture
def prices():
    """Factory fixture: ``prices([1.0, 2.0, ...])`` → list[HistoricalPrice]."""
    return make_prices


@pytest.fixture
def zigzag(prices):
    """60 points oscillating around an upward drift; every indicator populated."""
    values = [100.0 + 0.3 * i + (4.0 if i % 4 < 2 else -4.0) for i in range(60)]
    return prices(values)


@pytest.fixture
def make_csv(tmp_path):
    """Create a minimal price CSV and return its path.

    Usage:
        path = make_csv(
            rows=[{"date": "2024-01-01", "price": 10.0}, ...],
            filename="TEST.csv"
        )
    """
    def _make_csv(rows: Iterable[Mapping], filename: str = "TEST.csv") -> Path:
        path = tmp_path / filename
        rows = list(rows)
        if not rows:
            raise ValueError("rows must be non-empty")
        fieldnames = list(rows[0].keys())
        with path.open("w", newline="") as f:
            writer = csv.DictWriter(f, fieldnames=fieldnames)
            writer.writeheader()
            for r in rows:
                writer.writerow(r)
        return path

    return _make_csv
