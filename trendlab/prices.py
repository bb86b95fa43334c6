"""Price-series normalization.

Non-finite policy: a record whose price is missing, non-numeric, NaN or
infinite is *skipped*. Nothing is interpolated or clamped, so every indicator
row keeps the date of a real observation.
"""
from __future__ import annotations

import datetime as dt
import logging
import math
from typing import Any, Iterable, List, Mapping, Optional

from trendlab.types import DateLabel, HistoricalPrice

logger = logging.getLogger(__name__)


def _coerce(record: HistoricalPrice | Mapping[str, Any]) -> HistoricalPrice:
    """Turn a mapping row (``{"date", "price", ...}``) into a ``HistoricalPrice``."""
    if isinstance(record, HistoricalPrice):
        return record
    return HistoricalPrice(
        date=DateLabel(str(record["date"])),
        price=record.get("price"),
        volume=record.get("volume"),
        timestamp=record.get("timestamp"),
    )


def _as_finite(value: Any) -> Optional[float]:
    """Return ``value`` as a finite float, or ``None``."""
    if value is None or isinstance(value, bool):
        return None
    try:
        num = float(value)
    except (TypeError, ValueError):
        return None
    return num if math.isfinite(num) else None


def finite_prices(records: Iterable[HistoricalPrice | Mapping[str, Any]]) -> List[HistoricalPrice]:
    """Return the records with a finite price, in input order."""
    out: List[HistoricalPrice] = []
    for idx, raw in enumerate(records):
        rec = _coerce(raw)
        price = _as_finite(rec.price)
        if price is None:
            logger.warning("Skipping record %d (%s): non-finite price %r", idx, rec.date, rec.price)
            continue
        if price != rec.price:
            rec = HistoricalPrice(date=rec.date, price=price, volume=rec.volume, timestamp=rec.timestamp)
        out.append(rec)
    return out


def _parse_date(label: str) -> Optional[dt.datetime]:
    try:
        parsed = dt.datetime.fromisoformat(label)
    except (TypeError, ValueError):
        return None
    # Mixed naive/aware values cannot be compared; treat naive as UTC.
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=dt.timezone.utc)
    return parsed


def normalize_prices(records: Iterable[HistoricalPrice | Mapping[str, Any]]) -> List[HistoricalPrice]:
    """Return a fresh, chronologically ascending list of finite observations.

    Ordering key, in order of preference:
        1. ``timestamp`` when every record carries one;
        2. the ISO-8601 ``date`` when every label parses;
        3. the input order otherwise (display labels such as ``"Jan 5"``).

    The sort is stable, so observations sharing a key keep their input order.

    Args:
        records: ``HistoricalPrice`` objects or mappings with ``date``/``price``.

    Returns:
        A new list; the input is never mutated.
    """
    cleaned = finite_prices(records)
    if not cleaned:
        return cleaned

    if all(r.timestamp is not None for r in cleaned):
        return sorted(cleaned, key=lambda r: r.timestamp)

    parsed = [_parse_date(r.date) for r in cleaned]
    if all(p is not None for p in parsed):
        order = sorted(range(len(cleaned)), key=lambda i: parsed[i])
        return [cleaned[i] for i in order]

    return cleaned


def is_ascending(records: Iterable[HistoricalPrice]) -> bool:
    """Return True if the records are already in the order ``normalize_prices`` yields."""
    seq = list(records)
    return seq == normalize_prices(seq)
