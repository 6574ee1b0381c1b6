"""Totals and percentage shares for a series table."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

import numpy as np

from .aggregator import AggregationSnapshot, Dimension, Observation, SeriesTable


@dataclass(frozen=True)
class SummaryRow:
    key: str
    total: int
    percent: float

    @property
    def percent_label(self) -> str:
        return f"{self.percent:.2f}%"

    @property
    def total_label(self) -> str:
        return format_total(self.total)


def series_total(series: Sequence[Observation]) -> int:
    values = np.fromiter((obs.value for obs in series), dtype=np.int64, count=len(series))
    return int(values.sum())


def percent_of(part: int, grand_total: int) -> float:
    if grand_total <= 0:
        return 0.0
    return round(part / grand_total * 100.0, 2)


def format_total(value: int) -> str:
    return f"{value:,}"


def format_percent(part: int, grand_total: int) -> str:
    return f"{percent_of(part, grand_total):.2f}%"


def summarize(table: SeriesTable) -> Optional[List[SummaryRow]]:
    """Return rows ordered by descending total, then ascending key.

    ``None`` means the table holds no keys at all, which is distinct from a
    table whose keys all total zero (that yields rows at 0.00%).
    """
    if not table:
        return None

    keys = list(table)
    totals = np.array([series_total(table[key]) for key in keys], dtype=np.int64)
    grand_total = int(totals.sum())

    rows = [
        SummaryRow(key=key, total=int(total), percent=percent_of(int(total), grand_total))
        for key, total in zip(keys, totals)
    ]
    rows.sort(key=lambda row: (-row.total, row.key))
    return rows


def grand_total(rows: Optional[Sequence[SummaryRow]]) -> int:
    if not rows:
        return 0
    return sum(row.total for row in rows)


def summarize_snapshot(snapshot: AggregationSnapshot) -> Dict[Dimension, Optional[List[SummaryRow]]]:
    return {dimension: summarize(table) for dimension, table in snapshot.items()}


__all__ = [
    "SummaryRow",
    "series_total",
    "percent_of",
    "format_total",
    "format_percent",
    "summarize",
    "grand_total",
    "summarize_snapshot",
]
