"""Numeric aggregation: rank quantiles, medians and box-plot summaries.

Two median flavours are used by the dashboard:

- `summarize` reports rank-based quantiles, ``sorted[floor(p * n)]`` with no
  interpolation, which is what the length box plots display.
- `median` averages the two middle values on even counts and is used when
  collapsing time series into monthly or seasonal points.

Empty input never raises; the "no data" sentinel is ``None``.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Iterable, Sequence

from fisheries_pipeline.models import coerce_number

DISPLAY_DECIMALS = 2


def round2(value: float) -> float:
    return round(value, DISPLAY_DECIMALS)


@dataclass(frozen=True)
class StatSummary:
    """Five-number summary of a numeric sample.

    All statistics are None when `count` is 0.
    """
    count: int = 0
    min: float | None = None
    q1: float | None = None
    median: float | None = None
    q3: float | None = None
    max: float | None = None

    @property
    def is_empty(self) -> bool:
        return self.count == 0

    def as_box(self) -> list[float | None]:
        """Return ``[min, q1, median, q3, max]`` for box-plot renderers."""
        return [self.min, self.q1, self.median, self.q3, self.max]


def numeric_values(values: Iterable[Any]) -> list[float]:
    """Keep the entries of `values` that are usable numbers.

    None, NaN, infinities, booleans and non-numeric strings are dropped;
    numeric strings are converted.
    """
    out: list[float] = []
    for v in values:
        number = coerce_number(v)
        if number is not None:
            out.append(number)
    return out


def quantile_at(sorted_values: Sequence[float], p: float) -> float:
    """Return the rank quantile ``sorted_values[floor(p * n)]``.

    Args:
        sorted_values: Non-empty, ascending sequence.
        p: Quantile in ``[0, 1]``; ``p = 1`` maps to the last element.
    """
    n = len(sorted_values)
    if n == 0:
        raise ValueError("quantile_at() needs at least one value")
    index = min(int(math.floor(p * n)), n - 1)
    return sorted_values[index]


def summarize(values: Iterable[Any]) -> StatSummary:
    """Compute the rank-based five-number summary of `values`.

    Args:
        values: Any iterable; non-numeric entries are ignored.

    Returns:
        StatSummary rounded to 2 decimals, or an empty summary (count 0,
        statistics None) when no numeric value remains.
    """
    data = sorted(numeric_values(values))
    if not data:
        return StatSummary()

    return StatSummary(
        count=len(data),
        min=round2(data[0]),
        q1=round2(quantile_at(data, 0.25)),
        median=round2(quantile_at(data, 0.5)),
        q3=round2(quantile_at(data, 0.75)),
        max=round2(data[-1]),
    )


def median(values: Iterable[Any]) -> float | None:
    """Return the midpoint median of the numeric entries, or None if empty."""
    data = sorted(numeric_values(values))
    n = len(data)
    if n == 0:
        return None
    middle = n // 2
    if n % 2 == 0:
        return round2((data[middle - 1] + data[middle]) / 2)
    return round2(data[middle])


def mean(values: Iterable[Any]) -> float | None:
    """Return the arithmetic mean of the numeric entries, or None if empty."""
    data = numeric_values(values)
    if not data:
        return None
    return sum(data) / len(data)
