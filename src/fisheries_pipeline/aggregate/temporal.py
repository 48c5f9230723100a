"""Calendar bucketing of time series.

Three views are derived from one ``{x: timestamp, y: value}`` series:

- seasonal: `bucket_by_month` collapses every year into a 12-slot
  Jan…Dec profile of monthly medians;
- monthly: `monthly_series` keeps one chronological point per observed
  (year, month), without gap filling;
- differenced: `difference_from_mean` re-expresses each value as its
  distance from the series mean.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Iterable, Sequence

import pandas as pd

from fisheries_pipeline.aggregate.series import PointLike, SeriesPoint, to_points
from fisheries_pipeline.aggregate.stats import mean, median, round2
from fisheries_pipeline.lookups import MONTH_NAMES

log = logging.getLogger(__name__)

# Epoch milliseconds, possibly stringified from a float ("1672531200000.0")
EPOCH_MS_RE = re.compile(r"^-?\d{7,}(\.\d+)?$")


def parse_timestamp(x: Any) -> pd.Timestamp | None:
    """Parse a point label into a naive timestamp.

    Accepts ISO-like strings (``"2023-01"``, ``"2023-01-15T00:00:00Z"``),
    datetime objects and epoch milliseconds. Returns None when unparseable.
    """
    if x is None or x == "":
        return None
    if isinstance(x, (int, float)) and not isinstance(x, bool):
        ts = pd.to_datetime(x, unit="ms", errors="coerce")
    else:
        text = str(x)
        if EPOCH_MS_RE.match(text):
            ts = pd.to_datetime(float(text), unit="ms", errors="coerce")
        else:
            ts = pd.to_datetime(text, errors="coerce")
    if ts is None or pd.isna(ts):
        return None
    if ts.tzinfo is not None:
        ts = ts.tz_convert("UTC").tz_localize(None)
    return ts


def bucket_by_month(
    series: Iterable[PointLike],
    month_names: Sequence[str] = MONTH_NAMES,
) -> list[SeriesPoint]:
    """Collapse a multi-year series into a 12-point seasonal profile.

    Args:
        series: Points with timestamp `x` and numeric or None `y`.
        month_names: Twelve labels used as `x` of the output.

    Returns:
        Exactly 12 points in calendar order; `y` is the median of every
        non-null value observed in that calendar month (any year), or None
        for months without observations.
    """
    if len(month_names) != 12:
        raise ValueError("month_names must have 12 entries")

    buckets: list[list[float]] = [[] for _ in range(12)]
    skipped = 0
    for p in to_points(series):
        if p.y is None:
            continue
        ts = parse_timestamp(p.x)
        if ts is None:
            skipped += 1
            continue
        buckets[ts.month - 1].append(p.y)

    if skipped:
        log.debug("bucket_by_month skipped %d points with unparseable timestamps", skipped)

    return [SeriesPoint(x=name, y=median(values)) for name, values in zip(month_names, buckets)]


def monthly_series(series: Iterable[PointLike]) -> list[SeriesPoint]:
    """Return one point per observed calendar month, in chronological order.

    Points in the same (year, month) are combined with the median; a month
    whose points are all null yields a None point. Months with no points at
    all are not filled in.

    Returns:
        Points with `x` as the month start (``YYYY-MM-01``).
    """
    rows = []
    for p in to_points(series):
        ts = parse_timestamp(p.x)
        if ts is not None:
            rows.append({"ts": ts, "y": p.y})

    if not rows:
        return []

    df = pd.DataFrame(rows)
    df["y"] = pd.to_numeric(df["y"], errors="coerce")
    df["month"] = df["ts"].dt.to_period("M").dt.to_timestamp()

    out: list[SeriesPoint] = []
    for month, group in df.groupby("month", sort=True):
        out.append(SeriesPoint(x=month.strftime("%Y-%m-%d"), y=median(group["y"].tolist())))
    return out


@dataclass(frozen=True)
class DifferencedSeries:
    """Series re-expressed as differences from its mean.

    Attributes:
        points: Points with ``y - mean`` (None preserved).
        mean: Mean of the valid input values, rounded to 2 decimals; None
            when the input had no valid value.
    """
    points: list[SeriesPoint]
    mean: float | None

    def axis_title(self, unit: str) -> str:
        if self.mean is None:
            return f"Difference from mean ({unit})"
        return f"Difference from mean ({self.mean:.2f} {unit})".replace(" )", ")")

    def actual_value(self, diff: float | None) -> float | None:
        """Undo the differencing for tooltips."""
        if diff is None or self.mean is None:
            return None
        return round2(diff + self.mean)


def difference_from_mean(series: Iterable[PointLike]) -> DifferencedSeries:
    """Subtract the series mean from every non-null point."""
    points = to_points(series)
    raw_mean = mean(p.y for p in points)
    if raw_mean is None:
        return DifferencedSeries(points=[SeriesPoint(p.x, None) for p in points], mean=None)

    diffed = [
        SeriesPoint(p.x, None if p.y is None else round2(p.y - raw_mean))
        for p in points
    ]
    return DifferencedSeries(points=diffed, mean=round2(raw_mean))
