"""Series value objects and conversion from raw records."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Union

from fisheries_pipeline.models import coerce_number


@dataclass(frozen=True)
class SeriesPoint:
    """One chart point; `y` is None when the bucket has no observation."""
    x: str
    y: float | None

    def as_dict(self) -> dict[str, Any]:
        return {"x": self.x, "y": self.y}


PointLike = Union[SeriesPoint, Mapping[str, Any], tuple]


def to_point(item: PointLike) -> SeriesPoint:
    """Build a SeriesPoint from a point, an ``{x, y}`` mapping or an ``(x, y)`` pair.

    Non-numeric `y` values become None.
    """
    if isinstance(item, SeriesPoint):
        return item
    if isinstance(item, Mapping):
        x, y = item.get("x"), item.get("y")
    else:
        x, y = item
    return SeriesPoint(x="" if x is None else str(x), y=coerce_number(y))


def to_points(items: Iterable[PointLike]) -> list[SeriesPoint]:
    return [to_point(i) for i in items]


def series_from_records(
    records: Iterable[Mapping[str, Any]],
    x_field: str,
    y_field: str,
) -> list[SeriesPoint]:
    """Project records onto ``(x_field, y_field)`` points, keeping input order."""
    return [to_point((r.get(x_field), r.get(y_field))) for r in records]


def valid_points(series: Iterable[PointLike]) -> list[SeriesPoint]:
    """Return the points that carry a value."""
    return [p for p in to_points(series) if p.y is not None]
