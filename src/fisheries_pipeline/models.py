"""Pydantic models used to validate dataset records at the load boundary.

Each JSON extract holds one record shape. The models coerce what the
dashboard can use and blank out what it cannot: a malformed numeric field
becomes ``None`` instead of failing the whole record, while a missing
identifying field (e.g. `landing_site`) rejects the record.

MongoDB exports carry extra fields (``_id``, ``__v``...), so models ignore
unknown keys.
"""

from __future__ import annotations

import math
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


def coerce_number(value: Any) -> float | None:
    """Return `value` as a finite float, or None when it is not numeric."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (list, tuple)) and len(value) == 1:
        # R/Mongo exports wrap scalars in one-element arrays
        value = value[0]
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def _unwrap(value: Any) -> Any:
    if isinstance(value, (list, tuple)) and len(value) == 1:
        return value[0]
    return value


class DatasetRecord(BaseModel):
    """Base for every dataset record."""
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class MonthlyMetric(DatasetRecord):
    """Monthly catch and revenue per unit effort for a landing site.

    Attributes:
        date: Month the metrics refer to (any ISO-like date string).
        landing_site: Landing site identifier.
        district: Optional district name.
        cpue: Median catch per unit effort (kg/fisher/hour).
        rpue: Median revenue per unit effort (MT/fisher/hour).
    """
    date: str
    landing_site: str
    district: str | None = None
    cpue: float | None = Field(default=None, validation_alias=AliasChoices("cpue", "median_cpue"))
    rpue: float | None = Field(default=None, validation_alias=AliasChoices("rpue", "median_rpue"))

    @field_validator("date", mode="before")
    @classmethod
    def _date_as_text(cls, v: Any) -> Any:
        v = _unwrap(v)
        if hasattr(v, "isoformat"):
            return v.isoformat()
        return v

    @field_validator("cpue", "rpue", mode="before")
    @classmethod
    def _numeric(cls, v: Any) -> float | None:
        return coerce_number(v)


class SiteStats(DatasetRecord):
    """Per landing site summary row for the statistics table."""
    district: str | None = None
    landing_site: str
    trip_duration_hrs: float | None = None
    cpue_kg_fisher_hr: float | None = None
    price_per_kg_mzn: float | None = None
    mean_catch_kg: float | None = None
    mean_catch_price_mzn: float | None = None

    @field_validator(
        "trip_duration_hrs",
        "cpue_kg_fisher_hr",
        "price_per_kg_mzn",
        "mean_catch_kg",
        "mean_catch_price_mzn",
        mode="before",
    )
    @classmethod
    def _numeric(cls, v: Any) -> float | None:
        return coerce_number(v)


class TaxaLength(DatasetRecord):
    """Length observation or pre-aggregated length range for a taxon.

    Observation rows carry `length_class`; range rows carry `min`, `q25`,
    `q75` and `max`. Both shapes share the extract.
    """
    catch_taxon: str | None = None
    length_class: float | None = None
    min: float | None = None
    q25: float | None = None
    q75: float | None = None
    max: float | None = None

    @field_validator("catch_taxon", mode="before")
    @classmethod
    def _taxon(cls, v: Any) -> Any:
        v = _unwrap(v)
        return v or None

    @field_validator("length_class", "min", "q25", "q75", "max", mode="before")
    @classmethod
    def _numeric(cls, v: Any) -> float | None:
        return coerce_number(v)


class TaxaSite(DatasetRecord):
    """Catch share of one fish family at one landing site."""
    landing_site: str
    family: str | None = None
    catch_percent: float | None = Field(
        default=None,
        validation_alias=AliasChoices("catch_percent", "catch_prop"),
    )
    catch_kg: float | None = None

    @field_validator("family", mode="before")
    @classmethod
    def _family(cls, v: Any) -> Any:
        v = _unwrap(v)
        return v or None

    @field_validator("catch_percent", "catch_kg", mode="before")
    @classmethod
    def _numeric(cls, v: Any) -> float | None:
        return coerce_number(v)


class GearValue(BaseModel):
    """Metric value for one gear type inside a habitat."""
    model_config = ConfigDict(extra="ignore")
    x: str
    y: float | None = None

    @field_validator("x", mode="before")
    @classmethod
    def _label(cls, v: Any) -> Any:
        return _unwrap(v)

    @field_validator("y", mode="before")
    @classmethod
    def _numeric(cls, v: Any) -> float | None:
        return coerce_number(v)


class HabitatMetric(BaseModel):
    """All gear values recorded for one habitat."""
    model_config = ConfigDict(extra="ignore")
    name: str
    data: list[GearValue] = Field(default_factory=list)

    @field_validator("name", mode="before")
    @classmethod
    def _label(cls, v: Any) -> Any:
        return _unwrap(v)


class GearHabitatMetrics(DatasetRecord):
    """Gear × habitat catch (`cpue`) and revenue (`rpue`) rates."""
    cpue: list[HabitatMetric] = Field(default_factory=list)
    rpue: list[HabitatMetric] = Field(default_factory=list)


class EffortCell(DatasetRecord):
    """One 1 km grid cell of GPS-tracked fishing effort.

    Counters default to 0 when missing or malformed so a cell still plots.
    """
    lng_grid_1km: float
    lat_grid_1km: float
    avg_time_hours: float = 0.0
    total_visits: float = 0.0
    avg_speed: float = 0.0
    original_cells: float = 0.0

    @field_validator("lng_grid_1km", "lat_grid_1km", mode="before")
    @classmethod
    def _coordinate(cls, v: Any) -> Any:
        number = coerce_number(v)
        return v if number is None else number

    @field_validator("avg_time_hours", "total_visits", "avg_speed", "original_cells", mode="before")
    @classmethod
    def _counter(cls, v: Any) -> float:
        number = coerce_number(v)
        return 0.0 if number is None else number
