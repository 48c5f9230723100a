"""Display views built from validated dataset records.

Each function prepares the data of one dashboard panel. Inputs are records as
produced by `fisheries_pipeline.load.reader` (dicts dumped from the dataset
models); metadata rows are tolerated and dropped.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Sequence

from fisheries_pipeline.aggregate.filters import filter_metadata
from fisheries_pipeline.aggregate.grouping import group_by
from fisheries_pipeline.aggregate.proportions import ProportionTable, normalize_proportions
from fisheries_pipeline.aggregate.series import PointLike, SeriesPoint, series_from_records, valid_points
from fisheries_pipeline.aggregate.stats import StatSummary, summarize
from fisheries_pipeline.aggregate.temporal import monthly_series, parse_timestamp
from fisheries_pipeline.lookups import DisplayConfig, TimeBreak, get_display_config
from fisheries_pipeline.models import GearHabitatMetrics, coerce_number

Record = Mapping[str, Any]

ALL_SITES = "all"
METRICS = ("cpue", "rpue")

SITE_STATS_COLUMNS: tuple[str, ...] = (
    "trip_duration_hrs",
    "cpue_kg_fisher_hr",
    "price_per_kg_mzn",
    "mean_catch_kg",
    "mean_catch_price_mzn",
)


# =========================================================
# CATCH & REVENUE TIME SERIES
# =========================================================

def landing_sites(records: Iterable[Record]) -> list[str]:
    """Return the sorted distinct landing sites of `records`."""
    return sorted({str(k) for k in group_by(records, "landing_site") if k is not None})


def metric_series(
    records: Iterable[Record],
    metric: str,
    landing_site: str = ALL_SITES,
) -> list[SeriesPoint]:
    """Return the monthly series of `metric` for one landing site or all.

    Args:
        records: Monthly-metrics records.
        metric: ``"cpue"`` or ``"rpue"``.
        landing_site: Site to keep, or ``"all"`` for the median across sites.

    Returns:
        Chronological month-start points (see `monthly_series`).
    """
    if metric not in METRICS:
        raise ValueError(f"metric must be one of {METRICS}, got {metric!r}")

    rows = filter_metadata(records)
    if landing_site != ALL_SITES:
        rows = [r for r in rows if r.get("landing_site") == landing_site]
    return monthly_series(series_from_records(rows, "date", metric))


@dataclass(frozen=True)
class PeriodChange:
    """Change between the two most recent valid points of a series."""
    latest: float
    previous: float
    change_pct: float | None
    current_period: str
    previous_period: str


def _period_label(x: str) -> str:
    ts = parse_timestamp(x)
    return ts.strftime("%b %Y") if ts is not None else x


def latest_change(series: Iterable[PointLike]) -> PeriodChange | None:
    """Compare the last two valid points; None with fewer than two.

    `change_pct` is rounded to one decimal and is None when the previous
    value is 0.
    """
    points = valid_points(series)
    if len(points) < 2:
        return None
    previous, latest = points[-2], points[-1]

    change = None
    if previous.y != 0:
        change = round((latest.y - previous.y) / previous.y * 100.0, 1)  # type: ignore[operator]

    return PeriodChange(
        latest=latest.y,
        previous=previous.y,
        change_pct=change,
        current_period=_period_label(latest.x),
        previous_period=_period_label(previous.x),
    )


# =========================================================
# TAXA LENGTH
# =========================================================

@dataclass(frozen=True)
class TaxonLengthSummary:
    taxon: str
    summary: StatSummary


@dataclass(frozen=True)
class TaxonLengthRange:
    """Pre-aggregated length spread of a taxon."""
    taxon: str
    min: float
    q25: float
    q75: float
    max: float

    @property
    def midpoint(self) -> float:
        return (self.q25 + self.q75) / 2


def taxa_length_summaries(records: Iterable[Record]) -> list[TaxonLengthSummary]:
    """Summarize `length_class` per taxon, ranked by descending median.

    Records without a taxon are skipped; taxa without any numeric length are
    omitted.
    """
    out: list[TaxonLengthSummary] = []
    for taxon, rows in group_by(records, "catch_taxon").items():
        if not taxon:
            continue
        summary = summarize(r.get("length_class") for r in rows)
        if summary.is_empty:
            continue
        out.append(TaxonLengthSummary(taxon=str(taxon), summary=summary))

    out.sort(key=lambda t: t.summary.median, reverse=True)  # type: ignore[arg-type, return-value]
    return out


def taxa_length_ranges(records: Iterable[Record]) -> list[TaxonLengthRange]:
    """Return complete min/q25/q75/max rows ranked by descending midpoint."""
    out: list[TaxonLengthRange] = []
    for r in filter_metadata(records):
        values = [coerce_number(r.get(k)) for k in ("min", "q25", "q75", "max")]
        if any(v is None for v in values):
            continue
        lo, q25, q75, hi = values
        out.append(TaxonLengthRange(str(r.get("catch_taxon") or ""), lo, q25, q75, hi))  # type: ignore[arg-type]

    out.sort(key=lambda t: t.midpoint, reverse=True)
    return out


# =========================================================
# CATCH COMPOSITION
# =========================================================

def site_label(site: str) -> str:
    """Display form of a landing-site identifier (``"praia_nova"`` → ``"Praia nova"``)."""
    text = site.replace("_", " ")
    return text[:1].upper() + text[1:]


def taxa_composition(
    records: Iterable[Record],
    config: DisplayConfig | None = None,
) -> ProportionTable:
    """Return the family composition per landing site, sites sorted by name."""
    config = config or get_display_config()
    table = normalize_proportions(
        records,
        config.family_display_names,
        config.display_categories,
        group_field="landing_site",
        category_field="family",
    )
    ordered = sorted((k for k in table if k is not None), key=str)
    return {site: table[site] for site in ordered}


# =========================================================
# GEAR × HABITAT
# =========================================================

@dataclass(frozen=True)
class HabitatSeries:
    name: str
    points: list[SeriesPoint] = field(default_factory=list)


def _gear_doc(docs: Mapping[str, Any] | Sequence[Mapping[str, Any]]) -> GearHabitatMetrics | None:
    if isinstance(docs, Mapping):
        candidates = [docs]
    else:
        candidates = filter_metadata(docs)
    if not candidates:
        return None
    return GearHabitatMetrics.model_validate(candidates[0])


def gear_habitat_series(
    docs: Mapping[str, Any] | Sequence[Mapping[str, Any]],
    metric: str = "cpue",
) -> list[HabitatSeries]:
    """Return treemap series: one per habitat, gears by descending value."""
    if metric not in METRICS:
        raise ValueError(f"metric must be one of {METRICS}, got {metric!r}")
    doc = _gear_doc(docs)
    if doc is None:
        return []

    out: list[HabitatSeries] = []
    for habitat in getattr(doc, metric):
        points = [SeriesPoint(g.x, g.y) for g in habitat.data]
        points.sort(key=lambda p: (p.y is None, -(p.y or 0.0)))
        out.append(HabitatSeries(name=habitat.name, points=points))
    return out


def gear_habitat_rows(
    docs: Mapping[str, Any] | Sequence[Mapping[str, Any]],
    metric: str = "cpue",
) -> list[dict[str, Any]]:
    """Flatten gear × habitat values into ``{habitat, gear, value}`` records."""
    return [
        {"habitat": h.name, "gear": p.x, "value": p.y}
        for h in gear_habitat_series(docs, metric)
        for p in h.points
    ]


# =========================================================
# LANDING SITE STATISTICS TABLE
# =========================================================

def column_ranges(
    records: Iterable[Record],
    columns: Sequence[str] = SITE_STATS_COLUMNS,
) -> dict[str, tuple[float | None, float | None]]:
    """Return ``(min, max)`` of each numeric column, ignoring non-numeric cells."""
    rows = filter_metadata(records)
    out: dict[str, tuple[float | None, float | None]] = {}
    for col in columns:
        values = [v for v in (coerce_number(r.get(col)) for r in rows) if v is not None]
        out[col] = (min(values), max(values)) if values else (None, None)
    return out


def color_intensity(value: Any, lo: float | None, hi: float | None) -> float:
    """Return the shading intensity of `value` within ``[lo, hi]``, clamped to [0, 1]."""
    number = coerce_number(value)
    if number is None or lo is None or hi is None or hi == lo:
        return 0.0
    return max(0.0, min(1.0, (number - lo) / (hi - lo)))


# =========================================================
# FISHING EFFORT GRID
# =========================================================

@dataclass(frozen=True)
class EffortStats:
    total_visits: float = 0.0
    avg_time: float = 0.0
    max_time: float = 0.0
    grid_cells: int = 0
    avg_speed: float = 0.0


def time_break_index(hours: Any, breaks: Sequence[TimeBreak]) -> int:
    """Return the index of the time break containing `hours` (0 when none does)."""
    number = coerce_number(hours)
    if number is None:
        return 0
    for i in range(len(breaks) - 1, -1, -1):
        if breaks[i].contains(number):
            return i
    return 0


def toggle_time_break(selected: Sequence[TimeBreak], brk: TimeBreak) -> list[TimeBreak]:
    """Add or remove `brk` from the selection; the last selected break stays."""
    if brk in selected:
        if len(selected) == 1:
            return list(selected)
        return [b for b in selected if b != brk]
    return [*selected, brk]


def filter_effort_cells(cells: Iterable[Record], selected: Sequence[TimeBreak]) -> list[Record]:
    """Keep cells whose average hours fall in any selected break."""
    out = []
    for c in filter_metadata(cells):
        hours = coerce_number(c.get("avg_time_hours")) or 0.0
        if any(b.contains(hours) for b in selected):
            out.append(c)
    return out


def effort_stats(cells: Iterable[Record]) -> EffortStats:
    """Summary figures for the effort map panel; all zeros when empty."""
    rows = filter_metadata(cells)
    if not rows:
        return EffortStats()

    def _col(name: str) -> list[float]:
        return [coerce_number(r.get(name)) or 0.0 for r in rows]

    times = _col("avg_time_hours")
    speeds = _col("avg_speed")
    return EffortStats(
        total_visits=sum(_col("total_visits")),
        avg_time=round(sum(times) / len(rows), 1),
        max_time=round(max(times), 1),
        grid_cells=len(rows),
        avg_speed=round(sum(speeds) / len(rows), 1),
    )
