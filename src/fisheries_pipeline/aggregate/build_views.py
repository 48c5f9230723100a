"""Materialize display views to JSON.

`build_views` computes every dashboard panel for one landing-site and
currency selection from the loaded datasets. `write_views` stores each view
as ``<views_dir>/<name>.json`` so the outputs can be inspected or served
statically.

Expectations:
- Input: dict of dataset name → validated records (see
  `fisheries_pipeline.load.reader.load_all_datasets`).
- Output: dict of view name → JSON-serializable payload.
"""
from __future__ import annotations

import json
import logging
from dataclasses import asdict
from pathlib import Path
from typing import Any, Mapping, Sequence

from fisheries_pipeline.aggregate.currency import convert_series, rate_for
from fisheries_pipeline.aggregate.proportions import category_series
from fisheries_pipeline.aggregate.series import SeriesPoint
from fisheries_pipeline.aggregate.temporal import bucket_by_month, difference_from_mean
from fisheries_pipeline.aggregate.views import (
    ALL_SITES,
    column_ranges,
    effort_stats,
    gear_habitat_series,
    latest_change,
    metric_series,
    taxa_composition,
    taxa_length_ranges,
    taxa_length_summaries,
)
from fisheries_pipeline.lookups import DisplayConfig, get_display_config

log = logging.getLogger(__name__)

Records = Sequence[Mapping[str, Any]]


def _points(series: Sequence[SeriesPoint]) -> list[dict[str, Any]]:
    return [p.as_dict() for p in series]


def _time_series_views(
    records: Records,
    metric: str,
    landing_site: str,
    rate: float,
    month_names: Sequence[str],
) -> dict[str, Any]:
    """Monthly, differenced and seasonal views of one metric."""
    monthly = convert_series(metric_series(records, metric, landing_site), rate)
    differenced = difference_from_mean(monthly)
    change = latest_change(monthly)

    return {
        "monthly": _points(monthly),
        "differenced": {"mean": differenced.mean, "points": _points(differenced.points)},
        "seasonal": _points(bucket_by_month(monthly, month_names)),
        "latest_change": asdict(change) if change else None,
    }


def build_views(
    datasets: Mapping[str, Records],
    landing_site: str = ALL_SITES,
    currency: str = "MT",
    config: DisplayConfig | None = None,
) -> dict[str, Any]:
    """Compute every dashboard view available from `datasets`.

    Datasets absent from the mapping are skipped.

    Args:
        datasets: Dataset name → validated records.
        landing_site: Landing site for the catch/revenue series.
        currency: Currency for revenue values.
        config: Display lookup tables.

    Returns:
        View name → JSON-serializable payload.
    """
    config = config or get_display_config()
    rate = rate_for(currency, config.currency_rates)
    views: dict[str, Any] = {}

    if "monthly-metrics" in datasets:
        records = datasets["monthly-metrics"]
        views["catch"] = _time_series_views(records, "cpue", landing_site, 1.0, config.month_names)
        views["revenue"] = {
            "currency": currency,
            **_time_series_views(records, "rpue", landing_site, rate, config.month_names),
        }

    if "taxa-length" in datasets:
        records = datasets["taxa-length"]
        views["taxa_length"] = [
            {"taxon": t.taxon, **asdict(t.summary)} for t in taxa_length_summaries(records)
        ]
        views["taxa_length_ranges"] = [asdict(r) for r in taxa_length_ranges(records)]

    if "taxa-sites" in datasets:
        table = taxa_composition(datasets["taxa-sites"], config)
        views["taxa_composition"] = {
            "landing_sites": list(table),
            "series": category_series(table),
        }

    if "gear-habitat-metrics" in datasets:
        for metric in ("cpue", "rpue"):
            views[f"gear_habitat_{metric}"] = [
                {"name": h.name, "data": _points(h.points)}
                for h in gear_habitat_series(datasets["gear-habitat-metrics"], metric)
            ]

    if "sites-stats" in datasets:
        views["sites_stats_ranges"] = {
            col: {"min": lo, "max": hi}
            for col, (lo, hi) in column_ranges(datasets["sites-stats"]).items()
        }

    if "surveys-gps" in datasets:
        views["effort_stats"] = asdict(effort_stats(datasets["surveys-gps"]))

    log.info("Built %d views (landing_site=%s, currency=%s)", len(views), landing_site, currency)
    return views


def write_views(views: Mapping[str, Any], views_dir: Path) -> list[Path]:
    """Write each view to ``<views_dir>/<name>.json``.

    Returns:
        Paths written, in view order.
    """
    views_dir.mkdir(parents=True, exist_ok=True)
    paths = []
    for name, payload in views.items():
        path = views_dir / f"{name}.json"
        path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
        paths.append(path)
    log.info("Wrote %d view files to %s", len(paths), views_dir)
    return paths
