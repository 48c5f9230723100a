from __future__ import annotations

import pytest

from fisheries_pipeline.aggregate.temporal import bucket_by_month
from fisheries_pipeline.aggregate.views import (
    EffortStats,
    color_intensity,
    column_ranges,
    effort_stats,
    filter_effort_cells,
    gear_habitat_rows,
    gear_habitat_series,
    landing_sites,
    latest_change,
    metric_series,
    site_label,
    taxa_composition,
    taxa_length_ranges,
    taxa_length_summaries,
    time_break_index,
    toggle_time_break,
)
from fisheries_pipeline.lookups import OTHER, TIME_BREAKS

MONTHLY = [
    {"date": "2023-01-01", "landing_site": "palma", "cpue": 10, "rpue": 100},
    {"date": "2023-01-01", "landing_site": "pemba", "cpue": 20, "rpue": 300},
    {"date": "2023-02-01", "landing_site": "palma", "cpue": None, "rpue": None},
    {"type": ["metadata"], "date": "2023-02-01", "landing_site": "palma", "cpue": 99},
]


# ---------- time series ----------

def test_landing_sites_sorted_distinct() -> None:
    assert landing_sites(MONTHLY) == ["palma", "pemba"]


def test_metric_series_all_sites_takes_median() -> None:
    series = metric_series(MONTHLY, "cpue")
    assert [p.as_dict() for p in series] == [
        {"x": "2023-01-01", "y": 15.0},
        {"x": "2023-02-01", "y": None},
    ]


def test_seasonal_view_end_to_end() -> None:
    seasonal = bucket_by_month(metric_series(MONTHLY, "cpue"))
    assert seasonal[0].y == 15
    assert seasonal[1].y is None
    assert len(seasonal) == 12


def test_metric_series_single_site() -> None:
    series = metric_series(MONTHLY, "rpue", "pemba")
    assert [p.y for p in series] == [300.0]


def test_metric_series_rejects_unknown_metric() -> None:
    with pytest.raises(ValueError):
        metric_series(MONTHLY, "price")


def test_latest_change_skips_null_points() -> None:
    change = latest_change([("2023-01-01", 10), ("2023-02-01", None), ("2023-03-01", 15)])
    assert change is not None
    assert change.latest == 15
    assert change.previous == 10
    assert change.change_pct == 50.0
    assert change.current_period == "Mar 2023"
    assert change.previous_period == "Jan 2023"


def test_latest_change_edge_cases() -> None:
    assert latest_change([("2023-01-01", 10)]) is None
    change = latest_change([("2023-01-01", 0), ("2023-02-01", 4)])
    assert change is not None
    assert change.change_pct is None


# ---------- taxa ----------

def test_taxa_length_summaries_ranked_by_median() -> None:
    records = [
        {"catch_taxon": "Lethrinidae", "length_class": v} for v in (10, 20, 30, 40)
    ] + [
        {"catch_taxon": "Scaridae", "length_class": 50},
        {"catch_taxon": "Mullidae", "length_class": None},
        {"catch_taxon": None, "length_class": 70},
    ]
    out = taxa_length_summaries(records)
    assert [t.taxon for t in out] == ["Scaridae", "Lethrinidae"]
    assert out[1].summary.as_box() == [10, 20, 30, 40, 40]


def test_taxa_length_ranges_skip_incomplete_rows() -> None:
    records = [
        {"catch_taxon": "A", "min": 1, "q25": 2, "q75": 4, "max": 5},
        {"catch_taxon": "B", "min": 1, "q25": 10, "q75": 20, "max": 30},
        {"catch_taxon": "C", "min": 1, "q25": None, "q75": 4, "max": 5},
    ]
    out = taxa_length_ranges(records)
    assert [r.taxon for r in out] == ["B", "A"]
    assert out[0].midpoint == 15


def test_site_label() -> None:
    assert site_label("praia_nova") == "Praia nova"
    assert site_label("") == ""


def test_taxa_composition_sorts_sites() -> None:
    records = [
        {"landing_site": "pemba", "family": "Scaridae", "catch_percent": 10},
        {"landing_site": "mecufi", "family": "Ariidae", "catch_percent": 10},
    ]
    table = taxa_composition(records)
    assert list(table) == ["mecufi", "pemba"]
    assert table["mecufi"][OTHER] == pytest.approx(100)
    assert table["pemba"]["Parrotfish"] == pytest.approx(100)


# ---------- gear x habitat ----------

GEAR_DOCS = [
    {"type": ["metadata"]},
    {
        "cpue": [
            {
                "name": ["Reef"],
                "data": [
                    {"x": ["gillnet"], "y": [2]},
                    {"x": "handline", "y": 5},
                    {"x": "seine", "y": None},
                ],
            }
        ],
        "rpue": [],
    },
]


def test_gear_habitat_series_sorted_descending() -> None:
    out = gear_habitat_series(GEAR_DOCS, "cpue")
    assert len(out) == 1
    assert out[0].name == "Reef"
    assert [(p.x, p.y) for p in out[0].points] == [("handline", 5), ("gillnet", 2), ("seine", None)]
    assert gear_habitat_series(GEAR_DOCS, "rpue") == []
    assert gear_habitat_series([], "cpue") == []


def test_gear_habitat_rows_flatten() -> None:
    rows = gear_habitat_rows(GEAR_DOCS[1], "cpue")
    assert rows[0] == {"habitat": "Reef", "gear": "handline", "value": 5.0}
    assert len(rows) == 3


# ---------- site statistics ----------

def test_column_ranges_and_intensity() -> None:
    rows = [
        {"landing_site": "a", "mean_catch_kg": 10, "price_per_kg_mzn": None},
        {"landing_site": "b", "mean_catch_kg": "30"},
    ]
    ranges = column_ranges(rows)
    assert ranges["mean_catch_kg"] == (10, 30)
    assert ranges["price_per_kg_mzn"] == (None, None)

    assert color_intensity(20, 10, 30) == 0.5
    assert color_intensity(50, 10, 30) == 1.0
    assert color_intensity(None, 10, 30) == 0.0
    assert color_intensity(5, 5, 5) == 0.0


# ---------- effort grid ----------

def test_time_break_index() -> None:
    assert time_break_index(0.5, TIME_BREAKS) == 0
    assert time_break_index(1.5, TIME_BREAKS) == 1
    assert time_break_index(20, TIME_BREAKS) == len(TIME_BREAKS) - 1
    assert time_break_index(None, TIME_BREAKS) == 0
    assert time_break_index(-3, TIME_BREAKS) == 0


def test_toggle_time_break_keeps_last_selection() -> None:
    first, second = TIME_BREAKS[0], TIME_BREAKS[1]
    assert toggle_time_break([first], second) == [first, second]
    assert toggle_time_break([first, second], first) == [second]
    assert toggle_time_break([first], first) == [first]


def test_filter_effort_cells_and_stats() -> None:
    cells = [
        {"avg_time_hours": 1.0, "total_visits": 3, "avg_speed": 2.0},
        {"avg_time_hours": 2.0, "total_visits": 2, "avg_speed": 3.0},
        {"avg_time_hours": 0.5, "total_visits": 1, "avg_speed": 1.0},
    ]
    kept = filter_effort_cells(cells, [TIME_BREAKS[1], TIME_BREAKS[2]])
    assert len(kept) == 2

    stats = effort_stats(kept)
    assert stats == EffortStats(
        total_visits=5.0,
        avg_time=1.5,
        max_time=2.0,
        grid_cells=2,
        avg_speed=2.5,
    )
    assert effort_stats([]) == EffortStats()
