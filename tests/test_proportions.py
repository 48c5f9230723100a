from __future__ import annotations

import pytest

from fisheries_pipeline.aggregate.proportions import category_series, normalize_proportions
from fisheries_pipeline.lookups import DISPLAY_CATEGORIES, FAMILY_DISPLAY_NAMES, OTHER


def _table(records):
    return normalize_proportions(records, FAMILY_DISPLAY_NAMES, DISPLAY_CATEGORIES)


def test_unmapped_and_missing_families_fold_into_other() -> None:
    records = [
        {"landing_site": "palma", "family": "Lethrinidae", "catch_percent": 40},
        {"landing_site": "palma", "family": "Scaridae", "catch_percent": 30},
        {"landing_site": "palma", "family": "Ariidae", "catch_percent": 20},
        {"landing_site": "palma", "family": None, "catch_percent": 5},
        {"landing_site": "palma", "catch_percent": 5},
    ]
    row = _table(records)["palma"]
    assert row["Emperor"] == pytest.approx(40)
    assert row["Parrotfish"] == pytest.approx(30)
    assert row[OTHER] == pytest.approx(30)
    assert row["Grouper"] == 0


def test_every_group_reports_every_category_and_sums_to_100() -> None:
    records = [
        {"landing_site": "a", "family": "Serranidae", "catch_percent": 12.5},
        {"landing_site": "a", "family": "Unknownidae", "catch_percent": 60},
        {"landing_site": "b", "family": "Siganidae", "catch_percent": 3},
        {"landing_site": "b", "family": "Others", "catch_percent": 1},
    ]
    table = _table(records)
    assert list(table) == ["a", "b"]
    for row in table.values():
        assert list(row) == list(DISPLAY_CATEGORIES)
        assert sum(row.values()) == pytest.approx(100)
    assert table["b"]["Spinefoot"] == pytest.approx(75)
    assert table["b"][OTHER] == pytest.approx(25)


def test_percent_is_derived_from_catch_when_missing() -> None:
    records = [
        {"landing_site": "a", "family": "Lutjanidae", "catch_kg": 3},
        {"landing_site": "a", "family": "Mullidae", "catch_kg": 1},
    ]
    row = _table(records)["a"]
    assert row["Snapper/seaperch"] == pytest.approx(75)
    assert row[OTHER] == pytest.approx(25)


def test_zero_total_group_reports_zeros() -> None:
    records = [
        {"landing_site": "empty", "family": "Scaridae", "catch_percent": 0},
        {"landing_site": "empty", "family": "Serranidae", "catch_percent": -4},
    ]
    row = _table(records)["empty"]
    assert all(v == 0 for v in row.values())


def test_metadata_rows_are_ignored() -> None:
    records = [
        {"type": ["metadata"], "landing_site": "a", "family": "Scaridae", "catch_percent": 99},
        {"landing_site": "a", "family": "Scaridae", "catch_percent": 50},
    ]
    assert _table(records)["a"]["Parrotfish"] == pytest.approx(100)


def test_other_is_appended_to_custom_categories() -> None:
    table = normalize_proportions(
        [{"landing_site": "a", "family": "x", "catch_percent": 1}],
        {},
        ["y"],
    )
    assert list(table["a"]) == ["y", OTHER]
    assert table["a"][OTHER] == pytest.approx(100)


def test_category_series_pivots_table() -> None:
    table = {
        "a": {"Emperor": 60.0, OTHER: 40.0},
        "b": {"Emperor": 10.0, OTHER: 90.0},
    }
    assert category_series(table) == {"Emperor": [60.0, 10.0], OTHER: [40.0, 90.0]}
    assert category_series(table, ["b"]) == {"Emperor": [10.0], OTHER: [90.0]}
    assert category_series({}) == {}


def test_sub_document_group_key_does_not_break_normalization() -> None:
    records = [
        {"landing_site": {"id": 1}, "family": "Scaridae", "catch_percent": 10},
        {"landing_site": {"id": 1}, "family": "Lethrinidae", "catch_percent": 30},
    ]
    row = _table(records)["{'id': 1}"]
    assert row["Emperor"] == pytest.approx(75)
