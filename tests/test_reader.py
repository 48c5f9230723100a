from __future__ import annotations

import json
from pathlib import Path

import pytest

from fisheries_pipeline.load.errors import DataLoadError
from fisheries_pipeline.load.reader import (
    load_all_datasets,
    load_dataset,
    read_records,
    validate_records,
)
from fisheries_pipeline.models import MonthlyMetric


def _write(path: Path, payload: object) -> Path:
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def test_read_records_keeps_objects_only(tmp_path: Path) -> None:
    path = _write(tmp_path / "x.json", [{"a": 1}, 3, "s", {"b": 2}])
    assert read_records(path) == [{"a": 1}, {"b": 2}]


def test_read_records_missing_file(tmp_path: Path) -> None:
    with pytest.raises(DataLoadError) as exc:
        read_records(tmp_path / "nope.json", dataset="monthly-metrics")
    assert exc.value.dataset == "monthly-metrics"
    assert "not found" in exc.value.reason


def test_read_records_rejects_bad_payloads(tmp_path: Path) -> None:
    bad_json = tmp_path / "bad.json"
    bad_json.write_text("{not json", encoding="utf-8")
    with pytest.raises(DataLoadError):
        read_records(bad_json)

    with pytest.raises(DataLoadError):
        read_records(_write(tmp_path / "obj.json", {"rows": []}))


def test_validate_records_counts_bad_and_drops_metadata() -> None:
    rows = [
        {"date": "2023-01-01", "landing_site": "palma", "cpue": 1.0},
        {"type": ["metadata"], "date": "2023-01-01"},
        {"date": "2023-01-01"},
    ]
    good, bad = validate_records(rows, MonthlyMetric)
    assert bad == 1
    assert len(good) == 1
    assert good[0]["landing_site"] == "palma"
    assert good[0]["rpue"] is None


def test_load_dataset_uses_registry_filename(tmp_path: Path) -> None:
    _write(
        tmp_path / "taxa-sites.json",
        [{"landing_site": "palma", "family": "Scaridae", "catch_percent": 10}, {"family": "x"}],
    )
    loaded = load_dataset("taxa-sites", tmp_path)
    assert loaded.name == "taxa-sites"
    assert loaded.bad == 1
    assert loaded.records[0]["family"] == "Scaridae"


def test_load_all_datasets_in_parallel(tmp_path: Path) -> None:
    _write(tmp_path / "monthly-metrics.json", [{"date": "2023-01-01", "landing_site": "a", "cpue": 2}])
    _write(tmp_path / "surveys-gps.json", [{"lng_grid_1km": 40.1, "lat_grid_1km": -11.0}])

    loaded = load_all_datasets(tmp_path, ["monthly-metrics", "surveys-gps"])
    assert list(loaded) == ["monthly-metrics", "surveys-gps"]
    assert len(loaded["surveys-gps"].records) == 1


def test_load_all_datasets_fails_on_missing_extract(tmp_path: Path) -> None:
    _write(tmp_path / "monthly-metrics.json", [])
    with pytest.raises(DataLoadError):
        load_all_datasets(tmp_path, ["monthly-metrics", "sites-stats"])


def test_load_all_datasets_rejects_unknown_name(tmp_path: Path) -> None:
    with pytest.raises(KeyError):
        load_all_datasets(tmp_path, ["catches"])
