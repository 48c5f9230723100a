from __future__ import annotations

import pytest

from fisheries_pipeline.datasets import DATASETS, get_dataset
from fisheries_pipeline.lookups import (
    COLOR_RANGE,
    DISPLAY_CATEGORIES,
    FAMILY_DISPLAY_NAMES,
    OTHER,
    TIME_BREAKS,
    get_display_config,
)


def test_every_display_category_is_reachable() -> None:
    reachable = set(FAMILY_DISPLAY_NAMES.values())
    for category in DISPLAY_CATEGORIES:
        assert category in reachable
    assert OTHER in DISPLAY_CATEGORIES


def test_time_breaks_are_contiguous() -> None:
    assert len(TIME_BREAKS) == len(COLOR_RANGE)
    for lo, hi in zip(TIME_BREAKS, TIME_BREAKS[1:]):
        assert lo.max == hi.min
    assert TIME_BREAKS[-1].contains(1000)
    assert not TIME_BREAKS[0].contains(1.0)


def test_display_config_is_shared_and_immutable() -> None:
    config = get_display_config()
    assert config is get_display_config()
    with pytest.raises(TypeError):
        config.currency_rates["GBP"] = 0.01  # type: ignore[index]


def test_dataset_registry() -> None:
    assert get_dataset("gear-habitat-metrics").collection == "gear_habitat_metrics"
    assert all(d.filename == f"{name}.json" for name, d in DATASETS.items())
    with pytest.raises(KeyError):
        get_dataset("catches")
