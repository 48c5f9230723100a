from __future__ import annotations

import pytest

from fisheries_pipeline.aggregate.currency import (
    convert_series,
    convert_value,
    format_currency,
    rate_for,
)
from fisheries_pipeline.aggregate.series import SeriesPoint
from fisheries_pipeline.lookups import CURRENCY_RATES


def test_rate_for_known_and_unknown_currency() -> None:
    assert rate_for("MT") == 1.0
    assert rate_for("USD") == 0.016
    with pytest.raises(ValueError):
        rate_for("GBP")


def test_convert_series_rounds_and_keeps_nulls() -> None:
    out = convert_series([("2023-01-01", 1000.0), ("2023-02-01", None)], rate_for("USD"))
    assert out == [SeriesPoint("2023-01-01", 16.0), SeriesPoint("2023-02-01", None)]


def test_conversion_round_trip_within_tolerance() -> None:
    values = [0.0, 0.37, 12.5, 999.99, 12345.678]
    for rate in CURRENCY_RATES.values():
        for v in values:
            converted = convert_value(v, rate)
            assert converted is not None
            assert abs(converted / rate - v) <= 0.005 / rate + 0.01


def test_format_currency() -> None:
    assert format_currency(1234.5, "USD") == "USD 1,234.50"
    assert format_currency(1234.5, "EUR") == "€ 1,234.50"
    assert format_currency(3, "MT", with_symbol=False) == "3.00"
    assert format_currency(None, "MT") == "No data"
