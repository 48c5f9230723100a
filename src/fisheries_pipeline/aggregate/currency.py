"""Static-rate currency conversion for revenue series."""
from __future__ import annotations

from typing import Iterable, Mapping

from fisheries_pipeline.aggregate.series import PointLike, SeriesPoint, to_points
from fisheries_pipeline.aggregate.stats import round2
from fisheries_pipeline.lookups import CURRENCY_RATES, CURRENCY_SYMBOLS

NO_DATA = "No data"


def rate_for(currency: str, rates: Mapping[str, float] = CURRENCY_RATES) -> float:
    """Return the rate converting 1 MT into `currency`.

    Raises:
        ValueError: if `currency` is not in the rate table.
    """
    try:
        return rates[currency]
    except KeyError:
        raise ValueError(f"Unsupported currency {currency!r}; expected one of {sorted(rates)}") from None


def convert_value(value: float | None, rate: float) -> float | None:
    if value is None:
        return None
    return round2(value * rate)


def convert_series(series: Iterable[PointLike], rate: float) -> list[SeriesPoint]:
    """Multiply every non-null point by `rate`, rounding to 2 decimals."""
    return [SeriesPoint(p.x, convert_value(p.y, rate)) for p in to_points(series)]


def format_currency(
    value: float | None,
    currency: str,
    symbols: Mapping[str, str] = CURRENCY_SYMBOLS,
    with_symbol: bool = True,
) -> str:
    """Format a converted amount, e.g. ``"USD 1,234.50"``."""
    if value is None:
        return NO_DATA
    text = f"{value:,.2f}"
    if not with_symbol:
        return text
    return f"{symbols.get(currency, currency)} {text}"
