"""Catch composition: fold raw categories into a fixed display taxonomy.

The output of `normalize_proportions` is a ProportionTable, a mapping of
group key → {display category → percent}. For every group with a nonzero
total the percentages sum to 100; categories outside the fixed set (or
without a category at all) are folded into "Other".
"""
from __future__ import annotations

from typing import Any, Hashable, Iterable, Mapping, Sequence

from fisheries_pipeline.aggregate.grouping import group_by
from fisheries_pipeline.lookups import OTHER
from fisheries_pipeline.models import coerce_number

ProportionTable = dict[Hashable, dict[str, float]]


def _display_name(raw: Any, category_map: Mapping[str, str]) -> str | None:
    if raw is None or raw == "":
        return None
    raw = str(raw)
    return category_map.get(raw, raw)


def _contributions(
    records: Sequence[Mapping[str, Any]],
    percent_field: str,
    value_field: str | None,
) -> list[float]:
    """Return each record's percent share of its group (unnormalized)."""
    values = [coerce_number(r.get(value_field)) if value_field else None for r in records]
    group_total = sum(v for v in values if v is not None and v > 0)

    out: list[float] = []
    for record, value in zip(records, values):
        pct = coerce_number(record.get(percent_field))
        if pct is None:
            if value is None or value <= 0 or group_total == 0:
                pct = 0.0
            else:
                pct = value / group_total * 100.0
        out.append(pct if pct > 0 else 0.0)
    return out


def normalize_proportions(
    records: Iterable[Mapping[str, Any]],
    category_map: Mapping[str, str],
    fixed_categories: Sequence[str],
    group_field: str = "landing_site",
    category_field: str = "family",
    percent_field: str = "catch_percent",
    value_field: str | None = "catch_kg",
    other: str = OTHER,
) -> ProportionTable:
    """Build a ProportionTable from per-category catch records.

    Args:
        records: Records with a group, a raw category and either a
            precomputed percent or a raw value.
        category_map: Raw category → display category.
        fixed_categories: Display categories every group reports, in order.
            `other` is appended when missing.
        group_field: Field partitioning the records (e.g. landing site).
        category_field: Field holding the raw category (e.g. fish family).
        percent_field: Precomputed percent share; used when numeric.
        value_field: Raw amount used to derive the share when the percent
            is absent, as ``value / group_total * 100``.
        other: Name of the catch-all bucket.

    Returns:
        Dict of group → {category → percent}, groups in first-seen order.
        Groups whose contributions total 0 report 0 everywhere.
    """
    categories = list(fixed_categories)
    if other not in categories:
        categories.append(other)
    fixed = set(categories)

    table: ProportionTable = {}
    for group, members in group_by(records, group_field).items():
        buckets = {c: 0.0 for c in categories}
        for record, pct in zip(members, _contributions(members, percent_field, value_field)):
            name = _display_name(record.get(category_field), category_map)
            bucket = name if name in fixed else other
            buckets[bucket] += pct

        total = sum(buckets.values())
        if total > 0:
            buckets = {c: v * 100.0 / total for c, v in buckets.items()}
        table[group] = buckets

    return table


def category_series(
    table: ProportionTable,
    groups: Sequence[Hashable] | None = None,
) -> dict[str, list[float]]:
    """Pivot a ProportionTable into one value list per category.

    This is the stacked-bar layout: for every category, its percent in each
    group, following `groups` order (table order by default).
    """
    if groups is None:
        groups = list(table)
    if not groups:
        return {}
    categories = list(table[groups[0]])
    return {c: [table[g].get(c, 0.0) for g in groups] for c in categories}
