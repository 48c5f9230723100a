"""Metadata row filtering.

Exports keep aggregate header documents alongside the data rows; such rows
carry ``"metadata"`` in their `type` field and must never reach a chart.
"""
from __future__ import annotations

from typing import Any, Iterable, Mapping

from fisheries_pipeline.datasets import METADATA_TAG


def is_metadata(record: Mapping[str, Any]) -> bool:
    """Return True when `record` is tagged as a metadata sentinel.

    `type` may be a list of tags or a single string; an absent or null
    `type` means a data row.
    """
    tags = record.get("type")
    if tags is None:
        return False
    if isinstance(tags, str):
        return tags == METADATA_TAG
    try:
        return METADATA_TAG in tags
    except TypeError:
        return False


def filter_metadata(records: Iterable[Mapping[str, Any]]) -> list[Mapping[str, Any]]:
    """Return a new list without metadata rows."""
    return [r for r in records if not is_metadata(r)]
