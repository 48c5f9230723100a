"""Partition records by one or more categorical keys."""
from __future__ import annotations

from typing import Any, Callable, Hashable, Iterable, Mapping, Union

from fisheries_pipeline.aggregate.filters import filter_metadata

Record = Mapping[str, Any]
KeyFn = Callable[[Record], Hashable]

COMPOSITE_SEP = "|"


def _key_fn(key: Union[str, KeyFn]) -> KeyFn:
    if callable(key):
        return key
    return lambda record: record.get(key)


def group_by(records: Iterable[Record], key: Union[str, KeyFn]) -> dict[Hashable, list[Record]]:
    """Group non-metadata records by `key`.

    Args:
        records: Records of one dataset.
        key: Field name or callable returning the group key. Records without
            the field fall into the ``None`` group.

    Returns:
        Dict of key → records, keys in first-seen order. Every
        non-metadata record appears in exactly one group.
    """
    fn = _key_fn(key)
    groups: dict[Hashable, list[Record]] = {}
    for record in filter_metadata(records):
        groups.setdefault(_hashable(fn(record)), []).append(record)
    return groups


def _hashable(k: Any) -> Hashable:
    """Return `k` usable as a dict key: lists become tuples, other unhashable values their str."""
    if isinstance(k, list):
        k = tuple(k)
    try:
        hash(k)
    except TypeError:
        return str(k)
    return k


def composite_key(*fields: str, sep: str = COMPOSITE_SEP) -> KeyFn:
    """Return a key function joining several fields, e.g. ``"palma|gillnet"``.

    Missing fields contribute an empty part so the key stays positional.
    """
    if not fields:
        raise ValueError("composite_key() needs at least one field")

    def _key(record: Record) -> str:
        parts = []
        for f in fields:
            v = record.get(f)
            parts.append("" if v is None else str(v))
        return sep.join(parts)

    return _key


def split_composite(key: str, sep: str = COMPOSITE_SEP) -> list[str]:
    """Inverse of `composite_key` for display labels."""
    return key.split(sep)
