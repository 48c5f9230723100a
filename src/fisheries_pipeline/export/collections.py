"""Dump the source collections to JSON extracts.

Each registered dataset is read with its export query and written verbatim
as a JSON array. BSON-only types (ObjectId, datetime, Decimal128) are turned
into strings or floats so the file stays plain JSON.
"""
from __future__ import annotations

import json
import logging
from datetime import date, datetime
from pathlib import Path
from typing import Any, Iterable

from bson import ObjectId
from bson.decimal128 import Decimal128
from pymongo.database import Database

from fisheries_pipeline.datasets import DATASETS, Dataset
from fisheries_pipeline.db import iter_documents

log = logging.getLogger(__name__)


def to_json_safe(value: Any) -> Any:
    """Convert BSON values (recursively) into JSON-serializable ones."""
    if isinstance(value, dict):
        return {k: to_json_safe(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_json_safe(v) for v in value]
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, Decimal128):
        return float(value.to_decimal())
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


def write_extract(docs: Iterable[dict[str, Any]], path: Path) -> int:
    """Write documents to `path` as an indented JSON array.

    Returns:
        Number of documents written.
    """
    rows = [to_json_safe(d) for d in docs]
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    tmp.write_text(json.dumps(rows, indent=2, ensure_ascii=False), encoding="utf-8")
    tmp.replace(path)
    return len(rows)


def export_collection(db: Database[dict[str, Any]], dataset: Dataset, out_dir: Path) -> int:
    """Export one dataset's collection to its extract file.

    Args:
        db: Source database.
        dataset: Registered dataset (collection, query, filename).
        out_dir: Data directory receiving the file.

    Returns:
        Number of documents exported.
    """
    log.info("Exporting %s data...", dataset.collection)
    count = write_extract(
        iter_documents(db[dataset.collection], dataset.query),
        out_dir / dataset.filename,
    )
    log.info("Exported %d records from %s", count, dataset.collection)
    return count


def export_all(
    db: Database[dict[str, Any]],
    out_dir: Path,
    names: Iterable[str] | None = None,
) -> dict[str, int]:
    """Export the selected datasets (all by default).

    Returns:
        Dict of dataset name → number of exported documents.
    """
    selected = list(names) if names is not None else list(DATASETS)
    counts: dict[str, int] = {}
    for name in selected:
        counts[name] = export_collection(db, DATASETS[name], out_dir)
    log.info("Data export completed: %d collections", len(counts))
    return counts
