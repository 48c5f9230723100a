"""Read and validate dataset extracts.

`validate_records` is the load boundary: metadata rows are dropped, each
remaining row is validated against the dataset's pydantic model, and rows
that fail are counted rather than raised. Datasets are read concurrently
with dask delayed tasks since every file is independent.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, cast, Any as TypingAny

from dask import compute, delayed  # type: ignore[attr-defined]
from pydantic import ValidationError

from fisheries_pipeline.aggregate.filters import filter_metadata
from fisheries_pipeline.datasets import DATASETS, get_dataset
from fisheries_pipeline.load.errors import DataLoadError
from fisheries_pipeline.models import DatasetRecord

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoadedDataset:
    """Validated records of one extract.

    Attributes:
        name: Dataset name.
        records: Validated records as plain dicts.
        bad: Number of rows rejected by validation.
    """
    name: str
    records: list[dict[str, Any]]
    bad: int = 0


def read_records(path: Path, dataset: str = "") -> list[dict[str, Any]]:
    """Parse a JSON array file.

    Raises:
        DataLoadError: if the file is missing, unreadable, not JSON, or not
            an array of objects.
    """
    name = dataset or path.stem
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise DataLoadError(name, f"extract not found at {path}") from e
    except (OSError, json.JSONDecodeError) as e:
        raise DataLoadError(name, f"could not read {path}: {e}") from e

    if not isinstance(payload, list):
        raise DataLoadError(name, f"expected a JSON array in {path}")
    return [row for row in payload if isinstance(row, dict)]


def validate_records(
    records: Iterable[dict[str, Any]],
    model: type[DatasetRecord],
) -> tuple[list[dict[str, Any]], int]:
    """Validate records using the dataset's pydantic model.

    Args:
        records: Raw rows.
        model: Model class of the dataset.

    Returns:
        A tuple of (list_of_validated_records, bad_count). Metadata rows
        are neither returned nor counted as bad.
    """
    good: list[dict[str, Any]] = []
    bad = 0

    for rec in filter_metadata(records):
        try:
            m = model.model_validate(rec)
            good.append(m.model_dump(mode="python"))
        except ValidationError:
            bad += 1

    return good, bad


def load_dataset(name: str, data_dir: Path) -> LoadedDataset:
    """Read and validate the extract of dataset `name` from `data_dir`."""
    dataset = get_dataset(name)
    rows = read_records(data_dir / dataset.filename, dataset=name)
    good, bad = validate_records(rows, dataset.model)

    if bad:
        log.warning("%s: dropped %d invalid records", name, bad)
    log.info("%s: loaded %d records", name, len(good))
    return LoadedDataset(name=name, records=good, bad=bad)


def load_all_datasets(
    data_dir: Path,
    names: Iterable[str] | None = None,
) -> dict[str, LoadedDataset]:
    """Load several datasets concurrently.

    Args:
        data_dir: Directory holding the extracts.
        names: Datasets to load; all registered datasets by default.

    Returns:
        Dict of dataset name → LoadedDataset, in the requested order.

    Raises:
        DataLoadError: if any extract fails to load. Nothing is returned in
            that case.
    """
    selected = list(names) if names is not None else list(DATASETS)
    for name in selected:
        get_dataset(name)

    tasks = [delayed(load_dataset)(name, data_dir) for name in selected]
    # `compute` is untyped in our environment; cast to Any before calling
    results = cast(TypingAny, compute)(*tasks, scheduler="threads")

    return {r.name: r for r in results}
