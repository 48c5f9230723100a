"""Registry of the dataset extracts the dashboard consumes.

Each entry names the MongoDB collection it is exported from, the query used
for the export, the file it is written to under ``DATA_DIR`` and the model
that validates its records.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from fisheries_pipeline.models import (
    DatasetRecord,
    EffortCell,
    GearHabitatMetrics,
    MonthlyMetric,
    SiteStats,
    TaxaLength,
    TaxaSite,
)

METADATA_TAG = "metadata"
NOT_METADATA: dict[str, Any] = {"type": {"$ne": METADATA_TAG}}


@dataclass(frozen=True)
class Dataset:
    """One JSON extract.

    Attributes:
        name: Dataset name used by the loader and CLI.
        collection: Source MongoDB collection.
        filename: Target file under the data directory.
        model: Pydantic model validating each record.
        query: MongoDB filter applied during export.
    """
    name: str
    collection: str
    filename: str
    model: type[DatasetRecord]
    query: dict[str, Any] = field(default_factory=dict)


DATASETS: dict[str, Dataset] = {
    d.name: d
    for d in (
        Dataset("monthly-metrics", "monthly-metrics", "monthly-metrics.json", MonthlyMetric, NOT_METADATA),
        Dataset("sites-stats", "sites-stats", "sites-stats.json", SiteStats),
        Dataset("taxa-length", "taxa-length", "taxa-length.json", TaxaLength),
        Dataset("taxa-sites", "taxa-sites", "taxa-sites.json", TaxaSite),
        Dataset(
            "gear-habitat-metrics",
            "gear_habitat_metrics",
            "gear-habitat-metrics.json",
            GearHabitatMetrics,
            NOT_METADATA,
        ),
        Dataset("surveys-gps", "surveys-gps", "surveys-gps.json", EffortCell),
    )
}


def get_dataset(name: str) -> Dataset:
    """Return the registered dataset called `name`.

    Raises:
        KeyError: if no dataset has that name.
    """
    try:
        return DATASETS[name]
    except KeyError:
        raise KeyError(f"Unknown dataset {name!r}; expected one of {sorted(DATASETS)}") from None
