"""Download dataset extracts published under a base URL.

Extracts are cached in the data directory; a cached, non-empty file is reused
unless a refresh is forced.
"""

from __future__ import annotations

import logging
from pathlib import Path

import requests

from fisheries_pipeline.datasets import Dataset
from fisheries_pipeline.load.errors import DataLoadError

log = logging.getLogger(__name__)


def extract_url(base_url: str, dataset: Dataset) -> str:
    """Return the URL of `dataset`'s extract under `base_url`."""
    return f"{base_url.rstrip('/')}/{dataset.filename}"


def download_extract(
    dataset: Dataset,
    base_url: str,
    out_dir: Path,
    force: bool = False,
    timeout: float = 60.0,
) -> Path:
    """Download or return the cached extract for `dataset`.

    Args:
        dataset: Registered dataset to fetch.
        base_url: Location the extracts are published under.
        out_dir: Local data directory.
        force: Re-download even when a cached copy exists.
        timeout: Request timeout in seconds.

    Returns:
        Path to the extract on disk.

    Raises:
        DataLoadError: if the request fails or returns a non-2xx status.
    """
    out_dir.mkdir(parents=True, exist_ok=True)
    out_path = out_dir / dataset.filename

    if not force and out_path.exists() and out_path.stat().st_size > 0:
        log.info("Cache hit: %s", out_path)
        return out_path

    url = extract_url(base_url, dataset)
    log.info("Downloading %s", url)
    try:
        r = requests.get(url, timeout=timeout)
        r.raise_for_status()
    except requests.RequestException as e:
        raise DataLoadError(dataset.name, f"download failed: {e}") from e

    out_path.write_bytes(r.content)
    log.info("Saved: %s (%d bytes)", out_path, out_path.stat().st_size)
    return out_path
