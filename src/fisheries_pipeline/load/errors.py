"""Exceptions raised at the data loading boundary."""

from __future__ import annotations


class DataLoadError(RuntimeError):
    """A dataset extract could not be fetched, read or parsed.

    Attributes:
        dataset: Name of the dataset that failed.
        reason: Human-readable cause.
    """

    def __init__(self, dataset: str, reason: str) -> None:
        super().__init__(f"{dataset}: {reason}")
        self.dataset = dataset
        self.reason = reason
