"""Dataset ingestion, persistence and readiness."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from stockflow.config import DataRole
from stockflow.data.ingest import classify_role, ingest_files
from stockflow.data.models import Dataset, SeriesPoint, StockRow
from stockflow.data.store import DatasetStore

logger = logging.getLogger(__name__)

__all__ = [
    "Dataset",
    "DatasetStore",
    "SeriesPoint",
    "StockRow",
    "classify_role",
    "ingest_files",
    "is_ready",
    "missing_roles",
    "upload_files",
]


def missing_roles(datasets: Iterable[Dataset]) -> list[DataRole]:
    """Roles with no dataset in the collection, in slot order."""
    present = {d.role for d in datasets}
    return [role for role in DataRole if role not in present]


def is_ready(datasets: Iterable[Dataset]) -> bool:
    """True when every role has at least one dataset."""
    return not missing_roles(datasets)


def upload_files(
    store: DatasetStore,
    paths: Iterable[Path],
    default_role: DataRole,
) -> list[Dataset]:
    """Decode a batch of files and persist it.

    Loading sequence:
        1. Decode every file concurrently (all-or-nothing).
        2. Save the whole batch in one transaction.

    Args:
        store: Persistent dataset collection.
        paths: Files uploaded together through one slot.
        default_role: Slot role for files without a role prefix.

    Returns:
        The new datasets, in input order.

    Raises:
        ValueError: If any file fails to decode; nothing is saved.
    """
    datasets = ingest_files(paths, default_role)
    if datasets:
        store.upsert_many(datasets)
    by_role = {
        role.name: sum(1 for d in datasets if d.role is role) for role in DataRole
    }
    logger.info(
        "Uploaded %d files: %s",
        len(datasets),
        ", ".join(f"{k}={v}" for k, v in by_role.items() if v),
    )
    return datasets
