"""SQLite-backed dataset collection.

Stores each Dataset as one row keyed by id, with records serialised as
JSON text. The engine never reads the store directly; callers load the
collection and pass it in as a snapshot.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from collections.abc import Iterable
from pathlib import Path

from stockflow.config import DataRole
from stockflow.data.models import Dataset

logger = logging.getLogger(__name__)

_SCHEMA = """
    CREATE TABLE IF NOT EXISTS datasets (
        seq INTEGER PRIMARY KEY AUTOINCREMENT,
        id TEXT NOT NULL UNIQUE,
        role TEXT NOT NULL,
        name TEXT NOT NULL,
        trading_date TEXT,
        upload_time TEXT NOT NULL,
        row_count INTEGER NOT NULL,
        rows_json TEXT NOT NULL
    )
"""


class DatasetStore:
    """Persistent dataset collection: load-all, upsert, delete, clear.

    Args:
        db_path: SQLite file path. Parent directories are created.
    """

    def __init__(self, db_path: Path) -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = self._connect()
        try:
            conn.execute(_SCHEMA)
            conn.commit()
        finally:
            conn.close()

    def _connect(self) -> sqlite3.Connection:
        return sqlite3.connect(self._db_path)

    def load_all(self) -> list[Dataset]:
        """All stored datasets, in the order they were first added."""
        conn = self._connect()
        try:
            rows = conn.execute(
                """
                SELECT id, role, name, trading_date, upload_time, rows_json
                FROM datasets
                ORDER BY seq
                """
            ).fetchall()
        finally:
            conn.close()

        datasets = [
            Dataset(
                id=dataset_id,
                role=DataRole(role),
                name=name,
                rows=tuple(json.loads(rows_json)),
                trading_date=trading_date,
                upload_time=upload_time,
            )
            for dataset_id, role, name, trading_date, upload_time, rows_json in rows
        ]
        logger.debug("Loaded %d datasets from %s", len(datasets), self._db_path)
        return datasets

    def upsert(self, dataset: Dataset) -> None:
        """Insert a dataset, or replace the stored one with the same id."""
        self.upsert_many([dataset])

    def upsert_many(self, datasets: Iterable[Dataset]) -> None:
        """Insert or replace several datasets in one transaction."""
        params = [
            (
                d.id,
                d.role.value,
                d.name,
                d.trading_date,
                d.upload_time,
                d.row_count,
                json.dumps(list(d.rows), ensure_ascii=False, default=str),
            )
            for d in datasets
        ]
        conn = self._connect()
        try:
            with conn:
                conn.executemany(
                    """
                    INSERT INTO datasets
                        (id, role, name, trading_date, upload_time, row_count, rows_json)
                    VALUES (?, ?, ?, ?, ?, ?, ?)
                    ON CONFLICT(id) DO UPDATE SET
                        role = excluded.role,
                        name = excluded.name,
                        trading_date = excluded.trading_date,
                        upload_time = excluded.upload_time,
                        row_count = excluded.row_count,
                        rows_json = excluded.rows_json
                    """,
                    params,
                )
        finally:
            conn.close()
        logger.info("Saved %d datasets", len(params))

    def delete(self, dataset_id: str) -> bool:
        """Remove one dataset. Returns False if the id was not stored."""
        conn = self._connect()
        try:
            with conn:
                cursor = conn.execute(
                    "DELETE FROM datasets WHERE id = ?", (dataset_id,)
                )
        finally:
            conn.close()
        deleted = cursor.rowcount > 0
        if not deleted:
            logger.warning("Dataset %s not found", dataset_id)
        return deleted

    def clear(self) -> int:
        """Remove every dataset. Returns the number removed."""
        conn = self._connect()
        try:
            with conn:
                cursor = conn.execute("DELETE FROM datasets")
        finally:
            conn.close()
        logger.info("Cleared %d datasets", cursor.rowcount)
        return cursor.rowcount
