"""Spreadsheet ingestion: decode files into role-tagged Datasets.

Decoding runs concurrently across a batch; the batch is returned only
once every file has decoded, so callers add it to the collection in one
step.
"""

from __future__ import annotations

import datetime
import logging
import uuid
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any

import numpy as np
import pandas as pd

from stockflow.config import CODE_ALIASES, ROLE_PREFIXES, DataRole
from stockflow.data.dates import parse_file_name_date
from stockflow.data.models import Dataset, Record
from stockflow.data.schema import canonical_code

logger = logging.getLogger(__name__)

_EXCEL_SUFFIXES = {".xlsx", ".xls"}
_CSV_ENCODINGS = ("utf-8-sig", "cp949")
# Only blank cells are missing; text such as "NA" or "None" is data.
_NA_OPTIONS = {"keep_default_na": False, "na_values": [""]}


def classify_role(file_name: str, default_role: DataRole) -> DataRole:
    """Infer a dataset role from its file name.

    ``f_*`` files are foreign flow and ``inst_*`` files institutional
    flow, case-insensitively. Anything else takes the upload slot role.

    Args:
        file_name: Uploaded file name (no directory).
        default_role: Role of the slot the file was uploaded through.

    Returns:
        The inferred DataRole.
    """
    lower = file_name.lower()
    for prefix, role in ROLE_PREFIXES.items():
        if lower.startswith(prefix):
            return role
    return default_role


def _to_scalar(value: Any) -> Any:
    if isinstance(value, np.generic):
        return value.item()
    if isinstance(value, (pd.Timestamp, datetime.date)):
        return value.isoformat()
    return value


def frame_to_records(frame: pd.DataFrame) -> list[Record]:
    """Convert a decoded sheet to records, omitting empty cells.

    Column order is preserved so positional lookups keep working. Rows
    with no non-empty cell are dropped.
    """
    columns = [str(c) for c in frame.columns]
    records: list[Record] = []
    for values in frame.astype(object).itertuples(index=False, name=None):
        record = {
            column: _to_scalar(value)
            for column, value in zip(columns, values)
            if not pd.isna(value)
        }
        if record:
            records.append(record)
    return records


def _code_converters(columns: Iterable[Any]) -> dict[Any, Any]:
    """Converters that keep code columns as text, keyed by column label.

    Code columns are the aliased code headers plus the first column,
    where the positional fallback looks.
    """
    columns = list(columns)
    labels = [c for c in columns if c in CODE_ALIASES]
    if columns:
        labels.append(columns[0])
    return {label: canonical_code for label in labels}


def _read_csv(path: Path) -> pd.DataFrame:
    last_error: Exception | None = None
    for encoding in _CSV_ENCODINGS:
        try:
            header = pd.read_csv(path, encoding=encoding, nrows=0)
            # Only code columns stay text so zero padding survives;
            # comma-grouped numbers like "1,234,567" decode as numbers.
            return pd.read_csv(
                path,
                encoding=encoding,
                thousands=",",
                converters=_code_converters(header.columns),
                **_NA_OPTIONS,
            )
        except UnicodeDecodeError as e:
            last_error = e
            logger.debug("%s: not %s, trying next encoding", path.name, encoding)
    raise ValueError(
        f"Could not decode {path.name} with any of {_CSV_ENCODINGS}"
    ) from last_error


def _read_excel(path: Path) -> pd.DataFrame:
    header = pd.read_excel(path, sheet_name=0, nrows=0)
    return pd.read_excel(
        path,
        sheet_name=0,
        thousands=",",
        converters=_code_converters(header.columns),
        **_NA_OPTIONS,
    )


def read_records(path: Path) -> list[Record]:
    """Decode the first sheet of a spreadsheet file into records.

    Args:
        path: ``.xlsx``, ``.xls`` or ``.csv`` file.

    Returns:
        List of records (column label -> scalar).

    Raises:
        ValueError: If the file type is unsupported.
    """
    suffix = path.suffix.lower()
    if suffix in _EXCEL_SUFFIXES:
        frame = _read_excel(path)
    elif suffix == ".csv":
        frame = _read_csv(path)
    else:
        raise ValueError(f"Unsupported file type: {path.name}")
    return frame_to_records(frame)


def load_dataset(path: Path, default_role: DataRole) -> Dataset:
    """Decode one file and tag it with a role, date and fresh id.

    Args:
        path: Spreadsheet path.
        default_role: Upload slot role, used when no prefix matches.

    Returns:
        New Dataset.

    Raises:
        ValueError: If the file cannot be decoded.
    """
    try:
        records = read_records(path)
    except Exception as e:
        raise ValueError(f"Failed to decode {path.name}: {e}") from e

    dataset = Dataset(
        id=uuid.uuid4().hex[:12],
        role=classify_role(path.name, default_role),
        name=path.name,
        rows=tuple(records),
        trading_date=parse_file_name_date(path.name),
        upload_time=datetime.datetime.now().isoformat(timespec="seconds"),
    )
    logger.info(
        "%s: %d rows as %s (date %s)",
        dataset.name,
        dataset.row_count,
        dataset.role.name,
        dataset.trading_date or "-",
    )
    return dataset


def ingest_files(
    paths: Iterable[Path],
    default_role: DataRole,
    max_workers: int | None = None,
) -> list[Dataset]:
    """Decode a batch of files concurrently.

    Files decode in any order; results come back in input order and only
    after the whole batch has succeeded.

    Args:
        paths: Files uploaded together through one slot.
        default_role: Slot role for files without a role prefix.
        max_workers: Thread pool size (None = executor default).

    Returns:
        One Dataset per path, in input order.

    Raises:
        ValueError: If any file fails to decode. No partial batch is
            returned.
    """
    paths = [Path(p) for p in paths]
    if not paths:
        return []

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = [
            executor.submit(load_dataset, path, default_role) for path in paths
        ]
        datasets = [future.result() for future in futures]

    logger.info("Ingested batch of %d files", len(datasets))
    return datasets


def preview_frame(dataset: Dataset, n_rows: int = 50) -> pd.DataFrame:
    """First ``n_rows`` records of a dataset as a DataFrame."""
    return pd.DataFrame.from_records(list(dataset.rows[:n_rows]))
