"""Export of screened rows to a spreadsheet artifact."""

from __future__ import annotations

import datetime
import logging
from collections.abc import Sequence
from pathlib import Path

import pandas as pd

from stockflow.data.models import StockRow

logger = logging.getLogger(__name__)

# (StockRow attribute, exported header), in column order.
COLUMNS: tuple[tuple[str, str], ...] = (
    ("code", "종목코드"),
    ("name", "종목명"),
    ("change_rate", "등락률(%)"),
    ("range_total", "기관 누적 거래대금"),
    ("specific_inst", "특정일 기관 거래대금"),
    ("specific_market", "특정일 전체 거래대금"),
)

SHEET_NAME = "분석결과"


def default_export_name(today: datetime.date | None = None) -> str:
    """Dated default file name for an xlsx export."""
    today = today or datetime.date.today()
    return f"주식분석결과_{today.isoformat()}.xlsx"


def rows_to_frame(rows: Sequence[StockRow]) -> pd.DataFrame:
    """Rows as a DataFrame with the fixed export headers, order preserved."""
    return pd.DataFrame(
        [[getattr(row, attr) for attr, _ in COLUMNS] for row in rows],
        columns=[header for _, header in COLUMNS],
    )


def export_rows(rows: Sequence[StockRow], path: Path) -> Path:
    """Write rows to ``.xlsx`` or ``.csv``.

    xlsx output uses a single sheet named ``분석결과``. csv output is
    UTF-8 with a byte-order mark so spreadsheet tools detect the encoding.

    Args:
        rows: Pipeline output, already filtered and sorted.
        path: Destination file. Parent directories are created.

    Returns:
        The written path.

    Raises:
        ValueError: If the suffix is neither ``.xlsx`` nor ``.csv``.
    """
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix not in (".xlsx", ".csv"):
        raise ValueError(f"Unsupported export format: {path.suffix!r}")

    frame = rows_to_frame(rows)
    path.parent.mkdir(parents=True, exist_ok=True)
    if suffix == ".xlsx":
        frame.to_excel(path, sheet_name=SHEET_NAME, index=False)
    else:
        frame.to_csv(path, index=False, encoding="utf-8-sig")

    logger.info("Exported %d rows to %s", len(frame), path)
    return path
