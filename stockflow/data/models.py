"""Data models for the dashboard."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from stockflow.config import DataRole
from stockflow.data.dates import format_yymmdd

# One decoded spreadsheet row: column label -> scalar, in file column order.
Record = dict[str, Any]


@dataclass(frozen=True)
class Dataset:
    """An uploaded, decoded spreadsheet.

    Held immutably for the session; the engine never mutates ``rows``.

    Attributes:
        id: Unique identifier assigned at ingestion.
        role: Functional category of the dataset.
        name: Original file name.
        rows: Decoded records in sheet order. No fixed schema.
        trading_date: ``YYMMDD`` key parsed from the file name, if any.
        upload_time: ISO timestamp of ingestion.
    """

    id: str
    role: DataRole
    name: str
    rows: tuple[Record, ...] = ()
    trading_date: str | None = None
    upload_time: str = ""

    @property
    def row_count(self) -> int:
        return len(self.rows)


@dataclass
class StockRow:
    """Reconciled per-stock record consumed by filtering, sorting and export.

    Attributes:
        code: Canonical stock code from the roster row.
        name: Display name from the roster row.
        change_rate: Normalised percentage change.
        range_total: Sum of the range metric across in-range datasets.
        specific_inst: Institutional trade value on the specific date.
        specific_market: Total-market trade value on the specific date.
    """

    code: str | None
    name: Any
    change_rate: float = 0.0
    range_total: float = 0.0
    specific_inst: float = 0.0
    specific_market: float = 0.0


@dataclass
class SeriesPoint:
    """One chart x-position: a trading date and one value per selected code."""

    date_key: str
    values: dict[str, float] = field(default_factory=dict)

    @property
    def date(self) -> str:
        """ISO label for the trading date."""
        return format_yymmdd(self.date_key)
