"""Dashboard configuration dataclasses."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class DataRole(Enum):
    """Functional category of an uploaded dataset.

    Values keep the upload slot numbering so persisted datasets stay
    readable across versions.
    """

    ROSTER = "1"
    MARKET_TOTAL = "2"
    FOREIGN_FLOW = "3"
    INSTITUTIONAL_FLOW = "4"

    @property
    def label(self) -> str:
        return ROLE_LABELS[self]

    @property
    def is_time_series(self) -> bool:
        return self is not DataRole.ROSTER


ROLE_LABELS: dict[DataRole, str] = {
    DataRole.ROSTER: "1. Selected stocks",
    DataRole.MARKET_TOTAL: "2. Total trade value",
    DataRole.FOREIGN_FLOW: "3. Foreign (f_)",
    DataRole.INSTITUTIONAL_FLOW: "4. Institutional (inst_)",
}

TIME_SERIES_ROLES: tuple[DataRole, ...] = (
    DataRole.MARKET_TOTAL,
    DataRole.FOREIGN_FLOW,
    DataRole.INSTITUTIONAL_FLOW,
)

# File-name prefixes (matched case-insensitively) that override the slot role.
ROLE_PREFIXES: dict[str, DataRole] = {
    "f_": DataRole.FOREIGN_FLOW,
    "inst_": DataRole.INSTITUTIONAL_FLOW,
}


class SortKey(Enum):
    """Sortable columns of the reconciled table."""

    NAME = "name"
    CHANGE_RATE = "change_rate"
    RANGE_TOTAL = "range_total"
    SPECIFIC_INST = "specific_inst"
    SPECIFIC_MARKET = "specific_market"


class SortOrder(Enum):
    ASC = "asc"
    DESC = "desc"


class SeriesMode(Enum):
    """Time-series value mode: per-date value or running total."""

    DAILY = "daily"
    CUMULATIVE = "cumulative"


# ---------------------------------------------------------------------------
# Column aliases: (named aliases, positional fallback index)
# ---------------------------------------------------------------------------

CODE_ALIASES: tuple[str, ...] = ("종목코드", "Code")
CODE_POSITION = 0

NAME_ALIASES: tuple[str, ...] = ("종목명", "Name")
NAME_POSITION = 1

CHANGE_RATE_ALIASES: tuple[str, ...] = ("등락률", "ChangeRate")
CHANGE_RATE_POSITION = 5

TRADE_VALUE_ALIASES: tuple[str, ...] = ("거래대금",)
TRADE_VALUE_POSITION = 7

# Numeric StockRow fields that accept min/max bounds.
FILTER_FIELDS: tuple[str, ...] = (
    "change_rate",
    "range_total",
    "specific_inst",
    "specific_market",
)


@dataclass(frozen=True)
class FilterBounds:
    """Inclusive numeric bounds for one field (None = unbounded)."""

    min: float | None = None
    max: float | None = None

    @property
    def is_active(self) -> bool:
        return self.min is not None or self.max is not None


@dataclass(frozen=True)
class SnapshotParams:
    """User-chosen dates for one reconciliation.

    Attributes:
        start_date: Inclusive ISO start of the aggregation range.
        end_date: Inclusive ISO end of the aggregation range.
        specific_date: ISO date for the single-day snapshot columns.
    """

    start_date: str = "2024-01-01"
    end_date: str = "2024-12-31"
    specific_date: str = "2024-01-15"


@dataclass
class DashboardConfig:
    """Main dashboard configuration."""

    # Persistence
    db_path: Path = Path("data/stockflow.db")

    # Reconciliation
    snapshot: SnapshotParams = field(default_factory=SnapshotParams)
    range_role: DataRole = DataRole.INSTITUTIONAL_FLOW

    # Filters (field name -> bounds; missing = unconstrained)
    filters: dict[str, FilterBounds] = field(default_factory=dict)

    # Ordering (None = keep roster order)
    sort_key: SortKey | None = SortKey.CHANGE_RATE
    sort_order: SortOrder | None = SortOrder.DESC

    # Display
    preview_rows: int = 50
