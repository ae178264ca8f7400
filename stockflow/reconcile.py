"""Reconciliation: join the roster against dated time-series datasets.

Produces one StockRow per roster row carrying a range aggregate and a
specific-date snapshot. All lookups degrade to 0.0; the only way to get
an empty result is an absent or empty roster.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from stockflow.config import DataRole, SnapshotParams
from stockflow.data.dates import is_within_range, to_date_key
from stockflow.data.models import Dataset, StockRow
from stockflow.data.schema import index_by_code, stock_code, stock_name
from stockflow.metrics.derivation import change_rate, trade_value

logger = logging.getLogger(__name__)


def find_roster(datasets: Iterable[Dataset]) -> Dataset | None:
    """Return the active roster: the first ROSTER dataset, if any."""
    return next((d for d in datasets if d.role is DataRole.ROSTER), None)


def datasets_in_range(
    datasets: Iterable[Dataset],
    role: DataRole,
    start_date: str,
    end_date: str,
) -> list[Dataset]:
    """All datasets of ``role`` whose trading date lies in the range."""
    return [
        d for d in datasets
        if d.role is role and is_within_range(d.trading_date, start_date, end_date)
    ]


def dataset_for_date(
    datasets: Iterable[Dataset],
    role: DataRole,
    date_key: str,
) -> Dataset | None:
    """The first dataset of ``role`` dated exactly ``date_key``."""
    return next(
        (d for d in datasets if d.role is role and d.trading_date == date_key),
        None,
    )


def reconcile(
    datasets: Sequence[Dataset],
    params: SnapshotParams,
    range_role: DataRole = DataRole.INSTITUTIONAL_FLOW,
) -> list[StockRow]:
    """Build one reconciled row per roster stock.

    Steps:
        1. Locate the roster (first ROSTER dataset). None -> empty list.
        2. Sum the trade value of ``range_role`` datasets dated within
           ``[params.start_date, params.end_date]``, per stock code.
        3. Take the institutional and market-total trade values from the
           datasets dated exactly ``params.specific_date``.
        4. Emit rows in roster order.

    Rows are matched by canonical code, first occurrence per dataset.
    Unmatched codes and missing datasets contribute 0.0.

    Args:
        datasets: Immutable snapshot of the dataset collection.
        params: Range and specific-date selection.
        range_role: Time-series role aggregated over the range.

    Returns:
        List of StockRow, one per roster row, in roster order.

    Raises:
        ValueError: If ``range_role`` is not a time-series role.
    """
    if not range_role.is_time_series:
        raise ValueError(f"range_role must be a time-series role, got {range_role.name}")

    roster = find_roster(datasets)
    if roster is None:
        logger.info("No roster dataset, nothing to reconcile")
        return []

    range_indexes = [
        index_by_code(d.rows)
        for d in datasets_in_range(
            datasets, range_role, params.start_date, params.end_date,
        )
    ]

    specific_key = to_date_key(params.specific_date)
    inst_dataset = dataset_for_date(
        datasets, DataRole.INSTITUTIONAL_FLOW, specific_key,
    )
    market_dataset = dataset_for_date(
        datasets, DataRole.MARKET_TOTAL, specific_key,
    )
    if inst_dataset is None and market_dataset is None:
        logger.debug("No time-series dataset dated %s", specific_key)
    inst_index = index_by_code(inst_dataset.rows) if inst_dataset else {}
    market_index = index_by_code(market_dataset.rows) if market_dataset else {}

    rows: list[StockRow] = []
    for record in roster.rows:
        code = stock_code(record)
        range_total = 0.0
        for index in range_indexes:
            range_total += trade_value(index.get(code))

        rows.append(
            StockRow(
                code=code,
                name=stock_name(record),
                change_rate=change_rate(record),
                range_total=range_total,
                specific_inst=trade_value(inst_index.get(code)),
                specific_market=trade_value(market_index.get(code)),
            )
        )

    logger.info(
        "Reconciled %d roster stocks against %d %s datasets in range",
        len(rows),
        len(range_indexes),
        range_role.name,
    )
    return rows
