"""Time-series builder for charting selected stocks."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

import pandas as pd

from stockflow.config import TIME_SERIES_ROLES, DataRole, SeriesMode
from stockflow.data.dates import is_within_range
from stockflow.data.models import Dataset, SeriesPoint
from stockflow.data.schema import canonical_code, index_by_code
from stockflow.metrics.derivation import trade_value
from stockflow.reconcile import dataset_for_date

logger = logging.getLogger(__name__)


def trading_dates(
    datasets: Iterable[Dataset],
    start_date: str,
    end_date: str,
) -> list[str]:
    """Distinct in-range dates across all time-series roles, ascending.

    Lexical order is chronological because keys are zero-padded ``YYMMDD``.
    """
    dates = {
        d.trading_date
        for d in datasets
        if d.role in TIME_SERIES_ROLES
        and d.trading_date
        and is_within_range(d.trading_date, start_date, end_date)
    }
    return sorted(dates)


def build_series(
    datasets: Sequence[Dataset],
    selected_codes: Iterable[str],
    start_date: str,
    end_date: str,
    metric: DataRole,
    mode: SeriesMode = SeriesMode.DAILY,
) -> list[SeriesPoint]:
    """Build a date-aligned matrix of one metric for the selected stocks.

    The date axis is the union of in-range dates across every time-series
    role, so a date present only for another role yields 0.0 for
    ``metric``. In cumulative mode each code carries its own running
    total across the sorted dates; nothing persists between calls.

    Args:
        datasets: Immutable snapshot of the dataset collection.
        selected_codes: Stock codes to chart. Duplicates are ignored.
        start_date: Inclusive ISO start of the range.
        end_date: Inclusive ISO end of the range.
        metric: Time-series role whose trade value is plotted.
        mode: DAILY for per-date values, CUMULATIVE for running totals.

    Returns:
        One SeriesPoint per trading date, ascending. Empty if no codes
        are selected or no dataset falls in the range.

    Raises:
        ValueError: If ``metric`` is not a time-series role.
    """
    if not metric.is_time_series:
        raise ValueError(f"metric must be a time-series role, got {metric.name}")

    codes = [
        c for c in dict.fromkeys(canonical_code(c) for c in selected_codes)
        if c is not None
    ]
    if not codes:
        return []

    dates = trading_dates(datasets, start_date, end_date)
    if not dates:
        logger.info("No time-series datasets between %s and %s", start_date, end_date)
        return []

    matrix: list[list[float]] = []
    for date_key in dates:
        dataset = dataset_for_date(datasets, metric, date_key)
        index = index_by_code(dataset.rows) if dataset is not None else {}
        matrix.append([trade_value(index.get(code)) for code in codes])

    frame = pd.DataFrame(matrix, index=dates, columns=codes, dtype=float)
    if mode is SeriesMode.CUMULATIVE:
        frame = frame.cumsum()

    logger.debug(
        "Built %s %s series: %d dates x %d codes",
        mode.value, metric.name, len(dates), len(codes),
    )
    return [
        SeriesPoint(
            date_key=str(date_key),
            values={code: float(row[code]) for code in codes},
        )
        for date_key, row in frame.iterrows()
    ]


def series_frame(points: Sequence[SeriesPoint]) -> pd.DataFrame:
    """Tabular view of series points, indexed by ISO date.

    Args:
        points: Output of :func:`build_series`.

    Returns:
        DataFrame with a ``date`` index and one column per stock code.
    """
    frame = pd.DataFrame(
        [p.values for p in points],
        index=pd.Index([p.date for p in points], name="date"),
    )
    return frame
