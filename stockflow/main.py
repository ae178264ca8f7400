"""CLI entry point for the stock flow dashboard."""

from __future__ import annotations

import argparse
import logging
import sqlite3
import sys
from pathlib import Path

from stockflow.config import (
    FILTER_FIELDS,
    DashboardConfig,
    DataRole,
    FilterBounds,
    SeriesMode,
    SnapshotParams,
    SortKey,
    SortOrder,
)
from stockflow.data import DatasetStore, is_ready, missing_roles, upload_files
from stockflow.data.dates import format_yymmdd
from stockflow.data.ingest import preview_frame
from stockflow.data.models import Dataset
from stockflow.output.export import default_export_name, export_rows, rows_to_frame
from stockflow.reconcile import reconcile
from stockflow.screening import screen_rows
from stockflow.series import build_series, series_frame

logger = logging.getLogger(__name__)

ROLE_MAP = {
    "roster": DataRole.ROSTER,
    "market": DataRole.MARKET_TOTAL,
    "foreign": DataRole.FOREIGN_FLOW,
    "institutional": DataRole.INSTITUTIONAL_FLOW,
}

METRIC_MAP = {k: v for k, v in ROLE_MAP.items() if v.is_time_series}

SORT_MAP = {key.value: key for key in SortKey}

_DEFAULTS = DashboardConfig()


def _add_common(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--db-path",
        type=Path,
        default=None,
        help=f"Dataset database path (default: {_DEFAULTS.db_path})",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )


def _add_range(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--start",
        default=_DEFAULTS.snapshot.start_date,
        help=f"Range start, ISO date (default: {_DEFAULTS.snapshot.start_date})",
    )
    parser.add_argument(
        "--end",
        default=_DEFAULTS.snapshot.end_date,
        help=f"Range end, ISO date (default: {_DEFAULTS.snapshot.end_date})",
    )


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Args:
        argv: Argument list (defaults to sys.argv[1:]).

    Returns:
        Parsed arguments namespace.
    """
    parser = argparse.ArgumentParser(
        prog="stockflow",
        description="Reconcile roster and trade-flow spreadsheets",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # ingest command
    ingest_parser = subparsers.add_parser(
        "ingest", help="Decode spreadsheets and add them to the collection"
    )
    ingest_parser.add_argument(
        "files",
        nargs="+",
        type=Path,
        help="Spreadsheet files (.xlsx, .xls, .csv) uploaded together",
    )
    ingest_parser.add_argument(
        "--role",
        choices=list(ROLE_MAP),
        required=True,
        help="Upload slot; f_*/inst_* file names override it",
    )
    _add_common(ingest_parser)

    # list command
    list_parser = subparsers.add_parser("list", help="List stored datasets")
    _add_common(list_parser)

    # preview command
    preview_parser = subparsers.add_parser(
        "preview", help="Show the first rows of a dataset"
    )
    preview_parser.add_argument("dataset_id", help="Dataset id (see list)")
    preview_parser.add_argument(
        "--rows",
        type=int,
        default=_DEFAULTS.preview_rows,
        help=f"Rows to show (default: {_DEFAULTS.preview_rows})",
    )
    _add_common(preview_parser)

    # delete command
    delete_parser = subparsers.add_parser("delete", help="Remove one dataset")
    delete_parser.add_argument("dataset_id", help="Dataset id (see list)")
    _add_common(delete_parser)

    # clear command
    clear_parser = subparsers.add_parser("clear", help="Remove every dataset")
    _add_common(clear_parser)

    # snapshot command
    snapshot_parser = subparsers.add_parser(
        "snapshot", help="Reconcile the roster, filter, sort and export"
    )
    _add_range(snapshot_parser)
    snapshot_parser.add_argument(
        "--specific",
        default=_DEFAULTS.snapshot.specific_date,
        help=(
            "Snapshot date, ISO "
            f"(default: {_DEFAULTS.snapshot.specific_date})"
        ),
    )
    snapshot_parser.add_argument(
        "--range-metric",
        choices=list(METRIC_MAP),
        default="institutional",
        help="Role summed over the range (default: institutional)",
    )
    for field_name in FILTER_FIELDS:
        flag = field_name.replace("_", "-")
        snapshot_parser.add_argument(
            f"--min-{flag}",
            type=float,
            default=None,
            help=f"Minimum {field_name} (default: disabled)",
        )
        snapshot_parser.add_argument(
            f"--max-{flag}",
            type=float,
            default=None,
            help=f"Maximum {field_name} (default: disabled)",
        )
    snapshot_parser.add_argument(
        "--sort",
        choices=[*SORT_MAP, "none"],
        default=_DEFAULTS.sort_key.value if _DEFAULTS.sort_key else "none",
        help="Sort column, or 'none' for roster order (default: change_rate)",
    )
    snapshot_parser.add_argument(
        "--order",
        choices=[o.value for o in SortOrder],
        default=_DEFAULTS.sort_order.value if _DEFAULTS.sort_order else "desc",
        help="Sort order (default: desc)",
    )
    snapshot_parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help=(
            "Export path, .xlsx or .csv (default: print only; "
            "'-' writes a dated xlsx in the working directory)"
        ),
    )
    _add_common(snapshot_parser)

    # series command
    series_parser = subparsers.add_parser(
        "series", help="Per-date trade values for selected stocks"
    )
    series_parser.add_argument(
        "codes",
        nargs="+",
        help="Stock codes to include",
    )
    series_parser.add_argument(
        "--metric",
        choices=list(METRIC_MAP),
        required=True,
        help="Trade-value feed to chart",
    )
    series_parser.add_argument(
        "--mode",
        choices=[m.value for m in SeriesMode],
        default=SeriesMode.DAILY.value,
        help="daily values or cumulative totals (default: daily)",
    )
    _add_range(series_parser)
    series_parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="CSV output path (default: print only)",
    )
    _add_common(series_parser)

    return parser.parse_args(argv)


def _build_config(args: argparse.Namespace) -> DashboardConfig:
    """Build a DashboardConfig from parsed CLI arguments."""
    config = DashboardConfig()
    if args.db_path is not None:
        config.db_path = args.db_path

    if args.command == "snapshot":
        config.snapshot = SnapshotParams(
            start_date=args.start,
            end_date=args.end,
            specific_date=args.specific,
        )
        config.range_role = METRIC_MAP[args.range_metric]
        config.filters = {
            field_name: FilterBounds(
                min=getattr(args, f"min_{field_name}"),
                max=getattr(args, f"max_{field_name}"),
            )
            for field_name in FILTER_FIELDS
        }
        config.sort_key = None if args.sort == "none" else SORT_MAP[args.sort]
        config.sort_order = SortOrder(args.order)
    elif args.command == "series":
        config.snapshot = SnapshotParams(start_date=args.start, end_date=args.end)
    elif args.command == "preview":
        config.preview_rows = args.rows

    return config


def _warn_if_not_ready(datasets: list[Dataset]) -> None:
    if not is_ready(datasets):
        logger.warning(
            "Missing datasets for: %s",
            ", ".join(role.label for role in missing_roles(datasets)),
        )


def run_ingest(args: argparse.Namespace, config: DashboardConfig) -> None:
    """Execute the ingest command."""
    store = DatasetStore(config.db_path)
    datasets = upload_files(store, args.files, ROLE_MAP[args.role])
    for dataset in datasets:
        print(f"{dataset.id}  {dataset.role.label}  {dataset.name}")


def run_list(config: DashboardConfig) -> None:
    """Execute the list command: newest datasets first."""
    datasets = DatasetStore(config.db_path).load_all()
    if not datasets:
        print("No datasets stored.")
        return
    for dataset in reversed(datasets):
        date = format_yymmdd(dataset.trading_date) if dataset.trading_date else "-"
        print(
            f"{dataset.id}  {dataset.role.label:<26} {dataset.row_count:>7,} rows  "
            f"{date:<10}  {dataset.name}"
        )
    _warn_if_not_ready(datasets)


def run_preview(args: argparse.Namespace, config: DashboardConfig) -> None:
    """Execute the preview command."""
    datasets = DatasetStore(config.db_path).load_all()
    dataset = next((d for d in datasets if d.id == args.dataset_id), None)
    if dataset is None:
        logger.error("Dataset %s not found", args.dataset_id)
        sys.exit(1)
    print(f"{dataset.name} (first {config.preview_rows} rows)")
    print(preview_frame(dataset, config.preview_rows).to_string(index=False))


def run_snapshot(args: argparse.Namespace, config: DashboardConfig) -> None:
    """Execute the snapshot command.

    Reconciles the stored collection, applies filters and sorting, prints
    the table and optionally exports it.
    """
    datasets = DatasetStore(config.db_path).load_all()
    _warn_if_not_ready(datasets)

    rows = reconcile(datasets, config.snapshot, range_role=config.range_role)
    rows = screen_rows(rows, config.filters, config.sort_key, config.sort_order)

    print(f"Results: {len(rows)}")
    if rows:
        print(rows_to_frame(rows).to_string(index=False))

    if args.output is not None:
        output = Path(default_export_name()) if str(args.output) == "-" else args.output
        export_rows(rows, output)


def run_series(args: argparse.Namespace, config: DashboardConfig) -> None:
    """Execute the series command."""
    datasets = DatasetStore(config.db_path).load_all()
    points = build_series(
        datasets,
        args.codes,
        config.snapshot.start_date,
        config.snapshot.end_date,
        METRIC_MAP[args.metric],
        SeriesMode(args.mode),
    )
    frame = series_frame(points)
    if frame.empty:
        print("No data for the selected stocks and range.")
    else:
        print(frame.to_string())

    if args.output is not None:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        frame.to_csv(args.output)
        logger.info("Series written to %s", args.output)


def main(argv: list[str] | None = None) -> None:
    """Main entry point.

    Args:
        argv: Argument list (defaults to sys.argv[1:]).
    """
    args = _parse_args(argv)

    # Configure logging
    level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    config = _build_config(args)

    try:
        if args.command == "ingest":
            run_ingest(args, config)
        elif args.command == "list":
            run_list(config)
        elif args.command == "preview":
            run_preview(args, config)
        elif args.command == "delete":
            if not DatasetStore(config.db_path).delete(args.dataset_id):
                sys.exit(1)
        elif args.command == "clear":
            DatasetStore(config.db_path).clear()
        elif args.command == "snapshot":
            run_snapshot(args, config)
        elif args.command == "series":
            run_series(args, config)
        else:
            logger.error("Unknown command: %s", args.command)
            sys.exit(1)
    except (ValueError, sqlite3.Error) as e:
        logger.error("%s failed: %s", args.command, e)
        sys.exit(1)


if __name__ == "__main__":
    main()
