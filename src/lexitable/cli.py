"""CLI entrypoint for lexitable."""

import argparse
import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

from lexitable.config.loader import build_columns, get_table_config, load_tables_config
from lexitable.controller import EXPORT_SCOPES, TableController, TableFeatures, TableView
from lexitable.database.row_repo import import_rows, list_rows
from lexitable.database.sqlite_client import session_context
from lexitable.engine.columns import ColumnDefinition
from lexitable.export.formatter import format_export_value
from lexitable.export.models import ExportFormat
from lexitable.qa.checks import checks_passed
from lexitable.sources.file_source import load_rows
from lexitable.sources.rest_client import RestRowClient
from lexitable.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_SQLITE_PATH = "lexitable.db"
MAX_CELL_WIDTH = 40


def _sqlite_path(args: argparse.Namespace, config: Dict[str, Any]) -> str:
    return getattr(args, "sqlite", None) or config.get("storage", {}).get("sqlite_path", DEFAULT_SQLITE_PATH)


def _fetch_rows(args: argparse.Namespace, config: Dict[str, Any], table_cfg: Dict[str, Any]) -> List[Any]:
    """Load rows from the selected source: file, REST API or SQLite store."""
    if getattr(args, "rows", None):
        return load_rows(args.rows, resource_key=table_cfg["name"])
    if getattr(args, "api", False):
        api_cfg = config.get("api") or {}
        base_url = api_cfg.get("base_url")
        if not base_url:
            raise ValueError("Tables config has no 'api.base_url' for --api")
        client = RestRowClient(
            base_url,
            table_cfg["resource"],
            token=getattr(args, "token", None) or os.environ.get("LEXITABLE_API_TOKEN"),
            timeout_seconds=api_cfg.get("timeout_seconds", 10),
        )
        return client.list_rows()
    with session_context(_sqlite_path(args, config)) as session:
        return list_rows(session, table_cfg["name"])


def _build_controller(args: argparse.Namespace) -> Tuple[TableController, Dict[str, Any]]:
    config = load_tables_config(args.config)
    table_cfg = get_table_config(config, args.table)
    columns = build_columns(table_cfg)
    rows = _fetch_rows(args, config, table_cfg)
    features = table_cfg["features"]
    controller = TableController(
        rows,
        columns,
        page_size=getattr(args, "page_size", None) or table_cfg["page_size"],
        id_field=table_cfg["id_field"],
        features=TableFeatures(
            enable_search=features["search"],
            enable_sort=features["sort"],
            enable_export=features["export"],
            enable_pagination=features["pagination"],
        ),
    )
    if getattr(args, "search", None):
        controller.set_search_text(args.search)
    if getattr(args, "sort", None):
        controller.set_sort(args.sort)
        if getattr(args, "desc", False):
            controller.set_sort(args.sort)
    return controller, table_cfg


def _cell_text(value: Any) -> str:
    text = format_export_value(value).replace("\n", " ")
    if len(text) > MAX_CELL_WIDTH:
        return text[: MAX_CELL_WIDTH - 1] + "…"
    return text


def render_text_table(view: TableView, columns: Sequence[ColumnDefinition]) -> str:
    """Plain-text rendering of a table view for terminals."""
    shown = [column for column in columns if column.has_accessor or column.render is not None]
    header = [column.label for column in shown]
    body = [[_cell_text(row.cells.get(column.key)) for column in shown] for row in view.rows]
    widths = [len(label) for label in header]
    for values in body:
        widths = [max(width, len(value)) for width, value in zip(widths, values)]

    def _line(values: Sequence[str]) -> str:
        return "  ".join(value.ljust(width) for value, width in zip(values, widths)).rstrip()

    lines = [_line(header), _line(["-" * width for width in widths])]
    lines.extend(_line(values) for values in body)
    lines.append(
        f"Page {view.page} / {view.total_pages} "
        f"(showing {view.start_index}-{view.end_index} of {view.filtered_count})"
    )
    return "\n".join(lines)


def cmd_view(args: argparse.Namespace) -> None:
    """Print one page of a table."""
    controller, _ = _build_controller(args)
    if args.page:
        controller.go_to_page(args.page)
    print(render_text_table(controller.view(), controller.columns))


def cmd_export(args: argparse.Namespace) -> None:
    """Export a table's rows."""
    if args.format == ExportFormat.XLSX and not args.out:
        raise ValueError("XLSX export requires --out")
    try:
        controller, _ = _build_controller(args)
        result = controller.export(format=args.format, scope=args.scope, out=args.out)
    except Exception as e:
        logger.error(f"Error exporting: {e}", exc_info=True)
        raise
    if args.out:
        print(f"Exported to {args.out}")
    else:
        sys.stdout.write(result.content)
        sys.stdout.write("\n")


def cmd_check(args: argparse.Namespace) -> int:
    """Run the table self-checks; returns the process exit code."""
    controller, _ = _build_controller(args)
    results = controller.run_checks()
    for result in results:
        status = "PASS" if result.passed else "FAIL"
        print(f"[{status}] {result.id}: {result.label}")
    return 0 if checks_passed(results) else 1


def cmd_import(args: argparse.Namespace) -> None:
    """Load rows from a file into the SQLite row store."""
    config = load_tables_config(args.config)
    table_cfg = get_table_config(config, args.table)
    rows = load_rows(args.rows, resource_key=table_cfg["name"])
    with session_context(_sqlite_path(args, config)) as session:
        count = import_rows(session, table_cfg["name"], rows, id_field=table_cfg["id_field"])
    print(f"Imported {count} rows into {table_cfg['name']}")


def _add_common_arguments(parser: argparse.ArgumentParser, with_source: bool = True) -> None:
    parser.add_argument("table", type=str, help="Table name from the tables config")
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Tables config path (default: lexitable.tables.yaml)",
    )
    parser.add_argument("--sqlite", type=str, help="SQLite row store path (default: from config)")
    if not with_source:
        return
    source = parser.add_mutually_exclusive_group()
    source.add_argument("--rows", type=Path, help="Read rows from a JSON, YAML or CSV file")
    source.add_argument("--api", action="store_true", help="Read rows from the configured REST API")
    parser.add_argument("--token", type=str, help="Bearer token for --api (default: $LEXITABLE_API_TOKEN)")


def _add_query_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--search", type=str, help="Free-text search query")
    parser.add_argument("--sort", type=str, help="Column key to sort by")
    parser.add_argument("--desc", action="store_true", help="Sort descending")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lexitable",
        description="Search, sort, page and export tabular office data",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    view_parser = subparsers.add_parser("view", help="Print one page of a table")
    _add_common_arguments(view_parser)
    _add_query_arguments(view_parser)
    view_parser.add_argument("--page", type=int, default=1, help="Page number (default: 1)")
    view_parser.add_argument("--page-size", type=int, help="Rows per page (default: from config)")
    view_parser.set_defaults(func=cmd_view)

    export_parser = subparsers.add_parser("export", help="Export table rows")
    _add_common_arguments(export_parser)
    _add_query_arguments(export_parser)
    export_parser.add_argument(
        "--format",
        type=str,
        choices=list(ExportFormat.ALL),
        default=ExportFormat.CSV,
        help="Export format (default: csv)",
    )
    export_parser.add_argument(
        "--scope",
        type=str,
        choices=list(EXPORT_SCOPES),
        default="sorted",
        help="Rows to export: raw, filtered, or filtered and sorted (default: sorted)",
    )
    export_parser.add_argument(
        "--out",
        type=Path,
        help="Output file path (if not provided, prints to stdout)",
    )
    export_parser.set_defaults(func=cmd_export)

    check_parser = subparsers.add_parser("check", help="Run table self-checks")
    _add_common_arguments(check_parser)
    check_parser.set_defaults(func=cmd_check)

    import_parser = subparsers.add_parser("import", help="Import rows into the SQLite row store")
    _add_common_arguments(import_parser, with_source=False)
    import_parser.add_argument("--rows", type=Path, required=True, help="JSON, YAML or CSV file to import")
    import_parser.set_defaults(func=cmd_import)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main CLI entrypoint."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    try:
        result = args.func(args)
    except Exception as e:
        logger.error(f"Error running command '{args.command}': {e}", exc_info=True)
        raise
    return result if isinstance(result, int) else 0


if __name__ == "__main__":
    sys.exit(main())
