"""Flat-file export of table rows: CSV, spreadsheet HTML, XLSX and JSON."""

import html
import json
from datetime import date, datetime
from io import BytesIO
from pathlib import Path
from typing import Any, Iterable, List, Optional, Sequence

from openpyxl import Workbook

from ..engine.columns import ColumnDefinition
from ..utils.logging import get_logger
from ..utils.time import to_utc_z, utc_now_z
from .models import FILE_EXTENSIONS, MEDIA_TYPES, ExportFormat, ExportPayload, ExportResult

logger = get_logger(__name__)

BOM = "\ufeff"
EXPORT_SCHEMA_VERSION = "1"
CSV_QUOTE_TRIGGERS = (",", "\"", "\n", "\r")


def format_export_value(value: Any) -> str:
    """
    String form of a cell for export.

    Unlike search normalization this keeps original casing and diacritics.
    """
    if value is None:
        return ""
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.isoformat()
        return to_utc_z(value)
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        return ", ".join(format_export_value(item) for item in value)
    return str(value)


def exportable_columns(columns: Iterable[ColumnDefinition]) -> List[ColumnDefinition]:
    return [column for column in columns if column.is_exportable]


def build_export_payload(rows: Sequence[Any], columns: Iterable[ColumnDefinition]) -> ExportPayload:
    """Headers and formatted values for every column that has an accessor."""
    selected = exportable_columns(columns)
    return ExportPayload(
        headers=[column.label for column in selected],
        rows=[[format_export_value(column.extract(row)) for column in selected] for row in rows],
    )


def to_csv(rows: Sequence[Any], columns: Iterable[ColumnDefinition]) -> str:
    """
    Render rows as BOM-prefixed CSV.
    
    Fields holding a comma, quote or newline are quoted with inner quotes
    doubled; records are joined with "\\n".
    """
    payload = build_export_payload(rows, columns)
    records = [payload.headers, *payload.rows]
    text = "\n".join(",".join(_escape_csv_field(value) for value in values) for values in records)
    return BOM + text


def _escape_csv_field(value: str) -> str:
    # Empty fields stay bare, even when they are the only field in a record.
    if any(char in value for char in CSV_QUOTE_TRIGGERS):
        return '"' + value.replace('"', '""') + '"'
    return value


def to_spreadsheet_html(rows: Sequence[Any], columns: Iterable[ColumnDefinition]) -> str:
    """Render rows as a BOM-prefixed HTML table for spreadsheet import."""
    payload = build_export_payload(rows, columns)

    def _escape(text: str) -> str:
        return html.escape(text, quote=False)

    head = "".join(f"<th>{_escape(label)}</th>" for label in payload.headers)
    body = "".join(
        "<tr>" + "".join(f"<td>{_escape(value)}</td>" for value in values) + "</tr>"
        for values in payload.rows
    )
    return f"{BOM}<table><thead><tr>{head}</tr></thead><tbody>{body}</tbody></table>"


def to_xlsx(rows: Sequence[Any], columns: Iterable[ColumnDefinition], sheet_name: str = "Data") -> bytes:
    """Render rows as an OOXML workbook with a single worksheet."""
    payload = build_export_payload(rows, columns)
    workbook = Workbook()
    worksheet = workbook.active
    worksheet.title = sheet_name
    worksheet.append(payload.headers)
    for values in payload.rows:
        worksheet.append(values)
    buffer = BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


def to_json(rows: Sequence[Any], columns: Iterable[ColumnDefinition]) -> str:
    """Render rows as label-keyed records wrapped in the export envelope."""
    payload = build_export_payload(rows, columns)
    export_data = {
        "export_schema_version": EXPORT_SCHEMA_VERSION,
        "exported_at_utc": utc_now_z(),
        "data": [dict(zip(payload.headers, values)) for values in payload.rows],
    }
    return json.dumps(export_data, indent=2, ensure_ascii=False)


def export_rows(
    rows: Sequence[Any],
    columns: Iterable[ColumnDefinition],
    format: str = ExportFormat.CSV,
    out: Optional[Path] = None,
) -> ExportResult:
    """
    Serialize rows in the requested format.
    
    Args:
        rows: Rows to export, in the order they should appear
        columns: Column definitions; accessor-less columns are skipped
        format: One of "csv", "html", "xlsx", "json"
        out: Optional output file path; content is also written there
        
    Returns:
        ExportResult with the serialized content and its media type
        
    Raises:
        ValueError: If the format is not supported
    """
    columns = list(columns)
    if format == ExportFormat.CSV:
        content: Any = to_csv(rows, columns)
    elif format == ExportFormat.HTML:
        content = to_spreadsheet_html(rows, columns)
    elif format == ExportFormat.XLSX:
        content = to_xlsx(rows, columns)
    elif format == ExportFormat.JSON:
        content = to_json(rows, columns)
    else:
        raise ValueError(f"Unsupported format: {format}")

    if out:
        if isinstance(content, bytes):
            out.write_bytes(content)
        else:
            out.write_text(content, encoding="utf-8", newline="")
        logger.info("Exported %d rows as %s to %s", len(rows), format, out)

    return ExportResult(
        format=format,
        content=content,
        media_type=MEDIA_TYPES[format],
        suggested_extension=FILE_EXTENSIONS[format],
    )
