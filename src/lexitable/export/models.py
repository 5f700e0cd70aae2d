"""Pydantic models for export payloads and results."""

from typing import List, Union

from pydantic import BaseModel, Field


class ExportFormat:
    CSV = "csv"
    HTML = "html"
    XLSX = "xlsx"
    JSON = "json"

    ALL = (CSV, HTML, XLSX, JSON)


MEDIA_TYPES = {
    ExportFormat.CSV: "text/csv;charset=utf-8",
    ExportFormat.HTML: "application/vnd.ms-excel",
    ExportFormat.XLSX: "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    ExportFormat.JSON: "application/json",
}

# Spreadsheet HTML is saved as .xls so spreadsheet tools open it as a worksheet
FILE_EXTENSIONS = {
    ExportFormat.CSV: ".csv",
    ExportFormat.HTML: ".xls",
    ExportFormat.XLSX: ".xlsx",
    ExportFormat.JSON: ".json",
}


class ExportPayload(BaseModel):
    """Header labels plus formatted cell values, one list per row."""

    headers: List[str] = Field(default_factory=list)
    rows: List[List[str]] = Field(default_factory=list)


class ExportResult(BaseModel):
    """Serialized export ready to be written or downloaded."""

    format: str
    content: Union[str, bytes]
    media_type: str
    suggested_extension: str
