"""Table controller: query state plus the filter -> sort -> page pipeline."""

from pathlib import Path
from typing import Any, Dict, List, Literal, Optional, Sequence

from pydantic import BaseModel, Field

from .engine.columns import ColumnDefinition, find_column, validate_columns
from .engine.comparator import ASC, DESC, sort_rows
from .engine.identity import DEFAULT_ID_FIELD, IdExtractor, resolve_id
from .engine.pager import PageResult, clamp_page, paginate, total_pages_for
from .engine.search import filter_rows
from .export.formatter import export_rows
from .export.models import ExportFormat, ExportResult
from .qa.checks import CheckResult, column_renderers, run_table_checks
from .utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_PAGE_SIZE = 10

EXPORT_SCOPES = ("filtered", "sorted", "raw")


class FeatureDisabledError(RuntimeError):
    """Raised when a disabled table feature is invoked explicitly."""


class TableFeatures(BaseModel):
    enable_search: bool = True
    enable_sort: bool = True
    enable_export: bool = True
    enable_pagination: bool = True


class QueryState(BaseModel):
    search_text: str = ""
    sort_key: Optional[str] = None
    sort_direction: Literal["asc", "desc"] = ASC
    page: int = Field(default=1, ge=1)


class VisibleRow(BaseModel):
    id: Any
    is_missing: bool = False
    row: Any = None
    cells: Dict[str, Any] = Field(default_factory=dict)


class TableView(BaseModel):
    """What the rendering layer draws for the current state."""

    rows: List[VisibleRow] = Field(default_factory=list)
    page: int = 1
    total_pages: int = 1
    total_rows: int = 0
    filtered_count: int = 0
    start_index: int = 0
    end_index: int = 0
    state: QueryState = Field(default_factory=QueryState)


class TableController:
    """
    Owns the query state of one table instance.

    Rows always flow filter -> sort -> page, so sort stability and the
    "showing X-Y of Z" counts apply to the filtered population only.
    """

    def __init__(
        self,
        rows: Sequence[Any],
        columns: Sequence[ColumnDefinition],
        *,
        page_size: int = DEFAULT_PAGE_SIZE,
        id_field: str = DEFAULT_ID_FIELD,
        id_extractor: Optional[IdExtractor] = None,
        features: Optional[TableFeatures] = None,
    ):
        self.columns: List[ColumnDefinition] = validate_columns(columns)
        self.rows: Sequence[Any] = list(rows or [])
        self.page_size = max(1, int(page_size))
        self.id_field = id_field
        self.id_extractor = id_extractor
        self.features = features or TableFeatures()
        self.state = QueryState()

    # State transitions -------------------------------------------------

    def set_search_text(self, text: Optional[str]) -> None:
        if not self.features.enable_search:
            logger.debug("Search disabled; ignoring query %r", text)
            return
        self.state = self.state.model_copy(update={"search_text": text or "", "page": 1})

    def set_sort(self, key: str) -> None:
        if not self.features.enable_sort:
            logger.debug("Sort disabled; ignoring sort on %r", key)
            return
        column = find_column(self.columns, key)
        if column is None or not column.is_sortable:
            logger.debug("Column %r is not sortable", key)
            return
        if self.state.sort_key == key:
            direction = DESC if self.state.sort_direction == ASC else ASC
        else:
            direction = ASC
        self.state = self.state.model_copy(update={"sort_key": key, "sort_direction": direction, "page": 1})

    def clear_sort(self) -> None:
        self.state = self.state.model_copy(update={"sort_key": None, "sort_direction": ASC, "page": 1})

    def go_to_page(self, page: Any) -> int:
        clamped = clamp_page(page, self.total_pages)
        self.state = self.state.model_copy(update={"page": clamped})
        return clamped

    def next_page(self) -> int:
        return self.go_to_page(self.state.page + 1)

    def previous_page(self) -> int:
        return self.go_to_page(self.state.page - 1)

    def set_rows(self, rows: Sequence[Any]) -> None:
        """
        Replace the data set.

        A change in row count sends the user back to page 1; a same-size
        replacement keeps the current page, clamped to the new range.
        """
        rows = list(rows or [])
        resized = len(rows) != len(self.rows)
        self.rows = rows
        self.go_to_page(1 if resized else self.state.page)

    def set_page_size(self, page_size: int) -> None:
        self.page_size = max(1, int(page_size))
        self.state = self.state.model_copy(update={"page": 1})

    # Pipeline ---------------------------------------------------------

    @property
    def sort_column(self) -> Optional[ColumnDefinition]:
        if not self.features.enable_sort:
            return None
        return find_column(self.columns, self.state.sort_key)

    def filtered_rows(self) -> Sequence[Any]:
        if not self.features.enable_search:
            return self.rows
        return filter_rows(self.rows, self.columns, self.state.search_text)

    def sorted_rows(self) -> Sequence[Any]:
        return sort_rows(self.filtered_rows(), self.sort_column, self.state.sort_direction)

    @property
    def effective_page_size(self) -> int:
        if self.features.enable_pagination:
            return self.page_size
        return max(1, len(self.rows))

    @property
    def total_pages(self) -> int:
        return total_pages_for(len(self.filtered_rows()), self.effective_page_size)

    def current_page(self) -> PageResult:
        return paginate(self.sorted_rows(), self.effective_page_size, self.state.page)

    def view(self) -> TableView:
        """Run the pipeline for the current state."""
        page = self.current_page()
        if page.page != self.state.page:
            self.state = self.state.model_copy(update={"page": page.page})

        offset = (page.page - 1) * page.page_size
        visible = []
        for position, row in enumerate(page.rows):
            identity = resolve_id(row, offset + position, self.id_field, self.id_extractor)
            visible.append(
                VisibleRow(
                    id=identity.id,
                    is_missing=identity.is_missing,
                    row=row,
                    cells={column.key: column.display(row) for column in self.columns},
                )
            )
        return TableView(
            rows=visible,
            page=page.page,
            total_pages=page.total_pages,
            total_rows=len(self.rows),
            filtered_count=page.total_rows,
            start_index=page.start_index,
            end_index=page.end_index,
            state=self.state,
        )

    # Collaborator helpers ---------------------------------------------

    def export(
        self,
        format: str = ExportFormat.CSV,
        scope: str = "sorted",
        out: Optional[Path] = None,
    ) -> ExportResult:
        """
        Export the raw, filtered or filtered-and-sorted row set.
        
        Raises:
            FeatureDisabledError: If export is disabled for this table
            ValueError: If scope or format is unknown
        """
        if not self.features.enable_export:
            raise FeatureDisabledError("Export is disabled for this table")
        if scope == "raw":
            rows = self.rows
        elif scope == "filtered":
            rows = self.filtered_rows()
        elif scope == "sorted":
            rows = self.sorted_rows()
        else:
            raise ValueError(f"Unsupported export scope: {scope}")
        return export_rows(rows, self.columns, format=format, out=out)

    def find_row(self, row_id: Any) -> Optional[Any]:
        for index, row in enumerate(self.rows):
            identity = resolve_id(row, index, self.id_field, self.id_extractor)
            if not identity.is_missing and identity.id == row_id:
                return row
        return None

    def run_checks(self) -> List[CheckResult]:
        return run_table_checks(
            self.columns,
            self.rows,
            id_field=self.id_field,
            id_extractor=self.id_extractor,
            renderers=column_renderers(self.columns),
        )
