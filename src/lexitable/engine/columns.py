"""Column definitions shared by search, sort, export and rendering."""

from typing import Any, Callable, Iterable, List, Optional

from pydantic import BaseModel, ConfigDict

from ..utils.fields import field_getter
from ..utils.logging import get_logger

logger = get_logger(__name__)

ACTIONS_KEY = "actions"

Accessor = Callable[[Any], Any]


class ColumnConfigError(ValueError):
    """Raised when a table's column definitions are inconsistent."""


class ColumnDefinition(BaseModel):
    """
    Metadata and accessors for one table column.

    A column without an accessor is display-only: it never takes part in
    search, sort or export, whatever its flags say.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    key: str
    label: str
    accessor: Optional[Accessor] = None
    sort_value: Optional[Accessor] = None
    search_value: Optional[Accessor] = None
    render: Optional[Accessor] = None
    sortable: bool = True
    searchable: bool = True

    @classmethod
    def for_field(
        cls,
        key: str,
        label: str,
        field: Optional[str] = None,
        **kwargs: Any,
    ) -> "ColumnDefinition":
        """Build a column whose accessor reads a (dotted) field of the row."""
        return cls(key=key, label=label, accessor=field_getter(field or key), **kwargs)

    @property
    def has_accessor(self) -> bool:
        return self.accessor is not None

    @property
    def is_searchable(self) -> bool:
        return self.has_accessor and self.searchable and self.key != ACTIONS_KEY

    @property
    def is_sortable(self) -> bool:
        return self.has_accessor and self.sortable

    @property
    def is_exportable(self) -> bool:
        return self.has_accessor

    def _call(self, fn: Optional[Accessor], row: Any) -> Any:
        if fn is None:
            return None
        try:
            return fn(row)
        except Exception as exc:
            logger.debug("Accessor for column %r failed: %s", self.key, exc)
            return None

    def extract(self, row: Any) -> Any:
        return self._call(self.accessor, row)

    def extract_sort(self, row: Any) -> Any:
        if not self.has_accessor:
            return None
        return self._call(self.sort_value or self.accessor, row)

    def extract_search(self, row: Any) -> Any:
        if not self.has_accessor:
            return None
        return self._call(self.search_value or self.accessor, row)

    def display(self, row: Any) -> Any:
        """Value shown in a cell: the renderer if any, else the accessor value."""
        if self.render is not None:
            return self._call(self.render, row)
        return self.extract(row)


def validate_columns(columns: Iterable[ColumnDefinition]) -> List[ColumnDefinition]:
    """
    Check column keys once per table.
    
    Raises:
        ColumnConfigError: If a key is empty or used more than once
    """
    validated = list(columns)
    seen = set()
    for column in validated:
        if not column.key:
            raise ColumnConfigError("Column key must not be empty")
        if column.key in seen:
            raise ColumnConfigError(f"Duplicate column key: {column.key}")
        seen.add(column.key)
    return validated


def find_column(columns: Iterable[ColumnDefinition], key: Optional[str]) -> Optional[ColumnDefinition]:
    if key is None:
        return None
    for column in columns:
        if column.key == key:
            return column
    return None
