"""Free-text search over a row set."""

from typing import Any, Iterable, List, Sequence

from .columns import ColumnDefinition
from .normalizer import normalize


def searchable_columns(columns: Iterable[ColumnDefinition]) -> List[ColumnDefinition]:
    """Columns that take part in search (accessor present, not actions, not opted out)."""
    return [column for column in columns if column.is_searchable]


def split_keywords(query: Any) -> List[str]:
    normalized = normalize(query)
    if not normalized:
        return []
    return [keyword for keyword in normalized.split(" ") if keyword]


def row_matches(row: Any, columns: Sequence[ColumnDefinition], keywords: Sequence[str]) -> bool:
    """
    True when every keyword occurs in at least one column's normalized value.
    """
    haystacks = [normalize(column.extract_search(row)) for column in columns]
    return all(any(keyword in haystack for haystack in haystacks) for keyword in keywords)


def filter_rows(rows: Sequence[Any], columns: Iterable[ColumnDefinition], query: Any) -> Sequence[Any]:
    """
    Keep the rows matching all keywords of ``query``.
    
    Args:
        rows: Row set to search
        columns: Table columns; non-searchable ones are ignored
        query: Free-text query
        
    Returns:
        ``rows`` itself when the query is empty, else a new list with the
        matching rows in their original order
    """
    keywords = split_keywords(query)
    if not keywords:
        return rows
    candidates = searchable_columns(columns)
    return [row for row in rows if row_matches(row, candidates, keywords)]
