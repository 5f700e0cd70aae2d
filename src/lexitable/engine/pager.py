"""Page arithmetic for table views."""

import math
from typing import Any, List, Sequence

from pydantic import BaseModel, Field


class PageResult(BaseModel):
    """One visible window of a row set."""

    rows: List[Any] = Field(default_factory=list)
    page: int = 1
    total_pages: int = 1
    total_rows: int = 0
    page_size: int = 10
    start_index: int = 0  # 1-based index of first visible row, 0 when empty
    end_index: int = 0


def _coerce_int(value: Any, fallback: int) -> int:
    if isinstance(value, bool):
        return fallback
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return fallback


def total_pages_for(row_count: int, page_size: int) -> int:
    size = max(1, _coerce_int(page_size, 1))
    return max(1, math.ceil(row_count / size))


def clamp_page(requested_page: Any, total_pages: int) -> int:
    page = _coerce_int(requested_page, 1)
    return min(max(page, 1), max(1, total_pages))


def paginate(rows: Sequence[Any], page_size: int, requested_page: Any = 1) -> PageResult:
    """
    Slice out the requested page, clamped into ``[1, total_pages]``.

    An empty row set still has one (empty) page.
    """
    size = max(1, _coerce_int(page_size, 1))
    total_rows = len(rows)
    total_pages = total_pages_for(total_rows, size)
    page = clamp_page(requested_page, total_pages)

    start = (page - 1) * size
    window = list(rows[start:start + size])
    return PageResult(
        rows=window,
        page=page,
        total_pages=total_pages,
        total_rows=total_rows,
        page_size=size,
        start_index=start + 1 if window else 0,
        end_index=start + len(window),
    )
