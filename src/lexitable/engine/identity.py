"""Stable row keys for list rendering."""

from typing import Any, Callable, Optional

from pydantic import BaseModel

from ..utils.fields import get_field
from ..utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_ID_FIELD = "id"

IdExtractor = Callable[[Any], Any]


class RowIdentity(BaseModel):
    id: Any
    is_missing: bool = False


def resolve_id(
    row: Any,
    index: int,
    id_field: str = DEFAULT_ID_FIELD,
    extractor: Optional[IdExtractor] = None,
) -> RowIdentity:
    """
    Resolve a row's key, falling back to its position when it has none.

    Never raises: a row the extractor cannot handle is reported as missing.
    """
    raw_id = None
    if extractor is not None:
        try:
            raw_id = extractor(row)
        except Exception as exc:
            logger.debug("Row id extractor failed at index %d: %s", index, exc)
    else:
        raw_id = get_field(row, id_field or DEFAULT_ID_FIELD)

    if raw_id is None:
        return RowIdentity(id=index, is_missing=True)
    return RowIdentity(id=raw_id, is_missing=False)
