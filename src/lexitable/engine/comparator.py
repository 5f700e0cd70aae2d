"""Natural, locale-aware value comparison and stable sorting."""

import math
import re
import unicodedata
from datetime import date
from decimal import Decimal, InvalidOperation
from functools import cmp_to_key
from typing import Any, List, Optional, Sequence, Tuple, Union

from ..utils.time import to_epoch_ms
from .columns import ColumnDefinition

ASC = "asc"
DESC = "desc"

DIGIT_RUN_RE = re.compile(r"(\d+)")
NUMERIC_TEXT_RE = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")


def _sign(value: float) -> int:
    if value > 0:
        return 1
    if value < 0:
        return -1
    return 0


def as_number(value: Any) -> Optional[float]:
    """
    Numeric view of a value: real numbers as-is, numeric-looking strings
    (thousands separators allowed) parsed. Returns None otherwise; integers
    beyond float range map to signed infinity.
    """
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float, Decimal)):
        try:
            return float(value)
        except OverflowError:
            return math.inf if value > 0 else -math.inf
    if isinstance(value, str):
        text = value.strip().replace(",", "")
        if not text or not NUMERIC_TEXT_RE.match(text):
            return None
        try:
            return float(Decimal(text))
        except (InvalidOperation, ValueError, OverflowError):
            return None
    return None


def collation_key(text: str) -> List[Union[str, int]]:
    """
    Case- and diacritic-insensitive key with digit runs compared numerically.

    The key alternates text and integer segments, always starting with text,
    so two keys are always comparable element by element.
    """
    decomposed = unicodedata.normalize("NFD", text)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    folded = unicodedata.normalize("NFC", stripped).casefold()
    parts: List[Union[str, int]] = []
    for index, part in enumerate(DIGIT_RUN_RE.split(folded)):
        parts.append(int(part) if index % 2 else part)
    return parts


def compare_text(a: str, b: str) -> int:
    key_a = collation_key(a)
    key_b = collation_key(b)
    if key_a == key_b:
        return 0
    return -1 if key_a < key_b else 1


def _is_date(value: Any) -> bool:
    return isinstance(value, date)


def _is_plain_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def compare_values(a: Any, b: Any) -> int:
    """
    Three-way comparison used by the sort engine.
    
    Order of rules: identical values are equal, None is the minimum, dates
    compare by epoch milliseconds (unparsable counterparts compare equal),
    numbers and numeric-looking strings compare numerically, everything else
    uses natural collation.
    """
    if a is b:
        return 0
    if a is None:
        return -1
    if b is None:
        return 1
    if type(a) is type(b):
        try:
            if a == b:
                return 0
        except (TypeError, ValueError):
            pass

    if _is_date(a) or _is_date(b):
        ms_a = to_epoch_ms(a)
        ms_b = to_epoch_ms(b)
        if ms_a is None or ms_b is None:
            return 0
        return _sign(ms_a - ms_b)

    if _is_plain_int(a) and _is_plain_int(b):
        return _sign(a - b)

    num_a = as_number(a)
    num_b = as_number(b)
    if num_a is not None and num_b is not None:
        if math.isnan(num_a) or math.isnan(num_b):
            return 0
        return _sign(num_a - num_b)

    return compare_text(str(a), str(b))


def sort_rows(
    rows: Sequence[Any],
    column: Optional[ColumnDefinition],
    direction: str = ASC,
) -> Sequence[Any]:
    """
    Stable sort of ``rows`` by ``column``.
    
    Args:
        rows: Row set (not modified)
        column: Column to sort by; None, accessor-less or non-sortable
            columns leave the rows untouched
        direction: "asc" or "desc"; descending negates the comparison while
            ties keep their input order
        
    Returns:
        A new sorted list, or ``rows`` itself when sorting does not apply
    """
    if column is None or not column.is_sortable:
        return rows

    multiplier = -1 if direction == DESC else 1
    decorated: List[Tuple[Any, Any]] = [(column.extract_sort(row), row) for row in rows]

    def _cmp(left: Tuple[Any, Any], right: Tuple[Any, Any]) -> int:
        return compare_values(left[0], right[0]) * multiplier

    return [row for _, row in sorted(decorated, key=cmp_to_key(_cmp))]
