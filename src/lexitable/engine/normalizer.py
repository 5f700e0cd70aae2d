"""Search normalization for bilingual (Arabic/Latin) table content."""

import math
import re
from collections.abc import Mapping
from datetime import date
from decimal import Decimal
from typing import Any

# Arabic tashkeel (U+064B..U+065F), superscript alef and tatweel
ARABIC_MARKS_RE = re.compile("[\u064B-\u065F\u0670\u0640]")
WHITESPACE_RE = re.compile(r"\s+")

ARABIC_FOLDS = str.maketrans(
    {
        "أ": "ا",  # alef with hamza above
        "إ": "ا",  # alef with hamza below
        "آ": "ا",  # alef with madda
        "ٱ": "ا",  # alef wasla
        "ئ": "ي",  # yeh with hamza above
        "ى": "ي",  # alef maksura
        "ة": "ه",  # teh marbuta
    }
)


def normalize_text(text: str) -> str:
    text = text.lower()
    text = ARABIC_MARKS_RE.sub("", text)
    text = text.translate(ARABIC_FOLDS)
    text = WHITESPACE_RE.sub(" ", text)
    return text.strip()


def _number_text(value: Any) -> str:
    if isinstance(value, float):
        if not math.isfinite(value):
            return ""
        if value.is_integer():
            return str(int(value))
        return repr(value)
    if isinstance(value, Decimal):
        if not value.is_finite():
            return ""
        return format(value, "f")
    return str(value)


def normalize(value: Any) -> str:
    """
    Canonical searchable form of an arbitrary field value.

    None becomes "", containers are normalized element-wise and joined with a
    single space, non-finite numbers become "" and strings are lower-cased with
    Arabic diacritics stripped and hamza/yeh/teh-marbuta variants folded.
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return normalize_text(value)
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float, Decimal)):
        return _number_text(value)
    if isinstance(value, date):
        return normalize_text(value.isoformat())
    if isinstance(value, Mapping):
        parts = [normalize(item) for item in value.values()]
        return " ".join(part for part in parts if part)
    if isinstance(value, (list, tuple, set, frozenset)):
        parts = [normalize(item) for item in value]
        return " ".join(part for part in parts if part)
    return normalize_text(str(value))
