from collections.abc import Mapping
from typing import Any, Callable


def get_field(row: Any, path: str) -> Any:
    """
    Resolve a dotted field path against a row.

    Mappings are indexed by key, anything else by attribute. Missing segments
    resolve to None.
    """
    current = row
    for part in path.split("."):
        if current is None:
            return None
        if isinstance(current, Mapping):
            current = current.get(part)
        else:
            current = getattr(current, part, None)
    return current


def field_getter(path: str) -> Callable[[Any], Any]:
    def _get(row: Any) -> Any:
        return get_field(row, path)

    _get.__name__ = f"get_{path.replace('.', '_')}"
    return _get
