"""Self-verification checks a host can run against a table's headers and rows."""

from collections.abc import Mapping
from datetime import date
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional, Sequence, Set

from pydantic import BaseModel

from ..engine.columns import ACTIONS_KEY, ColumnDefinition
from ..engine.identity import DEFAULT_ID_FIELD, IdExtractor, resolve_id


class CheckResult(BaseModel):
    """Outcome of one named diagnostic check."""

    id: str
    label: str
    passed: bool


def _header_attr(header: Any, name: str) -> Any:
    if isinstance(header, ColumnDefinition):
        return getattr(header, name)
    if isinstance(header, Mapping):
        if name == "label":
            return header.get("label", header.get("text"))
        return header.get(name)
    return None


def _is_displayable(value: Any) -> bool:
    return value is None or isinstance(value, (str, int, float, Decimal, date))


def _all_unique(values: List[Any]) -> bool:
    seen: Set[Any] = set()
    unhashable: List[Any] = []
    for value in values:
        try:
            if value in seen:
                return False
            seen.add(value)
        except TypeError:
            if value in unhashable:
                return False
            unhashable.append(value)
    return True


def run_table_checks(
    headers: Sequence[Any],
    rows: Sequence[Any],
    id_field: str = DEFAULT_ID_FIELD,
    id_extractor: Optional[IdExtractor] = None,
    renderers: Optional[Dict[str, Callable[[Any], Any]]] = None,
) -> List[CheckResult]:
    """
    Run the header, row-identity and renderer checks.
    
    Args:
        headers: ColumnDefinitions or raw header mappings (key/label or key/text)
        rows: Row set the table displays
        id_field: Field holding each row's id
        id_extractor: Optional callable overriding ``id_field``
        renderers: Optional renderers keyed by column key, sampled on the first row
        
    Returns:
        One CheckResult per check, in a fixed order
    """
    headers = list(headers or [])
    results: List[CheckResult] = []

    results.append(
        CheckResult(id="headers-non-empty", label="Headers array is not empty", passed=len(headers) > 0)
    )

    keys = [_header_attr(header, "key") for header in headers]
    results.append(
        CheckResult(
            id="headers-have-key",
            label="Each header has key/label",
            passed=all(_header_attr(h, "key") and _header_attr(h, "label") for h in headers),
        )
    )

    present_keys = [key for key in keys if key]
    results.append(
        CheckResult(id="headers-unique", label="Header keys are unique", passed=_all_unique(present_keys))
    )

    actions_header = next((h for h in headers if _header_attr(h, "key") == ACTIONS_KEY), None)
    results.append(
        CheckResult(
            id="actions-not-searchable",
            label="Actions header not searchable",
            passed=actions_header is None or _header_attr(actions_header, "searchable") is False,
        )
    )

    identities = [resolve_id(row, index, id_field, id_extractor) for index, row in enumerate(rows)]
    results.append(
        CheckResult(
            id="row-id-present",
            label="Row IDs are present",
            passed=all(not identity.is_missing for identity in identities),
        )
    )
    results.append(
        CheckResult(
            id="row-id-unique",
            label="Row IDs are unique",
            passed=_all_unique([identity.id for identity in identities]),
        )
    )

    sample = rows[0] if rows else None
    for key, renderer in (renderers or {}).items():
        value = None
        passed = True
        if sample is not None and callable(renderer):
            try:
                value = renderer(sample)
            except Exception:
                passed = False
        results.append(
            CheckResult(
                id=f"renderer-{key}",
                label=f"Renderer for {key} returns a displayable value",
                passed=passed and _is_displayable(value),
            )
        )

    return results


def column_renderers(columns: Sequence[ColumnDefinition]) -> Dict[str, Callable[[Any], Any]]:
    return {column.key: column.render for column in columns if column.render is not None}


def checks_passed(results: Sequence[CheckResult]) -> bool:
    return all(result.passed for result in results)
