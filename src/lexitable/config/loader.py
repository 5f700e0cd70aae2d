from copy import deepcopy
from pathlib import Path
from typing import Any, Callable, Dict, List

import yaml
from jsonschema import Draft202012Validator, ValidationError

from ..engine.columns import ACTIONS_KEY, ColumnDefinition
from ..engine.comparator import as_number
from ..utils.fields import field_getter, get_field
from ..utils.time import parse_datetime

DEFAULT_TABLES_PATH = Path("lexitable.tables.yaml")

COLUMN_TYPES = ("text", "number", "date")

BASE_DEFAULTS: Dict[str, Any] = {
    "page_size": 10,
    "id_field": "id",
}

BASE_FEATURES: Dict[str, bool] = {
    "search": True,
    "sort": True,
    "export": True,
    "pagination": True,
}

COLUMN_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "required": ["key", "label"],
    "properties": {
        "key": {"type": "string", "minLength": 1},
        "label": {"type": "string"},
        "field": {"type": "string", "minLength": 1},
        "sort_field": {"type": "string", "minLength": 1},
        "search_fields": {"type": "array", "items": {"type": "string", "minLength": 1}},
        "type": {"enum": list(COLUMN_TYPES)},
        "sortable": {"type": "boolean"},
        "searchable": {"type": "boolean"},
    },
    "additionalProperties": False,
}

TABLES_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "required": ["version", "tables"],
    "properties": {
        "version": {"type": "integer", "minimum": 1},
        "defaults": {
            "type": "object",
            "properties": {
                "page_size": {"type": "integer", "minimum": 1},
                "id_field": {"type": "string", "minLength": 1},
            },
        },
        "storage": {
            "type": "object",
            "properties": {"sqlite_path": {"type": "string"}},
        },
        "api": {
            "type": "object",
            "properties": {
                "base_url": {"type": "string"},
                "timeout_seconds": {"type": "number", "exclusiveMinimum": 0},
            },
        },
        "tables": {
            "type": "object",
            "additionalProperties": {
                "type": "object",
                "required": ["columns"],
                "properties": {
                    "resource": {"type": "string"},
                    "page_size": {"type": "integer", "minimum": 1},
                    "id_field": {"type": "string", "minLength": 1},
                    "features": {
                        "type": "object",
                        "properties": {name: {"type": "boolean"} for name in BASE_FEATURES},
                        "additionalProperties": False,
                    },
                    "columns": {"type": "array", "items": COLUMN_SCHEMA},
                },
            },
        },
    },
}


def _format_error_path(error: ValidationError) -> str:
    if not error.absolute_path:
        return "$"
    return ".".join(("$", *map(str, error.absolute_path)))


def validate_tables_config(config: Any) -> None:
    """
    Validate a parsed tables config against the JSON schema.
    
    Raises:
        ValueError: On the first (deterministically ordered) schema violation
    """
    validator = Draft202012Validator(TABLES_SCHEMA)
    errors = sorted(validator.iter_errors(config), key=lambda e: list(map(str, e.absolute_path)))
    if errors:
        first = errors[0]
        raise ValueError(f"Invalid tables config at {_format_error_path(first)}: {first.message}")


def load_tables_config(path: Path | None = None) -> Dict[str, Any]:
    """
    Load table definitions from YAML.
    
    Args:
        path: Optional path to the tables file. Defaults to lexitable.tables.yaml
        
    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the structure is invalid
    """
    cfg_path = path or DEFAULT_TABLES_PATH
    if not cfg_path.exists():
        raise FileNotFoundError(f"Tables config file not found: {cfg_path}")
    with cfg_path.open("r", encoding="utf-8") as f:
        config = yaml.safe_load(f)

    if not isinstance(config, dict):
        raise ValueError("Tables config must be a dictionary")
    validate_tables_config(config)

    seen_keys: Dict[str, set] = {}
    for table_name, table in config["tables"].items():
        keys = seen_keys.setdefault(table_name, set())
        for column in table["columns"]:
            if column["key"] in keys:
                raise ValueError(f"Table '{table_name}' has duplicate column key: {column['key']}")
            keys.add(column["key"])
    return config


def get_table_config(config: Dict[str, Any], name: str) -> Dict[str, Any]:
    """
    Resolve one table entry with defaults applied.
    
    Raises:
        KeyError: If the table is not configured
    """
    tables = config.get("tables") or {}
    if name not in tables:
        raise KeyError(f"Unknown table: {name}")

    defaults = {**BASE_DEFAULTS, **(config.get("defaults") or {})}
    table = deepcopy(tables[name])
    table["name"] = name
    table.setdefault("page_size", defaults["page_size"])
    table.setdefault("id_field", defaults["id_field"])
    table.setdefault("resource", f"/api/{name}")
    table["features"] = {**BASE_FEATURES, **(table.get("features") or {})}
    return table


def _coerce_number(value: Any) -> Any:
    number = as_number(value)
    return value if number is None else number


def _typed_getter(path: str, column_type: str) -> Callable[[Any], Any]:
    getter = field_getter(path)
    if column_type == "date":
        return lambda row: parse_datetime(getter(row))
    if column_type == "number":
        return lambda row: _coerce_number(getter(row))
    return getter


def _composite_getter(paths: List[str]) -> Callable[[Any], Any]:
    return lambda row: [get_field(row, path) for path in paths]


def build_column(entry: Dict[str, Any]) -> ColumnDefinition:
    """Turn one config column entry into a ColumnDefinition."""
    key = entry["key"]
    column_type = entry.get("type", "text")
    field = entry.get("field")
    if field is None and key != ACTIONS_KEY:
        field = key

    accessor = field_getter(field) if field else None
    sort_value = None
    if accessor is not None:
        sort_path = entry.get("sort_field", field)
        if column_type != "text" or sort_path != field:
            sort_value = _typed_getter(sort_path, column_type)

    search_value = None
    if entry.get("search_fields"):
        search_value = _composite_getter(entry["search_fields"])

    return ColumnDefinition(
        key=key,
        label=entry["label"],
        accessor=accessor,
        sort_value=sort_value,
        search_value=search_value,
        sortable=entry.get("sortable", True),
        searchable=entry.get("searchable", True),
    )


def build_columns(table_config: Dict[str, Any]) -> List[ColumnDefinition]:
    return [build_column(entry) for entry in table_config.get("columns", [])]
