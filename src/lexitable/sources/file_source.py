import csv
import json
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from ..utils.logging import get_logger

logger = get_logger(__name__)


def unwrap_rows(payload: Any, resource_key: Optional[str] = None) -> List[Dict[str, Any]]:
    """
    Extract the row list from a response or file payload.

    Accepts a bare list, ``{"data": [...]}`` or ``{"<resource_key>": [...]}``.
    Anything else yields an empty list.
    """
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        if resource_key and isinstance(payload.get(resource_key), list):
            return payload[resource_key]
        if isinstance(payload.get("data"), list):
            return payload["data"]
    return []


def _read_csv(path: Path) -> List[Dict[str, Any]]:
    with path.open("r", encoding="utf-8-sig", newline="") as f:
        reader = csv.DictReader(f)
        # Empty cells become None so they sort and export like missing values
        return [{key: (value if value != "" else None) for key, value in row.items()} for row in reader]


def load_rows(path: Path, resource_key: Optional[str] = None) -> List[Dict[str, Any]]:
    """
    Load rows from a JSON, YAML or CSV file.
    
    Args:
        path: File to read; the suffix selects the parser
        resource_key: Optional wrapper key for JSON/YAML payloads
        
    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the suffix is not supported
    """
    if not path.exists():
        raise FileNotFoundError(f"Rows file not found: {path}")

    suffix = path.suffix.lower()
    if suffix == ".csv":
        rows = _read_csv(path)
    elif suffix == ".json":
        rows = unwrap_rows(json.loads(path.read_text(encoding="utf-8")), resource_key)
    elif suffix in (".yaml", ".yml"):
        with path.open("r", encoding="utf-8") as f:
            rows = unwrap_rows(yaml.safe_load(f), resource_key)
    else:
        raise ValueError(f"Unsupported rows file type: {path.suffix}")

    logger.info(f"Loaded {len(rows)} rows from {path}")
    return rows
