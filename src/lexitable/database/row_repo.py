"""Repository for rows stored per table, keyed by row id."""

import json
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from ..utils.id_generator import new_row_id
from ..utils.logging import get_logger
from ..utils.time import utc_now_z
from .schema import StoredRow

logger = get_logger(__name__)


def _find(session: Session, table_name: str, row_id: Any) -> Optional[StoredRow]:
    return (
        session.query(StoredRow)
        .filter(StoredRow.table_name == table_name, StoredRow.row_id == str(row_id))
        .first()
    )


def _load_payload(stored: StoredRow) -> Dict[str, Any]:
    try:
        payload = json.loads(stored.payload_json)
    except (json.JSONDecodeError, TypeError):
        logger.warning(f"Stored row {stored.table_name}/{stored.row_id} has invalid JSON payload")
        return {}
    return payload if isinstance(payload, dict) else {}


def list_rows(session: Session, table_name: str) -> List[Dict[str, Any]]:
    """All rows of a table in insertion order."""
    stored = (
        session.query(StoredRow)
        .filter(StoredRow.table_name == table_name)
        .order_by(StoredRow.pk.asc())
        .all()
    )
    return [_load_payload(row) for row in stored]


def get_row(session: Session, table_name: str, row_id: Any) -> Optional[Dict[str, Any]]:
    stored = _find(session, table_name, row_id)
    return _load_payload(stored) if stored else None


def create_row(
    session: Session,
    table_name: str,
    data: Dict[str, Any],
    id_field: str = "id",
) -> Dict[str, Any]:
    """
    Insert a row, generating an id when the payload has none.
    
    Raises:
        ValueError: If a row with the same id already exists in the table
    """
    payload = dict(data)
    if payload.get(id_field) is None:
        payload[id_field] = new_row_id()
    row_id = str(payload[id_field])

    if _find(session, table_name, row_id):
        raise ValueError(f"Row already exists: {table_name}/{row_id}")

    now = utc_now_z()
    session.add(
        StoredRow(
            table_name=table_name,
            row_id=row_id,
            payload_json=json.dumps(payload, default=str, ensure_ascii=False),
            created_at_utc=now,
            updated_at_utc=now,
        )
    )
    session.commit()
    logger.debug(f"Created row {table_name}/{row_id}")
    return payload


def update_row(
    session: Session,
    table_name: str,
    row_id: Any,
    changes: Dict[str, Any],
    id_field: str = "id",
) -> Optional[Dict[str, Any]]:
    """Merge ``changes`` into an existing row. Returns None if the row is unknown."""
    stored = _find(session, table_name, row_id)
    if stored is None:
        return None
    existing = _load_payload(stored)
    payload = {**existing, **changes}
    payload[id_field] = existing.get(id_field, row_id)
    stored.payload_json = json.dumps(payload, default=str, ensure_ascii=False)
    stored.updated_at_utc = utc_now_z()
    session.commit()
    return payload


def delete_row(session: Session, table_name: str, row_id: Any) -> bool:
    stored = _find(session, table_name, row_id)
    if stored is None:
        return False
    session.delete(stored)
    session.commit()
    logger.debug(f"Deleted row {table_name}/{row_id}")
    return True


def import_rows(
    session: Session,
    table_name: str,
    rows: Iterable[Dict[str, Any]],
    id_field: str = "id",
) -> int:
    """
    Upsert rows into a table.

    Rows whose id already exists are updated in place; the rest are created.
    """
    count = 0
    for data in rows:
        row_id = data.get(id_field)
        if row_id is not None and _find(session, table_name, row_id):
            update_row(session, table_name, row_id, data, id_field=id_field)
        else:
            create_row(session, table_name, data, id_field=id_field)
        count += 1
    logger.info(f"Imported {count} rows into {table_name}")
    return count
