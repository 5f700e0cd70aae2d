import uuid
from datetime import UTC, datetime


def new_row_id() -> str:
    return f"ROW-{datetime.now(UTC).strftime('%Y%m%d')}-{uuid.uuid4().hex[:8]}"
