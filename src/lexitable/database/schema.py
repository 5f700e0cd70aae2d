from sqlalchemy import Column, Index, Integer, String, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class StoredRow(Base):
    __tablename__ = "stored_rows"

    pk = Column(Integer, primary_key=True, autoincrement=True)
    table_name = Column(String, nullable=False)
    row_id = Column(String, nullable=False)
    payload_json = Column(Text, nullable=False)
    created_at_utc = Column(String, nullable=False)
    updated_at_utc = Column(String, nullable=False)

    __table_args__ = (
        Index("idx_stored_rows_table_row", "table_name", "row_id", unique=True),
    )