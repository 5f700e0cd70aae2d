"""Pytest configuration and fixtures."""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from lexitable.database.schema import Base
from lexitable.engine.columns import ColumnDefinition


@pytest.fixture
def session():
    """Create a temporary in-memory database session for testing."""
    engine = create_engine("sqlite:///:memory:", echo=False)
    Base.metadata.create_all(engine)

    SessionLocal = sessionmaker(bind=engine)
    session = SessionLocal()

    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def sample_rows():
    return [
        {"id": 1, "name": "Bravo", "amount": 10},
        {"id": 2, "name": "alpha", "amount": 2},
        {"id": 3, "name": None, "amount": 5},
    ]


@pytest.fixture
def columns():
    return [
        ColumnDefinition.for_field("name", "Name"),
        ColumnDefinition.for_field("amount", "Amount"),
        ColumnDefinition(key="actions", label="Actions", sortable=False, searchable=False),
    ]


@pytest.fixture
def clients():
    """Bilingual client rows the way the office dashboard lists them."""
    return [
        {"id": "c1", "name": "أحمد علي", "city": "Cairo", "case_no": "item10", "fee": "1,200"},
        {"id": "c2", "name": "مدرسة النور", "city": "Alexandria", "case_no": "item2", "fee": "950"},
        {"id": "c3", "name": "John Smith", "city": "cairo", "case_no": "item1", "fee": None},
        {"id": "c4", "name": "قاضٍ مستقل", "city": "Giza", "case_no": "Item3", "fee": "75"},
    ]


@pytest.fixture
def client_columns():
    return [
        ColumnDefinition.for_field("name", "Name"),
        ColumnDefinition.for_field("city", "City"),
        ColumnDefinition.for_field("case_no", "Case"),
        ColumnDefinition.for_field("fee", "Fee"),
    ]
