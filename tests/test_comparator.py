"""Tests for value comparison and stable sorting."""

from datetime import date, datetime, timezone

import pytest

from lexitable.engine.columns import ColumnDefinition
from lexitable.engine.comparator import as_number, collation_key, compare_values, sort_rows


def _ids(rows):
    return [row["id"] for row in rows]


def test_sort_by_name_ascending_puts_null_first(sample_rows, columns):
    result = sort_rows(sample_rows, columns[0], "asc")
    assert _ids(result) == [3, 2, 1]


def test_sort_by_name_descending_mirrors_order(sample_rows, columns):
    result = sort_rows(sample_rows, columns[0], "desc")
    assert _ids(result) == [1, 2, 3]


def test_sort_numbers(sample_rows, columns):
    assert _ids(sort_rows(sample_rows, columns[1], "asc")) == [2, 3, 1]


def test_sort_does_not_mutate_input(sample_rows, columns):
    before = list(sample_rows)
    sort_rows(sample_rows, columns[0], "asc")
    assert sample_rows == before


@pytest.mark.parametrize("direction", ["asc", "desc"])
def test_sort_is_stable(direction):
    column = ColumnDefinition.for_field("group", "Group")
    rows = [
        {"id": 1, "group": "b"},
        {"id": 2, "group": "a"},
        {"id": 3, "group": "B"},
        {"id": 4, "group": "a"},
        {"id": 5, "group": None},
        {"id": 6, "group": None},
    ]
    result = sort_rows(rows, column, direction)
    if direction == "asc":
        assert _ids(result) == [5, 6, 2, 4, 1, 3]
    else:
        assert _ids(result) == [1, 3, 2, 4, 5, 6]


def test_sort_is_idempotent(client_columns, clients):
    once = sort_rows(clients, client_columns[2], "asc")
    twice = sort_rows(once, client_columns[2], "asc")
    assert once == twice


def test_natural_order_for_embedded_numbers(client_columns, clients):
    result = sort_rows(clients, client_columns[2], "asc")
    assert [row["case_no"] for row in result] == ["item1", "item2", "Item3", "item10"]


def test_numeric_looking_strings_sort_numerically(client_columns, clients):
    result = sort_rows(clients, client_columns[3], "asc")
    assert [row["fee"] for row in result] == [None, "75", "950", "1,200"]


def test_sort_value_override_takes_precedence():
    column = ColumnDefinition.for_field("label", "Label", sort_value=lambda row: row["rank"])
    rows = [{"label": "a", "rank": 3}, {"label": "b", "rank": 1}, {"label": "c", "rank": 2}]
    assert [row["label"] for row in sort_rows(rows, column, "asc")] == ["b", "c", "a"]


def test_noop_for_missing_or_unsortable_column(sample_rows):
    unsortable = ColumnDefinition.for_field("name", "Name", sortable=False)
    display_only = ColumnDefinition(key="name", label="Name")
    assert sort_rows(sample_rows, None, "asc") is sample_rows
    assert sort_rows(sample_rows, unsortable, "asc") is sample_rows
    assert sort_rows(sample_rows, display_only, "desc") is sample_rows


def test_compare_nulls_are_minimum():
    assert compare_values(None, None) == 0
    assert compare_values(None, "a") == -1
    assert compare_values(0, None) == 1


def test_compare_dates_against_strings_and_dates():
    jan = datetime(2024, 1, 1, tzinfo=timezone.utc)
    assert compare_values(jan, "2024-02-01T00:00:00Z") == -1
    assert compare_values("2023-12-31", jan) == -1
    assert compare_values(date(2024, 1, 1), jan) == 0
    assert compare_values(datetime(2024, 1, 1), jan) == 0


def test_unparsable_date_compares_equal():
    assert compare_values(datetime(2024, 1, 1, tzinfo=timezone.utc), "not a date") == 0
    assert compare_values("soon", date(2024, 1, 1)) == 0


def test_compare_is_case_and_diacritic_insensitive():
    assert compare_values("alpha", "ALPHA") == 0
    assert compare_values("café", "cafe") == 0
    assert compare_values("alpha", "Bravo") == -1


def test_arabic_strings_collate_by_letter():
    assert compare_values("أحمد", "باسم") == -1
    assert compare_values("آمنة", "امنة") == 0


def test_nan_compares_equal():
    assert compare_values(float("nan"), 1) == 0


def test_integers_beyond_float_range():
    assert compare_values(10**400, 1) == 1
    assert compare_values(-(10**400), 1) == -1
    assert compare_values(10**400, 10**401) == -1
    assert compare_values(10**400, "5") == 1
    assert as_number(10**400) == float("inf")
    column = ColumnDefinition.for_field("amount", "Amount")
    rows = [{"amount": 10**400}, {"amount": 3}, {"amount": None}]
    assert [row["amount"] for row in sort_rows(rows, column)] == [None, 3, 10**400]


def test_as_number():
    assert as_number("1,200") == 1200
    assert as_number(" 42 ") == 42
    assert as_number("-3.5") == -3.5
    assert as_number("12abc") is None
    assert as_number("") is None
    assert as_number(None) is None


def test_collation_key_splits_digit_runs():
    assert collation_key("Item10b") == ["item", 10, "b"]


def test_failing_sort_value_sorts_as_null():
    def broken(row):
        if row["id"] == 1:
            raise LookupError("gone")
        return row["id"]

    column = ColumnDefinition(key="ref", label="Ref", accessor=broken)
    rows = [{"id": 3}, {"id": 1}, {"id": 2}]
    assert [row["id"] for row in sort_rows(rows, column)] == [1, 2, 3]
