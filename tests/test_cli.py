"""Tests for the lexitable CLI."""

import csv
import json
from io import StringIO

import pytest

from lexitable.cli import main

TABLES_YAML = """
version: 1
defaults:
  page_size: 2
tables:
  clients:
    columns:
      - {key: name, label: Name}
      - {key: amount, label: Amount, type: number}
      - {key: actions, label: Actions, searchable: false, sortable: false}
"""

ROWS = [
    {"id": 1, "name": "Bravo", "amount": 10},
    {"id": 2, "name": "alpha", "amount": 2},
    {"id": 3, "name": None, "amount": 5},
]


@pytest.fixture
def workspace(tmp_path):
    config = tmp_path / "lexitable.tables.yaml"
    config.write_text(TABLES_YAML, encoding="utf-8")
    rows = tmp_path / "clients.json"
    rows.write_text(json.dumps(ROWS), encoding="utf-8")
    return tmp_path, config, rows


def test_view_prints_page(workspace, capsys):
    _, config, rows = workspace
    code = main(["view", "clients", "--config", str(config), "--rows", str(rows), "--sort", "name", "--page", "2"])
    out = capsys.readouterr().out
    assert code == 0
    assert "Bravo" in out
    assert "alpha" not in out
    assert "Page 2 / 2 (showing 3-3 of 3)" in out


def test_view_search(workspace, capsys):
    _, config, rows = workspace
    main(["view", "clients", "--config", str(config), "--rows", str(rows), "--search", "al"])
    out = capsys.readouterr().out
    assert "alpha" in out
    assert "Bravo" not in out
    assert "showing 1-1 of 1" in out


def test_export_csv_to_stdout(workspace, capsys):
    _, config, rows = workspace
    main(["export", "clients", "--config", str(config), "--rows", str(rows), "--sort", "amount", "--desc"])
    out = capsys.readouterr().out
    lines = list(csv.reader(StringIO(out.lstrip("\ufeff"))))
    assert lines[0] == ["Name", "Amount"]
    assert [line[1] for line in lines[1:]] == ["10", "5", "2"]


def test_export_xlsx_requires_out(workspace):
    _, config, rows = workspace
    with pytest.raises(ValueError, match="requires --out"):
        main(["export", "clients", "--config", str(config), "--rows", str(rows), "--format", "xlsx"])


def test_export_html_to_file(workspace, capsys):
    tmp_path, config, rows = workspace
    out = tmp_path / "clients.xls"
    main(["export", "clients", "--config", str(config), "--rows", str(rows), "--format", "html", "--out", str(out)])
    assert "Exported to" in capsys.readouterr().out
    assert "<th>Name</th>" in out.read_text(encoding="utf-8")


def test_check_exit_codes(workspace, tmp_path, capsys):
    _, config, rows = workspace
    assert main(["check", "clients", "--config", str(config), "--rows", str(rows)]) == 0
    assert "[PASS] row-id-unique" in capsys.readouterr().out

    dup = tmp_path / "dup.json"
    dup.write_text(json.dumps([{"id": 1}, {"id": 1}]), encoding="utf-8")
    assert main(["check", "clients", "--config", str(config), "--rows", str(dup)]) == 1
    assert "[FAIL] row-id-unique" in capsys.readouterr().out


def test_import_then_view_from_sqlite(workspace, capsys):
    tmp_path, config, rows = workspace
    db = str(tmp_path / "office.db")
    main(["import", "clients", "--config", str(config), "--sqlite", db, "--rows", str(rows)])
    assert "Imported 3 rows into clients" in capsys.readouterr().out

    main(["view", "clients", "--config", str(config), "--sqlite", db, "--page-size", "5"])
    out = capsys.readouterr().out
    assert "Bravo" in out and "alpha" in out
    assert "Page 1 / 1" in out


def test_no_command_prints_help(capsys):
    assert main([]) == 0
    assert "usage: lexitable" in capsys.readouterr().out
