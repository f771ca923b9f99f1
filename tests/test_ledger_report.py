from __future__ import annotations

import json
import os

import pytest
from openpyxl import load_workbook
from typer.testing import CliRunner

from csv_handler import import_expenses_from_csv, import_payments_from_csv
from ledger_report import app

runner = CliRunner()


@pytest.fixture
def groups_file(tmp_path, groups_payload) -> str:
    path = tmp_path / "groups.json"
    path.write_text(json.dumps(groups_payload), encoding="utf-8")
    return os.fspath(path)


def test_group_json_payload(groups_file):
    result = runner.invoke(app, ["group", groups_file, "g1", "--observer", "bob", "--json"])
    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert payload["myBalance"] == -20.0
    assert payload["oweTo"] == [{"userId": "alice", "amount": 20.0}]


def test_group_text_report(groups_file):
    result = runner.invoke(app, ["group", groups_file, "g1", "-o", "alice"])
    assert result.exit_code == 0, result.output
    assert "Flat" in result.stdout
    assert "bob owes you 20.00" in result.stdout
    assert "[rent] 100.00" in result.stdout


def test_group_date_window(groups_file):
    # only the April 3rd groceries and nothing else
    result = runner.invoke(
        app,
        ["group", groups_file, "g1", "-o", "bob", "--json", "--start", "2024-04-02", "--end", "2024-04-03"],
    )
    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert payload["totalSpent"] == 40.0
    assert payload["myBalance"] == 20.0


def test_unknown_group_exits_with_usage_code(groups_file):
    result = runner.invoke(app, ["group", groups_file, "nope", "-o", "bob"])
    assert result.exit_code == 2


def test_bad_date_exits_with_usage_code(groups_file):
    result = runner.invoke(app, ["group", groups_file, "g1", "-o", "bob", "--start", "04/02/2024"])
    assert result.exit_code == 2


def test_missing_file(tmp_path):
    result = runner.invoke(app, ["overview", os.fspath(tmp_path / "none.json"), "-o", "bob"])
    assert result.exit_code == 2


def test_malformed_file_exits_with_error(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text(json.dumps({"g": {"id": "g", "expenses": {"e": {"value": 1}}}}), encoding="utf-8")
    result = runner.invoke(app, ["overview", os.fspath(path), "-o", "bob"])
    assert result.exit_code == 1


def test_overview_json(groups_file):
    result = runner.invoke(app, ["overview", groups_file, "-o", "alice", "--json", "--workers", "2"])
    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert payload["totalBalance"] == -10.0
    assert payload["totalOwedToMe"] == 20.0
    assert payload["totalOwedByMe"] == 30.0
    assert [g["groupId"] for g in payload["groups"]] == ["g1", "g2"]


def test_overview_text(groups_file):
    result = runner.invoke(app, ["--log-level", "WARNING", "overview", groups_file, "-o", "alice"])
    assert result.exit_code == 0, result.output
    assert "Groups:           2" in result.stdout
    assert "You owe:          30.00" in result.stdout


def test_excel_command(groups_file, tmp_path):
    out = os.fspath(tmp_path / "alice.xlsx")
    result = runner.invoke(app, ["excel", groups_file, out, "-o", "alice"])
    assert result.exit_code == 0, result.output
    assert load_workbook(out).sheetnames == ["Overview", "Flat", "Ski", "Categories"]


def test_csv_command(groups_file, tmp_path):
    out_dir = tmp_path / "dump"
    result = runner.invoke(app, ["csv", groups_file, "g1", os.fspath(out_dir)])
    assert result.exit_code == 0, result.output
    assert len(import_expenses_from_csv(os.fspath(out_dir / "expenses.csv"))) == 2
    (p,) = import_payments_from_csv(os.fspath(out_dir / "payments.csv"))
    assert p.value == 10.0


def test_recent_command(groups_file):
    result = runner.invoke(app, ["recent", groups_file, "--limit", "2"])
    assert result.exit_code == 0, result.output
    lines = result.stdout.strip().splitlines()
    assert len(lines) == 2
    assert lines[0].startswith("2024-04-03")
    assert lines[1].startswith("2024-04-01")


def test_non_finite_value_exits_with_error(tmp_path):
    path = tmp_path / "nan.json"
    path.write_text(
        json.dumps({"g": {"id": "g", "memberIds": ["a"], "expenses": {"e": {"payerId": "a", "value": "NaN"}}}}),
        encoding="utf-8",
    )
    result = runner.invoke(app, ["overview", os.fspath(path), "-o", "a"])
    assert result.exit_code == 1
