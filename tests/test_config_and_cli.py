import json

import pytest

import main
from models.budget import Budget
from ui.budget_chart import build_funding_chart, save_funding_chart
from utils import app_config
from utils.currency import format_currency, round_money


@pytest.fixture
def config_home(tmp_path, monkeypatch):
    monkeypatch.setattr(app_config, "CONFIG_DIR", tmp_path / ".fintrack")
    monkeypatch.setattr(app_config, "CONFIG_FILE", tmp_path / ".fintrack" / "config.json")
    monkeypatch.delenv(app_config.DB_FOLDER_ENV, raising=False)
    return tmp_path


# ── Config ───────────────────────────────────────────────────────────────────

def test_config_round_trip(config_home):
    assert app_config.get_db_folder() is None

    app_config.set_db_folder("/data/fin")

    assert app_config.get_db_folder() == "/data/fin"
    app_config.set_db_folder(None)
    assert app_config.load_config() == {}


def test_corrupt_config_is_ignored(config_home):
    app_config.CONFIG_DIR.mkdir()
    app_config.CONFIG_FILE.write_text("[1, 2", encoding="utf-8")

    assert app_config.load_config() == {}
    assert app_config.get_log_level() == "WARNING"


def test_env_overrides_config(config_home, monkeypatch):
    app_config.set_db_folder("/from/config")
    monkeypatch.setenv(app_config.DB_FOLDER_ENV, "/from/env")

    assert app_config.get_db_folder() == "/from/env"


# ── Money helpers ────────────────────────────────────────────────────────────

def test_round_money_and_format():
    assert round_money(0.1 + 0.2) == 0.3
    assert str(round_money(-0.001)) == "0.0"
    assert format_currency(1234.5) == "$1,234.50"
    assert format_currency(-3, "ZAR") == "-R3.00"


# ── Chart ────────────────────────────────────────────────────────────────────

def test_chart_saves_png(tmp_path):
    budgets = [
        Budget(id="b1", name="Rent", amount=1000, period="monthly", start_date="2024-01-01",
               funded_amount=800, spent_amount=200),
        Budget(id="b2", name="Food", amount=300, period="monthly", start_date="2024-01-01"),
    ]
    path = tmp_path / "chart.png"

    save_funding_chart(budgets, str(path))

    assert path.read_bytes()[:4] == b"\x89PNG"


def test_chart_handles_no_budgets():
    fig = build_funding_chart([])

    assert fig.axes[0].texts[0].get_text() == "No budgets"


# ── CLI ──────────────────────────────────────────────────────────────────────

def _run(tmp_path, *argv):
    return main.main(["--db-folder", str(tmp_path / "db"), *argv])


def _budget_id(tmp_path, capsys, name):
    _run(tmp_path, "budgets")
    for line in capsys.readouterr().out.splitlines():
        if f" {name} " in line:
            return line.split()[0]
    raise AssertionError(f"budget {name} not listed")


def test_cli_allocate_and_reallocate(tmp_path, capsys, config_home):
    assert _run(tmp_path, "add-income", "120", "--date", "2024-01-01") == 0
    assert _run(tmp_path, "add-budget", "Rent", "100") == 0
    assert _run(tmp_path, "add-budget", "Fun", "100") == 0
    capsys.readouterr()
    rent = _budget_id(tmp_path, capsys, "Rent")
    fun = _budget_id(tmp_path, capsys, "Fun")

    assert _run(tmp_path, "allocate", rent, "100") == 0
    assert _run(tmp_path, "allocate", fun, "50") == 0
    out = capsys.readouterr().out
    assert "Not enough unallocated income" in out

    assert _run(tmp_path, "reallocate", rent, fun, "40") == 0
    capsys.readouterr()
    _run(tmp_path, "budgets")
    out = capsys.readouterr().out
    assert out.count("$60.00") == 2


def test_cli_reports_errors(tmp_path, capsys, config_home):
    assert _run(tmp_path, "allocate", "missing", "10") == 1
    assert "not found" in capsys.readouterr().err
    assert _run(tmp_path, "add-income", "nan") == 1
    assert _run(tmp_path, "add-income", "inf") == 1

    assert _run(tmp_path, "import", str(tmp_path / "nope.json")) == 1


def test_cli_export_import(tmp_path, capsys, config_home):
    _run(tmp_path, "add-income", "75", "--date", "2024-01-01")
    export = tmp_path / "out.json"

    assert _run(tmp_path, "export", str(export)) == 0
    data = json.loads(export.read_text(encoding="utf-8"))
    assert data["incomes"][0]["amount"] == 75

    other = tmp_path / "other"
    assert main.main(["--db-folder", str(other), "import", str(export)]) == 0
    capsys.readouterr()
    main.main(["--db-folder", str(other), "summary"])
    assert "$75.00" in capsys.readouterr().out
