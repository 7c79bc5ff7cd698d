# tests/test_cli.py
import csv
import json

import pytest
from click.testing import CliRunner

from emi_calc import main
from emi_calc.main import cli


@pytest.fixture(autouse=True)
def no_logging_setup(monkeypatch):
    calls = []
    monkeypatch.setattr(main, "configure_logging", lambda level=None: calls.append(level))
    return calls


@pytest.fixture
def runner():
    return CliRunner()


def test_emi_command(runner):
    result = runner.invoke(cli, ["emi", "-p", "25l", "-r", "8.5", "-t", "20", "--unit", "years"])
    assert result.exit_code == 0, result.output
    assert "21,695.58" in result.output
    assert "27,06,939.20" in result.output


def test_log_level_option_is_passed_on(runner, no_logging_setup):
    result = runner.invoke(cli, ["--log-level", "debug", "emi", "-p", "100000", "-r", "12", "-t", "1"])
    assert result.exit_code == 0, result.output
    assert [level.upper() for level in no_logging_setup] == ["DEBUG"]


def test_emi_json_export(runner, tmp_path):
    out = tmp_path / "emi.json"
    result = runner.invoke(cli, ["emi", "-p", "2500000", "-r", "8.5", "-t", "240", "--output", str(out)])
    assert result.exit_code == 0, result.output
    data = json.loads(out.read_text())
    assert data["result"]["emi"] == pytest.approx(21695.58)
    assert data["result"]["tenure_months"] == 240


def test_invalid_principal_is_a_usage_error(runner):
    result = runner.invoke(cli, ["emi", "-p", "0", "-r", "8.5", "-t", "240"])
    assert result.exit_code == 2
    assert "Principal must be greater than 0" in result.output


def test_unparseable_amount(runner):
    result = runner.invoke(cli, ["emi", "-p", "lots", "-r", "8.5", "-t", "240"])
    assert result.exit_code == 2
    assert "Invalid amount" in result.output


def test_prepay_monthly(runner):
    result = runner.invoke(
        cli, ["prepay", "-p", "2500000", "-r", "8.5", "-t", "240", "--strategy", "monthly", "--amount", "5000"]
    )
    assert result.exit_code == 0, result.output
    assert "New tenure         : 155 months" in result.output
    assert "(85 months)" in result.output


def test_prepay_defaults_to_five_thousand_a_month(runner):
    result = runner.invoke(cli, ["prepay", "-p", "2500000", "-r", "8.5", "-t", "240"])
    assert result.exit_code == 0, result.output
    assert "monthly (5,000.00)" in result.output


def test_prepay_csv_export(runner, tmp_path):
    out = tmp_path / "schedule.csv"
    result = runner.invoke(
        cli,
        ["prepay", "-p", "2500000", "-r", "8.5", "-t", "20", "--unit", "years", "--strategy", "onetime", "--amount", "1l", "--output", str(out)],
    )
    assert result.exit_code == 0, result.output
    with out.open(newline="") as f:
        rows = list(csv.reader(f))
    assert rows[0][0] == "Period"
    assert len(rows) == 1 + 217
    assert rows[1][1] == "2400000.00"


def test_prepay_json_export_includes_schedule(runner, tmp_path):
    out = tmp_path / "prepay.json"
    result = runner.invoke(
        cli, ["prepay", "-p", "2500000", "-r", "8.5", "-t", "240", "--strategy", "yearly", "--amount", "5000", "--output", str(out)]
    )
    assert result.exit_code == 0, result.output
    data = json.loads(out.read_text())
    assert data["prepayment"]["months_to_payoff"] == 157
    assert data["prepayment"]["converged"] is True
    assert len(data["prepayment"]["schedule"]) == 157


def test_prepay_unsupported_output(runner, tmp_path):
    result = runner.invoke(
        cli, ["prepay", "-p", "2500000", "-r", "8.5", "-t", "240", "--output", str(tmp_path / "x.txt")]
    )
    assert result.exit_code == 2


def test_prepay_negative_amount(runner):
    result = runner.invoke(cli, ["prepay", "-p", "2500000", "-r", "8.5", "-t", "240", "--amount=-5"])
    assert result.exit_code == 2
    assert "cannot be negative" in result.output


def test_prepay_schedule_flag(runner):
    result = runner.invoke(
        cli, ["prepay", "-p", "100000", "-r", "12", "-t", "12", "--amount", "10000", "--schedule"]
    )
    assert result.exit_code == 0, result.output
    assert "Period\tOpening" in result.output


def test_compare_command(runner):
    result = runner.invoke(cli, ["compare", "--option", "A:25l:8.5:20", "--option", "B:25l:9:15"])
    assert result.exit_code == 0, result.output
    assert "21,695.58*" in result.output
    assert "Lowest interest    : B" in result.output


def test_compare_months_unit_and_json(runner, tmp_path):
    out = tmp_path / "cmp.json"
    result = runner.invoke(
        cli, ["compare", "--option", "Short:500000:10:36:months", "--option", "Long:500000:10:60:months", "--output", str(out)]
    )
    assert result.exit_code == 0, result.output
    data = json.loads(out.read_text())
    names = [o["name"] for o in data["options"]]
    assert names == ["Short", "Long"]
    assert data["options"][0]["lowest_interest"] is True
    assert data["options"][1]["lowest_emi"] is True


def test_compare_rejects_more_than_four(runner):
    args = ["compare"]
    for name in "ABCDE":
        args += ["--option", f"{name}:25l:8.5:20"]
    result = runner.invoke(cli, args)
    assert result.exit_code == 2
    assert "At most 4" in result.output


def test_compare_malformed_option(runner):
    result = runner.invoke(cli, ["compare", "--option", "A:25l:8.5"])
    assert result.exit_code == 2
    assert "NAME:AMOUNT:RATE:TENURE" in result.output


def test_prepay_strict_passes_when_paid_off(runner):
    result = runner.invoke(cli, ["prepay", "-p", "2500000", "-r", "8.5", "-t", "240", "--strict"])
    assert result.exit_code == 0, result.output
    assert "outstanding" not in result.output


def test_unknown_log_level_in_environment_is_a_usage_error(runner, monkeypatch):
    from emi_calc import config

    monkeypatch.setattr(main, "configure_logging", config.configure_logging)
    monkeypatch.setenv(config.LOG_LEVEL_ENV, "chatty")
    result = runner.invoke(cli, ["emi", "-p", "100000", "-r", "12", "-t", "1"])
    assert result.exit_code == 2
    assert "Unknown log level" in result.output
