from __future__ import annotations

import json
import runpy

import pytest

from fx_ghana import cli
from fx_ghana.coordinator import CycleReport
from fx_ghana.errors import RateNotFoundError


class _DummyFx:
    instances: list["_DummyFx"] = []
    report = CycleReport(trigger="manual", ran=True, fetched=True, observations=1, persisted=1)

    def __init__(self, settings) -> None:
        self.settings = settings
        self.closed = False
        _DummyFx.instances.append(self)

    def __enter__(self) -> "_DummyFx":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self.closed = True

    def update(self) -> CycleReport:
        return self.report

    def rate(self, currency=None) -> dict:
        if currency == "GBP":
            raise RateNotFoundError("GBP")
        return {"currency": currency or "USD", "buying": 10.95, "selling": 11.05}

    def history(self, currency=None) -> list[dict]:
        return [{"currency": "USD", "buying": 10.95, "selling": 11.05}]


@pytest.fixture(autouse=True)
def _dummy_fx(monkeypatch):
    _DummyFx.instances = []
    monkeypatch.setattr(cli, "FxGhana", _DummyFx)
    monkeypatch.delenv("FX_GHANA_DB_PATH", raising=False)


def test_parse_args_requires_a_command() -> None:
    with pytest.raises(SystemExit):
        cli.parse_args([])


def test_update_prints_report_and_applies_overrides(capsys) -> None:
    exit_code = cli.main(["--db", "custom.db", "--cache", "sheet.pdf", "update"])

    assert exit_code == 0
    assert json.loads(capsys.readouterr().out)["persisted"] == 1
    fx = _DummyFx.instances[0]
    assert str(fx.settings.db_path) == "custom.db"
    assert str(fx.settings.cache_path) == "sheet.pdf"
    assert fx.closed is True


def test_update_signals_failed_fetch(monkeypatch, capsys) -> None:
    monkeypatch.setattr(
        _DummyFx, "report", CycleReport(trigger="manual", ran=True, error="HTTP 503")
    )

    assert cli.main(["update"]) == 1
    assert json.loads(capsys.readouterr().out)["error"] == "HTTP 503"


def test_update_signals_unreadable_document(monkeypatch, capsys) -> None:
    report = CycleReport(
        trigger="manual",
        ran=True,
        fetched=True,
        error="Unable to read Daily_Forex_Rates.pdf: EOF marker not found",
    )
    monkeypatch.setattr(_DummyFx, "report", report)

    assert cli.main(["update"]) == 1
    assert json.loads(capsys.readouterr().out)["persisted"] == 0


def test_update_signals_partial_persist_failure(monkeypatch) -> None:
    report = CycleReport(
        trigger="manual", ran=True, fetched=True, observations=2, persisted=1, persist_failures=1
    )
    monkeypatch.setattr(_DummyFx, "report", report)

    assert cli.main(["update"]) == 1


def test_latest_prints_rate(capsys) -> None:
    assert cli.main(["latest", "--currency", "USD"]) == 0
    assert json.loads(capsys.readouterr().out)["buying"] == 10.95


def test_latest_reports_missing_rate() -> None:
    assert cli.main(["latest", "--currency", "GBP"]) == 1


def test_history_prints_rows(capsys) -> None:
    assert cli.main(["--log-level", "warning", "history"]) == 0
    assert json.loads(capsys.readouterr().out)[0]["currency"] == "USD"
    cli.set_log_level("INFO")


def test_module_entry_point_invokes_main(monkeypatch) -> None:
    monkeypatch.setattr(cli, "main", lambda: 0)

    with pytest.raises(SystemExit) as excinfo:
        runpy.run_module("fx_ghana", run_name="__main__")

    assert excinfo.value.code == 0
