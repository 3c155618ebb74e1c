from __future__ import annotations

import json
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

import pytest

from probeset.cli import app


@pytest.fixture(autouse=True)
def _restore_logging():
    yield
    app.configure_logging()


def test_json_formatter_with_exc_and_stack() -> None:
    formatter = app.JsonFormatter()
    try:
        raise RuntimeError("boom")
    except RuntimeError:
        record = logging.getLogger("test").makeRecord(
            "test", logging.ERROR, __file__, 0, "failure", (), sys.exc_info(), func="func"
        )
    record.stack_info = "trace info"
    payload = json.loads(formatter.format(record))
    assert payload["level"] == "ERROR"
    assert payload["msg"] == "failure"
    assert "exc_info" in payload
    assert payload["stack"]


def test_configure_logging_json_and_file(tmp_path: Path) -> None:
    log_file = tmp_path / "app.log"
    app.configure_logging(use_json=True, log_file=str(log_file))
    logger = logging.getLogger("probeset")
    logger.error("error message")
    assert any(isinstance(handler, RotatingFileHandler) for handler in logger.handlers)
    line = log_file.read_text(encoding="utf-8").strip().splitlines()[-1]
    assert json.loads(line)["msg"] == "error message"


def test_configure_logging_replaces_handlers() -> None:
    app.configure_logging()
    app.configure_logging()
    assert len(logging.getLogger("probeset").handlers) == 1


def test_verbose_logs_rehash(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    log_file = tmp_path / "debug.log"
    roster = tmp_path / "growth.txt"
    roster.write_text("1\n1 Noether\n", encoding="utf-8")
    assert app.main(["--verbose", "--log-file", str(log_file), "items", str(roster)]) == 0
    assert capsys.readouterr().out.strip() == "1, Noether, active"
    text = log_file.read_text(encoding="utf-8")
    assert "Rehashed 2 -> 5 slots (live=1)" in text
    assert "Loaded" in text


def test_emit_success_json(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setattr(app, "OUTPUT_JSON", True)
    app.emit_success("demo", text="done", data={"value": 5})
    payload = json.loads(capsys.readouterr().out.strip())
    assert payload == {"ok": True, "command": "demo", "value": 5, "result": "done"}


def test_emit_success_text(capsys: pytest.CaptureFixture[str]) -> None:
    app.emit_success("demo", text="plain")
    assert capsys.readouterr().out.strip() == "plain"
