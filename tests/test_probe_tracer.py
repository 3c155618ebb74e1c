from __future__ import annotations

import json
from importlib import resources

import pytest
from jsonschema import Draft202012Validator

from probeset.analysis.probe import (
    _json_friendly,
    format_slot_lines,
    format_trace_lines,
    slot_payload,
    trace_find,
    trace_insert,
    verify_table,
)
from probeset.core.table import ProbeSet

SCHEMA = json.loads(
    resources.files("probeset.contracts").joinpath("trace_schema.json").read_text(encoding="utf-8")
)
VALIDATOR = Draft202012Validator(SCHEMA)


def _collided_table() -> ProbeSet:
    table = ProbeSet(4)  # capacity 11
    table.insert(0)
    table.insert(11)
    table.insert(22)
    return table


def test_trace_find_walks_quadratic_path() -> None:
    trace = trace_find(_collided_table(), 22)
    assert trace["found"] is True
    assert trace["terminal"] == "match"
    assert [step["slot"] for step in trace["path"]] == [0, 1, 4]
    assert trace["final_slot"] == 4
    VALIDATOR.validate(trace)


def test_trace_find_passes_tombstone() -> None:
    table = _collided_table()
    table.delete(0)
    trace = trace_find(table, 11)
    states = [step["state"] for step in trace["path"]]
    assert states == ["tombstone", "occupied"]
    assert trace["found"] is True
    VALIDATOR.validate(trace)


def test_trace_find_absent_ends_on_empty() -> None:
    trace = trace_find(_collided_table(), 33)
    assert trace["found"] is False
    assert trace["terminal"] == "empty"
    assert trace["path"][-1]["slot"] == 9
    VALIDATOR.validate(trace)


def test_trace_insert_stops_on_tombstone_without_mutating() -> None:
    table = _collided_table()
    table.delete(11)
    before = list(table.slots())
    trace = trace_insert(table, 33)
    assert trace["terminal"] == "tombstone"
    assert trace["would_insert"] is True
    assert trace["would_rehash"] is False
    assert list(table.slots()) == before
    VALIDATOR.validate(trace)


def test_trace_insert_reports_duplicate_and_rehash() -> None:
    table = _collided_table()
    dup = trace_insert(table, 11)
    assert dup["found"] is True
    assert dup["would_insert"] is False

    table.insert(1)  # occupied_cells == 4, next new insert reaches 11 // 2
    grow = trace_insert(table, 2)
    assert grow["would_rehash"] is True
    assert grow["rehash_capacity"] == 23
    VALIDATOR.validate(grow)


def test_schema_rejects_unknown_state() -> None:
    trace = trace_find(_collided_table(), 22)
    trace["path"][0]["state"] = "deleted"
    errors = list(VALIDATOR.iter_errors(trace))
    assert errors


def test_format_trace_lines() -> None:
    lines = format_trace_lines(trace_find(_collided_table(), 22), export_path="/tmp/t.json")
    assert lines[0] == "Probe visualization FIND key=22"
    assert "  Step 2: slot=4, state=occupied, matches=true, key_repr=22" in lines
    assert lines[-1] == "Trace JSON written to: /tmp/t.json"


def test_format_trace_lines_without_path() -> None:
    assert "  (no path recorded)" in format_trace_lines({"operation": "find", "path": []})


def test_format_slot_lines_and_payload() -> None:
    table = _collided_table()
    table.delete(11)
    lines = format_slot_lines(table)
    assert len(lines) == 11
    assert lines[0] == "[0]: 0, active"
    assert lines[1] == "[1]: tombstone"
    assert lines[2] == "[2]: empty"
    payload = slot_payload(table)
    assert payload[1] == {"slot": 1, "state": "tombstone", "element": None}
    assert payload[4] == {"slot": 4, "state": "occupied", "element": "22"}


def test_verify_table_ok() -> None:
    ok, messages = verify_table(_collided_table())
    assert ok is True
    assert messages[0].startswith("capacity=11 live=3")


def test_verify_table_detects_counter_drift() -> None:
    table = _collided_table()
    table._occupied_cells = 1  # pylint: disable=protected-access
    ok, messages = verify_table(table)
    assert ok is False
    assert any("occupied_cells=1" in message for message in messages)


@pytest.mark.parametrize("value", [1, "x", [1, 2], None])
def test_json_friendly_passthrough(value: object) -> None:
    assert _json_friendly(value) == value


def test_json_friendly_repr_fallback() -> None:
    assert _json_friendly({1, 2}) == repr({1, 2})
