from __future__ import annotations

from pathlib import Path
from typing import Callable, Iterable, List

from probeset.cli.shell import FAREWELL, MENU_LINES, prompt_for_roster, run_shell
from probeset.core.table import ProbeSet
from probeset.records import StudentRecord


def _scripted(answers: Iterable[str]) -> tuple[Callable[[str], str], List[str]]:
    queue = list(answers)
    prompts: List[str] = []

    def input_fn(prompt: str) -> str:
        prompts.append(prompt)
        if not queue:
            raise EOFError
        return queue.pop(0)

    return input_fn, prompts


def _run(table: ProbeSet, answers: Iterable[str]) -> List[str]:
    input_fn, _ = _scripted(answers)
    out: List[str] = []
    run_shell(table, input_fn=input_fn, print_fn=out.append)
    return out


def test_menu_and_quit() -> None:
    out = _run(ProbeSet(2), ["Quit"])
    for line in MENU_LINES:
        assert line in out
    assert out[-1] == FAREWELL


def test_add_find_delete_cycle() -> None:
    table = ProbeSet(4)
    out = _run(
        table,
        ["a", "1234 Smith", "a", "1234 Other", "f", "1234", "d", "1234", "d", "1234", "f", "1234", "q"],
    )
    assert "Student successfully inserted." in out
    assert "Student already exists." in out
    assert "Found record with inputted key: 1234, Smith" in out
    assert "Student deleted." in out
    assert "Student not found." in out
    assert "No student found." in out
    assert table.is_empty()


def test_count_empty_clear_print_output() -> None:
    table = ProbeSet(2)
    table.insert(StudentRecord(5, "Curie"))
    out = _run(table, ["n", "e", "o", "p", "k", "e", "n", "q"])
    assert "Number of elements: 1" in out
    assert "Table is not empty." in out
    assert "5, Curie, active" in out
    assert any(line.startswith("[0]: ") for line in out)
    assert "Table is now empty." in out
    assert "Table is empty." in out
    assert "Number of elements: 0" in out


def test_invalid_inputs() -> None:
    out = _run(ProbeSet(2), ["z", "a", "not a record at all", "f", "abc", "", "q"])
    assert "Please enter a valid operation." in out
    assert out.count("Invalid Student") == 2


def test_end_of_input_stops_shell() -> None:
    table = ProbeSet(2)
    input_fn, _ = _scripted(["a"])
    out: List[str] = []
    assert run_shell(table, input_fn=input_fn, print_fn=out.append) == 0
    assert out[-1] == FAREWELL


def test_prompt_for_roster_retries(roster_file: Path, tmp_path: Path) -> None:
    bad_header = tmp_path / "bad.txt"
    bad_header.write_text("x\n", encoding="utf-8")
    input_fn, prompts = _scripted([str(tmp_path / "missing.txt"), str(bad_header), str(roster_file)])
    out: List[str] = []
    table = prompt_for_roster(input_fn=input_fn, print_fn=out.append)
    assert table is not None
    assert table.count() == 5
    assert out == ["File not found.", "First line must contain collection size."]
    assert len(prompts) == 3


def test_prompt_for_roster_retries_after_unreadable_file(roster_file: Path, tmp_path: Path) -> None:
    fake_gz = tmp_path / "roster.txt.gz"
    fake_gz.write_text("1\n1 A\n", encoding="utf-8")
    latin = tmp_path / "latin.txt"
    latin.write_bytes(b"1\n1 M\xfcller\n")
    input_fn, prompts = _scripted([str(fake_gz), str(latin), str(roster_file)])
    out: List[str] = []
    table = prompt_for_roster(input_fn=input_fn, print_fn=out.append)
    assert table is not None
    assert table.count() == 5
    assert out == ["Roster is not a readable gzip file", "Roster is not valid utf-8 text"]
    assert len(prompts) == 3


def test_prompt_for_roster_eof() -> None:
    input_fn, _ = _scripted([])
    assert prompt_for_roster(input_fn=input_fn, print_fn=lambda _line: None) is None
