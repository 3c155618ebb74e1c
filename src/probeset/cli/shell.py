"""Interactive text menu over a loaded roster."""

from __future__ import annotations

import logging
from typing import Callable, Dict, Optional

from probeset.analysis.probe import format_slot_lines
from probeset.config import AppConfig
from probeset.contracts.error import EnvelopeError, InvalidRecordError
from probeset.core.table import ProbeSet
from probeset.io.loader import load_roster
from probeset.records import parse_record, parse_search_key

logger = logging.getLogger("probeset")

InputFn = Callable[[str], str]
PrintFn = Callable[[str], None]

MENU_LINES = (
    "Choose one of the following operations:",
    "a - add the element",
    "d - delete the element",
    "f - find and retrieve the element",
    "n - get the number of elements in the collection",
    "e - check if the collection is empty",
    "k - make the hash table empty",
    "p - print the content of the hash table",
    "o - output the elements of the collection",
    "q - Quit",
)
FAREWELL = "Thank you for being such a great user ;)"


def prompt_for_roster(
    config: Optional[AppConfig] = None,
    *,
    input_fn: InputFn = input,
    print_fn: PrintFn = print,
) -> Optional[ProbeSet]:
    """Ask for a roster path until one loads; ``None`` when input runs out."""

    while True:
        try:
            path = input_fn("What is the name of the input file? ").strip()
        except EOFError:
            return None
        try:
            return load_roster(path, config).table
        except EnvelopeError as exc:
            print_fn(str(exc))


def _add(table: ProbeSet, input_fn: InputFn, print_fn: PrintFn) -> None:
    record = parse_record(input_fn("Enter a student record: "))
    if table.insert(record):
        print_fn("Student successfully inserted.")
    else:
        print_fn("Student already exists.")


def _delete(table: ProbeSet, input_fn: InputFn, print_fn: PrintFn) -> None:
    if table.delete(parse_search_key(input_fn("Enter an id: "))):
        print_fn("Student deleted.")
    else:
        print_fn("Student not found.")


def _find(table: ProbeSet, input_fn: InputFn, print_fn: PrintFn) -> None:
    found = table.find(parse_search_key(input_fn("Enter an id: ")))
    if found is not None:
        print_fn(f"Found record with inputted key: {found}")
    else:
        print_fn("No student found.")


def _count(table: ProbeSet, input_fn: InputFn, print_fn: PrintFn) -> None:
    print_fn(f"Number of elements: {table.count()}")


def _empty(table: ProbeSet, input_fn: InputFn, print_fn: PrintFn) -> None:
    print_fn("Table is empty." if table.is_empty() else "Table is not empty.")


def _make_empty(table: ProbeSet, input_fn: InputFn, print_fn: PrintFn) -> None:
    table.clear()
    print_fn("Table is now empty.")


def _print_table(table: ProbeSet, input_fn: InputFn, print_fn: PrintFn) -> None:
    for line in format_slot_lines(table):
        print_fn(line)


def _output(table: ProbeSet, input_fn: InputFn, print_fn: PrintFn) -> None:
    for element in table.traversal():
        print_fn(f"{element}, active")


_ACTIONS: Dict[str, Callable[[ProbeSet, InputFn, PrintFn], None]] = {
    "a": _add,
    "d": _delete,
    "f": _find,
    "n": _count,
    "e": _empty,
    "k": _make_empty,
    "p": _print_table,
    "o": _output,
}


def run_shell(
    table: ProbeSet,
    *,
    input_fn: InputFn = input,
    print_fn: PrintFn = print,
) -> int:
    """Run the menu loop until ``q`` or end of input; return the number of commands run."""

    print_fn("")
    for line in MENU_LINES:
        print_fn(line)

    handled = 0
    prompt = ""
    while True:
        try:
            raw = input_fn(prompt).strip()
        except EOFError:
            break
        prompt = "Choose an operation: "
        if not raw:
            continue
        choice = raw[0].lower()
        if choice == "q":
            break
        print_fn("")
        action = _ACTIONS.get(choice)
        if action is None:
            print_fn("Please enter a valid operation.")
        else:
            try:
                action(table, input_fn, print_fn)
            except InvalidRecordError as exc:
                print_fn(str(exc))
            except EOFError:
                break
            handled += 1
            logger.debug("Shell command %r done (count=%d)", choice, table.count())
        print_fn("")
    print_fn(FAREWELL)
    return handled


__all__ = ["FAREWELL", "MENU_LINES", "prompt_for_roster", "run_shell"]
