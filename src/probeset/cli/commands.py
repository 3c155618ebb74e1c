"""CLI command registration and handlers for probeset."""

from __future__ import annotations

import argparse
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from probeset.analysis import (
    format_slot_lines,
    format_trace_lines,
    slot_payload,
    trace_find,
    trace_insert,
    verify_table,
)
from probeset.cli.shell import prompt_for_roster, run_shell
from probeset.config import AppConfig
from probeset.contracts.error import BadInputError, Exit, InvariantError
from probeset.io.loader import LoadResult
from probeset.records import parse_record, parse_search_key

Handler = Callable[[argparse.Namespace], int]


@dataclass(frozen=True)
class CLIContext:
    """Runtime hooks supplied by the top-level CLI entrypoint."""

    emit_success: Callable[..., None]
    load_table: Callable[[str], LoadResult]
    app_config: Callable[[], AppConfig]
    logger: logging.Logger
    guard: Callable[[Handler], Handler]
    input_fn: Callable[[str], str] = input
    print_fn: Callable[[str], None] = print


def register_subcommands(
    subparsers: argparse._SubParsersAction[argparse.ArgumentParser],
    ctx: CLIContext,
) -> Dict[str, Handler]:
    """Define CLI subcommands and return their handlers."""

    handlers: Dict[str, Handler] = {}

    def _register(
        name: str,
        help_text: Optional[str],
        configure: Callable[[argparse.ArgumentParser], Handler],
    ) -> None:
        parser = subparsers.add_parser(name, help=help_text)
        handlers[name] = ctx.guard(configure(parser))

    _register("shell", "Interactive menu over a roster.", lambda parser: _configure_shell(parser, ctx))
    _register("summary", "Load a roster and report table statistics.", lambda parser: _configure_summary(parser, ctx))
    _register("insert", "Insert one record into a loaded roster.", lambda parser: _configure_insert(parser, ctx))
    _register("find", "Find a record by id.", lambda parser: _configure_find(parser, ctx))
    _register("delete", "Delete a record by id.", lambda parser: _configure_delete(parser, ctx))
    _register("items", "List live records in slot order.", lambda parser: _configure_items(parser, ctx))
    _register("dump", "Print every slot of the table.", lambda parser: _configure_dump(parser, ctx))
    _register(
        "probe",
        "Trace the probe path of a find or insert (text/JSON).",
        lambda parser: _configure_probe(parser, ctx),
    )
    _register("verify", "Check table invariants after loading a roster.", lambda parser: _configure_verify(parser, ctx))
    return handlers


def _table_stats(result: LoadResult) -> Dict[str, Any]:
    table = result.table
    return {
        "capacity": table.capacity,
        "occupied_cells": table.occupied_cells,
        "tombstones": table.tombstone_count(),
        "count": table.count(),
        "load_factor": round(table.load_factor(), 6),
    }


def _configure_shell(parser: argparse.ArgumentParser, ctx: CLIContext) -> Handler:
    parser.add_argument("--file", help="Roster to load (prompted for when omitted)")

    def handler(args: argparse.Namespace) -> int:
        if args.file:
            table = ctx.load_table(args.file).table
        else:
            table = prompt_for_roster(ctx.app_config(), input_fn=ctx.input_fn, print_fn=ctx.print_fn)
            if table is None:
                raise BadInputError("No roster loaded before end of input")
        handled = run_shell(table, input_fn=ctx.input_fn, print_fn=ctx.print_fn)
        ctx.logger.info("Shell finished after %d commands", handled)
        return int(Exit.OK)

    return handler


def _configure_summary(parser: argparse.ArgumentParser, ctx: CLIContext) -> Handler:
    parser.add_argument("roster")

    def handler(args: argparse.Namespace) -> int:
        result = ctx.load_table(args.roster)
        data = {
            "roster": args.roster,
            "declared": result.declared,
            "inserted": result.inserted,
            "duplicates": result.duplicates,
            "invalid": result.invalid,
            **_table_stats(result),
        }
        text = "\n".join(f"{key}: {value}" for key, value in data.items())
        ctx.emit_success("summary", text=text, data=data)
        return int(Exit.OK)

    return handler


def _configure_insert(parser: argparse.ArgumentParser, ctx: CLIContext) -> Handler:
    parser.add_argument("roster")
    parser.add_argument("record", help='Record text, e.g. "1234 Smith"')

    def handler(args: argparse.Namespace) -> int:
        record = parse_record(args.record)
        result = ctx.load_table(args.roster)
        inserted = result.table.insert(record)
        text = "Student successfully inserted." if inserted else "Student already exists."
        data = {"record": str(record), "inserted": inserted, **_table_stats(result)}
        ctx.emit_success("insert", text=text, data=data)
        return int(Exit.OK)

    return handler


def _configure_find(parser: argparse.ArgumentParser, ctx: CLIContext) -> Handler:
    parser.add_argument("roster")
    parser.add_argument("id", help="Student id to look up")

    def handler(args: argparse.Namespace) -> int:
        key = parse_search_key(args.id)
        found = ctx.load_table(args.roster).table.find(key)
        if found is not None:
            text = f"Found record with inputted key: {found}"
            data = {"id": key.student_id, "found": True, "record": str(found), "last_name": found.last_name}
        else:
            text = "No student found."
            data = {"id": key.student_id, "found": False, "record": None, "last_name": None}
        ctx.emit_success("find", text=text, data=data)
        return int(Exit.OK)

    return handler


def _configure_delete(parser: argparse.ArgumentParser, ctx: CLIContext) -> Handler:
    parser.add_argument("roster")
    parser.add_argument("id", help="Student id to delete")

    def handler(args: argparse.Namespace) -> int:
        key = parse_search_key(args.id)
        result = ctx.load_table(args.roster)
        deleted = result.table.delete(key)
        text = "Student deleted." if deleted else "Student not found."
        data = {"id": key.student_id, "deleted": deleted, **_table_stats(result)}
        ctx.emit_success("delete", text=text, data=data)
        return int(Exit.OK)

    return handler


def _configure_items(parser: argparse.ArgumentParser, ctx: CLIContext) -> Handler:
    parser.add_argument("roster")

    def handler(args: argparse.Namespace) -> int:
        records = [str(element) for element in ctx.load_table(args.roster).table]
        text = "\n".join(f"{record}, active" for record in records)
        ctx.emit_success("items", text=text, data={"count": len(records), "items": records})
        return int(Exit.OK)

    return handler


def _configure_dump(parser: argparse.ArgumentParser, ctx: CLIContext) -> Handler:
    parser.add_argument("roster")

    def handler(args: argparse.Namespace) -> int:
        table = ctx.load_table(args.roster).table
        text = "\n".join(format_slot_lines(table))
        ctx.emit_success("dump", text=text, data={"capacity": table.capacity, "slots": slot_payload(table)})
        return int(Exit.OK)

    return handler


def _configure_probe(parser: argparse.ArgumentParser, ctx: CLIContext) -> Handler:
    parser.add_argument("roster")
    parser.add_argument("--operation", choices=["find", "insert"], required=True, help="Operation to trace")
    parser.add_argument(
        "--record",
        required=True,
        help='Id for find ("1234") or full record for insert ("1234 Smith")',
    )
    parser.add_argument("--export-json", help="Write the trace payload to a JSON file (indent=2)")

    def handler(args: argparse.Namespace) -> int:
        table = ctx.load_table(args.roster).table
        if args.operation == "find":
            trace = trace_find(table, parse_search_key(args.record))
        else:
            trace = trace_insert(table, parse_record(args.record))

        export_path: Optional[Path] = None
        if args.export_json:
            export_path = Path(args.export_json).expanduser().resolve()
            export_path.parent.mkdir(parents=True, exist_ok=True)
            export_path.write_text(json.dumps(trace, indent=2), encoding="utf-8")
            ctx.logger.info("Wrote probe trace to %s", export_path)

        text = "\n".join(format_trace_lines(trace, export_path=export_path))
        data: Dict[str, Any] = {"trace": trace}
        if export_path is not None:
            data["export_json"] = str(export_path)
        ctx.emit_success("probe", text=text, data=data)
        return int(Exit.OK)

    return handler


def _configure_verify(parser: argparse.ArgumentParser, ctx: CLIContext) -> Handler:
    parser.add_argument("roster")

    def handler(args: argparse.Namespace) -> int:
        ok, messages = verify_table(ctx.load_table(args.roster).table)
        if not ok:
            raise InvariantError("; ".join(messages))
        ctx.emit_success("verify", text="\n".join(messages), data={"ok": True, "messages": messages})
        return int(Exit.OK)

    return handler


__all__ = ["CLIContext", "register_subcommands"]
