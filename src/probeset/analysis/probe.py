"""Probe-path tracing and invariant checks for :class:`ProbeSet`."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from probeset.core.primes import is_prime, smallest_prime_at_least
from probeset.core.table import ProbeSet, SlotState, home_slot

ProbeTrace = Dict[str, Any]


def _json_friendly(value: Any) -> Any:
    """Return a JSON-serialisable representation of ``value``."""

    try:
        json.dumps(value)
        return value
    except (TypeError, ValueError):
        return repr(value)


def _trace(table: ProbeSet, key: Any, stop_on_tombstone: bool) -> Tuple[List[Dict[str, Any]], str, int]:
    cells = list(table.slots())
    capacity = len(cells)
    start = home_slot(key, capacity)
    path: List[Dict[str, Any]] = []
    terminal = "overflow"
    final_slot = start
    # Quadratic probing revisits residues after (capacity + 1) // 2 distinct steps.
    for step in range(capacity + 1):
        idx = (start + step * step) % capacity
        _, state, element = cells[idx]
        entry: Dict[str, Any] = {"step": step, "slot": idx, "state": state.value}
        final_slot = idx
        if state is SlotState.EMPTY:
            path.append(entry)
            terminal = "empty"
            break
        if state is SlotState.TOMBSTONE:
            path.append(entry)
            if stop_on_tombstone:
                terminal = "tombstone"
                break
            continue
        matches = element == key
        entry.update({"key_repr": repr(element), "matches": matches})
        path.append(entry)
        if matches:
            terminal = "match"
            break
    return path, terminal, final_slot


def trace_find(table: ProbeSet, key: Any) -> ProbeTrace:
    """Trace the slots ``find``/``delete`` would visit for ``key``."""

    path, terminal, final_slot = _trace(table, key, stop_on_tombstone=False)
    return {
        "operation": "find",
        "key_repr": repr(key),
        "found": terminal == "match",
        "terminal": terminal,
        "capacity": table.capacity,
        "start_slot": path[0]["slot"] if path else None,
        "final_slot": final_slot,
        "path": path,
    }


def trace_insert(table: ProbeSet, element: Any) -> ProbeTrace:
    """Trace the slots ``insert`` would visit for ``element`` without inserting it."""

    path, terminal, final_slot = _trace(table, element, stop_on_tombstone=True)
    would_rehash = terminal == "empty" and table.occupied_cells + 1 >= table.capacity // 2
    trace: ProbeTrace = {
        "operation": "insert",
        "key_repr": repr(element),
        "found": terminal == "match",
        "terminal": terminal,
        "capacity": table.capacity,
        "start_slot": path[0]["slot"] if path else None,
        "final_slot": final_slot,
        "would_insert": terminal in {"empty", "tombstone"},
        "would_rehash": would_rehash,
        "path": path,
    }
    if would_rehash:
        trace["rehash_capacity"] = smallest_prime_at_least(table.capacity * 2)
    return trace


def format_trace_lines(
    trace: ProbeTrace,
    *,
    export_path: Optional[Union[str, Path]] = None,
) -> List[str]:
    """Return a human-friendly rendering of a probe trace."""

    lines: List[str] = []
    operation = str(trace.get("operation", "?"))
    lines.append(f"Probe visualization {operation.upper()} key={trace.get('key_repr', '?')}")
    lines.append(f"Found: {trace.get('found')} | Terminal: {trace.get('terminal')}")
    lines.append(f"Capacity: {trace.get('capacity')}")
    if trace.get("would_rehash"):
        lines.append(f"Insert would trigger rehash to capacity {trace.get('rehash_capacity')}")
    lines.append("Steps:")
    path = trace.get("path")
    if not isinstance(path, list) or not path:
        lines.append("  (no path recorded)")
    else:
        for item in path:
            attrs: List[str] = []
            for key in ("slot", "state", "matches", "key_repr"):
                if key in item and item[key] is not None:
                    value = item[key]
                    if isinstance(value, bool):
                        value = str(value).lower()
                    attrs.append(f"{key}={value}")
            lines.append(f"  Step {item.get('step', '?')}: " + ", ".join(attrs))
    if export_path:
        lines.append(f"Trace JSON written to: {export_path}")
    return lines


def format_slot_lines(table: ProbeSet) -> List[str]:
    """Render every slot of ``table`` as ``[index]: ...`` lines."""

    lines: List[str] = []
    for idx, state, element in table.slots():
        if state is SlotState.EMPTY:
            lines.append(f"[{idx}]: empty")
        elif state is SlotState.TOMBSTONE:
            lines.append(f"[{idx}]: tombstone")
        else:
            lines.append(f"[{idx}]: {element}, active")
    return lines


def slot_payload(table: ProbeSet) -> List[Dict[str, Any]]:
    return [
        {
            "slot": idx,
            "state": state.value,
            "element": None if element is None else _json_friendly(str(element)),
        }
        for idx, state, element in table.slots()
    ]


def verify_table(table: ProbeSet) -> Tuple[bool, List[str]]:
    """Check the structural invariants of ``table``; return ``(ok, messages)``."""

    messages: List[str] = []
    capacity = table.capacity
    if not is_prime(capacity):
        messages.append(f"capacity {capacity} is not prime")

    live: List[Any] = []
    tombstones = 0
    for _, state, element in table.slots():
        if state is SlotState.OCCUPIED:
            live.append(element)
        elif state is SlotState.TOMBSTONE:
            tombstones += 1

    if table.occupied_cells != len(live) + tombstones:
        messages.append(
            f"occupied_cells={table.occupied_cells} but found {len(live)} live + {tombstones} tombstones"
        )
    if table.occupied_cells and table.occupied_cells >= capacity // 2:
        messages.append(f"occupied_cells={table.occupied_cells} breaks the half-load bound for capacity {capacity}")
    try:
        if len(set(live)) != len(live):
            messages.append("duplicate live elements present")
    except TypeError as exc:
        messages.append(f"unhashable element present: {exc}")
    for element in live:
        if table.find(element) is not element:
            messages.append(f"element {element!r} is not reachable by find")
    ok = not messages
    if ok:
        messages.append(
            f"capacity={capacity} live={len(live)} tombstones={tombstones} load_factor={table.load_factor():.3f}"
        )
    return ok, messages


__all__ = [
    "ProbeTrace",
    "format_slot_lines",
    "format_trace_lines",
    "slot_payload",
    "trace_find",
    "trace_insert",
    "verify_table",
]
