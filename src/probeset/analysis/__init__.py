"""Probe tracing and invariant checks for probe sets."""

from .probe import (
    format_slot_lines,
    format_trace_lines,
    slot_payload,
    trace_find,
    trace_insert,
    verify_table,
)

__all__ = [
    "format_slot_lines",
    "format_trace_lines",
    "slot_payload",
    "trace_find",
    "trace_insert",
    "verify_table",
]
