"""Contract helpers for the probeset CLI."""

from .error import (
    BadInputError,
    EnvelopeError,
    ErrorEnvelope,
    Exit,
    InvalidRecordError,
    InvariantError,
    IOErrorEnvelope,
    PolicyError,
    classify,
    die,
    guard_cli,
)

__all__ = [
    "Exit",
    "ErrorEnvelope",
    "EnvelopeError",
    "BadInputError",
    "InvalidRecordError",
    "InvariantError",
    "PolicyError",
    "IOErrorEnvelope",
    "classify",
    "guard_cli",
    "die",
]
