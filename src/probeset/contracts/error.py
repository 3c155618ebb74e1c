"""Error envelopes and exit codes for the probeset CLI.

Every command failure ends as one JSON line on stderr::

    {"error": "<label>", "detail": "<message>", "hint": "<optional>"}

and a stable exit code from :class:`Exit`. Roster and config code raise the
``EnvelopeError`` subclasses below; read failures that slip out of the loader
as plain ``OSError``/``UnicodeDecodeError`` are classified here as well.
"""

from __future__ import annotations

import json
import logging
import sys
from collections.abc import Callable
from dataclasses import dataclass
from enum import IntEnum
from functools import wraps
from typing import Any, NoReturn, TypeVar

logger = logging.getLogger("probeset")
T = TypeVar("T")


class Exit(IntEnum):
    """Stable exit codes shared across the CLI."""

    OK = 0
    BAD_INPUT = 2
    INVARIANT = 3
    POLICY = 4
    IO = 5


@dataclass(slots=True)
class ErrorEnvelope:
    """Machine-readable error written to stderr when a command fails."""

    error: str
    detail: str
    hint: str | None = None

    def to_json(self) -> str:
        payload = {"error": self.error, "detail": self.detail}
        if self.hint:
            payload["hint"] = self.hint
        return json.dumps(payload, ensure_ascii=False)


def die(code: Exit, kind: str, detail: str, hint: str | None = None) -> NoReturn:
    """Write the error envelope to stderr and exit with ``code``."""

    env = ErrorEnvelope(error=kind, detail=detail, hint=hint)
    sys.stderr.write(env.to_json() + "\n")
    try:
        sys.stderr.flush()
    finally:
        sys.exit(int(code))


class EnvelopeError(Exception):
    """Base exception that carries an optional hint for the error envelope."""

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint = hint


class BadInputError(EnvelopeError):
    """Malformed user input: roster files, record lines, config values."""


class InvalidRecordError(BadInputError):
    """A record line could not be parsed into a student record."""


class InvariantError(EnvelopeError):
    """Table invariants were found broken."""


class PolicyError(EnvelopeError):
    """Unsupported operation or command."""


class IOErrorEnvelope(EnvelopeError):  # noqa: N818
    """IO failures that map to Exit.IO."""


# Checked in order; subclasses come before their bases.
_EXCEPTION_ORDER: tuple[tuple[type[BaseException], Exit, str], ...] = (
    (InvalidRecordError, Exit.BAD_INPUT, "InvalidRecord"),
    (BadInputError, Exit.BAD_INPUT, "BadInput"),
    (InvariantError, Exit.INVARIANT, "Invariant"),
    (PolicyError, Exit.POLICY, "Policy"),
    (IOErrorEnvelope, Exit.IO, "IO"),
    (UnicodeDecodeError, Exit.BAD_INPUT, "BadEncoding"),
    (FileNotFoundError, Exit.IO, "FileNotFound"),
    (IsADirectoryError, Exit.IO, "IsADirectory"),
    (PermissionError, Exit.IO, "PermissionDenied"),
    (OSError, Exit.IO, "IO"),
)


def classify(exc: BaseException) -> tuple[Exit, ErrorEnvelope] | None:
    """Map ``exc`` to its exit code and envelope, or ``None`` when unknown."""

    for exc_type, exit_code, label in _EXCEPTION_ORDER:
        if isinstance(exc, exc_type):
            if isinstance(exc, EnvelopeError):
                return exit_code, ErrorEnvelope(label, str(exc), exc.hint)
            if isinstance(exc, OSError):
                detail = exc.strerror or str(exc)
                return exit_code, ErrorEnvelope(label, detail, exc.filename and str(exc.filename))
            return exit_code, ErrorEnvelope(label, str(exc))
    return None


def guard_cli(fn: Callable[..., T]) -> Callable[..., T]:
    """Decorate a CLI handler to enforce exit codes and error envelopes."""

    @wraps(fn)
    def _wrapped(*args: Any, **kwargs: Any) -> T:
        try:
            return fn(*args, **kwargs)
        except Exception as exc:
            mapped = classify(exc)
            if mapped is None:
                logger.exception("Unhandled CLI exception")
                die(Exit.POLICY, "Unhandled", f"{type(exc).__name__}: {exc}")
            exit_code, env = mapped
            logger.debug("%s failed with %s: %s", fn.__name__, env.error, env.detail)
            die(exit_code, env.error, env.detail, hint=env.hint)

    return _wrapped


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
