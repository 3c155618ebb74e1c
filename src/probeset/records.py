"""Student records stored in the probe set.

Two records are equal when their ids are equal, whatever their last names,
so a bare id can be used to look up or delete the full stored record.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from .contracts.error import InvalidRecordError


@dataclass(frozen=True)
class StudentRecord:
    student_id: int
    last_name: Optional[str] = field(default=None, compare=False)

    def __str__(self) -> str:
        return f"{self.student_id}, {self.last_name}"


def _parse_id(token: str) -> int:
    if not (token.isascii() and token.lstrip("+-").isdigit()):
        raise InvalidRecordError("Invalid Student")
    try:
        student_id = int(token)
    except ValueError as exc:
        raise InvalidRecordError("Invalid Student") from exc
    if student_id <= 0:
        raise InvalidRecordError("Invalid Student")
    return student_id


def _tokens(line: str, expected: int) -> List[str]:
    tokens = line.split()
    if len(tokens) != expected:
        raise InvalidRecordError("Invalid Student")
    return tokens


def parse_record(line: str) -> StudentRecord:
    """Parse ``"<id> <last_name>"`` into a record."""

    id_token, last_name = _tokens(line, 2)
    return StudentRecord(_parse_id(id_token), last_name)


def parse_search_key(line: str) -> StudentRecord:
    """Parse a bare ``"<id>"`` into a key record with no last name."""

    (id_token,) = _tokens(line, 1)
    return StudentRecord(_parse_id(id_token))


__all__ = ["StudentRecord", "parse_record", "parse_search_key"]
