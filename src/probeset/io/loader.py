"""Roster file loading for the probe set."""

from __future__ import annotations

import gzip
import logging
import zlib
from dataclasses import dataclass
from pathlib import Path
from typing import IO, Optional, cast

from probeset.config import AppConfig
from probeset.contracts.error import BadInputError, InvalidRecordError, IOErrorEnvelope
from probeset.core.table import ProbeSet
from probeset.records import parse_record

logger = logging.getLogger("probeset")


@dataclass
class LoadResult:
    table: ProbeSet
    declared: int
    inserted: int = 0
    duplicates: int = 0
    invalid: int = 0


def open_roster_for_read(path: str, encoding: str = "utf-8") -> IO[str]:
    """Open a roster for text reading (gzip-aware)."""

    if path.endswith(".gz"):
        return cast(IO[str], gzip.open(path, "rt", encoding=encoding))
    return cast(IO[str], open(path, "r", encoding=encoding))


def _read_declared_size(header: str) -> int:
    tokens = header.split()
    try:
        return int(tokens[0])
    except (IndexError, ValueError) as exc:
        raise BadInputError("First line must contain collection size.") from exc


def load_roster(path: str | Path, config: Optional[AppConfig] = None) -> LoadResult:
    """Build a probe set from a roster file.

    The first line holds the number of records N; up to N record lines follow.
    Unparseable records are skipped unless ``loader.strict`` is set. Read
    failures surface as ``BadInputError`` (undecodable or corrupt content) or
    ``IOErrorEnvelope`` (the file cannot be opened or read).
    """

    cfg = config or AppConfig()
    cfg.loader.validate()
    encoding = cfg.loader.encoding
    target = str(Path(path).expanduser())
    try:
        with open_roster_for_read(target, encoding) as fh:
            result = _read_roster(fh, cfg)
    except FileNotFoundError as exc:
        raise IOErrorEnvelope("File not found.", hint=target) from exc
    except IsADirectoryError as exc:
        raise IOErrorEnvelope("File not found.", hint=f"{target} is a directory") from exc
    except UnicodeDecodeError as exc:
        raise BadInputError(f"Roster is not valid {encoding} text", hint=target) from exc
    except (gzip.BadGzipFile, EOFError, zlib.error) as exc:
        raise BadInputError("Roster is not a readable gzip file", hint=target) from exc
    except OSError as exc:
        raise IOErrorEnvelope(f"Could not read roster: {exc.strerror or exc}", hint=target) from exc

    logger.info(
        "Loaded %s: declared=%d inserted=%d duplicates=%d invalid=%d capacity=%d",
        target,
        result.declared,
        result.inserted,
        result.duplicates,
        result.invalid,
        result.table.capacity,
    )
    return result


def _read_roster(fh: IO[str], cfg: AppConfig) -> LoadResult:
    declared = _read_declared_size(fh.readline())
    max_records = cfg.loader.max_records
    if max_records is not None and declared > max_records:
        raise BadInputError(
            f"Declared collection size {declared} exceeds loader.max_records={max_records}"
        )

    result = LoadResult(
        table=ProbeSet(declared, min_capacity=cfg.table.min_capacity),
        declared=declared,
    )
    for offset in range(max(declared, 0)):
        line = fh.readline()
        if not line:
            break
        line_no = offset + 2
        try:
            record = parse_record(line)
        except InvalidRecordError as exc:
            if cfg.loader.strict:
                raise InvalidRecordError(f"Invalid Student on line {line_no}") from exc
            logger.warning("Skipping invalid record on line %d: %r", line_no, line.rstrip("\n"))
            result.invalid += 1
            continue
        if result.table.insert(record):
            result.inserted += 1
        else:
            logger.info("Duplicate student id %d on line %d", record.student_id, line_no)
            result.duplicates += 1
    return result


__all__ = ["LoadResult", "load_roster", "open_roster_for_read"]
