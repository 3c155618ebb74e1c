"""Typed configuration loader for the probeset CLI."""

from __future__ import annotations

import codecs
import os
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .contracts.error import BadInputError
from .core.table import DEFAULT_MIN_CAPACITY

_TRUE_WORDS = {"1", "true", "yes", "on"}
_FALSE_WORDS = {"0", "false", "no", "off"}
_NONE_WORDS = {"none", "null", "unlimited", "off"}


def _coerce_bool(raw: Any, name: str) -> bool:
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, str):
        normalized = raw.strip().lower()
        if normalized in _TRUE_WORDS:
            return True
        if normalized in _FALSE_WORDS:
            return False
    raise BadInputError(f"{name} must be boolean")


def _coerce_optional_int(raw: Any, name: str) -> int | None:
    if raw is None:
        return None
    if isinstance(raw, str) and raw.strip().lower() in _NONE_WORDS:
        return None
    if isinstance(raw, bool):
        raise BadInputError(f"{name} must be an integer or 'none'")
    try:
        return int(raw)
    except (TypeError, ValueError) as exc:
        raise BadInputError(f"{name} must be an integer or 'none'") from exc


@dataclass
class TablePolicy:
    min_capacity: int = DEFAULT_MIN_CAPACITY

    def validate(self) -> None:
        if isinstance(self.min_capacity, bool) or not isinstance(self.min_capacity, int):
            raise BadInputError("table.min_capacity must be an integer")
        if self.min_capacity < 2:
            raise BadInputError("table.min_capacity must be >= 2")


@dataclass
class LoaderPolicy:
    strict: bool = False
    max_records: int | None = None
    encoding: str = "utf-8"

    def validate(self) -> None:
        if self.max_records is not None and self.max_records < 0:
            raise BadInputError("loader.max_records must be >= 0 or 'none'")
        if not self.encoding:
            raise BadInputError("loader.encoding must not be empty")
        try:
            codecs.lookup(self.encoding)
        except LookupError as exc:
            raise BadInputError(f"loader.encoding {self.encoding!r} is not a known codec") from exc


@dataclass
class AppConfig:
    table: TablePolicy = field(default_factory=TablePolicy)
    loader: LoaderPolicy = field(default_factory=LoaderPolicy)

    @classmethod
    def load(cls, path: Path | None) -> AppConfig:
        if path is None:
            cfg = cls()
        else:
            try:
                data = tomllib.loads(path.read_text(encoding="utf-8"))
            except FileNotFoundError as exc:
                raise BadInputError(f"Config file not found: {path}") from exc
            except tomllib.TOMLDecodeError as exc:
                raise BadInputError(f"Invalid TOML: {exc}") from exc
            cfg = cls.from_dict(data)
        cfg.apply_env_overrides(os.environ)
        cfg.validate()
        return cfg

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AppConfig:
        table_data = data.get("table", {})
        if not isinstance(table_data, dict):
            raise BadInputError("[table] section must be a table")
        try:
            table = TablePolicy(**table_data)
        except TypeError as exc:
            raise BadInputError(f"Unknown key in [table]: {exc}") from exc

        loader_data = data.get("loader", {})
        if not isinstance(loader_data, dict):
            raise BadInputError("[loader] section must be a table")
        unknown = set(loader_data) - {"strict", "max_records", "encoding"}
        if unknown:
            raise BadInputError(f"Unknown key(s) in [loader]: {', '.join(sorted(unknown))}")
        loader_kwargs: dict[str, Any] = {}
        if "strict" in loader_data:
            loader_kwargs["strict"] = _coerce_bool(loader_data["strict"], "loader.strict")
        if "max_records" in loader_data:
            loader_kwargs["max_records"] = _coerce_optional_int(
                loader_data["max_records"], "loader.max_records"
            )
        if "encoding" in loader_data:
            loader_kwargs["encoding"] = str(loader_data["encoding"])
        return cls(table=table, loader=LoaderPolicy(**loader_kwargs))

    def apply_env_overrides(self, env: Mapping[str, str]) -> None:
        raw_capacity = env.get("PROBESET_MIN_CAPACITY")
        if raw_capacity is not None:
            try:
                self.table.min_capacity = int(raw_capacity)
            except ValueError as exc:
                raise BadInputError(
                    f"Invalid env override PROBESET_MIN_CAPACITY={raw_capacity!r}"
                ) from exc

        raw_strict = env.get("PROBESET_LOADER_STRICT")
        if raw_strict is not None:
            try:
                self.loader.strict = _coerce_bool(raw_strict, "PROBESET_LOADER_STRICT")
            except BadInputError as exc:
                raise BadInputError(
                    f"Invalid env override PROBESET_LOADER_STRICT={raw_strict!r}"
                ) from exc

        raw_max = env.get("PROBESET_MAX_RECORDS")
        if raw_max is not None:
            try:
                self.loader.max_records = _coerce_optional_int(raw_max, "PROBESET_MAX_RECORDS")
            except BadInputError as exc:
                raise BadInputError(
                    f"Invalid env override PROBESET_MAX_RECORDS={raw_max!r}"
                ) from exc

        raw_encoding = env.get("PROBESET_ENCODING")
        if raw_encoding is not None:
            self.loader.encoding = raw_encoding

    def validate(self) -> None:
        self.table.validate()
        self.loader.validate()


def load_app_config(path: str | None) -> AppConfig:
    config_path = Path(path) if path else None
    return AppConfig.load(config_path)
