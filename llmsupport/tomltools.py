"""Parsing, querying and validating TOML documents."""

from __future__ import annotations

import datetime as dt
import math
import os
import tomllib
from dataclasses import dataclass
from decimal import Decimal
from pathlib import Path
from typing import Any

PathLike = str | os.PathLike[str]


def _go_float(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    if value == 0:
        return "-0" if math.copysign(1.0, value) < 0 else "0"
    sign = "-" if value < 0 else ""
    number = Decimal(repr(abs(value))).normalize()
    _, digits_tuple, exponent = number.as_tuple()
    digits = "".join(map(str, digits_tuple))
    exp10 = len(digits) + int(exponent) - 1
    if exp10 < -4 or exp10 >= 6:
        mantissa = digits[0] + (f".{digits[1:]}" if len(digits) > 1 else "")
        return f"{sign}{mantissa}e{'-' if exp10 < 0 else '+'}{abs(exp10):02d}"
    return sign + format(number, "f")


def _fraction(microsecond: int) -> str:
    return f".{microsecond:06d}".rstrip("0") if microsecond else ""


def _go_time(value: dt.datetime | dt.date | dt.time) -> str:
    if isinstance(value, dt.datetime):
        base = (
            f"{value.year:04d}-{value.month:02d}-{value.day:02d} "
            f"{value.hour:02d}:{value.minute:02d}:{value.second:02d}"
            f"{_fraction(value.microsecond)}"
        )
        offset = value.utcoffset()
        if offset is None:
            return f"{base} +0000 datetime-local"
        total = int(offset.total_seconds())
        hours, minutes = divmod(abs(total) // 60, 60)
        numeric = f"{'-' if total < 0 else '+'}{hours:02d}{minutes:02d}"
        return f"{base} {numeric} {'UTC' if total == 0 else numeric}"
    if isinstance(value, dt.date):
        return f"{value.year:04d}-{value.month:02d}-{value.day:02d} 00:00:00 +0000 date-local"
    return (
        f"0000-01-01 {value.hour:02d}:{value.minute:02d}:{value.second:02d}"
        f"{_fraction(value.microsecond)} +0000 time-local"
    )


def _go_value(value: Any) -> str:
    """Render a value the way a default-format print shows it."""
    if value is None:
        return "<nil>"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return _go_float(value)
    if isinstance(value, str):
        return value
    if isinstance(value, (dt.datetime, dt.date, dt.time)):
        return _go_time(value)
    if isinstance(value, (list, tuple)):
        return "[" + " ".join(_go_value(item) for item in value) + "]"
    if isinstance(value, dict):
        members = sorted(value.items(), key=lambda pair: str(pair[0]))
        return "map[" + " ".join(f"{k}:{_go_value(v)}" for k, v in members) + "]"
    return str(value)


def _go_type(value: Any) -> str:
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, int):
        return "int64"
    if isinstance(value, float):
        return "float64"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "[]interface {}"
    if isinstance(value, (dt.datetime, dt.date, dt.time)):
        return "time.Time"
    return type(value).__name__


@dataclass(frozen=True)
class TomlValidation:
    """Result of checking a TOML document's syntax."""

    valid: bool
    keys: int = 0
    error: str | None = None

    def render(self) -> str:
        if not self.valid:
            return f"\u2717 INVALID: {self.error}\n"
        return f"\u2713 VALID TOML\nKeys: {self.keys}\n"


def _read(path: PathLike) -> bytes:
    try:
        return Path(path).read_bytes()
    except OSError as exc:
        raise OSError(f"failed to read file: {exc}") from exc


def _parse(content: bytes) -> dict[str, Any]:
    return tomllib.loads(content.decode("utf-8"))


def load_toml(path: PathLike) -> dict[str, Any]:
    """Read and parse a TOML file."""
    content = _read(path)
    try:
        return _parse(content)
    except ValueError as exc:
        raise ValueError(f"invalid TOML: {exc}") from exc


def format_toml(value: Any, indent: int = 0) -> str:
    """Show tables as ``[name]`` headings with indented ``key = value`` lines."""
    prefix = "  " * indent
    if not isinstance(value, dict):
        return f"{prefix}{_go_value(value)}\n"
    lines = []
    for key, item in value.items():
        if isinstance(item, dict):
            lines.append(f"{prefix}[{key}]\n")
            lines.append(format_toml(item, indent + 1))
        else:
            lines.append(f"{prefix}{key} = {_go_value(item)}\n")
    return "".join(lines)


def query_toml(data: dict[str, Any], path: str) -> Any:
    """Follow a dot-separated path of table keys."""
    current: Any = data
    for part in path.split("."):
        if not isinstance(current, dict):
            raise TypeError(f"cannot navigate through {_go_type(current)} at {part}")
        if part not in current:
            raise LookupError(f"path not found: {path}")
        current = current[part]
    return current


def query_file(path: PathLike, query: str) -> str:
    """Query a TOML file and format the answer."""
    result = query_toml(load_toml(path), query)
    return f"QUERY: {query}\nRESULT:\n{format_toml(result)}"


def count_keys(data: dict[str, Any]) -> int:
    """Count keys in a table and every nested table."""
    return len(data) + sum(count_keys(item) for item in data.values() if isinstance(item, dict))


def validate_toml(path: PathLike) -> TomlValidation:
    """Check whether a file holds valid TOML."""
    content = _read(path)
    try:
        data = _parse(content)
    except ValueError as exc:
        return TomlValidation(False, error=str(exc))
    return TomlValidation(True, keys=count_keys(data))