"""Parsing, querying, validating and merging JSON documents."""

from __future__ import annotations

import json
import math
import os
from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal
from pathlib import Path
from typing import Any

PathLike = str | os.PathLike[str]

_HTML_ESCAPES = {
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}


def _reject_constant(name: str) -> Any:
    raise ValueError(f"invalid character in literal: {name}")


def _loads(text: str) -> Any:
    """Parse strict JSON: NaN and Infinity are rejected."""
    return json.loads(text, parse_constant=_reject_constant)


def _read(path: PathLike, message: str) -> str:
    try:
        return Path(path).read_bytes().decode("utf-8", errors="replace")
    except OSError as exc:
        raise OSError(f"{message}: {exc}") from exc


def _encode_string(text: str) -> str:
    encoded = json.dumps(text, ensure_ascii=False)
    for char, escape in _HTML_ESCAPES.items():
        encoded = encoded.replace(char, escape)
    return encoded


def _decompose(magnitude: float) -> tuple[str, int]:
    _, digits, exponent = Decimal(repr(magnitude)).normalize().as_tuple()
    text = "".join(map(str, digits))
    return text, len(text) + int(exponent) - 1


def _json_number(value: int | float) -> str:
    if isinstance(value, int):
        if abs(value) < 10**21:
            return str(value)
        try:
            value = float(value)
        except OverflowError as exc:
            raise ValueError(f"number out of range: {value}") from exc
    if not math.isfinite(value):
        raise ValueError(f"unsupported value: {value}")
    if value == 0:
        return "-0" if math.copysign(1.0, value) < 0 else "0"
    sign = "-" if value < 0 else ""
    magnitude = abs(value)
    if magnitude < 1e21 and magnitude.is_integer():
        return sign + str(int(magnitude))
    if 1e-6 <= magnitude < 1e21:
        return sign + format(Decimal(repr(magnitude)), "f")
    digits, exp10 = _decompose(magnitude)
    mantissa = digits[0] + (f".{digits[1:]}" if len(digits) > 1 else "")
    if exp10 < 0:
        return f"{sign}{mantissa}e-{-exp10}"
    return f"{sign}{mantissa}e+{exp10:02d}"


def _dump(value: Any, indent: str | None, level: int = 0) -> str:
    """Serialise with sorted keys; ``indent=None`` gives compact output."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return _json_number(value)
    if isinstance(value, str):
        return _encode_string(value)
    if isinstance(value, dict):
        if not value:
            return "{}"
        members = [
            (_encode_string(str(key)), _dump(item, indent, level + 1))
            for key, item in sorted(value.items(), key=lambda pair: str(pair[0]))
        ]
        if indent is None:
            return "{" + ",".join(f"{k}:{v}" for k, v in members) + "}"
        inner = "\n" + indent * (level + 1)
        body = ("," + inner).join(f"{k}: {v}" for k, v in members)
        return "{" + inner + body + "\n" + indent * level + "}"
    if isinstance(value, (list, tuple)):
        if not value:
            return "[]"
        elements = [_dump(item, indent, level + 1) for item in value]
        if indent is None:
            return "[" + ",".join(elements) + "]"
        inner = "\n" + indent * (level + 1)
        return "[" + inner + ("," + inner).join(elements) + "\n" + indent * level + "]"
    raise TypeError(f"unsupported type: {type(value).__name__}")


def _go_type(value: Any) -> str:
    if value is None:
        return "<nil>"
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, (int, float)):
        return "float64"
    if isinstance(value, str):
        return "string"
    return type(value).__name__


def _scalar_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        return format(Decimal(repr(value)), "f")
    return str(value)


def _select(value: Any, parts: list[str]) -> tuple[bool, Any]:
    if not parts:
        return True, value
    head, rest = parts[0], parts[1:]
    if isinstance(value, list):
        if head == "#":
            if not rest:
                return True, len(value)
            collected = []
            for item in value:
                found, selected = _select(item, rest)
                if found:
                    collected.append(selected)
            return True, collected
        if head.isdigit() and int(head) < len(value):
            return _select(value[int(head)], rest)
        return False, None
    if isinstance(value, dict) and head in value:
        return _select(value[head], rest)
    return False, None


@dataclass(frozen=True)
class JsonValidation:
    """Result of checking a JSON document's syntax."""

    valid: bool
    elements: int = 0
    error: str | None = None

    def render(self) -> str:
        if not self.valid:
            return f"\u2717 INVALID: {self.error}\n"
        return f"\u2713 VALID JSON\nElements: {self.elements}\n"


def format_json(path: PathLike, indent: int = 2, compact: bool = False) -> str:
    """Pretty-print (or compact) a JSON file with keys sorted."""
    if indent < 0:
        raise ValueError("indent must not be negative")
    text = _read(path, "failed to read file")
    try:
        data = _loads(text)
    except ValueError as exc:
        raise ValueError(f"invalid JSON: {exc}") from exc
    return _dump(data, None if compact else " " * indent) + "\n"


def query_path(data: Any, path: str) -> Any:
    """Follow a dot-separated path of keys and array indexes."""
    current = data
    for part in path.split("."):
        if isinstance(current, dict):
            if part not in current:
                raise LookupError(f"key not found: {part}")
            current = current[part]
        elif isinstance(current, list):
            try:
                index = int(part)
            except ValueError as exc:
                raise ValueError(f"invalid array index: {part}") from exc
            if not 0 <= index < len(current):
                raise LookupError(f"array index out of range: {index}")
            current = current[index]
        else:
            raise TypeError(f"cannot navigate through {_go_type(current)}")
    return current


def query_file(path: PathLike, query: str) -> str:
    """Run a path query (``#`` spans arrays) against a JSON file and format the answer."""
    text = _read(path, "failed to read file")
    try:
        data = _loads(text)
    except ValueError as exc:
        raise ValueError("invalid JSON in file") from exc
    found, result = _select(data, query.split("."))
    if not found:
        raise LookupError(f"path not found: {query}")
    if isinstance(result, (dict, list)):
        body = _dump(result, "  ")
    else:
        body = _scalar_text(result)
    return f"QUERY: {query}\nRESULT:\n{body}\n"


def count_elements(data: Any) -> int:
    """Count a value and every value nested inside it."""
    if isinstance(data, dict):
        return 1 + sum(count_elements(item) for item in data.values())
    if isinstance(data, list):
        return 1 + sum(count_elements(item) for item in data)
    return 1


def validate_json(path: PathLike) -> JsonValidation:
    """Check whether a file holds valid JSON."""
    text = _read(path, "failed to read file")
    try:
        data = _loads(text)
    except ValueError as exc:
        return JsonValidation(False, error=str(exc))
    return JsonValidation(True, elements=count_elements(data))


def merge_json(paths: Iterable[PathLike]) -> str:
    """Shallow-merge JSON objects; later files override earlier keys."""
    files = list(paths)
    if len(files) < 2:
        raise ValueError("at least two files are required")
    merged: dict[str, Any] = {}
    for file in files:
        text = _read(file, f"failed to read {os.fspath(file)}")
        try:
            data = _loads(text)
        except ValueError as exc:
            raise ValueError(f"invalid JSON in {os.fspath(file)}: {exc}") from exc
        if data is None:
            continue
        if not isinstance(data, dict):
            raise ValueError(f"invalid JSON in {os.fspath(file)}: expected an object")
        merged.update(data)
    return _dump(merged, "  ") + "\n"