"""Text and data transformations: CSV/JSON conversion, case, sorting and filtering."""

from __future__ import annotations

import csv
import io
import re

from llmsupport.jsontools import _dump, _loads
from llmsupport.templating import _as_floats
from llmsupport.tomltools import _go_value

_WS = r"[\t\n\f\r ]"
_WORD_SPLIT = re.compile(r"[-_" + _WS[1:-1] + r"]+")
_SNAKE_FIRST = re.compile(r"(.)([ A-Z][a-z]+)")
_KEBAB_FIRST = re.compile(r"(.)([A-Z][a-z]+)")
_CAMEL_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])")
_SNAKE_SEPARATORS = re.compile(r"[-" + _WS[1:-1] + r"]+")
_KEBAB_SEPARATORS = re.compile(r"[_" + _WS[1:-1] + r"]+")
_SUPPORTED_CASES = (
    "camelCase, PascalCase, snake_case, kebab-case, UPPERCASE, lowercase, Title Case"
)


def _is_separator(ch: str) -> bool:
    if ch <= "\x7f":
        return not (ch.isalnum() or ch == "_")
    if ch.isalpha() or ch.isdecimal():
        return False
    return ch.isspace()


def _title(text: str) -> str:
    """Upper-case the first letter of every word, leaving the rest alone."""
    out = []
    previous = " "
    for ch in text:
        if _is_separator(previous):
            upper = ch.upper()
            out.append(upper if len(upper) == 1 else ch)
        else:
            out.append(ch)
        previous = ch
    return "".join(out)


def _read_csv(text: str) -> list[list[str]]:
    reader = csv.reader(io.StringIO(text, newline=""), strict=True)
    records: list[list[str]] = []
    try:
        for row in reader:
            if not row:
                continue
            if records and len(row) != len(records[0]):
                raise ValueError(
                    f"failed to parse CSV: record on line {reader.line_num}: "
                    "wrong number of fields"
                )
            records.append(row)
    except csv.Error as exc:
        raise ValueError(f"failed to parse CSV: {exc}") from exc
    return records


def csv_to_json(text: str) -> str:
    """Turn CSV with a header row into a JSON array of objects."""
    records = _read_csv(text)
    if not records:
        raise ValueError("empty CSV file")
    headers = records[0]
    rows = [dict(zip(headers, row)) for row in records[1:]]
    return _dump(rows if rows else None, "  ") + "\n"


def _csv_field(field: str) -> str:
    if field == "":
        return field
    needs_quotes = (
        field == r"\."
        or any(ch in field for ch in ',"\r\n')
        or field[0].isspace()
    )
    if not needs_quotes:
        return field
    return '"' + field.replace('"', '""') + '"'


def json_to_csv(text: str) -> str:
    """Turn a JSON array of objects into CSV with sorted column names."""
    try:
        data = _loads(text)
    except ValueError as exc:
        raise ValueError(f"invalid JSON: {exc}") from exc
    if data is None:
        data = []
    if not isinstance(data, list) or any(
        item is not None and not isinstance(item, dict) for item in data
    ):
        raise ValueError("invalid JSON: expected an array of objects")
    if not data:
        raise ValueError("empty JSON array")
    keys = sorted({key for item in data if item for key in item})
    rows = [keys]
    for item in data:
        record = item or {}
        rows.append(
            [_go_value(_as_floats(record[key])) if key in record else "" for key in keys]
        )
    return "".join(",".join(_csv_field(field) for field in row) + "\n" for row in rows)


def convert_case(text: str, target: str) -> str:
    """Convert ``text`` to camelCase, PascalCase, snake_case, kebab-case and so on."""
    to_case = target.lower()
    match to_case:
        case "camelcase":
            parts = _WORD_SPLIT.split(text)
            return parts[0].lower() + "".join(
                _title(word.lower()) for word in parts[1:] if word
            )
        case "pascalcase":
            return "".join(_title(word.lower()) for word in _WORD_SPLIT.split(text) if word)
        case "snake_case":
            result = _SNAKE_FIRST.sub(r"\1_\2", text)
            result = _CAMEL_BOUNDARY.sub(r"\1_\2", result)
            return _SNAKE_SEPARATORS.sub("_", result).lower()
        case "kebab-case":
            result = _KEBAB_FIRST.sub(r"\1-\2", text)
            result = _CAMEL_BOUNDARY.sub(r"\1-\2", result)
            return _KEBAB_SEPARATORS.sub("-", result).lower()
        case "uppercase":
            return text.upper()
        case "lowercase":
            return text.lower()
        case "titlecase" | "title case":
            return _title(text)
    raise ValueError(f"unknown case type: {to_case} (supported: {_SUPPORTED_CASES})")


def sort_lines(
    text: str, reverse: bool = False, unique: bool = False, no_empty: bool = False
) -> str:
    """Sort the lines of ``text``; each output line ends with a newline."""
    lines = text.split("\n")
    if no_empty:
        lines = [line for line in lines if line.strip()]
    lines.sort(reverse=reverse)
    if unique:
        lines = list(dict.fromkeys(lines))
    return "".join(f"{line}\n" for line in lines)


def filter_lines(text: str, pattern: str, invert: bool = False) -> str:
    """Keep lines matching ``pattern`` (or not matching, when ``invert``)."""
    try:
        regex = re.compile(pattern)
    except re.error as exc:
        raise ValueError(f"invalid regex pattern: {exc}") from exc
    return "".join(
        f"{line}\n"
        for line in text.split("\n")
        if (regex.search(line) is not None) != invert
    )