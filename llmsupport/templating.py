"""Variable substitution in text templates."""

from __future__ import annotations

import os
import re
import sys
from collections.abc import Callable, Iterable, Mapping
from pathlib import Path
from typing import Any

from llmsupport.jsontools import _loads
from llmsupport.tomltools import _go_value

PathLike = str | os.PathLike[str]

_PATTERNS = {
    "brackets": re.compile(r"\[\[([^\]]+)\]\]"),
    "braces": re.compile(r"\{\{([^}]+)\}\}"),
}


def _as_floats(value: Any) -> Any:
    """JSON numbers are treated as floating point throughout."""
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return float(value)
    if isinstance(value, list):
        return [_as_floats(item) for item in value]
    if isinstance(value, dict):
        return {key: _as_floats(item) for key, item in value.items()}
    return value


def collect_variables(
    data_file: PathLike | None = None,
    use_env: bool = False,
    assignments: Iterable[str] = (),
    strip: bool = False,
) -> dict[str, str]:
    """Merge variables from a JSON file, the environment and ``KEY=VALUE`` items.

    Later sources win. A value of ``@path`` is replaced by that file's contents.
    """
    variables: dict[str, str] = {}
    if data_file:
        try:
            raw = Path(data_file).read_bytes()
        except OSError as exc:
            raise OSError(f"failed to read data file: {exc}") from exc
        try:
            data = _loads(raw.decode("utf-8", errors="replace"))
        except ValueError as exc:
            raise ValueError(f"invalid JSON in data file: {exc}") from exc
        if data is not None and not isinstance(data, dict):
            raise ValueError("invalid JSON in data file: expected an object")
        for key, value in (data or {}).items():
            variables[key] = _go_value(_as_floats(value))
    if use_env:
        variables.update(os.environ)
    for item in assignments:
        key, sep, value = item.partition("=")
        if not sep:
            continue
        if value.startswith("@"):
            try:
                value = Path(value[1:]).read_bytes().decode("utf-8", errors="replace")
            except OSError as exc:
                raise OSError(f"failed to read file for variable {key}: {exc}") from exc
            if strip:
                value = value.strip()
        variables[key] = value
    return variables


def _stderr(message: str) -> None:
    print(message, file=sys.stderr)


def render_template(
    text: str,
    variables: Mapping[str, str],
    syntax: str = "braces",
    strict: bool = False,
    warn: Callable[[str], None] | None = None,
) -> str:
    """Replace ``{{name}}`` (or ``[[name]]``) placeholders; ``name|default`` supplies a fallback.

    Unknown placeholders are left as they are; in strict mode each is reported through ``warn``.
    """
    pattern = _PATTERNS["brackets" if syntax == "brackets" else "braces"]
    report = warn or _stderr

    def replace(match: re.Match[str]) -> str:
        name, sep, default = match.group(1).partition("|")
        name = name.strip()
        if name in variables:
            return variables[name]
        if sep:
            return default.strip()
        if strict:
            report(f"ERROR: Undefined variable: {name}")
        return match.group(0)

    return pattern.sub(replace, text)


def render_file(
    path: PathLike,
    variables: Mapping[str, str],
    syntax: str = "braces",
    strict: bool = False,
    warn: Callable[[str], None] | None = None,
) -> str:
    """Read a template file and render it."""
    if os.fspath(path) == "-":
        raise ValueError("stdin not supported, use file path")
    try:
        text = Path(path).read_bytes().decode("utf-8", errors="replace")
    except OSError as exc:
        raise OSError(f"failed to read template: {exc}") from exc
    return render_template(text, variables, syntax, strict, warn)