"""Directory views: listings, trees, statistics and summaries."""

from __future__ import annotations

import os
import re
import stat
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

PathLike = str | os.PathLike[str]

_SKIP_DIR = "skip_dir"
_SKIP_ALL = "skip_all"
_TEXT_SNIFF = 8192
_UNITS = ("KB", "MB", "GB", "TB", "PB")


class _StopWalk(Exception):
    pass


def format_size(size: int) -> str:
    """Render a byte count in human-readable units."""
    if size < 1024:
        return f"{size} B"
    value = float(size)
    for unit in _UNITS:
        value /= 1024
        if value < 1024 or unit == _UNITS[-1]:
            return f"{value:.1f} {unit}"
    return f"{value:.1f} {_UNITS[-1]}"


def _translate(pattern: str) -> str:
    out: list[str] = []
    i, n = 0, len(pattern)
    while i < n:
        if pattern.startswith("**/", i):
            out.append("(?:.*/)?")
            i += 3
            continue
        if pattern.startswith("/**", i) and i + 3 == n:
            out.append("(?:/.*)?")
            i += 3
            continue
        if pattern.startswith("**", i):
            out.append(".*")
            i += 2
            continue
        char = pattern[i]
        if char == "*":
            out.append("[^/]*")
        elif char == "?":
            out.append("[^/]")
        elif char == "[":
            end = pattern.find("]", i + 1)
            if end == -1:
                out.append(re.escape(char))
            else:
                body = pattern[i + 1:end]
                if body.startswith("!"):
                    body = "^" + body[1:]
                out.append("[" + body.replace("\\", "\\\\") + "]")
                i = end + 1
                continue
        elif char == "\\" and i + 1 < n:
            out.append(re.escape(pattern[i + 1]))
            i += 2
            continue
        else:
            out.append(re.escape(char))
        i += 1
    return "".join(out)


@dataclass(frozen=True)
class _Rule:
    regex: re.Pattern[str]
    negate: bool
    dir_only: bool


@dataclass(frozen=True)
class IgnoreRules:
    """Ignore patterns read from a directory's ``.gitignore``."""

    root: Path
    rules: tuple[_Rule, ...] = field(default=())

    @classmethod
    def from_directory(cls, root: PathLike) -> IgnoreRules:
        """Load ``<root>/.gitignore``; a missing file yields no rules."""
        base = Path(os.path.abspath(root))
        try:
            text = (base / ".gitignore").read_text(encoding="utf-8", errors="replace")
        except OSError:
            return cls(base)
        rules = []
        for raw in text.splitlines():
            line = raw.rstrip()
            if not line or line.startswith("#"):
                continue
            negate = line.startswith("!")
            if negate:
                line = line[1:]
            dir_only = line.endswith("/")
            line = line.rstrip("/")
            if not line:
                continue
            anchored = "/" in line
            line = line.lstrip("/")
            body = _translate(line)
            source = f"^{body}$" if anchored else f"^(?:.*/)?{body}$"
            try:
                rules.append(_Rule(re.compile(source), negate, dir_only))
            except re.error:
                continue
        return cls(base, tuple(rules))

    def _matches(self, relative: str, is_dir: bool) -> bool:
        ignored = False
        for rule in self.rules:
            if rule.dir_only and not is_dir:
                continue
            if rule.regex.match(relative):
                ignored = not rule.negate
        return ignored

    def is_ignored(self, path: PathLike) -> bool:
        """Whether ``path``, or any directory above it under the root, is ignored."""
        if not self.rules:
            return False
        absolute = os.path.abspath(path)
        relative = os.path.relpath(absolute, self.root)
        if relative == "." or relative == ".." or relative.startswith(".." + os.sep):
            return False
        parts = relative.replace(os.sep, "/").split("/")
        for depth in range(1, len(parts) + 1):
            prefix = "/".join(parts[:depth])
            is_dir = depth < len(parts) or os.path.isdir(absolute)
            if self._matches(prefix, is_dir):
                return True
        return False


def _resolve_directory(path: PathLike) -> str:
    absolute = os.path.abspath(path)
    if not os.path.exists(absolute):
        raise FileNotFoundError(f"path does not exist: {absolute}")
    if not os.path.isdir(absolute):
        raise NotADirectoryError(f"path is not a directory: {absolute}")
    return absolute


def _rules(path: str, no_gitignore: bool) -> IgnoreRules | None:
    return None if no_gitignore else IgnoreRules.from_directory(path)


def _name(path: str) -> str:
    return os.path.basename(path.rstrip(os.sep)) or path


def _ext(name: str) -> str:
    index = name.rfind(".")
    return name[index:] if index >= 0 else ""


def _walk(root: str, visit: Callable[[str, os.stat_result], str | None]) -> None:
    """Visit ``root`` and everything below it in lexical order, without following links."""
    try:
        info = os.lstat(root)
    except OSError:
        return
    try:
        _walk_node(root, info, visit)
    except _StopWalk:
        pass


def _walk_node(path: str, info: os.stat_result, visit: Callable[[str, os.stat_result], str | None]) -> None:
    action = visit(path, info)
    if action == _SKIP_ALL:
        raise _StopWalk
    if action == _SKIP_DIR or not stat.S_ISDIR(info.st_mode):
        return
    try:
        names = sorted(os.listdir(path))
    except OSError:
        return
    for name in names:
        child = os.path.join(path, name)
        try:
            child_info = os.lstat(child)
        except OSError:
            continue
        _walk_node(child, child_info, visit)


def _is_text(content: bytes) -> bool:
    return b"\x00" not in content[:_TEXT_SNIFF]


def list_directory(
    path: PathLike = ".",
    dates: bool = False,
    sizes: bool = False,
    no_gitignore: bool = False,
) -> str:
    """List a directory's entries as ``[type] name [size] [date]`` lines."""
    root = _resolve_directory(path)
    ignorer = _rules(root, no_gitignore)
    try:
        entries = list(os.scandir(root))
    except OSError as exc:
        raise PermissionError(f"permission denied: {root}") from exc
    rows = []
    for entry in entries:
        if not no_gitignore and entry.name.startswith("."):
            continue
        if ignorer is not None and ignorer.is_ignored(entry.path):
            continue
        try:
            info = entry.stat(follow_symlinks=False)
        except OSError:
            continue
        rows.append((entry.name, entry.is_dir(follow_symlinks=False), info))
    rows.sort(key=lambda row: row[0])
    if not rows:
        return "EMPTY_DIRECTORY\n"
    lines = []
    for name, is_dir, info in rows:
        parts = ["[dir]" if is_dir else "[file]", name]
        if sizes and not is_dir:
            parts.append(format_size(info.st_size))
        if dates:
            parts.append(datetime.fromtimestamp(info.st_mtime).strftime("%Y-%m-%d %H:%M:%S"))
        lines.append(" ".join(parts) + "\n")
    return "".join(lines)


def render_tree(
    path: PathLike = ".",
    depth: int = 999,
    sizes: bool = False,
    no_gitignore: bool = False,
) -> str:
    """Draw a directory tree, directories first, down to ``depth`` levels."""
    root = _resolve_directory(path)
    ignorer = _rules(root, no_gitignore)
    lines = [f"{root}/\n"]

    def build(current: str, prefix: str, level: int) -> None:
        if level > depth:
            return
        try:
            entries = list(os.scandir(current))
        except OSError:
            return
        items = [
            entry
            for entry in entries
            if (no_gitignore or not entry.name.startswith("."))
            and not (ignorer is not None and ignorer.is_ignored(entry.path))
        ]
        items.sort(key=lambda entry: (not entry.is_dir(follow_symlinks=False), entry.name))
        for position, entry in enumerate(items):
            last = position == len(items) - 1
            connector, extension = ("└── ", "    ") if last else ("├── ", "│   ")
            is_dir = entry.is_dir(follow_symlinks=False)
            name = entry.name + "/" if is_dir else entry.name
            suffix = ""
            if sizes and not is_dir:
                try:
                    suffix = f" [{format_size(entry.stat(follow_symlinks=False).st_size)}]"
                except OSError:
                    suffix = ""
            lines.append(f"{prefix}{connector}{name}{suffix}\n")
            if is_dir:
                build(entry.path, prefix + extension, level + 1)

    build(root, "", 0)
    return "".join(lines)


def directory_stats(path: PathLike = ".", no_gitignore: bool = False) -> str:
    """Count files and directories and break sizes down by extension."""
    root = _resolve_directory(path)
    ignorer = _rules(root, no_gitignore)
    totals = {"files": 0, "dirs": 0, "size": 0}
    counts: dict[str, int] = {}
    ext_sizes: dict[str, int] = {}

    def visit(current: str, info: os.stat_result) -> str | None:
        is_dir = stat.S_ISDIR(info.st_mode)
        name = _name(current)
        if not no_gitignore and name.startswith("."):
            return _SKIP_DIR if is_dir else None
        if ignorer is not None and ignorer.is_ignored(current):
            return _SKIP_DIR if is_dir else None
        if is_dir:
            if current != root:
                totals["dirs"] += 1
            return None
        totals["files"] += 1
        totals["size"] += info.st_size
        ext = _ext(name).lower() or "(no extension)"
        counts[ext] = counts.get(ext, 0) + 1
        ext_sizes[ext] = ext_sizes.get(ext, 0) + info.st_size
        return None

    _walk(root, visit)
    lines = [
        f"PATH: {root}\n",
        f"FILES: {totals['files']}\n",
        f"DIRECTORIES: {totals['dirs']}\n",
        f"TOTAL_SIZE: {format_size(totals['size'])}\n",
        "\n",
    ]
    if counts:
        lines.append("BY_EXTENSION:\n")
        for ext in sorted(counts, key=lambda key: (-counts[key], key)):
            lines.append(f"  {ext}: {counts[ext]} files ({format_size(ext_sizes[ext])})\n")
    return "".join(lines)


def _summary_tree(root: str, ignorer: IgnoreRules | None, recursive: bool, no_gitignore: bool) -> str:
    dirs: list[str] = []
    files: list[tuple[str, int]] = []

    def visit(current: str, info: os.stat_result) -> str | None:
        is_dir = stat.S_ISDIR(info.st_mode)
        if not no_gitignore and _name(current).startswith("."):
            return _SKIP_DIR if is_dir else None
        if ignorer is not None and ignorer.is_ignored(current):
            return _SKIP_DIR if is_dir else None
        relative = os.path.relpath(current, root)
        if relative == ".":
            return None
        if is_dir:
            dirs.append(relative)
            return None if recursive else _SKIP_DIR
        files.append((relative, info.st_size))
        return None

    _walk(root, visit)
    lines = [f"DIRECTORY: {root}\n\n", "DIRECTORIES:\n"]
    lines.extend(f"  {directory}/\n" for directory in sorted(dirs))
    lines.append("\nFILES:\n")
    lines.extend(f"  {name} ({format_size(size)})\n" for name, size in sorted(files))
    lines.append(f"\nSUMMARY: {len(dirs)} directories, {len(files)} files\n")
    return "".join(lines)


def _read_head(path: str, count: int) -> list[bytes]:
    lines: list[bytes] = []
    if count <= 0:
        return lines
    with open(path, "rb") as handle:
        for raw in handle:
            line = raw[:-1] if raw.endswith(b"\n") else raw
            lines.append(line[:-1] if line.endswith(b"\r") else line)
            if len(lines) >= count:
                break
    return lines


def _summary_outline(
    root: str, ignorer: IgnoreRules | None, max_chars: int, max_lines: int, no_gitignore: bool
) -> str:
    parts = [f"DIRECTORY: {root}\n", f"FORMAT: outline (first {max_lines} lines per file)\n\n"]
    total = 0

    def visit(current: str, info: os.stat_result) -> str | None:
        nonlocal total
        if stat.S_ISDIR(info.st_mode):
            return None
        if total >= max_chars:
            return _SKIP_ALL
        if not no_gitignore and _name(current).startswith("."):
            return None
        if ignorer is not None and ignorer.is_ignored(current):
            return None
        try:
            lines = _read_head(current, max_lines)
        except OSError:
            return None
        if lines:
            content = b"\n".join(lines)
            relative = os.path.relpath(current, root)
            parts.append(f"--- {relative} ---\n{content.decode('utf-8', errors='replace')}\n\n")
            total += len(content)
        return None

    _walk(root, visit)
    return "".join(parts)


def _summary_full(root: str, ignorer: IgnoreRules | None, max_chars: int, no_gitignore: bool) -> str:
    parts = [f"DIRECTORY: {root}\n", "FORMAT: full (truncated to max tokens)\n"]
    total = 0

    def visit(current: str, info: os.stat_result) -> str | None:
        nonlocal total
        if stat.S_ISDIR(info.st_mode):
            return None
        if total >= max_chars:
            return _SKIP_ALL
        if not no_gitignore and _name(current).startswith("."):
            return None
        if ignorer is not None and ignorer.is_ignored(current):
            return None
        try:
            content = Path(current).read_bytes()
        except OSError:
            return None
        if not _is_text(content):
            return None
        remaining = max_chars - total
        if len(content) > remaining:
            content = content[:remaining] + b"\n... (truncated)"
        relative = os.path.relpath(current, root)
        parts.append(f"=== {relative} ===\n{content.decode('utf-8', errors='replace')}\n\n")
        total += len(content)
        return None

    _walk(root, visit)
    return "".join(parts)


def summarize_directory(
    path: PathLike = ".",
    fmt: str = "tree",
    recursive: bool = True,
    max_tokens: int = 4000,
    max_lines: int = 10,
    no_gitignore: bool = False,
) -> str:
    """Summarise a directory as a tree, an outline of file heads, or truncated full text."""
    root = _resolve_directory(path)
    ignorer = _rules(root, no_gitignore)
    max_chars = max_tokens * 4
    match fmt:
        case "tree":
            return _summary_tree(root, ignorer, recursive, no_gitignore)
        case "outline":
            return _summary_outline(root, ignorer, max_chars, max_lines, no_gitignore)
        case "full":
            return _summary_full(root, ignorer, max_chars, no_gitignore)
    raise ValueError(f"unknown format: {fmt} (supported: tree, outline, full)")