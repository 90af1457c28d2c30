"""Extracting headers, tasks, sections, frontmatter and code blocks from Markdown."""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass

from llmsupport.jsontools import _dump

_WS = r"[\t\n\f\r ]"
_HEADER = re.compile(r"^(#{1,6})" + _WS + r"+(.+)$", re.MULTILINE)
_TASK = re.compile(r"- \[([ xX])\] (.+)")
_FRONTMATTER = re.compile(r"^---" + _WS + r"*\n(.*?)\n---" + _WS + r"*\n", re.DOTALL)
_CODEBLOCK = re.compile(r"```([0-9A-Za-z_]*)\n(.*?)```", re.DOTALL)
_LEVEL = re.compile(r"[+-]?[0-9]+")
_RULE = "=" * 60


@dataclass(frozen=True)
class Task:
    """A checklist item."""

    done: bool
    text: str


@dataclass(frozen=True)
class CodeBlock:
    """A fenced code block; ``language`` is empty when none was given."""

    language: str
    code: str

    @property
    def label(self) -> str:
        return self.language or "(no language)"


def parse_levels(spec: str) -> set[int] | None:
    """Parse a level filter such as ``"1,2"``; an empty spec means no filter."""
    if not spec:
        return None
    levels: set[int] = set()
    for part in spec.split(","):
        part = part.strip()
        if _LEVEL.fullmatch(part):
            number = int(part)
            if 1 <= number <= 6:
                levels.add(number)
    return levels


def extract_headers(text: str, levels: set[int] | None = None, plain: bool = False) -> str:
    """List headers, indented by level, or just their text when ``plain``."""
    lines = []
    for match in _HEADER.finditer(text):
        hashes, title = match.group(1), match.group(2)
        level = len(hashes)
        if levels is not None and level not in levels:
            continue
        if plain:
            lines.append(f"{title}\n")
        else:
            lines.append(f"{'  ' * (level - 1)}{hashes} {title}\n")
    return "".join(lines)


def extract_tasks(text: str) -> list[Task]:
    """Find ``- [ ]`` and ``- [x]`` checklist items."""
    return [
        Task(match.group(1).lower() == "x", match.group(2)) for match in _TASK.finditer(text)
    ]


def tasks_report(tasks: Iterable[Task], summary: bool = False) -> str:
    """Render tasks with a completion summary."""
    items = list(tasks)
    total = len(items)
    completed = sum(1 for task in items if task.done)
    percentage = completed / total * 100 if total else 0.0
    if summary:
        return (
            f"TOTAL_TASKS: {total}\n"
            f"COMPLETED: {completed}\n"
            f"INCOMPLETE: {total - completed}\n"
            f"COMPLETION_RATE: {percentage:.1f}%\n"
        )
    lines = [f"{'✓' if task.done else '☐'} {task.text}\n" for task in items]
    if total:
        lines.append("\n")
        lines.append(f"TOTAL_TASKS: {total}\n")
        lines.append(f"COMPLETED: {completed} ({percentage:.1f}%)\n")
        lines.append(f"INCOMPLETE: {total - completed}\n")
    return "".join(lines)


def extract_section(text: str, title: str, include_header: bool = False) -> str:
    """Return the body of the section titled ``title`` (case-insensitive)."""
    pattern = re.compile(
        r"^(#{1,6})" + _WS + "+" + re.escape(title) + _WS + "*$",
        re.MULTILINE | re.IGNORECASE,
    )
    match = pattern.search(text)
    if match is None:
        raise LookupError(f"section '{title}' not found")
    level = len(match.group(1))
    remaining = text[match.end():]
    next_header = re.compile(
        r"^#{1," + str(level) + "}" + _WS + r"+.+$", re.MULTILINE
    ).search(remaining)
    content = remaining[: next_header.start()] if next_header else remaining
    prefix = match.group(0) + "\n\n" if include_header else ""
    return prefix + content.strip() + "\n"


def extract_frontmatter(text: str) -> str:
    """Return the text between the leading ``---`` fences."""
    match = _FRONTMATTER.search(text)
    if match is None:
        raise LookupError("no frontmatter found")
    return match.group(1)


def frontmatter_to_json(frontmatter: str) -> str:
    """Read simple ``key: value`` lines into a JSON object with sorted keys."""
    result: dict[str, str] = {}
    for line in frontmatter.split("\n"):
        line = line.removesuffix("\r")
        key, sep, value = line.partition(":")
        if not sep:
            continue
        result[key.strip()] = value.strip().strip("\"'")
    return _dump(result, "  ") + "\n"


def extract_codeblocks(text: str, language: str | None = None) -> list[CodeBlock]:
    """Find fenced code blocks, optionally only those of one language."""
    wanted = language.casefold() if language else None
    blocks = []
    for match in _CODEBLOCK.finditer(text):
        block = CodeBlock(match.group(1), match.group(2))
        if wanted is not None and block.language.casefold() != wanted:
            continue
        blocks.append(block)
    return blocks


def codeblocks_report(blocks: Iterable[CodeBlock], list_only: bool = False) -> str:
    """Render numbered code blocks, or only their languages when ``list_only``."""
    parts = []
    for number, block in enumerate(blocks, start=1):
        if list_only:
            parts.append(f"Block {number}: {block.label}\n")
        else:
            parts.append(
                f"{_RULE}\nCODE BLOCK {number}: {block.label}\n{_RULE}\n"
                f"{block.code.rstrip(chr(10))}\n\n"
            )
    return "".join(parts)