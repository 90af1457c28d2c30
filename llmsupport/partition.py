"""Splitting work items into groups that can run in parallel."""

from __future__ import annotations

import os
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from llmsupport.jsontools import _dump

PathLike = str | os.PathLike[str]

_BACKTICK_FILE = re.compile(r"`([^`]+\.[a-zA-Z]{1,10})`")
_URL_SCHEME = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*://")


def _looks_like_path(candidate: str) -> bool:
    if not candidate or any(ch.isspace() for ch in candidate):
        return False
    return _URL_SCHEME.match(candidate) is None


def extract_file_deps(content: str) -> list[str]:
    """Return the sorted, unique file names quoted in backticks."""
    found = {
        match.group(1)
        for match in _BACKTICK_FILE.finditer(content)
        if _looks_like_path(match.group(1))
    }
    return sorted(found)


def has_overlap(a: Sequence[str], b: Sequence[str]) -> bool:
    """Whether the two sequences share any element."""
    return not set(a).isdisjoint(b)


def build_conflict_graph(items: Mapping[str, Sequence[str]]) -> dict[str, list[str]]:
    """Connect every pair of items that share a dependency."""
    names = sorted(items)
    conflicts: dict[str, list[str]] = {name: [] for name in names}
    for index, first in enumerate(names):
        for second in names[index + 1:]:
            if has_overlap(items[first], items[second]):
                conflicts[first].append(second)
                conflicts[second].append(first)
    return conflicts


def greedy_coloring(graph: Mapping[str, Sequence[str]]) -> dict[str, int]:
    """Give each node the smallest colour not used by an already coloured neighbour."""
    colors: dict[str, int] = {}
    for node in sorted(graph):
        used = {colors[neighbor] for neighbor in graph[node] if neighbor in colors}
        color = 0
        while color in used:
            color += 1
        colors[node] = color
    return colors


@dataclass(frozen=True)
class Partition:
    """Work items, their conflicts and the groups they fall into."""

    items: dict[str, list[str]] = field(default_factory=dict)
    conflicts: dict[str, list[str]] = field(default_factory=dict)
    colors: dict[str, int] = field(default_factory=dict)
    skipped: tuple[tuple[str, str], ...] = ()

    @classmethod
    def from_items(
        cls, items: Mapping[str, Sequence[str]], skipped: Sequence[tuple[str, str]] = ()
    ) -> Partition:
        conflicts = build_conflict_graph(items)
        return cls(
            {name: list(deps) for name, deps in items.items()},
            conflicts,
            greedy_coloring(conflicts),
            tuple(skipped),
        )

    @property
    def groups(self) -> dict[int, list[str]]:
        grouped: dict[int, list[str]] = {}
        for item, color in self.colors.items():
            grouped.setdefault(color, []).append(item)
        return {color: sorted(grouped[color]) for color in sorted(grouped)}

    def render_text(self) -> str:
        if not self.items:
            return "No items found to partition\n"
        groups = self.groups
        lines = []
        if len(groups) == 1:
            lines.append("All items are independent - can run in parallel")
        elif len(groups) == len(self.items):
            lines.append("Maximum conflicts detected - items must run sequentially")
        lines.append("")
        lines.extend(f"Group {color}: {', '.join(members)}" for color, members in groups.items())
        return "\n".join(lines) + "\n"

    def render_json(self) -> str:
        if not self.items:
            document = {
                "groups": [],
                "total_groups": 0,
                "items_per_group": [],
                "message": "No items found to partition",
            }
        else:
            groups = self.groups
            document = {
                "groups": [{"id": color, "items": members} for color, members in groups.items()],
                "total_groups": len(groups),
                "items_per_group": [len(members) for members in groups.values()],
            }
        return _dump(document, "  ") + "\n"

    def render_conflicts(self) -> str:
        lines = ["=== Conflict Graph ==="]
        for item in sorted(self.conflicts):
            neighbors = self.conflicts[item]
            if neighbors:
                lines.append(f"  {item} conflicts with: {', '.join(neighbors)}")
            else:
                lines.append(f"  {item}: no conflicts")
        lines.append("")
        return "\n".join(lines) + "\n"


def partition_directory(path: PathLike) -> Partition:
    """Read every ``*.md`` file in a directory and partition them by shared files."""
    absolute = os.path.abspath(path)
    if not os.path.exists(absolute):
        raise FileNotFoundError(f"directory not found: {absolute}")
    if not os.path.isdir(absolute):
        raise NotADirectoryError(f"not a directory: {absolute}")
    try:
        entries = list(os.scandir(absolute))
    except OSError as exc:
        raise OSError(f"failed to read directory: {exc}") from exc
    names = sorted(
        entry.name for entry in entries if not entry.is_dir() and entry.name.endswith(".md")
    )
    if not names:
        return Partition()
    items: dict[str, list[str]] = {}
    skipped: list[tuple[str, str]] = []
    for name in names:
        try:
            content = Path(absolute, name).read_bytes().decode("utf-8", errors="replace")
        except OSError as exc:
            skipped.append((name, str(exc)))
            continue
        items[name] = extract_file_deps(content)
    if not items:
        raise ValueError("no valid items found")
    return Partition.from_items(items, skipped)