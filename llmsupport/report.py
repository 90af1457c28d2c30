"""Markdown status reports."""

from __future__ import annotations

import os
from collections.abc import Iterable, Mapping
from datetime import datetime

STATUSES = ("success", "partial", "failed")
_EMOJI = {"success": "\u2705", "partial": "\u26a0\ufe0f", "failed": "\u274c"}
_ESCAPES = str.maketrans({char: "\\" + char for char in "|*_`[]"})


def escape_markdown(text: str) -> str:
    """Backslash-escape characters that would break markdown tables or emphasis."""
    return text.translate(_ESCAPES)


def status_emoji(status: str) -> str:
    """Return the emoji for a status, or a question mark for unknown ones."""
    return _EMOJI.get(status, "\u2753")


def parse_stats(items: Iterable[str]) -> dict[str, str]:
    """Parse ``KEY=VALUE`` items into an ordered mapping."""
    stats: dict[str, str] = {}
    for item in items:
        key, sep, value = item.partition("=")
        key, value = key.strip(), value.strip()
        if not sep or not key or not value:
            raise ValueError(f"stat must be in KEY=VALUE format: {item}")
        stats[key] = value
    return stats


def generate_report(
    title: str,
    status: str,
    stats: Mapping[str, str] | None = None,
    now: datetime | None = None,
) -> str:
    """Build the markdown report text."""
    moment = now or datetime.now()
    parts = [
        f"# {escape_markdown(title)}\n\n",
        f"**Status:** {status_emoji(status)} {status.upper()}\n",
        f"**Generated:** {moment:%Y-%m-%d %H:%M:%S}\n\n",
    ]
    if stats:
        parts.append("## Statistics\n\n")
        parts.append("| Metric | Value |\n")
        parts.append("|--------|-------|\n")
        for key, value in stats.items():
            parts.append(f"| {escape_markdown(key)} | {escape_markdown(value)} |\n")
        parts.append("\n")
    parts.append("---\n")
    return "".join(parts)


def write_report(
    title: str,
    status: str,
    stats: Iterable[str] = (),
    output: str | os.PathLike[str] | None = None,
) -> str:
    """Validate inputs and produce the report.

    ``stats`` holds ``KEY=VALUE`` strings. Returns the report text, or a
    confirmation line when it was written to ``output``.
    """
    if not title:
        raise ValueError("title is required")
    if not status:
        raise ValueError("status is required")
    if status not in STATUSES:
        raise ValueError("status must be: success, partial, or failed")
    report = generate_report(title, status, parse_stats(stats))
    if output is None or output == "":
        return report
    try:
        with open(output, "w", encoding="utf-8") as handle:
            handle.write(report)
    except OSError as exc:
        raise OSError(f"failed to write report: {exc}") from exc
    return f"Report written to: {os.fspath(output)}\n"