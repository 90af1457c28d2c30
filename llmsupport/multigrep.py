"""Searching a source tree for several keywords at once, definitions first."""

from __future__ import annotations

import json
import os
import re
import stat
import sys
from collections.abc import Iterable, Iterator
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from llmsupport.jsontools import _HTML_ESCAPES

PathLike = str | os.PathLike[str]

EXCLUDED_DIRS = frozenset(
    {
        ".git",
        ".hg",
        ".svn",
        "node_modules",
        "vendor",
        "__pycache__",
        ".venv",
        "venv",
        ".idea",
        ".vscode",
    }
)

BINARY_EXTENSIONS = frozenset(
    {
        "exe", "dll", "so", "dylib", "bin", "pyc", "pyo", "class", "jar", "zip",
        "tar", "gz", "png", "jpg", "jpeg", "gif", "ico", "svg", "woff", "woff2",
    }
)

DEFINITION_PATTERNS = (
    r"^\s*(export\s+)?(const|let|var|function|class|interface|type|enum)\s+%s\b",
    r"^\s*(export\s+)?async\s+function\s+%s\b",
    r"^\s*(public|private|protected)?\s*(static\s+)?(async\s+)?%s\s*[(<]",
    r"^\s*def\s+%s\s*\(",
    r"^\s*class\s+%s\s*[:(]",
    r"^\s*func\s+%s\s*\(",
    r"^\s*func\s+\([^)]*\)\s+%s\s*\(",
)

_UNSAFE_NAME = re.compile(r"[^\w\-]", re.ASCII)
_RULE = "=" * 70


@dataclass(frozen=True)
class MatchInfo:
    """One matching line."""

    file: str
    line: int
    content: str

    def to_dict(self) -> dict[str, Any]:
        return {"file": self.file, "line": self.line, "content": self.content}


@dataclass
class KeywordResult:
    """Matches found for one keyword, capped per kind."""

    match_count: int = 0
    files_matched: list[str] = field(default_factory=list)
    definition_matches: list[MatchInfo] = field(default_factory=list)
    other_matches: list[MatchInfo] = field(default_factory=list)
    truncated: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "match_count": self.match_count,
            "files_matched": list(self.files_matched),
            "definition_matches": [m.to_dict() for m in self.definition_matches],
            "other_matches": [m.to_dict() for m in self.other_matches],
            "truncated": self.truncated,
        }


def _truncate(text: str, limit: int) -> str:
    raw = text.encode("utf-8")
    if len(raw) <= limit:
        return text
    return raw[:limit].decode("utf-8", errors="ignore") + "..."


@dataclass(frozen=True)
class MultigrepReport:
    """Results of searching one path for several keywords."""

    search_path: str
    files: tuple[str, ...]
    keywords: tuple[str, ...]
    results: dict[str, KeywordResult]

    @property
    def total_matches(self) -> int:
        return sum(result.match_count for result in self.results.values())

    @property
    def keywords_with_matches(self) -> int:
        return sum(1 for result in self.results.values() if result.match_count > 0)

    def render_text(self, definitions_only: bool = False) -> str:
        lines = [
            _RULE,
            "MULTIGREP RESULTS",
            _RULE,
            f"Search Path: {self.search_path}",
            f"Files Searched: {len(self.files)}",
            f"Keywords: {len(self.keywords)}",
            f"Total Matches: {self.total_matches}",
            _RULE,
            "",
        ]
        for keyword in self.keywords:
            result = self.results[keyword]
            lines.append(f"KEYWORD: {keyword}")
            lines.append(
                f"  Matches: {result.match_count} in {len(result.files_matched)} files"
            )
            if result.definition_matches:
                lines.append("  DEFINITIONS:")
                lines.extend(
                    f"    → {m.file}:{m.line}: {_truncate(m.content, 80)}"
                    for m in result.definition_matches
                )
            if not definitions_only and result.other_matches:
                lines.append("  USAGES (sample):")
                lines.extend(
                    f"    - {m.file}:{m.line}: {_truncate(m.content, 80)}"
                    for m in result.other_matches
                )
            if result.truncated:
                lines.append("  (results truncated)")
            lines.append("")
        lines.append(f"KEYWORDS_SEARCHED: {len(self.keywords)}")
        lines.append(f"KEYWORDS_WITH_MATCHES: {self.keywords_with_matches}")
        lines.append(f"TOTAL_MATCHES: {self.total_matches}")
        return "\n".join(lines) + "\n"

    def render_json(self) -> str:
        document = {
            "files_searched": len(self.files),
            "keywords_searched": len(self.keywords),
            "keywords_with_matches": self.keywords_with_matches,
            "results": {key: self.results[key].to_dict() for key in sorted(self.results)},
            "search_path": self.search_path,
            "total_matches": self.total_matches,
        }
        text = json.dumps(document, indent=2, ensure_ascii=False)
        for char, escape in _HTML_ESCAPES.items():
            text = text.replace(char, escape)
        return text + "\n"

    def write_keyword_files(self, output_dir: PathLike) -> list[Path]:
        """Write one ``keyword_<name>.txt`` per keyword; return the paths written."""
        directory = Path(output_dir)
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise OSError(f"failed to create output directory: {exc}") from exc
        written = []
        for keyword, result in self.results.items():
            target = directory / f"keyword_{_UNSAFE_NAME.sub('_', keyword)}.txt"
            lines = [f"DEF: {m.file}:{m.line}: {m.content}" for m in result.definition_matches]
            lines += [f"USE: {m.file}:{m.line}: {m.content}" for m in result.other_matches]
            content = "\n".join(lines) + ("\n" if lines else "")
            try:
                target.write_text(content, encoding="utf-8")
            except OSError as exc:
                print(f"Warning: failed to write {target}: {exc}", file=sys.stderr)
                continue
            written.append(target)
        return written


def parse_keywords(text: str) -> list[str]:
    """Split a comma-separated keyword list, dropping blanks."""
    return [part.strip() for part in text.split(",") if part.strip()]


def _parse_extensions(extensions: str | Iterable[str] | None) -> list[str]:
    if not extensions:
        return []
    items = extensions.split(",") if isinstance(extensions, str) else extensions
    cleaned = (item.strip().removeprefix(".") for item in items)
    return [item for item in cleaned if item]


def _walk(path: str, no_exclude: bool) -> Iterator[str]:
    try:
        info = os.lstat(path)
    except OSError:
        return
    if not stat.S_ISDIR(info.st_mode):
        yield path
        return
    if not no_exclude and os.path.basename(path) in EXCLUDED_DIRS:
        return
    try:
        names = sorted(os.listdir(path))
    except OSError:
        return
    for name in names:
        yield from _walk(os.path.join(path, name), no_exclude)


def _extension(path: str) -> str:
    name = os.path.basename(path)
    index = name.rfind(".")
    return name[index + 1:] if index >= 0 else ""


def collect_files(
    base: PathLike,
    extensions: str | Iterable[str] | None = None,
    no_exclude: bool = False,
) -> list[str]:
    """List searchable files under ``base``, skipping binaries and common build folders."""
    wanted = [ext.lower() for ext in _parse_extensions(extensions)]
    files = []
    for path in _walk(os.path.abspath(base), no_exclude):
        ext = _extension(path).lower()
        if ext in BINARY_EXTENSIONS:
            continue
        if wanted and ext not in wanted:
            continue
        files.append(path)
    return files


def search_keyword(
    base: PathLike,
    files: Iterable[str],
    keyword: str,
    ignore_case: bool = False,
    max_per_keyword: int = 10,
) -> KeywordResult:
    """Find every line containing ``keyword`` and sort matches into definitions and uses."""
    definitions = [
        re.compile(pattern % re.escape(keyword), re.ASCII) for pattern in DEFINITION_PATTERNS
    ]
    needle = keyword.lower() if ignore_case else keyword
    result = KeywordResult()
    matched_files: dict[str, None] = {}
    for file_path in files:
        try:
            text = Path(file_path).read_bytes().decode("utf-8", errors="replace")
        except OSError:
            continue
        relative = os.path.relpath(file_path, base)
        for number, line in enumerate(text.split("\n"), start=1):
            haystack = line.lower() if ignore_case else line
            if needle not in haystack:
                continue
            result.match_count += 1
            matched_files[relative] = None
            info = MatchInfo(relative, number, line.strip())
            if any(regex.search(line) for regex in definitions):
                if len(result.definition_matches) < max_per_keyword:
                    result.definition_matches.append(info)
            elif len(result.other_matches) < max_per_keyword:
                result.other_matches.append(info)
            if (
                len(result.definition_matches) >= max_per_keyword
                and len(result.other_matches) >= max_per_keyword
            ):
                result.truncated = True
    result.files_matched = list(matched_files)
    return result


def multigrep(
    path: PathLike,
    keywords: str | Iterable[str],
    extensions: str | Iterable[str] | None = None,
    ignore_case: bool = False,
    max_per_keyword: int = 10,
    no_exclude: bool = False,
) -> MultigrepReport:
    """Search ``path`` for every keyword in parallel."""
    if isinstance(keywords, str):
        words = parse_keywords(keywords)
    else:
        words = [word.strip() for word in keywords if word.strip()]
    if not words:
        raise ValueError("no keywords provided")
    base = os.path.abspath(path)
    if not os.path.exists(base):
        raise FileNotFoundError(f"path does not exist: {base}")
    files = collect_files(base, extensions, no_exclude)
    unique = list(dict.fromkeys(words))
    with ThreadPoolExecutor() as pool:
        found = pool.map(
            lambda word: search_keyword(base, files, word, ignore_case, max_per_keyword),
            unique,
        )
        results = dict(zip(unique, found))
    return MultigrepReport(base, tuple(files), tuple(words), results)