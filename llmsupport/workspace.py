"""Workspace helpers: temp directories, repository roots and existence checks."""

from __future__ import annotations

import contextlib
import os
import shutil
import stat
import subprocess
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

DEFAULT_TEMP_BASE = Path(".planning") / ".temp"


def _count_files(directory: str | os.PathLike[str]) -> int:
    count = 0
    for root, dirs, files in os.walk(directory):
        count += len(files)
        count += sum(1 for name in dirs if os.path.islink(os.path.join(root, name)))
    return count


def _clean_directory(directory: Path) -> int:
    count = 0
    try:
        entries = list(os.scandir(directory))
    except OSError:
        return 0
    for entry in entries:
        if entry.is_dir(follow_symlinks=False):
            count += _count_files(entry.path)
            shutil.rmtree(entry.path, ignore_errors=True)
        else:
            with contextlib.suppress(OSError):
                os.remove(entry.path)
            count += 1
    return count


@dataclass(frozen=True)
class InitTempResult:
    """Outcome of preparing a temp directory."""

    temp_dir: Path
    status: str
    preserve: bool
    cleaned: int = 0
    existing_files: int = 0

    def render(self) -> str:
        lines = [f"TEMP_DIR: {self.temp_dir}", f"STATUS: {self.status}"]
        if self.preserve and self.status == "EXISTS":
            lines.append(f"EXISTING_FILES: {self.existing_files}")
        elif not self.preserve:
            lines.append(f"CLEANED: {self.cleaned} files removed")
        return "\n".join(lines) + "\n"


def init_temp(
    name: str, preserve: bool = False, base: str | os.PathLike[str] | None = None
) -> InitTempResult:
    """Create ``<base>/<name>``, cleaning it first unless ``preserve`` is set."""
    if not name:
        raise ValueError("name is required")
    base_dir = Path(base) if base is not None else DEFAULT_TEMP_BASE
    temp_dir = base_dir / name
    status = "CREATED"
    cleaned = 0
    existing = 0
    if temp_dir.is_dir():
        if preserve:
            existing = _count_files(temp_dir)
            status = "EXISTS"
        else:
            cleaned = _clean_directory(temp_dir)
    try:
        temp_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise OSError(f"failed to create temp directory: {exc}") from exc
    return InitTempResult(temp_dir, status, preserve, cleaned, existing)


@dataclass(frozen=True)
class RepoRootResult:
    """The git top-level directory, or ``None`` outside a repository."""

    root: str | None
    validate: bool = False
    valid: bool | None = None

    def render(self) -> str:
        if self.root is None:
            lines = ["ROOT: ", "ERROR: not a git repository"]
        else:
            lines = [f"ROOT: {self.root}"]
        if self.validate:
            lines.append("VALID: TRUE" if self.valid else "VALID: FALSE")
        return "\n".join(lines) + "\n"


def find_repo_root(path: str | os.PathLike[str] = ".", validate: bool = False) -> RepoRootResult:
    """Ask git for the repository root containing ``path``."""
    absolute = os.path.abspath(path)
    if not os.path.exists(absolute):
        raise FileNotFoundError(f"path does not exist: {absolute}")
    try:
        proc = subprocess.run(
            ["git", "rev-parse", "--show-toplevel"],
            cwd=absolute,
            capture_output=True,
            text=True,
            check=False,
        )
    except OSError:
        return RepoRootResult(None, validate, False if validate else None)
    if proc.returncode != 0:
        return RepoRootResult(None, validate, False if validate else None)
    root = proc.stdout.strip()
    valid = os.path.exists(os.path.join(root, ".git")) if validate else None
    return RepoRootResult(root, validate, valid)


@dataclass(frozen=True)
class PathStatus:
    """Whether one path exists, and what kind of entry it is."""

    path: str
    exists: bool
    kind: str | None = None


@dataclass(frozen=True)
class ExistsReport:
    """Existence results for a list of paths."""

    statuses: tuple[PathStatus, ...]

    @property
    def exist_count(self) -> int:
        return sum(1 for status in self.statuses if status.exists)

    @property
    def missing_count(self) -> int:
        return len(self.statuses) - self.exist_count

    @property
    def all_exist(self) -> bool:
        return self.missing_count == 0

    def render(self, verbose: bool = False) -> str:
        lines = []
        for entry in self.statuses:
            check, state = ("✓", "EXISTS") if entry.exists else ("✗", "MISSING")
            if verbose and entry.kind:
                lines.append(f"{check} {entry.path}: {state} ({entry.kind})")
            elif entry.kind == "directory":
                lines.append(f"{check} {entry.path}/: {state} (directory)")
            else:
                lines.append(f"{check} {entry.path}: {state}")
        lines.append("")
        lines.append("ALL_EXIST: TRUE" if self.all_exist else "ALL_EXIST: FALSE")
        lines.append(f"MISSING_COUNT: {self.missing_count}")
        lines.append(f"EXIST_COUNT: {self.exist_count}")
        return "\n".join(lines) + "\n"


def check_paths(paths: Iterable[str]) -> ExistsReport:
    """Stat each path and report which exist."""
    statuses = []
    for path in paths:
        try:
            info = os.stat(path)
        except OSError:
            statuses.append(PathStatus(path, False))
            continue
        if stat.S_ISDIR(info.st_mode):
            kind = "directory"
        elif stat.S_ISLNK(info.st_mode):
            kind = "symlink"
        else:
            kind = "file"
        statuses.append(PathStatus(path, True, kind))
    return ExistsReport(tuple(statuses))