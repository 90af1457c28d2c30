"""Checksums for files and directory trees."""

from __future__ import annotations

import hashlib
import os
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

ALGORITHMS = ("md5", "sha1", "sha256", "sha512")
_CHUNK_SIZE = 64 * 1024


@dataclass(frozen=True)
class HashResult:
    """The digest of one file, or the error that prevented computing it."""

    path: Path
    digest: str | None = None
    error: str | None = None


def _check_algorithm(algorithm: str) -> str:
    algo = algorithm.lower()
    if algo not in ALGORITHMS:
        raise ValueError(
            f"unsupported algorithm: {algo} (supported: md5, sha1, sha256, sha512)"
        )
    return algo


def compute_hash(path: str | os.PathLike[str], algorithm: str = "sha256") -> str:
    """Return the lowercase hex digest of a file's contents."""
    hasher = hashlib.new(_check_algorithm(algorithm))
    with open(path, "rb") as handle:
        for chunk in iter(lambda: handle.read(_CHUNK_SIZE), b""):
            hasher.update(chunk)
    return hasher.hexdigest()


def collect_files(paths: Iterable[str | os.PathLike[str]]) -> list[Path]:
    """Expand files and directories into a sorted list of unique absolute file paths."""
    found: set[str] = set()
    for given in paths:
        absolute = os.path.abspath(given)
        if not os.path.exists(absolute):
            raise FileNotFoundError(f"path not found: {os.fspath(given)}")
        if os.path.isdir(absolute):
            for root, dirs, files in os.walk(absolute):
                found.update(os.path.join(root, name) for name in files)
                found.update(
                    os.path.join(root, name)
                    for name in dirs
                    if os.path.islink(os.path.join(root, name))
                )
        else:
            found.add(absolute)
    if not found:
        raise ValueError("no files found")
    return [Path(name) for name in sorted(found)]


def hash_files(
    paths: Iterable[str | os.PathLike[str]], algorithm: str = "sha256"
) -> list[HashResult]:
    """Hash every file reachable from the given paths."""
    algo = _check_algorithm(algorithm)
    results = []
    for path in collect_files(paths):
        try:
            results.append(HashResult(path, digest=compute_hash(path, algo)))
        except OSError as exc:
            results.append(HashResult(path, error=str(exc)))
    return results


def render_results(results: Iterable[HashResult]) -> tuple[str, str]:
    """Return (standard output text, error text) in checksum-file layout."""
    out: list[str] = []
    err: list[str] = []
    for result in results:
        if result.error is not None:
            err.append(f"ERROR: {result.path}: {result.error}\n")
        else:
            out.append(f"{result.digest}  {result.path}\n")
    return "".join(out), "".join(err)