"""Index-backed scanning through macOS Spotlight (``mdfind``).

Spotlight answers "where are the directories named X" far faster than a
walk, but its answers are only hints: every hit is checked against the
filesystem and re-classified before it is accepted, and the classifier's
category wins over the one the query was looking for.
"""

import logging
import os
import shutil
import subprocess
import sys
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Optional

from dustpan.classifier import is_deletable
from dustpan.exceptions import IndexUnavailableError
from dustpan.models import Category, DeletableItem
from dustpan.scanner import (
    ProgressCallback,
    size_candidates,
    validate_max_depth,
    validate_scan_root,
)

log = logging.getLogger(__name__)

# Directory names to look up, with the categories a hit may classify as.
INDEX_QUERIES: tuple[tuple[str, frozenset[Category]], ...] = (
    ("target", frozenset({Category.RUST_TARGET, Category.MAVEN_TARGET})),
    ("node_modules", frozenset({Category.NODE_MODULES})),
    ("__pycache__", frozenset({Category.PYTHON_CACHE})),
    (".pytest_cache", frozenset({Category.PYTHON_CACHE})),
    (".tox", frozenset({Category.PYTHON_CACHE})),
    ("venv", frozenset({Category.PYTHON_CACHE})),
    (".venv", frozenset({Category.PYTHON_CACHE})),
    ("build", frozenset({Category.BUILD_CACHE, Category.GRADLE_BUILD})),
    ("dist", frozenset({Category.BUILD_CACHE})),
    (".gradle", frozenset({Category.GRADLE_BUILD})),
    ("vendor", frozenset({Category.PHP_VENDOR, Category.GO_VENDOR, Category.RUBY_GEMS})),
    ("CMakeFiles", frozenset({Category.C_CACHE})),
    ("bin", frozenset({Category.DOTNET_BUILD})),
    ("obj", frozenset({Category.DOTNET_BUILD})),
    ("packages", frozenset({Category.DOTNET_BUILD})),
    (".build", frozenset({Category.SWIFT_BUILD})),
    ("DerivedData", frozenset({Category.SWIFT_BUILD})),
    (".idea", frozenset({Category.IDE_CACHE})),
    (".vscode", frozenset({Category.IDE_CACHE})),
    (".vs", frozenset({Category.IDE_CACHE})),
    (".bundle", frozenset({Category.RUBY_GEMS})),
    (".sass-cache", frozenset({Category.TEMP_FILES})),
    (".parcel-cache", frozenset({Category.TEMP_FILES})),
)

MAX_QUERY_WORKERS = 8


def is_index_available() -> bool:
    """Spotlight is only queried on macOS with ``mdfind`` on the PATH."""
    return sys.platform == "darwin" and shutil.which("mdfind") is not None


def run_index_query(root: Path, name: str) -> list[Path]:
    """
    Ask Spotlight for entries named ``name`` under ``root``.

    Raises:
        IndexUnavailableError: If mdfind cannot run or exits with an error
    """
    query = f"kMDItemFSName == '{name}'"
    try:
        result = subprocess.run(
            ["mdfind", "-onlyin", str(root), query],
            capture_output=True,
            check=False,
        )
    except OSError as e:
        raise IndexUnavailableError(f"Failed to execute mdfind: {e}") from e

    if result.returncode != 0:
        stderr = result.stderr.decode(errors="replace").strip()
        raise IndexUnavailableError(f"mdfind failed: {stderr}")

    # Paths are raw bytes; undecodable names round-trip through os.fsdecode.
    return [Path(os.fsdecode(line.strip())) for line in result.stdout.splitlines() if line.strip()]


def _relative_to_root(path: Path, bases: tuple[Path, ...]) -> Optional[Path]:
    for base in bases:
        try:
            return path.relative_to(base)
        except ValueError:
            continue
    return None


def _inside_deletable(path: Path, bases: tuple[Path, ...]) -> bool:
    """Check whether any ancestor between ``path`` and the root is deletable."""
    relative = _relative_to_root(path, bases)
    if relative is None:
        return False

    base = path
    for _ in relative.parts[:-1]:
        base = base.parent
        if is_deletable(base) is not None:
            return True
    return False


def validate_hit(
    hit: Path,
    expected: frozenset[Category],
    bases: tuple[Path, ...],
) -> Optional[Category]:
    """
    Re-check a Spotlight hit against the filesystem.

    Returns:
        The detected category, or None if the hit must be discarded
    """
    relative = _relative_to_root(hit, bases)
    if relative is None or not relative.parts:
        return None

    try:
        if not hit.is_dir():
            return None
    except OSError:
        return None

    detected = is_deletable(hit)
    if detected is None or detected not in expected:
        return None

    if _inside_deletable(hit, bases):
        return None

    return detected


def try_indexed_scan(
    root: str | Path,
    max_depth: int,
    progress_callback: Optional[ProgressCallback] = None,
) -> list[DeletableItem]:
    """
    Scan using the system index instead of walking the tree.

    The index is not depth-limited: ``max_depth`` is accepted for interface
    parity with ``scan_directory`` but hits at any depth are returned.

    Raises:
        ScanPathError: If the root is missing or not a directory
        InvalidDepthError: If max_depth is negative
        IndexUnavailableError: If the index cannot be used; callers should
            fall back to ``scan_directory``
    """
    validate_max_depth(max_depth)
    root_path = validate_scan_root(root)
    if not is_index_available():
        raise IndexUnavailableError("System indexing is only supported on macOS with mdfind")

    try:
        resolved = root_path.resolve()
    except OSError:
        resolved = root_path
    bases = (root_path, resolved) if resolved != root_path else (root_path,)

    log.info("Querying Spotlight for %d artifact names under %s", len(INDEX_QUERIES), root_path)

    with ThreadPoolExecutor(max_workers=MAX_QUERY_WORKERS) as executor:
        futures = [
            (executor.submit(run_index_query, root_path, name), expected)
            for name, expected in INDEX_QUERIES
        ]
        # Any failed query fails the whole scan.
        answers = [(future.result(), expected) for future, expected in futures]

    seen: set[Path] = set()
    candidates: list[tuple[Path, Category]] = []
    for hits, expected in answers:
        for hit in hits:
            if hit in seen:
                continue
            detected = validate_hit(hit, expected, bases)
            if detected is None:
                continue
            seen.add(hit)
            candidates.append((hit, detected))

    if progress_callback:
        progress_callback("index", len(candidates), len(candidates))

    log.info("Spotlight found %d deletable directories", len(candidates))
    return size_candidates(candidates, progress_callback)
