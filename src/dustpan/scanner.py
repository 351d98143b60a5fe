"""Filesystem scanning for dustpan.

A scan runs in two phases:

1. Discovery walks the tree down to ``max_depth`` and classifies every
   entry. A match is recorded as a candidate and its subtree is never
   entered, so nested artifacts (a ``node_modules`` inside a
   ``node_modules``) are not double counted.
2. Sizing fans the candidates out over a thread pool and builds one
   ``DeletableItem`` per candidate.

Unreadable entries are skipped in both phases; only a bad root aborts.
"""

import logging
import os
import stat
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Optional

from dustpan.classifier import is_deletable
from dustpan.config import load_settings
from dustpan.exceptions import InvalidDepthError, ScanPathError
from dustpan.models import Category, DeletableItem

log = logging.getLogger(__name__)

ProgressCallback = Callable[[str, int, int], None]

# Discovery reports progress every this many entries.
PROGRESS_INTERVAL = 100


def expand_path(path: str | Path) -> Path:
    """Expand ~ and environment variables in path."""
    return Path(os.path.expanduser(os.path.expandvars(str(path))))


def normalize_path(path: str | Path) -> Path:
    """Expanded, absolute form of a path used as the cache key."""
    return Path(os.path.abspath(expand_path(path)))


def validate_scan_root(path: str | Path) -> Path:
    """
    Check that a scan root exists and is a directory.

    Args:
        path: Root to scan (may contain ~)

    Returns:
        The normalized root

    Raises:
        ScanPathError: If the root is missing or not a directory
    """
    root = normalize_path(path)
    if not root.exists():
        raise ScanPathError(str(path), ScanPathError.MISSING)
    if not root.is_dir():
        raise ScanPathError(str(path), ScanPathError.NOT_A_DIRECTORY)
    return root


def validate_max_depth(max_depth: int) -> int:
    """Reject negative depth limits before any walking or caching."""
    if max_depth < 0:
        raise InvalidDepthError(max_depth)
    return max_depth


def get_project_name(path: Path) -> str:
    """Name of the directory containing ``path``, or "Unknown"."""
    parent = path.parent
    if parent == path or not parent.name:
        return "Unknown"
    return parent.name


def get_directory_size(path: Path) -> int:
    """
    Sum the sizes of all regular files under a directory.

    Symlinks and special files are not counted and never followed.
    Entries that cannot be read contribute nothing.

    Returns:
        Total size in bytes
    """
    total_size = 0
    pending = [path]

    while pending:
        current = pending.pop()
        try:
            with os.scandir(current) as entries:
                for entry in entries:
                    try:
                        if entry.is_file(follow_symlinks=False):
                            total_size += entry.stat(follow_symlinks=False).st_size
                        elif entry.is_dir(follow_symlinks=False):
                            pending.append(Path(entry.path))
                    except (PermissionError, OSError):
                        continue
        except (PermissionError, OSError) as e:
            log.debug("Skipping unreadable directory %s: %s", current, e)

    return total_size


def build_item(path: Path, category: Category) -> DeletableItem:
    """Size a candidate and wrap it in a DeletableItem."""
    try:
        st = path.lstat()
    except (PermissionError, OSError):
        st = None

    if st is None:
        size = 0
    elif stat.S_ISDIR(st.st_mode):
        size = get_directory_size(path)
    else:
        size = st.st_size

    if st is not None:
        last_modified = datetime.fromtimestamp(st.st_mtime, tz=timezone.utc)
    else:
        last_modified = datetime.now(timezone.utc)

    return DeletableItem(
        path=path,
        size=size,
        category=category,
        project_name=get_project_name(path),
        last_modified=last_modified,
    )


def discover_candidates(
    root: Path,
    max_depth: int,
    progress_callback: Optional[ProgressCallback] = None,
) -> list[tuple[Path, Category]]:
    """
    Walk ``root`` and collect deletable entries without entering them.

    The root itself is never classified. Its children are at depth 1, and
    nothing deeper than ``max_depth`` is visited. Symlinks are not followed.

    Args:
        root: Directory to walk
        max_depth: Maximum depth of visited entries
        progress_callback: Optional callback(stage, scanned, found)

    Returns:
        List of (path, category) candidates
    """
    candidates: list[tuple[Path, Category]] = []
    pending: list[tuple[Path, int]] = [(root, 0)]
    scanned = 0

    while pending:
        directory, depth = pending.pop()
        if depth >= max_depth:
            continue

        try:
            with os.scandir(directory) as it:
                entries = sorted(it, key=lambda e: e.name)
        except (PermissionError, OSError) as e:
            log.debug("Skipping unreadable directory %s: %s", directory, e)
            continue

        for entry in entries:
            scanned += 1
            if progress_callback and scanned % PROGRESS_INTERVAL == 0:
                progress_callback("discover", scanned, len(candidates))

            entry_path = Path(entry.path)
            category = is_deletable(entry_path)
            if category is not None:
                candidates.append((entry_path, category))
                continue

            try:
                if entry.is_dir(follow_symlinks=False):
                    pending.append((entry_path, depth + 1))
            except OSError:
                continue

    if progress_callback:
        progress_callback("discover", scanned, len(candidates))

    log.info("Scanned %d entries under %s, found %d candidates", scanned, root, len(candidates))
    return candidates


def size_candidates(
    candidates: list[tuple[Path, Category]],
    progress_callback: Optional[ProgressCallback] = None,
    max_workers: Optional[int] = None,
) -> list[DeletableItem]:
    """
    Size candidates in parallel.

    Args:
        candidates: (path, category) pairs from discovery
        progress_callback: Optional callback(stage, done, total)
        max_workers: Number of worker threads (default: settings or CPU count)

    Returns:
        Items sorted by size, largest first
    """
    if not candidates:
        return []

    if max_workers is None:
        max_workers = load_settings().max_workers or os.cpu_count() or 4

    total = len(candidates)
    done = 0
    lock = threading.Lock()

    def _size(path: Path, category: Category) -> DeletableItem:
        nonlocal done
        item = build_item(path, category)
        with lock:
            done += 1
            if progress_callback:
                progress_callback("size", done, total)
        return item

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = [executor.submit(_size, path, category) for path, category in candidates]
        items = [future.result() for future in as_completed(futures)]

    items.sort(key=lambda i: i.size, reverse=True)
    return items


def scan_directory(
    root: str | Path,
    max_depth: int,
    progress_callback: Optional[ProgressCallback] = None,
    max_workers: Optional[int] = None,
) -> list[DeletableItem]:
    """
    Scan a directory tree for deletable items.

    Args:
        root: Directory to scan (may contain ~)
        max_depth: Maximum depth to walk
        progress_callback: Optional callback(stage, current, total)
        max_workers: Worker threads used for sizing

    Returns:
        Sized, categorized items

    Raises:
        ScanPathError: If the root is missing or not a directory
        InvalidDepthError: If max_depth is negative
    """
    validate_max_depth(max_depth)
    root_path = validate_scan_root(root)
    candidates = discover_candidates(root_path, max_depth, progress_callback)
    return size_candidates(candidates, progress_callback, max_workers)
