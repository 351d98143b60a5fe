"""Deletion of selected scan results."""

import logging
import os
import shutil
from pathlib import Path
from typing import Callable, Optional

from dustpan.models import CleanupResult, CleanupSummary, DeletableItem
from dustpan.scanner import expand_path

log = logging.getLogger(__name__)

# Paths that should NEVER be deleted, whatever the classifier says
BLOCKED_PATHS = [
    "~",
    "/",
    "/bin",
    "/etc",
    "/usr",
    "/var",
    "/System",
    "/Library",
    "/Applications",
]


def is_path_safe(path: Path) -> bool:
    """
    Check if a path is safe to delete.

    Args:
        path: Path to check

    Returns:
        True if safe to delete, False otherwise
    """
    path_str = os.path.abspath(str(path))
    for blocked in BLOCKED_PATHS:
        if path_str == os.path.abspath(str(expand_path(blocked))):
            return False
    return True


def delete_path(path: Path, dry_run: bool = False) -> str | None:
    """
    Delete a path (directory tree, file or symlink).

    Args:
        path: Path to delete
        dry_run: If True, don't actually delete

    Returns:
        Error message, or None on success
    """
    if not is_path_safe(path):
        return f"Blocked path: {path}"

    if not os.path.lexists(path):
        return None

    if dry_run:
        return None

    try:
        if path.is_dir() and not path.is_symlink():
            shutil.rmtree(path)
        else:
            path.unlink()
        return None
    except PermissionError as e:
        return f"Permission denied: {e}"
    except OSError as e:
        return f"OS error: {e}"


def delete_items(
    items: list[DeletableItem],
    dry_run: bool = False,
    progress_callback: Optional[Callable[[DeletableItem, CleanupResult], None]] = None,
) -> CleanupSummary:
    """
    Delete every item, recording per-item success or failure.

    A failure never stops the remaining deletions. Items that are already
    gone succeed but free nothing.

    Args:
        items: Items to delete
        dry_run: If True, only report what would be freed
        progress_callback: Optional callback(item, result) after each item

    Returns:
        CleanupSummary with one result per item
    """
    summary = CleanupSummary(dry_run=dry_run)

    for item in items:
        existed = os.path.lexists(item.path)
        error = delete_path(item.path, dry_run=dry_run)
        if error:
            log.warning("Failed to delete %s: %s", item.path, error)

        result = CleanupResult(
            path=item.path,
            category=item.category,
            bytes_freed=item.size if existed and error is None else 0,
            success=error is None,
            error=error,
            dry_run=dry_run,
        )
        summary.results.append(result)

        if progress_callback:
            progress_callback(item, result)

    return summary
