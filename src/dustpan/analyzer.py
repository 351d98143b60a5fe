"""Scan orchestration: cache first, then the index, then a walk."""

import logging
from pathlib import Path
from typing import Optional

from dustpan.cache import clear_cache, load_cache, save_cache
from dustpan.exceptions import IndexUnavailableError
from dustpan.indexed import try_indexed_scan
from dustpan.models import (
    Category,
    CategorySummary,
    CleanupSummary,
    DeletableItem,
    ScanReport,
    ScanSource,
)
from dustpan.scanner import (
    ProgressCallback,
    scan_directory,
    validate_max_depth,
    validate_scan_root,
)

log = logging.getLogger(__name__)


def perform_scan(
    path: str | Path,
    max_depth: int,
    force: bool = False,
    use_index: bool = False,
    progress_callback: Optional[ProgressCallback] = None,
) -> ScanReport:
    """
    Scan a directory, reusing the cached result when possible.

    Args:
        path: Directory to scan
        max_depth: Maximum depth to walk
        force: Ignore the cache and always scan
        use_index: Try the system index before walking
        progress_callback: Optional callback(stage, current, total)

    Returns:
        ScanReport with the items and where they came from

    Raises:
        ScanPathError: If the root is missing or not a directory
        InvalidDepthError: If max_depth is negative
    """
    validate_max_depth(max_depth)
    root = validate_scan_root(path)

    if not force:
        cached = load_cache(root, max_depth)
        if cached is not None:
            log.info("Using cached scan results for %s (%d items)", root, len(cached))
            return ScanReport(root=root, max_depth=max_depth, source=ScanSource.CACHE, items=cached)

    items: Optional[list[DeletableItem]] = None
    source = ScanSource.WALK

    if use_index:
        try:
            items = try_indexed_scan(root, max_depth, progress_callback)
            source = ScanSource.INDEX
        except IndexUnavailableError as e:
            log.warning("Index scan unavailable, walking the filesystem instead: %s", e)

    if items is None:
        items = scan_directory(root, max_depth, progress_callback)

    save_cache(root, max_depth, items)
    return ScanReport(root=root, max_depth=max_depth, source=source, items=items)


def summarize_by_category(items: list[DeletableItem]) -> list[CategorySummary]:
    """
    Group items by category.

    Returns:
        One summary per category, largest total first; items inside each
        summary are sorted largest first
    """
    groups: dict[Category, list[DeletableItem]] = {}
    for item in items:
        groups.setdefault(item.category, []).append(item)

    summaries = [
        CategorySummary(
            category=category,
            items=sorted(group, key=lambda i: i.size, reverse=True),
        )
        for category, group in groups.items()
    ]
    summaries.sort(key=lambda s: s.total_bytes, reverse=True)
    return summaries


def invalidate_after_cleanup(summary: CleanupSummary) -> bool:
    """
    Drop the scan cache once anything was actually deleted.

    Returns:
        True if the cache was cleared
    """
    if summary.dry_run or summary.deleted_count == 0:
        return False
    clear_cache()
    log.info("Cleared scan cache after deleting %d items", summary.deleted_count)
    return True
