"""Scan result caching.

The last completed scan is stored as one JSON document in the user's home
directory. It is reused only for the same root and depth, and only while it
is younger than ``CACHE_VALIDITY_SECONDS``. Any problem reading it is a
cache miss: callers always fall back to a fresh scan.
"""

import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from dustpan.config import load_settings
from dustpan.models import CacheInfo, DeletableItem, ScanCache
from dustpan.scanner import expand_path, normalize_path

log = logging.getLogger(__name__)

# Cache validity duration in seconds (5 minutes)
CACHE_VALIDITY_SECONDS = 300

CACHE_FILENAME = ".dustpan-cache.json"


def get_cache_path() -> Path:
    """Location of the cache file (``~/.dustpan-cache.json`` unless configured)."""
    configured = load_settings().cache_file
    if configured:
        return expand_path(configured)
    return Path.home() / CACHE_FILENAME


def _now(now: Optional[datetime]) -> datetime:
    return now if now is not None else datetime.now(timezone.utc)


def _age_seconds(scan_time: datetime, now: datetime) -> float:
    if scan_time.tzinfo is None:
        scan_time = scan_time.replace(tzinfo=timezone.utc)
    return (now - scan_time).total_seconds()


def _read_cache(cache_path: Path) -> Optional[ScanCache]:
    try:
        raw = cache_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    except OSError as e:
        log.debug("Cannot read cache %s: %s", cache_path, e)
        return None

    try:
        return ScanCache.model_validate_json(raw)
    except (ValidationError, ValueError) as e:
        log.debug("Ignoring corrupt cache %s: %s", cache_path, e)
        return None


def load_cache(
    scan_path: str | Path,
    max_depth: int,
    now: Optional[datetime] = None,
) -> Optional[list[DeletableItem]]:
    """
    Load cached scan results if they are valid for this scan.

    The cache is used only if:
    - it exists and parses
    - scan path and max depth match exactly
    - it is no older than CACHE_VALIDITY_SECONDS

    Items whose path no longer exists are dropped.

    Args:
        scan_path: The directory being scanned
        max_depth: The maximum depth of the scan
        now: Current time (for testing)

    Returns:
        Cached items, or None on any kind of cache miss
    """
    cache = _read_cache(get_cache_path())
    if cache is None:
        return None

    if cache.scan_path != normalize_path(scan_path) or cache.max_depth != max_depth:
        log.debug("Cache parameters do not match (%s, depth %d)", cache.scan_path, cache.max_depth)
        return None

    age = _age_seconds(cache.scan_time, _now(now))
    if age > CACHE_VALIDITY_SECONDS:
        log.debug("Cache is stale (%.0f seconds old)", age)
        return None

    return [item for item in cache.items if os.path.lexists(item.path)]


def save_cache(scan_path: str | Path, max_depth: int, items: list[DeletableItem]) -> bool:
    """
    Save scan results, replacing any previous record.

    Failure to write is logged and otherwise ignored.

    Returns:
        True if the cache was written
    """
    cache_path = get_cache_path()
    try:
        cache = ScanCache(
            scan_path=normalize_path(scan_path),
            scan_time=datetime.now(timezone.utc),
            max_depth=max_depth,
            items=list(items),
        )
        cache_path.write_text(cache.model_dump_json(), encoding="utf-8")
        return True
    except (OSError, ValidationError) as e:
        log.warning("Could not write scan cache %s: %s", cache_path, e)
        return False


def clear_cache() -> None:
    """Delete the cache file. Succeeds even if it does not exist."""
    cache_path = get_cache_path()
    try:
        cache_path.unlink()
    except FileNotFoundError:
        pass
    except OSError as e:
        log.warning("Could not remove scan cache %s: %s", cache_path, e)


def get_cache_info(now: Optional[datetime] = None) -> CacheInfo:
    """Describe the cache file without modifying it."""
    cache_path = get_cache_path()
    try:
        size = cache_path.stat().st_size
    except OSError:
        return CacheInfo(location=cache_path)

    info = CacheInfo(location=cache_path, exists=True, size_bytes=size)
    cache = _read_cache(cache_path)
    if cache is None:
        return info

    age = _age_seconds(cache.scan_time, _now(now))
    return info.model_copy(
        update={
            "readable": True,
            "scan_path": cache.scan_path,
            "max_depth": cache.max_depth,
            "item_count": len(cache.items),
            "scan_time": cache.scan_time,
            "age_seconds": age,
            "is_fresh": age <= CACHE_VALIDITY_SECONDS,
        }
    )
