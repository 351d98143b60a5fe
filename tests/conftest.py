"""Shared fixtures for dustpan tests."""

from datetime import datetime, timezone
from pathlib import Path

import pytest

from dustpan import cache, config
from dustpan.models import Category, DeletableItem


@pytest.fixture(autouse=True)
def isolate_storage(tmp_path_factory, monkeypatch):
    """Keep the cache and config files out of the real home directory."""
    home = tmp_path_factory.mktemp("dustpan_home")
    cache_file = home / ".dustpan-cache.json"

    monkeypatch.delenv(config.CONFIG_ENV_VAR, raising=False)
    monkeypatch.setattr(config, "CONFIG_FILE", home / ".dustpan" / "config.json")
    monkeypatch.setattr(cache, "get_cache_path", lambda: cache_file)
    return cache_file


@pytest.fixture
def make_item():
    """Factory for DeletableItems that don't need to exist on disk."""

    def _make(
        path,
        size: int = 100,
        category: Category = Category.NODE_MODULES,
        last_modified: datetime | None = None,
    ) -> DeletableItem:
        path = Path(path)
        return DeletableItem(
            path=path,
            size=size,
            category=category,
            project_name=path.parent.name or "Unknown",
            last_modified=last_modified or datetime.now(timezone.utc),
        )

    return _make
