"""Data models for dustpan."""

from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Category(str, Enum):
    """Closed set of artifact classes the classifier can detect."""

    RUST_TARGET = "rust_target"
    NODE_MODULES = "node_modules"
    PYTHON_CACHE = "python_cache"
    PHP_VENDOR = "php_vendor"
    RUBY_GEMS = "ruby_gems"
    MAVEN_TARGET = "maven_target"
    GRADLE_BUILD = "gradle_build"
    GO_VENDOR = "go_vendor"
    C_CACHE = "c_cache"
    DOTNET_BUILD = "dotnet_build"
    SWIFT_BUILD = "swift_build"
    IDE_CACHE = "ide_cache"
    OS_JUNK = "os_junk"
    TEMP_FILES = "temp_files"
    PACKAGE_CACHE = "package_cache"  # global caches, affects every project
    BUILD_CACHE = "build_cache"

    @classmethod
    def all(cls) -> list["Category"]:
        """All categories in declaration order."""
        return list(cls)

    @property
    def display_name(self) -> str:
        """Human-readable name."""
        from dustpan.categories import get_category_info

        return get_category_info(self).name

    @property
    def emoji(self) -> str:
        from dustpan.categories import get_category_info

        return get_category_info(self).emoji

    @property
    def is_dangerous(self) -> bool:
        """Whether deleting this category affects more than the scanned tree."""
        from dustpan.categories import get_category_info

        return get_category_info(self).dangerous


class DeletableItem(BaseModel):
    """A sized, categorized artifact found by a scan.

    Two items with the same path are the same entity, regardless of the
    size or timestamp recorded for them.
    """

    model_config = ConfigDict(frozen=True)

    path: Path = Field(..., description="Absolute path to the artifact")
    size: int = Field(..., ge=0, description="Size in bytes")
    category: Category = Field(..., description="Category classification")
    project_name: str = Field(..., description="Name of the parent directory")
    last_modified: datetime = Field(..., description="Modification time of the artifact")

    def __eq__(self, other: object) -> bool:
        if isinstance(other, DeletableItem):
            return self.path == other.path
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.path)


class ScanCache(BaseModel):
    """The single persisted scan record."""

    scan_path: Path = Field(..., description="Root that was scanned")
    scan_time: datetime = Field(..., description="When the scan finished")
    max_depth: int = Field(..., ge=0, description="Depth limit used for the scan")
    items: list[DeletableItem] = Field(default_factory=list)


class CacheInfo(BaseModel):
    """Read-only description of the cache file."""

    location: Path
    exists: bool = False
    readable: bool = False
    size_bytes: int = 0
    scan_path: Optional[Path] = None
    max_depth: Optional[int] = None
    item_count: int = 0
    scan_time: Optional[datetime] = None
    age_seconds: Optional[float] = None
    is_fresh: bool = False


class ScanSource(str, Enum):
    """Where a set of scan results came from."""

    CACHE = "cache"
    INDEX = "index"
    WALK = "walk"


class ScanReport(BaseModel):
    """Items produced by a scan plus how they were obtained."""

    root: Path
    max_depth: int
    source: ScanSource
    items: list[DeletableItem] = Field(default_factory=list)

    @property
    def total_bytes(self) -> int:
        return sum(item.size for item in self.items)


class CategorySummary(BaseModel):
    """Items of one category, largest first."""

    category: Category
    items: list[DeletableItem] = Field(default_factory=list)

    @property
    def total_bytes(self) -> int:
        return sum(item.size for item in self.items)

    @property
    def count(self) -> int:
        return len(self.items)


class CleanupResult(BaseModel):
    """Result of deleting a single item."""

    path: Path = Field(..., description="Path that was deleted")
    category: Category = Field(..., description="Category of the deleted item")
    bytes_freed: int = Field(0, description="Bytes freed by the deletion")
    success: bool = Field(True, description="Whether deletion succeeded")
    error: Optional[str] = Field(None, description="Error message if failed")
    dry_run: bool = Field(False, description="Whether this was a dry run")


class CleanupSummary(BaseModel):
    """Outcome of a batch of deletions."""

    results: list[CleanupResult] = Field(default_factory=list)
    dry_run: bool = False

    @property
    def bytes_freed(self) -> int:
        """Total bytes freed by successful deletions."""
        return sum(r.bytes_freed for r in self.results if r.success)

    @property
    def deleted_count(self) -> int:
        return sum(1 for r in self.results if r.success)

    @property
    def failed_count(self) -> int:
        return sum(1 for r in self.results if not r.success)
