"""dustpan - sweep away build artifacts and caches from a project tree."""

__version__ = "0.3.0"
