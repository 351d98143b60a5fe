"""Exceptions raised by dustpan."""


class DustpanError(Exception):
    """Base class for all dustpan errors."""


class ScanPathError(DustpanError):
    """The requested scan root is missing or is not a directory."""

    MISSING = "Path does not exist"
    NOT_A_DIRECTORY = "Path is not a directory"

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"{reason}: {path}")


class InvalidSizeError(DustpanError, ValueError):
    """A human-readable size string could not be parsed."""


class InvalidAgeError(DustpanError, ValueError):
    """A human-readable age string could not be parsed."""


class IndexUnavailableError(DustpanError):
    """The system content index cannot be used for this scan."""


class InvalidDepthError(DustpanError, ValueError):
    """A scan depth limit is negative."""

    def __init__(self, max_depth: int):
        self.max_depth = max_depth
        super().__init__(f"Maximum depth must be 0 or greater, got {max_depth}")
