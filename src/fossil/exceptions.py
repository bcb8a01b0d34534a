"""Exception hierarchy for Fossil.

Fatal errors (``PatternError``, ``ScanRootError``, ``ConfigError``,
``FilterError``) abort a run. ``FileScanError`` is per-file and is absorbed
by the tree walker.
"""

from pathlib import Path
from typing import Optional


class FossilError(Exception):
    """Base class for all Fossil errors."""


class PatternError(FossilError):
    """The marker vocabulary could not be compiled into a matching rule."""


class ScanRootError(FossilError):
    """The scan root does not exist or cannot be read."""

    def __init__(self, path: Path, reason: str = "does not exist") -> None:
        self.path = path
        super().__init__(f"Scan root {reason}: {path}")


class ConfigError(FossilError):
    """A configuration file could not be read or validated."""


class FilterError(FossilError):
    """A filter argument is malformed (e.g. an invalid age string)."""


class FileScanError(FossilError):
    """A single file could not be scanned. Recoverable."""

    def __init__(self, path: Path, reason: str, cause: Optional[BaseException] = None) -> None:
        self.path = path
        self.reason = reason
        self.cause = cause
        super().__init__(f"Cannot scan {path}: {reason}")


class FileTooLargeError(FileScanError):
    """The file exceeds the scanner's size ceiling."""

    def __init__(self, path: Path, size: int, limit: int) -> None:
        self.size = size
        self.limit = limit
        super().__init__(path, f"file is {size} bytes, limit is {limit}")
