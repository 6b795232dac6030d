"""
Core subpackage for snapdiff.

Contains exceptions and logging utilities.
"""

from .exceptions import (
    SnapDiffError,
    SnapshotParseError,
    ArchiveError,
    DuplicateKeyError,
    ConfigError,
)
from .logging import configure_logging

__all__ = [
    "SnapDiffError",
    "SnapshotParseError",
    "ArchiveError",
    "DuplicateKeyError",
    "ConfigError",
    "configure_logging",
]
