"""
Custom exceptions for the snapshot diff package.
"""


class SnapDiffError(Exception):
    """Base exception for all snapdiff errors."""
    pass


class SnapshotParseError(SnapDiffError):
    """
    A payload inside a snapshot could not be decoded.

    Raised when:
    - Payload bytes are not valid UTF-8
    - Payload text is not valid JSON
    """

    def __init__(self, message: str, source_label: str = None):
        super().__init__(message)
        self.source_label = source_label


class ArchiveError(SnapDiffError):
    """
    A snapshot container could not be opened or read.

    Raised when:
    - The path does not exist
    - The file is not a recognized archive format
    - A member is corrupt (bad gzip stream, truncated tar)
    """

    def __init__(self, message: str, path: str = None):
        super().__init__(message)
        self.path = path


class DuplicateKeyError(SnapDiffError):
    """Two records in one snapshot share an identity key and the policy is 'fail'."""

    def __init__(self, message: str, key: str = None, source_label: str = None):
        super().__init__(message)
        self.key = key
        self.source_label = source_label


class ConfigError(SnapDiffError):
    """
    Error in diff configuration.

    Raised when:
    - Configuration file is missing or not a mapping
    - A policy value is not one of the allowed choices
    - Numeric settings are out of range
    """
    pass
