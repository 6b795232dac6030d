"""
Configuration for snapshot extraction and diffing.
"""

from .config_loader import (
    DEFAULT_IGNORED_ATTRIBUTES,
    DEFAULT_SEPARATORS,
    DiffConfig,
    DuplicateKeyPolicy,
    ParseErrorPolicy,
    load_config,
)

__all__ = [
    "DEFAULT_IGNORED_ATTRIBUTES",
    "DEFAULT_SEPARATORS",
    "DiffConfig",
    "DuplicateKeyPolicy",
    "ParseErrorPolicy",
    "load_config",
]
