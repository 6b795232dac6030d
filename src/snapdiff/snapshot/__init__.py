"""
Snapshot module: from archive payloads to comparable objects.

This module provides:
- Value normalization: canonical multi-value sets from raw JSON values
- Record extraction: schema-tolerant ObjectRecords from JSON payloads
- Object store: per-snapshot key -> record mapping with statistics
- Archive suppliers: payload iteration over tar, zip and directories
"""

from .normalize import normalize_values, build_separator_pattern, DEFAULT_SEPARATORS
from .canonical import canonicalize, compute_fingerprint
from .models import ObjectRecord, AttributeBag, make_attribute_bag
from .extractor import ExtractionResult, extract_records, extract_payload, parse_document
from .store import ObjectStore, SnapshotStats, load_snapshot
from .archive import iter_payloads

__all__ = [
    "normalize_values",
    "build_separator_pattern",
    "DEFAULT_SEPARATORS",
    "canonicalize",
    "compute_fingerprint",
    "ObjectRecord",
    "AttributeBag",
    "make_attribute_bag",
    "ExtractionResult",
    "extract_records",
    "extract_payload",
    "parse_document",
    "ObjectStore",
    "SnapshotStats",
    "load_snapshot",
    "iter_payloads",
]
