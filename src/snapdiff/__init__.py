"""
snapdiff: compare point-in-time snapshots of directory objects.

Objects are extracted from JSON payloads inside snapshot archives,
normalized into case-insensitive attribute bags, and diffed into added,
deleted and modified sets with per-attribute value deltas.
"""

from .config import DiffConfig, load_config
from .snapshot import ObjectRecord, ObjectStore, extract_records, load_snapshot, normalize_values
from .diff import DiffResult, diff_stores, render_html, render_json

__version__ = "0.1.0"

__all__ = [
    "DiffConfig",
    "load_config",
    "ObjectRecord",
    "ObjectStore",
    "extract_records",
    "load_snapshot",
    "normalize_values",
    "DiffResult",
    "diff_stores",
    "render_html",
    "render_json",
]
