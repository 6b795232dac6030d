"""
Diff module: compare two snapshots and render the delta.
"""

from .engine import AttributeChange, DiffResult, ModifiedObject, diff_records, diff_stores
from .report import render_html, render_json, write_report

__all__ = [
    "AttributeChange",
    "DiffResult",
    "ModifiedObject",
    "diff_records",
    "diff_stores",
    "render_html",
    "render_json",
    "write_report",
]
