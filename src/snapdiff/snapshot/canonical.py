"""
Canonical serialization and attribute-bag fingerprints.

The fingerprint is a canonical JSON string built from the folded attribute
names and values, so it compares equal exactly when the diff engine would
find no attribute-level change:
- Attribute names sorted by their folded form
- Values folded (NFC + casefold), order preserved (already sorted)
- No insignificant whitespace
"""

import hashlib
import json
import unicodedata
from typing import Any, Mapping, Sequence

from ..core.caseless import fold


def canonicalize(obj: Any) -> str:
    """
    Canonicalize a Python object to a stable JSON string.

    Keys are sorted recursively, strings are NFC-normalized and no
    whitespace is emitted.

    Args:
        obj: The object to canonicalize

    Returns:
        Canonical JSON string
    """
    return json.dumps(
        _normalize_for_canonical(obj),
        sort_keys=True,
        ensure_ascii=False,
        separators=(",", ":"),
        default=str,
    )


def _normalize_for_canonical(obj: Any) -> Any:
    if isinstance(obj, str):
        return unicodedata.normalize("NFC", obj)

    if obj is None or isinstance(obj, (bool, int, float)):
        return obj

    if isinstance(obj, Mapping):
        return {
            _normalize_for_canonical(k): _normalize_for_canonical(v)
            for k, v in obj.items()
        }

    if isinstance(obj, (list, tuple)):
        return [_normalize_for_canonical(item) for item in obj]

    return unicodedata.normalize("NFC", str(obj))


def compute_fingerprint(attributes: Mapping[str, Sequence[str]]) -> str:
    """
    Compute the fingerprint of an attribute bag.

    Two bags produce the same fingerprint if and only if they hold the same
    attribute names with element-wise equal value sequences, all compared
    case-insensitively. Construction order of the bag does not matter, and
    an attribute with no values is the same as an absent one.

    Args:
        attributes: Mapping of attribute name to normalized values

    Returns:
        Canonical fingerprint string
    """
    entries = sorted(
        (
            [fold(name), [fold(v) for v in values]]
            for name, values in attributes.items()
            if values
        ),
        key=lambda entry: entry[0],
    )
    return canonicalize(entries)


def fingerprint_digest(fingerprint: str) -> str:
    """Short SHA256 digest of a fingerprint, for display in reports."""
    return hashlib.sha256(fingerprint.encode("utf-8")).hexdigest()[:16]
