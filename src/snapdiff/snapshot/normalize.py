"""
Value normalization for directory attributes.

Turns a raw JSON value (scalar, array or delimited string) into a canonical
tuple of strings:
- trimmed, with empty pieces dropped
- deduplicated case-insensitively (first occurrence kept)
- sorted case-insensitively
"""

import json
import re
from typing import Any, Iterable, List, Optional, Pattern, Tuple, Union

from ..config.config_loader import DEFAULT_SEPARATORS, build_separator_pattern
from ..core.caseless import ci_sorted, ci_unique

_DEFAULT_PATTERN = build_separator_pattern(DEFAULT_SEPARATORS)


class JsonNumber(float):
    """A parsed JSON fraction or exponent number that keeps its source spelling."""

    def __new__(cls, text: str):
        number = super().__new__(cls, text)
        number.text = text
        return number


def to_text(value: Any) -> Optional[str]:
    """
    Textual form of a JSON scalar or nested value.

    Strings are returned as-is, booleans and numbers in their JSON spelling
    (the source text for a JsonNumber), nested objects/arrays as compact
    JSON. None yields None.
    """
    if value is None:
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, JsonNumber):
        return value.text
    if isinstance(value, (int, float)):
        return json.dumps(value)
    return json.dumps(value, sort_keys=True, ensure_ascii=False, separators=(",", ":"))


def normalize_values(
    value: Any,
    separators: Union[Iterable[str], Pattern, None] = None,
) -> Tuple[str, ...]:
    """
    Normalize a raw attribute value.

    Args:
        value: Parsed JSON value
        separators: Separator strings or a pattern from build_separator_pattern
            (default: ";", "|", newline)

    Returns:
        Canonical, deduplicated, sorted tuple of values (possibly empty)
    """
    if separators is None:
        pattern = _DEFAULT_PATTERN
    elif isinstance(separators, re.Pattern):
        pattern = separators
    else:
        pattern = build_separator_pattern(separators)

    pieces: List[str] = []

    if isinstance(value, list):
        for item in value:
            text = to_text(item)
            if text is not None:
                pieces.append(text)
    elif isinstance(value, str):
        text = value.replace("\r\n", "\n").replace("\r", "\n")
        pieces.extend(pattern.split(text))
    elif isinstance(value, (bool, int, float)):
        pieces.append(to_text(value))
    # None and dict values carry no comparable content

    trimmed = (piece.strip() for piece in pieces)
    return tuple(ci_sorted(ci_unique(piece for piece in trimmed if piece)))
