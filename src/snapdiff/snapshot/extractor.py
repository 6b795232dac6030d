"""
Record extraction from heterogeneous JSON payloads.

Directory exports come in several shapes: a bare array of objects, an
object wrapping the array under a container field, a single object, and
BloodHound-style objects whose attributes live under a nested
"Properties" object. The extractor probes an ordered table of container
and identity field names instead of requiring a declared schema.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional

from ..config.config_loader import DiffConfig
from ..core.caseless import CaseInsensitiveDict, ci_union
from ..core.exceptions import SnapshotParseError
from .models import ObjectRecord
from .normalize import JsonNumber, normalize_values

logger = logging.getLogger(__name__)


# Container fields probed on a root object, in priority order
CONTAINER_FIELDS = ("data", "nodes", "objects", "items", "rows", "entries")

# Nested attribute source
PROPERTIES_FIELD = "Properties"

# Identity fields probed in priority order (exact-case lookups)
IDENTITY_FIELDS = (
    "DistinguishedName",
    "distinguishedname",
    "dn",
    "ObjectIdentifier",
    "objectid",
    "Guid",
    "guid",
    "Name",
    "name",
    "id",
)

# Never collected as attributes from the attribute source
EXCLUDED_FIELDS = frozenset(IDENTITY_FIELDS) | {"objectClass"}

# A key containing any of these is structurally distinctive (DN, GUID, UPN, path)
DISTINCTIVE_KEY_CHARS = frozenset("={@-,")

LABEL_SEPARATOR = ":"


@dataclass
class ExtractionResult:
    """Records extracted from one payload."""
    source_label: str
    records: List[ObjectRecord] = field(default_factory=list)
    skipped: int = 0

    @property
    def count(self) -> int:
        return len(self.records)


def parse_document(payload: bytes, source_label: str) -> Any:
    """
    Decode a payload as UTF-8 JSON.

    A leading byte-order mark is tolerated. NaN and Infinity literals are
    rejected, and fraction/exponent numbers keep their source text.

    Args:
        payload: Raw payload bytes
        source_label: Label used in error messages

    Returns:
        Parsed JSON document

    Raises:
        SnapshotParseError: If the payload is not UTF-8 or not valid JSON
    """
    try:
        text = payload.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise SnapshotParseError(
            f"Payload {source_label!r} is not valid UTF-8: {e}",
            source_label=source_label,
        ) from e

    try:
        return json.loads(text, parse_float=JsonNumber, parse_constant=_reject_constant)
    except ValueError as e:
        raise SnapshotParseError(
            f"Payload {source_label!r} is not valid JSON: {e}",
            source_label=source_label,
        ) from e


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not a valid JSON value")


def iter_candidates(document: Any) -> Iterator[Any]:
    """
    Yield candidate objects from a parsed document.

    - Array root: each element
    - Object root with a container field holding an array: each element
    - Any other object root: the root itself
    """
    if isinstance(document, list):
        yield from document
        return

    if isinstance(document, dict):
        for container in CONTAINER_FIELDS:
            items = document.get(container)
            if isinstance(items, list):
                yield from items
                return
        yield document


def find_identity(element: Dict[str, Any], attr_source: Dict[str, Any]) -> Optional[str]:
    """
    Probe identity fields on the element root, then the attribute source.

    Returns:
        The first non-blank string value, or None
    """
    for name in IDENTITY_FIELDS:
        for holder in (element, attr_source):
            value = holder.get(name)
            if isinstance(value, str) and value.strip():
                return value
    return None


def qualify_key(key: str, source_label: str) -> str:
    """
    Namespace a generic key by its source label.

    Keys with none of the characters ``= { @ - ,`` (short names) could
    collide across unrelated payloads, so they become ``label:key``.
    """
    if DISTINCTIVE_KEY_CHARS.isdisjoint(key):
        return f"{source_label}{LABEL_SEPARATOR}{key}"
    return key


def extract_record(
    element: Any,
    source_label: str,
    config: DiffConfig,
) -> Optional[ObjectRecord]:
    """
    Build one ObjectRecord from a candidate object.

    Args:
        element: Candidate object from iter_candidates
        source_label: Label of the source payload
        config: Ignore list and separators

    Returns:
        ObjectRecord, or None if the candidate has no identity key
    """
    if not isinstance(element, dict):
        return None

    properties = element.get(PROPERTIES_FIELD)
    nested = isinstance(properties, dict)
    attr_source = properties if nested else element

    key = find_identity(element, attr_source)
    if key is None:
        return None
    key = qualify_key(key, source_label)

    pattern = config.separator_pattern
    attributes: CaseInsensitiveDict = CaseInsensitiveDict()

    for name, raw in attr_source.items():
        if name in EXCLUDED_FIELDS or config.is_ignored(name):
            continue
        values = normalize_values(raw, pattern)
        if values:
            attributes[name] = values

    if nested:
        # Simple fields sitting next to Properties are merged in
        for name, raw in element.items():
            if name == PROPERTIES_FIELD or config.is_ignored(name):
                continue
            if raw is None or isinstance(raw, dict):
                continue
            values = normalize_values(raw, pattern)
            if not values:
                continue
            if name in attributes:
                attributes[name] = tuple(ci_union(attributes[name], values))
            else:
                attributes[name] = values

    return ObjectRecord.create(key, attributes, source_label=source_label)


def extract_records(
    document: Any,
    source_label: str,
    config: Optional[DiffConfig] = None,
) -> ExtractionResult:
    """
    Extract all ObjectRecords from a parsed JSON document.

    Candidates without an identity key are skipped silently (counted in
    ``ExtractionResult.skipped``); a document yielding zero records is not
    an error.

    Args:
        document: Parsed JSON document
        source_label: Label of the source payload
        config: Extraction settings (defaults if omitted)

    Returns:
        ExtractionResult holding the records in document order
    """
    if config is None:
        config = DiffConfig()

    result = ExtractionResult(source_label=source_label)

    for element in iter_candidates(document):
        record = extract_record(element, source_label, config)
        if record is None:
            result.skipped += 1
            continue
        result.records.append(record)

    if result.skipped:
        logger.debug(
            f"Skipped {result.skipped} candidate(s) without identity key",
            extra={"source_label": source_label},
        )

    return result


def extract_payload(
    payload: bytes,
    source_label: str,
    config: Optional[DiffConfig] = None,
) -> ExtractionResult:
    """Parse a raw payload and extract its records."""
    return extract_records(parse_document(payload, source_label), source_label, config)
