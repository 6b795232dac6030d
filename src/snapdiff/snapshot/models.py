"""
Core data models for snapshot objects.

An ObjectRecord is one canonical directory object extracted from a JSON
payload: a stable identity key, a normalized attribute bag and the bag's
fingerprint.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Mapping, Optional, Sequence, Tuple

from ..core.caseless import CaseInsensitiveDict, ci_sorted
from .canonical import compute_fingerprint, fingerprint_digest

# Attribute name -> normalized values, keyed case-insensitively
AttributeBag = CaseInsensitiveDict


def make_attribute_bag(
    items: Optional[Iterable[Tuple[str, Sequence[str]]]] = None,
) -> AttributeBag:
    """Build an AttributeBag, storing each value sequence as a tuple."""
    bag: AttributeBag = CaseInsensitiveDict()
    for name, values in items or ():
        bag[name] = tuple(values)
    return bag


@dataclass(frozen=True)
class ObjectRecord:
    """
    One object in a snapshot.

    Attributes:
        key: Identity key, unique within a snapshot (case-insensitive)
        attributes: Normalized attribute bag
        fingerprint: Canonical digest of ``attributes``
        source_label: Label of the payload the record came from
    """
    key: str
    attributes: AttributeBag = field(compare=False)
    fingerprint: str
    source_label: Optional[str] = field(default=None, compare=False)

    @classmethod
    def create(
        cls,
        key: str,
        attributes: Mapping[str, Sequence[str]],
        source_label: Optional[str] = None,
    ) -> "ObjectRecord":
        """
        Create a record and compute its fingerprint.

        ``attributes`` may be any mapping; it is copied into an AttributeBag.
        """
        bag = make_attribute_bag(attributes.items())
        return cls(
            key=key,
            attributes=bag,
            fingerprint=compute_fingerprint(bag),
            source_label=source_label,
        )

    def get_values(self, attribute: str) -> Tuple[str, ...]:
        """Values for ``attribute``, or an empty tuple if absent."""
        return self.attributes.get(attribute, ())

    @property
    def digest(self) -> str:
        return fingerprint_digest(self.fingerprint)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "key": self.key,
            "source_label": self.source_label,
            "fingerprint": self.digest,
            "attributes": {
                name: list(self.attributes[name])
                for name in ci_sorted(self.attributes)
            },
        }
