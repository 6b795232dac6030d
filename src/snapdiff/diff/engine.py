"""
Diff engine for two object stores.

Computes the three-way partition of keys (added, deleted, modified) and,
for modified objects, the attribute-level value deltas. The engine is a
pure function of its inputs; results are sorted case-insensitively so the
same pair of snapshots always yields the same output.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Tuple

from ..core.caseless import (
    CaseInsensitiveDict,
    ci_difference,
    ci_sequence_equal,
    ci_sorted,
    ci_unique,
    fold,
)
from ..snapshot.models import ObjectRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AttributeChange:
    """
    Change of one attribute on one object.

    Attributes:
        attribute: Attribute name
        old_values: Values in the old snapshot (empty if the attribute is new)
        new_values: Values in the new snapshot (empty if the attribute vanished)
        added: Values in new_values but not old_values (case-insensitive)
        removed: Values in old_values but not new_values (case-insensitive)
    """
    attribute: str
    old_values: Tuple[str, ...]
    new_values: Tuple[str, ...]
    added: Tuple[str, ...]
    removed: Tuple[str, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "attribute": self.attribute,
            "old_values": list(self.old_values),
            "new_values": list(self.new_values),
            "added": list(self.added),
            "removed": list(self.removed),
        }


@dataclass(frozen=True)
class ModifiedObject:
    """An object present in both snapshots whose attributes differ."""
    key: str
    changes: Tuple[AttributeChange, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": self.key,
            "changes": [change.to_dict() for change in self.changes],
        }


@dataclass(frozen=True)
class DiffResult:
    """
    Delta between two snapshots.

    Keys present in both snapshots with equal fingerprints appear in none
    of the lists; they are accounted for by old_count/new_count only.
    """
    old_count: int
    new_count: int
    added: Tuple[str, ...] = field(default_factory=tuple)
    deleted: Tuple[str, ...] = field(default_factory=tuple)
    modified: Tuple[ModifiedObject, ...] = field(default_factory=tuple)

    @property
    def is_empty(self) -> bool:
        return not (self.added or self.deleted or self.modified)

    @property
    def unchanged_count(self) -> int:
        """Keys present in both snapshots with no attribute change."""
        return self.old_count - len(self.deleted) - len(self.modified)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "old_count": self.old_count,
            "new_count": self.new_count,
            "summary": {
                "added": len(self.added),
                "deleted": len(self.deleted),
                "modified": len(self.modified),
                "unchanged": self.unchanged_count,
            },
            "added": list(self.added),
            "deleted": list(self.deleted),
            "modified": [m.to_dict() for m in self.modified],
        }

    def summary(self) -> str:
        """Get a human-readable summary."""
        lines = [
            "Snapshot Diff",
            f"  Old objects: {self.old_count}",
            f"  New objects: {self.new_count}",
            "",
            f"  Added: {len(self.added)}",
            f"  Deleted: {len(self.deleted)}",
            f"  Modified: {len(self.modified)}",
            f"  Unchanged: {self.unchanged_count}",
        ]
        return "\n".join(lines)


def diff_records(old: ObjectRecord, new: ObjectRecord) -> List[AttributeChange]:
    """
    Attribute-level changes between two versions of one object.

    Args:
        old: Record from the old snapshot
        new: Record from the new snapshot

    Returns:
        Changes sorted case-insensitively by attribute name
    """
    names = ci_sorted(ci_unique([*old.attributes, *new.attributes]))
    changes = []

    for name in names:
        old_values = tuple(old.get_values(name))
        new_values = tuple(new.get_values(name))
        if ci_sequence_equal(old_values, new_values):
            continue
        changes.append(
            AttributeChange(
                attribute=name,
                old_values=old_values,
                new_values=new_values,
                added=tuple(ci_difference(new_values, old_values)),
                removed=tuple(ci_difference(old_values, new_values)),
            )
        )

    return changes


def diff_stores(
    old_store: Mapping[str, ObjectRecord],
    new_store: Mapping[str, ObjectRecord],
) -> DiffResult:
    """
    Compare two snapshots.

    Stores are any mapping of key to ObjectRecord (an ObjectStore or a
    plain dict); keys are matched case-insensitively.

    Args:
        old_store: Objects of the older snapshot
        new_store: Objects of the newer snapshot

    Returns:
        DiffResult with sorted added/deleted keys and modified objects
    """
    old_index = CaseInsensitiveDict((key, old_store[key]) for key in old_store)
    new_index = CaseInsensitiveDict((key, new_store[key]) for key in new_store)

    added = ci_sorted(key for key in new_index if key not in old_index)
    deleted = ci_sorted(key for key in old_index if key not in new_index)

    modified = []
    for key in new_index:
        if key not in old_index:
            continue
        old_record = old_index[key]
        new_record = new_index[key]
        if old_record.fingerprint == new_record.fingerprint:
            continue
        modified.append(
            ModifiedObject(
                key=old_index.display_key(key),
                changes=tuple(diff_records(old_record, new_record)),
            )
        )

    modified.sort(key=lambda m: (fold(m.key), m.key))

    logger.info(
        f"Diff complete: added={len(added)}, deleted={len(deleted)}, "
        f"modified={len(modified)}"
    )

    return DiffResult(
        old_count=len(old_index),
        new_count=len(new_index),
        added=tuple(added),
        deleted=tuple(deleted),
        modified=tuple(modified),
    )
