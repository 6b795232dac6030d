"""
Per-snapshot object store.

Folds the records extracted from every payload of a snapshot into one
case-insensitive key -> ObjectRecord mapping, with running statistics.
Extraction may run on a thread pool; records are always folded into the
store in archive order so duplicate-key resolution stays deterministic.
"""

import logging
from collections import deque
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Deque, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple, Union

from ..config.config_loader import DiffConfig, DuplicateKeyPolicy, ParseErrorPolicy
from ..core.caseless import CaseInsensitiveDict, ci_sorted
from ..core.exceptions import DuplicateKeyError, SnapshotParseError
from .archive import iter_payloads
from .extractor import ExtractionResult, extract_payload
from .models import ObjectRecord

logger = logging.getLogger(__name__)

# Payloads submitted ahead of the one being folded, per extraction thread
PENDING_PER_WORKER = 4


@dataclass
class SnapshotStats:
    """
    Counters collected while building a store.

    Attributes:
        files: Payloads seen (including malformed ones)
        objects: Records extracted, duplicates included
        parse_errors: Payloads skipped because they were not valid JSON
        duplicates: Records whose key was already present
        skipped_candidates: Candidate objects without an identity key
        error_labels: Source labels of the skipped payloads
    """
    files: int = 0
    objects: int = 0
    parse_errors: int = 0
    duplicates: int = 0
    skipped_candidates: int = 0
    error_labels: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "files": self.files,
            "objects": self.objects,
            "parse_errors": self.parse_errors,
            "duplicates": self.duplicates,
            "skipped_candidates": self.skipped_candidates,
            "error_labels": list(self.error_labels),
        }


# Outcome of extracting one payload: records or the parse error it raised
_PayloadOutcome = Tuple[str, Union[ExtractionResult, SnapshotParseError]]


class ObjectStore(Mapping):
    """
    Read-only mapping of identity key to ObjectRecord for one snapshot.

    Keys compare case-insensitively. Build with ObjectStore.build() or
    load_snapshot(); there is no public mutation API.
    """

    def __init__(
        self,
        records: Optional[Iterable[ObjectRecord]] = None,
        name: Optional[str] = None,
        stats: Optional[SnapshotStats] = None,
    ):
        """
        Initialize a store.

        Args:
            records: Records to add, last-writer-wins on duplicate keys
            name: Display name of the snapshot (archive file name)
            stats: Statistics from the build, if any
        """
        self.name = name
        self.stats = stats or SnapshotStats()
        self._records: CaseInsensitiveDict = CaseInsensitiveDict()
        for record in records or ():
            self._records[record.key] = record

    def __getitem__(self, key: str) -> ObjectRecord:
        return self._records[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, key: object) -> bool:
        return key in self._records

    def __repr__(self) -> str:
        return f"ObjectStore(name={self.name!r}, objects={len(self)})"

    def sorted_keys(self) -> List[str]:
        return ci_sorted(self._records)

    @classmethod
    def build(
        cls,
        payloads: Iterable[Tuple[str, bytes]],
        config: Optional[DiffConfig] = None,
        name: Optional[str] = None,
    ) -> "ObjectStore":
        """
        Build a store from (source_label, payload_bytes) pairs.

        Args:
            payloads: Payloads in archive order
            config: Extraction and policy settings (defaults if omitted)
            name: Display name of the snapshot

        Returns:
            Populated ObjectStore

        Raises:
            SnapshotParseError: On a malformed payload when on_parse_error is 'fail'
            DuplicateKeyError: On a repeated key when on_duplicate_key is 'fail'
        """
        if config is None:
            config = DiffConfig()

        store = cls(name=name)
        for source_label, outcome in _extract_all(payloads, config):
            store._fold(source_label, outcome, config)

        logger.info(
            f"Loaded snapshot {name or '<unnamed>'}: files={store.stats.files}, "
            f"objects={store.stats.objects}, distinct={len(store)}",
            extra={"snapshot": name},
        )
        if store.stats.parse_errors:
            logger.warning(
                f"Skipped {store.stats.parse_errors} malformed payload(s) in "
                f"{name or '<unnamed>'}: {', '.join(store.stats.error_labels)}",
                extra={"snapshot": name},
            )
        return store

    def _fold(
        self,
        source_label: str,
        outcome: Union[ExtractionResult, SnapshotParseError],
        config: DiffConfig,
    ) -> None:
        """Merge one payload's outcome into the store."""
        self.stats.files += 1

        if isinstance(outcome, SnapshotParseError):
            if config.on_parse_error == ParseErrorPolicy.FAIL:
                raise outcome
            self.stats.parse_errors += 1
            self.stats.error_labels.append(source_label)
            logger.warning(
                f"Skipping malformed payload: {outcome}",
                extra={"snapshot": self.name, "source_label": source_label},
            )
            return

        self.stats.objects += outcome.count
        self.stats.skipped_candidates += outcome.skipped

        for record in outcome.records:
            if record.key in self._records:
                self.stats.duplicates += 1
                previous = self._records[record.key]
                logger.debug(
                    f"Duplicate key (previous source: {previous.source_label})",
                    extra={"snapshot": self.name, "source_label": source_label, "key": record.key},
                )
                if config.on_duplicate_key == DuplicateKeyPolicy.FAIL:
                    raise DuplicateKeyError(
                        f"Duplicate key {record.key!r} in {source_label!r} "
                        f"(first seen in {previous.source_label!r})",
                        key=record.key,
                        source_label=source_label,
                    )
                if config.on_duplicate_key == DuplicateKeyPolicy.FIRST_WINS:
                    continue
            self._records[record.key] = record


def _extract_one(payload: Tuple[str, bytes], config: DiffConfig) -> _PayloadOutcome:
    source_label, data = payload
    try:
        return source_label, extract_payload(data, source_label, config)
    except SnapshotParseError as e:
        return source_label, e


def _extract_all(
    payloads: Iterable[Tuple[str, bytes]],
    config: DiffConfig,
) -> Iterator[_PayloadOutcome]:
    """
    Extract every payload, yielding outcomes in input order.

    With several workers, at most PENDING_PER_WORKER * workers payloads are
    in flight, so a large archive is never read into memory all at once.
    """
    if config.workers <= 1:
        for payload in payloads:
            yield _extract_one(payload, config)
        return

    window = PENDING_PER_WORKER * config.workers
    pending: Deque[Future] = deque()

    with ThreadPoolExecutor(max_workers=config.workers, thread_name_prefix="snapdiff-extract") as executor:
        for payload in payloads:
            pending.append(executor.submit(_extract_one, payload, config))
            if len(pending) >= window:
                yield pending.popleft().result()
        while pending:
            yield pending.popleft().result()


def load_snapshot(path: Path, config: Optional[DiffConfig] = None) -> ObjectStore:
    """
    Load a snapshot archive or directory into an ObjectStore.

    Args:
        path: Archive (.tar.gz, .zip) or directory of JSON payloads
        config: Extraction and policy settings

    Returns:
        Populated ObjectStore named after the archive
    """
    path = Path(path)
    logger.info(f"Reading snapshot {path}")
    return ObjectStore.build(iter_payloads(path), config=config, name=path.name)
