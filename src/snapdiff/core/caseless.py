"""
Case-insensitive comparison helpers.

Every case-insensitive equality, set difference and sort in snapdiff goes
through fold(), so the diff engine and the fingerprint agree on what
"equal" means.
"""

import unicodedata
from typing import Dict, Generic, Iterable, Iterator, List, MutableMapping, Optional, Tuple, TypeVar

V = TypeVar("V")


def fold(value: str) -> str:
    """Return the comparison form of a string (NFC, then casefold)."""
    return unicodedata.normalize("NFC", value).casefold()


def sort_key(value: str) -> Tuple[str, str]:
    """Sort key ordering case-insensitively, with the raw string as tie-break."""
    return (fold(value), value)


def ci_sorted(values: Iterable[str]) -> List[str]:
    return sorted(values, key=sort_key)


def ci_unique(values: Iterable[str]) -> List[str]:
    """Drop case-insensitive duplicates, keeping the first occurrence."""
    seen = set()
    result = []
    for value in values:
        folded = fold(value)
        if folded not in seen:
            seen.add(folded)
            result.append(value)
    return result


def ci_difference(left: Iterable[str], right: Iterable[str]) -> List[str]:
    """Values of ``left`` not in ``right`` (case-insensitive), in ``left`` order."""
    exclude = {fold(v) for v in right}
    return ci_unique(v for v in left if fold(v) not in exclude)


def ci_union(left: Iterable[str], right: Iterable[str]) -> List[str]:
    """Case-insensitive union, sorted case-insensitively."""
    return ci_sorted(ci_unique([*left, *right]))


def ci_sequence_equal(left: Iterable[str], right: Iterable[str]) -> bool:
    left = list(left)
    right = list(right)
    if len(left) != len(right):
        return False
    return all(fold(a) == fold(b) for a, b in zip(left, right))


class CaseInsensitiveDict(MutableMapping, Generic[V]):
    """
    Mapping with case-insensitive string keys.

    Entries are stored under fold(key) alongside the display key. The
    display key of the first insert is kept when an entry is overwritten.
    Iteration yields display keys in insertion order.
    """

    def __init__(self, data: Optional[Iterable] = None, **kwargs: V):
        self._store: Dict[str, Tuple[str, V]] = {}
        if data is not None:
            self.update(data)
        if kwargs:
            self.update(kwargs)

    def __setitem__(self, key: str, value: V) -> None:
        folded = fold(key)
        existing = self._store.get(folded)
        display = existing[0] if existing is not None else key
        self._store[folded] = (display, value)

    def __getitem__(self, key: str) -> V:
        return self._store[fold(key)][1]

    def __delitem__(self, key: str) -> None:
        del self._store[fold(key)]

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and fold(key) in self._store

    def __iter__(self) -> Iterator[str]:
        return (display for display, _ in self._store.values())

    def __len__(self) -> int:
        return len(self._store)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CaseInsensitiveDict):
            return NotImplemented
        return dict(self.folded_items()) == dict(other.folded_items())

    def __repr__(self) -> str:
        return f"{type(self).__name__}({dict(self.items())!r})"

    def display_key(self, key: str) -> str:
        """Return the stored casing for ``key``."""
        return self._store[fold(key)][0]

    def folded_items(self) -> Iterator[Tuple[str, V]]:
        """Yield (folded_key, value) pairs."""
        return ((folded, value) for folded, (_, value) in self._store.items())
