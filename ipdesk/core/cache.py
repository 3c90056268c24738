"""
Reference Cache - local snapshot of slow-changing reference collections.

One ReferenceCache per kind (tenant, device type, ...). Index 0 is always the
"None" sentinel; indices 1..n follow the order of the last successful fetch.
A cache is rebuilt wholesale and swapped into the CacheSet in one step, so
readers see either the previous generation or the new one, never a mix.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Any, Iterable, Optional

from .errors import PartialRecordSkipped
from .models import SENTINEL_NAME, ReferenceEntry, ReferenceKind

logger = logging.getLogger(__name__)


def _sentinel() -> ReferenceEntry:
    return ReferenceEntry(local_index=0, remote_id=None, display_name=SENTINEL_NAME)


@dataclass(frozen=True)
class ReferenceCache:
    """
    Immutable ordered entries for one reference kind.

    Attributes:
        kind: Which reference collection this is
        entries: Sentinel first, then one entry per fetched record
        skipped: Number of malformed raw records dropped during rebuild
    """
    kind: ReferenceKind
    entries: tuple[ReferenceEntry, ...]
    skipped: int = 0

    @classmethod
    def empty(cls, kind: ReferenceKind) -> "ReferenceCache":
        """Sentinel-only cache, used before the first successful fetch."""
        return cls(kind=kind, entries=(_sentinel(),))

    def __len__(self) -> int:
        return len(self.entries)

    def get(self, local_index: int) -> ReferenceEntry:
        """Entry at local_index. Raises IndexError when out of range."""
        if not 0 <= local_index < len(self.entries):
            raise IndexError(
                f"{self.kind.value} index {local_index} out of range (size {len(self.entries)})"
            )
        return self.entries[local_index]

    def all(self) -> tuple[ReferenceEntry, ...]:
        """All entries in index order, sentinel included."""
        return self.entries

    def names(self) -> list[str]:
        return [e.display_name for e in self.entries]

    def clamp(self, local_index: int) -> int:
        """Selection that is still valid in this generation (0 otherwise)."""
        return local_index if 0 <= local_index < len(self.entries) else 0


def _entry_from_record(kind: ReferenceKind, local_index: int, record: Any) -> ReferenceEntry:
    """Build one entry, raising PartialRecordSkipped if required fields are missing."""
    if not isinstance(record, dict):
        raise PartialRecordSkipped(kind, f"record is {type(record).__name__}, not an object")

    remote_id = record.get("id")
    # bool is an int subclass; a JSON true is not an id
    if remote_id is not None and (not isinstance(remote_id, int) or isinstance(remote_id, bool)):
        raise PartialRecordSkipped(kind, f"non-integer id in {record!r:.80}")

    display = record.get(kind.display_field)
    if display is None and kind == ReferenceKind.DEVICE:
        display = record.get("name")
    if not isinstance(display, str):
        raise PartialRecordSkipped(kind, f"id={remote_id} has no '{kind.display_field}'")

    return ReferenceEntry(
        local_index=local_index,
        remote_id=remote_id,
        display_name=display,
        raw=record,
    )


def rebuild(kind: ReferenceKind, raw_records: Iterable[Any]) -> ReferenceCache:
    """
    Build a fresh cache generation from raw records.

    Args:
        kind: Reference kind the records belong to
        raw_records: Decoded records in response order

    Returns:
        ReferenceCache with the sentinel at 0 and valid records at 1..n
    """
    entries = [_sentinel()]
    skipped = 0

    for record in raw_records:
        try:
            entries.append(_entry_from_record(kind, len(entries), record))
        except PartialRecordSkipped as e:
            skipped += 1
            logger.warning(str(e))

    if skipped:
        logger.info(f"Rebuilt {kind.value} cache: {len(entries) - 1} entries, {skipped} skipped")

    return ReferenceCache(kind=kind, entries=tuple(entries), skipped=skipped)


class CacheSet:
    """
    The console's current cache per kind plus the operator's dropdown selections.

    Single writer (the refresh cycle) swaps whole caches under the lock;
    readers take a snapshot and keep using it without locking.
    """

    def __init__(self, kinds: Optional[Iterable[ReferenceKind]] = None):
        self._lock = threading.Lock()
        self._caches: dict[ReferenceKind, ReferenceCache] = {
            kind: ReferenceCache.empty(kind) for kind in (kinds or ReferenceKind)
        }
        self._selections: dict[ReferenceKind, int] = {kind: 0 for kind in self._caches}

    def get(self, kind: ReferenceKind) -> ReferenceCache:
        with self._lock:
            return self._caches[kind]

    def replace(self, cache: ReferenceCache) -> None:
        """Swap in a new generation and clamp the stored selection."""
        with self._lock:
            self._caches[cache.kind] = cache
            current = self._selections.get(cache.kind, 0)
            clamped = cache.clamp(current)
            if clamped != current:
                logger.info(f"{cache.kind.value} selection {current} no longer exists, reset to None")
            self._selections[cache.kind] = clamped

    def reset(self) -> None:
        """Drop every generation back to sentinel-only (logout / auth failure)."""
        with self._lock:
            for kind in self._caches:
                self._caches[kind] = ReferenceCache.empty(kind)
                self._selections[kind] = 0

    def snapshot(self) -> dict[ReferenceKind, ReferenceCache]:
        """Consistent view of all caches; the caches themselves are immutable."""
        with self._lock:
            return dict(self._caches)

    # ---- selections ----

    def select(self, kind: ReferenceKind, local_index: int) -> ReferenceEntry:
        """Store a dropdown selection. Raises IndexError if it does not exist."""
        with self._lock:
            entry = self._caches[kind].get(local_index)
            self._selections[kind] = local_index
            return entry

    def selection(self, kind: ReferenceKind) -> int:
        with self._lock:
            return self._selections[kind]

    def selected_entry(self, kind: ReferenceKind) -> ReferenceEntry:
        with self._lock:
            return self._caches[kind].get(self._selections[kind])
