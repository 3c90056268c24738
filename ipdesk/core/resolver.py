"""
Entity Resolver - map free text to a cache entry.

Matching rule:
| Needle    | Entries scanned    | Result                                  |
|-----------|--------------------|-----------------------------------------|
| ""        | -                  | 0 (unresolved)                          |
| non-empty | 1..n, in order     | first entry whose name contains needle  |
| non-empty | no entry contains  | 0 (unresolved)                          |

Containment is case-sensitive and unanchored ("Acme" matches "The Acme Corp").
Cache order is upstream response order, so the upstream order breaks ties.
"""

from typing import Optional

from .cache import ReferenceCache
from .errors import UnresolvedReference
from .models import ReferenceEntry

UNRESOLVED = 0


def resolve(cache: ReferenceCache, needle: str) -> int:
    """
    Resolve text to a local index.

    Args:
        cache: Cache generation to search
        needle: Text from a spreadsheet cell or search box

    Returns:
        Local index of the first match, or 0 if nothing matches
    """
    if not needle:
        return UNRESOLVED

    # The sentinel at 0 is never a match target
    for entry in cache.all()[1:]:
        if needle in entry.display_name:
            return entry.local_index

    return UNRESOLVED


def resolve_entry(cache: ReferenceCache, needle: str) -> Optional[ReferenceEntry]:
    """Like resolve(), but returns the entry or None."""
    index = resolve(cache, needle)
    return cache.get(index) if index != UNRESOLVED else None


def resolve_required(cache: ReferenceCache, needle: str) -> ReferenceEntry:
    """Resolve text that must name a concrete entity. Raises UnresolvedReference."""
    entry = resolve_entry(cache, needle)
    if entry is None:
        raise UnresolvedReference(cache.kind, needle)
    return entry


def search(cache: ReferenceCache, needle: str) -> list[ReferenceEntry]:
    """
    All non-sentinel entries containing needle, in cache order.

    Used as a browse filter, so an empty needle keeps everything.
    """
    return [e for e in cache.all()[1:] if needle in e.display_name]
