"""
Tests for the entity resolver.

Matching is case-sensitive, unanchored substring containment over entries
1..n; the first match in cache order wins; no match and empty text give 0.
"""

import pytest

from ipdesk.core.errors import UnresolvedReference
from ipdesk.core.models import ReferenceKind
from ipdesk.core.resolver import UNRESOLVED, resolve, resolve_entry, resolve_required, search


@pytest.fixture
def tenants(make_cache):
    return make_cache(ReferenceKind.TENANT, ["Globex", "The Acme Corp", "Acme Corp", "Initech"])


class TestResolve:

    def test_exact_name(self, tenants):
        assert resolve(tenants, "Initech") == 4

    def test_substring_unanchored(self, tenants):
        assert resolve(tenants, "lobe") == 1

    def test_first_match_wins(self, tenants):
        # "The Acme Corp" comes before "Acme Corp" in upstream order
        assert resolve(tenants, "Acme") == 2

    def test_case_sensitive(self, tenants):
        assert resolve(tenants, "acme") == UNRESOLVED

    def test_no_match(self, tenants):
        assert resolve(tenants, "Umbrella") == UNRESOLVED

    def test_empty_needle_is_unresolved(self, tenants):
        assert resolve(tenants, "") == UNRESOLVED

    def test_sentinel_never_matched(self, make_cache):
        cache = make_cache(ReferenceKind.SITE, ["NYC"])
        # "None" is the sentinel label, not a site
        assert resolve(cache, "None") == UNRESOLVED

    def test_sentinel_only_cache(self, make_cache):
        assert resolve(make_cache(ReferenceKind.SITE, []), "NYC") == UNRESOLVED


class TestResolveHelpers:

    def test_resolve_entry(self, tenants):
        entry = resolve_entry(tenants, "Init")
        assert entry.display_name == "Initech"
        assert entry.remote_id == 4

    def test_resolve_entry_none(self, tenants):
        assert resolve_entry(tenants, "nope") is None

    def test_resolve_required_raises(self, tenants):
        with pytest.raises(UnresolvedReference) as exc:
            resolve_required(tenants, "Umbrella")
        assert exc.value.kind == ReferenceKind.TENANT
        assert exc.value.needle == "Umbrella"
        assert "Umbrella" in str(exc.value)

    def test_resolve_required_empty(self, tenants):
        with pytest.raises(UnresolvedReference, match="No tenant selected"):
            resolve_required(tenants, "")


class TestSearch:

    def test_all_matches_in_order(self, tenants):
        assert [e.display_name for e in search(tenants, "Acme")] == ["The Acme Corp", "Acme Corp"]

    def test_empty_needle_keeps_everything(self, tenants):
        assert len(search(tenants, "")) == 4

    def test_sentinel_excluded(self, tenants):
        assert all(not e.is_sentinel for e in search(tenants, "o"))
