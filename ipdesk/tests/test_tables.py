"""
Tests for the browse table rows.
"""

from ipdesk.core.cache import rebuild
from ipdesk.core.models import ReferenceKind
from ipdesk.core.tables import (
    DEVICE_COLUMNS,
    IP_COLUMNS,
    MISSING,
    device_rows,
    format_table,
    ip_rows,
    nested,
    vlan_rows,
)


class TestNested:

    def test_walks_dicts(self):
        assert nested({"a": {"b": {"c": 1}}}, "a", "b", "c") == 1

    def test_missing_step(self):
        assert nested({"a": None}, "a", "b") == MISSING
        assert nested({}, "a") == MISSING

    def test_empty_string_is_missing(self):
        assert nested({"dns_name": ""}, "dns_name") == MISSING

    def test_custom_default(self):
        assert nested({"a": 1}, "a", "b", default="") == ""


class TestIpRows:

    def test_row_layout(self, sample_records):
        rows = ip_rows(sample_records["ip-addresses"])

        assert len(rows[0]) == len(IP_COLUMNS)
        assert rows[0] == ["71", "10.0.0.1/24", MISSING, "Active", "Tenant A", "True", "gw.nyc.example.net"]
        assert rows[1] == ["72", "192.168.5.10/24", "VIP", "Reserved", MISSING, "False", MISSING]

    def test_search_on_address(self, sample_records):
        rows = ip_rows(sample_records["ip-addresses"], "192.168")
        assert [r[0] for r in rows] == ["72"]


class TestVlanRows:

    def test_search_name_or_vid(self, sample_records):
        vlans = sample_records["vlans"]
        assert [r[2] for r in vlan_rows(vlans, "voice")] == ["voice"]
        assert [r[2] for r in vlan_rows(vlans, "100")] == ["users"]

    def test_missing_site(self, sample_records):
        row = vlan_rows(sample_records["vlans"], "voice")[0]
        assert row[4:] == [MISSING, MISSING]


class TestDeviceRows:

    def test_from_cache(self, sample_records):
        devices = rebuild(ReferenceKind.DEVICE, sample_records["devices"])
        rows = device_rows(devices)

        assert len(rows) == 2
        assert len(rows[0]) == len(DEVICE_COLUMNS)
        assert rows[0] == ["edge-nyc-01", "FOC1234", "Tenant A", "NYC", "Acme"]
        assert rows[1][1:3] == [MISSING, MISSING]

    def test_search(self, sample_records):
        devices = rebuild(ReferenceKind.DEVICE, sample_records["devices"])
        assert [r[0] for r in device_rows(devices, "core")] == ["core-lon-01"]


class TestFormatTable:

    def test_empty(self):
        assert format_table(IP_COLUMNS, []) == "No rows.\n"

    def test_rows_and_count(self):
        text = format_table(["A", "B"], [["1", "2"], ["3", "4"]], width=4)
        lines = text.splitlines()
        assert lines[0] == "A    B"
        assert lines[2] == "1    2"
        assert text.endswith("2 row(s)")
