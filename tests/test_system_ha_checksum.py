from textwrap import dedent

import pytest

from fortiprobe.metrics import ProbeError, TargetMetadata, render
from fortiprobe.system_ha_checksum import probe_system_ha_checksum

CHECKSUMS = {
    "http_method": "GET",
    "status": "success",
    "results": [
        {"is_manage_master": 1, "is_root_master": 1, "serial_no": "SERIAL111111111"},
        {"is_manage_master": 0, "is_root_master": 0, "serial_no": "SERIAL222222222"},
    ],
}


class FakeClient:
    def __init__(self, payload):
        self.payload = payload
        self.calls = []

    def get(self, path, query):
        self.calls.append((path, query))
        assert path == "api/v2/monitor/system/ha-checksums"
        return self.payload


class FailingClient:
    def get(self, path, query):
        raise ProbeError("denied")


META = TargetMetadata(version_major=7, version_minor=0)


def test_ha_checksum():
    client = FakeClient(CHECKSUMS)
    expected = dedent(
        """\
        # HELP fortigate_ha_member_has_role Master/Slave information
        # TYPE fortigate_ha_member_has_role gauge
        fortigate_ha_member_has_role{role="manage_master",serial="SERIAL111111111"} 1
        fortigate_ha_member_has_role{role="manage_master",serial="SERIAL222222222"} 0
        fortigate_ha_member_has_role{role="root_master",serial="SERIAL111111111"} 1
        fortigate_ha_member_has_role{role="root_master",serial="SERIAL222222222"} 0
        """
    )
    assert render(probe_system_ha_checksum(client, META)) == expected
    assert client.calls == [("api/v2/monitor/system/ha-checksums", "scope=global")]


def test_emission_order_per_member():
    metrics = probe_system_ha_checksum(FakeClient(CHECKSUMS), META)
    assert [m.labels()["role"] for m in metrics] == [
        "manage_master",
        "root_master",
        "manage_master",
        "root_master",
    ]


def test_no_results():
    assert probe_system_ha_checksum(FakeClient({"results": []}), META) == []


def test_client_error_propagates():
    with pytest.raises(ProbeError):
        probe_system_ha_checksum(FailingClient(), META)


def test_malformed_response():
    with pytest.raises(ProbeError):
        probe_system_ha_checksum(FakeClient({"results": [{"is_root_master": "yes"}]}), META)