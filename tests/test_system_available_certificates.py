import copy
from urllib.parse import parse_qs, urlsplit

import pytest

from fortiprobe.metrics import ProbeError, TargetMetadata, render
from fortiprobe.system_available_certificates import probe_system_available_certificates

META = TargetMetadata(version_major=7, version_minor=0)


class FakeClient:
    def __init__(self):
        self._prepared = {}

    def prepare(self, url, payload):
        parts = urlsplit(url)
        self._prepared.setdefault(parts.path, []).append((parse_qs(parts.query), payload))

    def get(self, path, query):
        wanted = parse_qs(query)
        for params, payload in self._prepared.get(path, []):
            if all(wanted.get(key, [None])[0] == values[0] for key, values in params.items()):
                return copy.deepcopy(payload)
        raise AssertionError(f"no prepared response for {path!r} {query!r}")


class FailingClient:
    def get(self, path, query):
        raise ProbeError("connection refused")


_GLOBAL_CERTS = [
    ("Fortinet_CA_SSL", "local-ca", 1472285182, 1787904382, 0),
    ("Fortinet_CA_Untrusted", "local-ca", 1472285185, 1787904385, 0),
    ("Fortinet_Factory", "local-cer", 1468370862, 2147483647, 4),
    ("Fortinet_SSL", "local-cer", 1472285190, 1787904390, 0),
    ("Fortinet_SSL_DSA1024", "local-cer", 1510074420, 1825693620, 0),
    ("Fortinet_SSL_RSA2048", "local-cer", 1510074417, 1825693617, 0),
    ("Fortinet_Wifi", "local-cer", 1606176000, 1640476799, 1),
]


def _cert(name, cert_type, valid_from, valid_to, q_ref):
    return {
        "name": name,
        "source": "factory",
        "type": cert_type,
        "status": "valid",
        "valid_from": valid_from,
        "valid_to": valid_to,
        "q_ref": q_ref,
    }


GLOBAL_RESPONSE = {
    "http_method": "GET",
    "results": [_cert(*row) for row in _GLOBAL_CERTS],
    "vdom": "root",
    "status": "success",
}

VDOM_RESPONSE = [
    {
        "http_method": "GET",
        "results": [_cert("Fortinet_CA_SSL", "local-ca", 1472285182, 1787904382, 5)],
        "vdom": "root",
        "status": "success",
    }
]

_FAMILIES = [
    "fortigate_certificate_cmdb_references",
    "fortigate_certificate_info",
    "fortigate_certificate_valid_from_seconds",
    "fortigate_certificate_valid_to_seconds",
]


def _client():
    client = FakeClient()
    client.prepare(
        "api/v2/monitor/system/available-certificates?scope=global", GLOBAL_RESPONSE
    )
    client.prepare("api/v2/monitor/system/available-certificates?vdom=*", VDOM_RESPONSE)
    return client


def _rendered_lines():
    return render(probe_system_available_certificates(_client(), META)).splitlines()


def test_families_are_typed_gauges_in_name_order():
    type_lines = [line for line in _rendered_lines() if line.startswith("# TYPE")]
    assert type_lines == [f"# TYPE {name} gauge" for name in _FAMILIES]


def test_each_family_has_one_sample_per_certificate():
    lines = _rendered_lines()
    for name in _FAMILIES:
        samples = [line for line in lines if line.startswith(name + "{")]
        assert len(samples) == len(_GLOBAL_CERTS) + 1


@pytest.mark.parametrize(
    "line",
    [
        'fortigate_certificate_cmdb_references{name="Fortinet_CA_SSL",scope="global",source="factory",vdom="root"} 0',
        'fortigate_certificate_cmdb_references{name="Fortinet_CA_SSL",scope="vdom",source="factory",vdom="root"} 5',
        'fortigate_certificate_cmdb_references{name="Fortinet_Factory",scope="global",source="factory",vdom="root"} 4',
        'fortigate_certificate_info{name="Fortinet_CA_SSL",scope="vdom",source="factory",status="valid",type="local-ca",vdom="root"} 1',
        'fortigate_certificate_info{name="Fortinet_Wifi",scope="global",source="factory",status="valid",type="local-cer",vdom="root"} 1',
        'fortigate_certificate_valid_from_seconds{name="Fortinet_SSL",scope="global",source="factory",vdom="root"} 1.47228519e+09',
        'fortigate_certificate_valid_from_seconds{name="Fortinet_Wifi",scope="global",source="factory",vdom="root"} 1.606176e+09',
        'fortigate_certificate_valid_to_seconds{name="Fortinet_Factory",scope="global",source="factory",vdom="root"} 2.147483647e+09',
        'fortigate_certificate_valid_to_seconds{name="Fortinet_SSL_DSA1024",scope="global",source="factory",vdom="root"} 1.82569362e+09',
    ],
)
def test_pinned_samples(line):
    assert line in _rendered_lines()


def test_vdom_certificates_come_before_global_ones():
    metrics = probe_system_available_certificates(_client(), META)
    assert metrics[0].labels()["scope"] == "vdom"
    assert metrics[-1].labels()["scope"] == "global"
    assert len(metrics) == 4 * (len(_GLOBAL_CERTS) + 1)


def test_client_error_propagates():
    with pytest.raises(ProbeError):
        probe_system_available_certificates(FailingClient(), META)


def test_malformed_vdom_response_raises_probe_error():
    client = FakeClient()
    client.prepare(
        "api/v2/monitor/system/available-certificates?scope=global", GLOBAL_RESPONSE
    )
    client.prepare("api/v2/monitor/system/available-certificates?vdom=*", ["not-an-object"])
    with pytest.raises(ProbeError):
        probe_system_available_certificates(client, META)