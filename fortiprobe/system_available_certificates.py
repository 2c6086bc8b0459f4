"""Certificate validity and reference count probe."""

from __future__ import annotations

from typing import Any, Iterator

from fortiprobe.metrics import ApiClient, Desc, Metric, ProbeError, TargetMetadata, ValueType

_PATH = "api/v2/monitor/system/available-certificates"

_CERT_LABELS = ("name", "source", "scope", "vdom")

_CERT_INFO = Desc(
    "fortigate_certificate_info",
    "Info metric containing meta information about the certificate",
    ("name", "source", "scope", "vdom", "status", "type"),
)
_VALID_FROM = Desc(
    "fortigate_certificate_valid_from_seconds",
    "Unix timestamp from which this certificate is valid",
    _CERT_LABELS,
)
_VALID_TO = Desc(
    "fortigate_certificate_valid_to_seconds",
    "Unix timestamp till which this certificate is valid",
    _CERT_LABELS,
)
_CMDB_REFERENCES = Desc(
    "fortigate_certificate_cmdb_references",
    "Number of times the certificate is referenced",
    _CERT_LABELS,
)


def _entries(response: Any, scope: str) -> Iterator[tuple[str, str, dict[str, Any]]]:
    if not isinstance(response, dict):
        raise TypeError(f"expected an object, got {response!r}")
    vdom = str(response.get("vdom") or "")
    for entry in response.get("results") or []:
        if not isinstance(entry, dict):
            raise TypeError(f"expected a certificate object, got {entry!r}")
        yield scope, vdom, entry


def _certificate_metrics(scope: str, vdom: str, entry: dict[str, Any]) -> list[Metric]:
    name = str(entry.get("name") or "")
    source = str(entry.get("source") or "")
    status = str(entry.get("status") or "")
    cert_type = str(entry.get("type") or "")
    valid_from = float(entry.get("valid_from") or 0)
    valid_to = float(entry.get("valid_to") or 0)
    references = float(entry.get("q_ref") or 0)
    return [
        _CERT_INFO.metric(ValueType.GAUGE, 1, name, source, scope, vdom, status, cert_type),
        _VALID_FROM.metric(ValueType.GAUGE, valid_from, name, source, scope, vdom),
        _VALID_TO.metric(ValueType.GAUGE, valid_to, name, source, scope, vdom),
        _CMDB_REFERENCES.metric(ValueType.GAUGE, references, name, source, scope, vdom),
    ]


def probe_system_available_certificates(client: ApiClient, meta: TargetMetadata) -> list[Metric]:
    """Report certificates of every VDOM and of the global scope."""
    global_response = client.get(_PATH, "scope=global")
    vdom_responses = client.get(_PATH, "vdom=*")
    try:
        entries = [
            item for response in vdom_responses or [] for item in _entries(response, "vdom")
        ]
        entries.extend(_entries(global_response or {}, "global"))
        return [
            metric
            for scope, vdom, entry in entries
            for metric in _certificate_metrics(scope, vdom, entry)
        ]
    except (AttributeError, TypeError, ValueError) as exc:
        raise ProbeError(f"malformed certificates response: {exc}") from exc