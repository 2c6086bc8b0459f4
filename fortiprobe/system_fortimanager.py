"""FortiManager connection and registration status probe."""

from __future__ import annotations

from enum import IntEnum

from fortiprobe.metrics import ApiClient, Desc, Metric, ProbeError, TargetMetadata, ValueType

_CONNECTION = Desc(
    "fortigate_fortimanager_connection_status",
    "Fortimanager status ID",
    ("vdom", "mode", "status"),
)
_REGISTRATION = Desc(
    "fortigate_fortimanager_registration_status",
    "Fortimanager registration status ID",
    ("vdom", "mode", "status"),
)


class ConnectionStatus(IntEnum):
    """State of the management tunnel, by the ID the device reports."""

    DOWN = 0
    HANDSHAKE = 1
    UP = 2

    @property
    def label(self) -> str:
        return self.name.lower().replace("_", "")


class RegistrationStatus(IntEnum):
    """Registration of the device on the manager, by the ID the device reports."""

    UNKNOWN = 0
    IN_PROGRESS = 1
    REGISTERED = 2
    UNREGISTERED = 3

    @property
    def label(self) -> str:
        return self.name.lower().replace("_", "")


def probe_system_fortimanager_status(client: ApiClient, meta: TargetMetadata) -> list[Metric]:
    """Report one-hot connection and registration status per VDOM."""
    payload = client.get("api/v2/monitor/system/fortimanager/status", "vdom=*")
    try:
        entries = []
        for response in payload or []:
            results = response.get("results") or {}
            entries.append(
                (
                    str(response.get("vdom") or ""),
                    str(results.get("mode") or ""),
                    int(results.get("fortimanager_status_id") or 0),
                    int(results.get("fortimanager_registration_status_id") or 0),
                )
            )
    except (AttributeError, TypeError, ValueError) as exc:
        raise ProbeError(f"malformed FortiManager status response: {exc}") from exc

    metrics: list[Metric] = []
    for vdom, mode, status_id, registration_id in entries:
        metrics.extend(
            _CONNECTION.metric(ValueType.GAUGE, float(status == status_id), vdom, mode, status.label)
            for status in ConnectionStatus
        )
        metrics.extend(
            _REGISTRATION.metric(
                ValueType.GAUGE, float(status == registration_id), vdom, mode, status.label
            )
            for status in RegistrationStatus
        )
    return metrics