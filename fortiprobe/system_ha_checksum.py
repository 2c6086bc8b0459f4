"""HA cluster member role probe."""

from __future__ import annotations

from fortiprobe.metrics import ApiClient, Desc, Metric, ProbeError, TargetMetadata, ValueType

_HAS_ROLE = Desc(
    "fortigate_ha_member_has_role",
    "Master/Slave information",
    ("role", "serial"),
)


def probe_system_ha_checksum(client: ApiClient, meta: TargetMetadata) -> list[Metric]:
    """Report whether each HA member is manage master and root master."""
    payload = client.get("api/v2/monitor/system/ha-checksums", "scope=global")
    try:
        members = [
            (
                str(entry.get("serial_no") or ""),
                float(int(entry.get("is_manage_master") or 0)),
                float(int(entry.get("is_root_master") or 0)),
            )
            for entry in (payload or {}).get("results") or []
        ]
    except (AttributeError, TypeError, ValueError) as exc:
        raise ProbeError(f"malformed HA checksum response: {exc}") from exc

    metrics: list[Metric] = []
    for serial, manage_master, root_master in members:
        metrics.append(_HAS_ROLE.metric(ValueType.GAUGE, manage_master, "manage_master", serial))
        metrics.append(_HAS_ROLE.metric(ValueType.GAUGE, root_master, "root_master", serial))
    return metrics