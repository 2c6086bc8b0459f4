"""HA cluster member statistics probe."""

from __future__ import annotations

from typing import Any

from fortiprobe.metrics import ApiClient, Desc, Metric, ProbeError, TargetMetadata, ValueType

_MEMBER_LABELS = ("vdom", "hostname")

_MEMBER_INFO = Desc(
    "fortigate_ha_member_info",
    "Info metric regarding cluster members",
    ("vdom", "hostname", "serial", "group"),
)
_SESSIONS = Desc(
    "fortigate_ha_member_sessions", "Sessions which are handled by this HA member", _MEMBER_LABELS
)
_PACKETS = Desc(
    "fortigate_ha_member_packets_total",
    "Packets which are handled by this HA member",
    _MEMBER_LABELS,
)
_VIRUS_EVENTS = Desc(
    "fortigate_ha_member_virus_events_total",
    "Virus events which are detected by this HA member",
    _MEMBER_LABELS,
)
_NETWORK_USAGE = Desc(
    "fortigate_ha_member_network_usage_ratio", "Network usage by HA member", _MEMBER_LABELS
)
_BYTES = Desc("fortigate_ha_member_bytes_total", "Bytes transferred by HA member", _MEMBER_LABELS)
_IPS_EVENTS = Desc(
    "fortigate_ha_member_ips_events_total", "IPS events processed by HA member", _MEMBER_LABELS
)
_CPU_USAGE = Desc("fortigate_ha_member_cpu_usage_ratio", "CPU usage by HA member", _MEMBER_LABELS)
_MEMORY_USAGE = Desc(
    "fortigate_ha_member_memory_usage_ratio", "Memory usage by HA member", _MEMBER_LABELS
)


def _group_name(config: Any) -> str:
    if not isinstance(config, dict):
        raise TypeError(f"expected an object, got {config!r}")
    results = config.get("results")
    if results is None:
        return ""
    if not isinstance(results, dict):
        raise TypeError(f"expected HA config results to be an object, got {results!r}")
    return str(results.get("group-name") or "")


def _member_metrics(vdom: str, group: str, entry: dict[str, Any]) -> list[Metric]:
    hostname = str(entry.get("hostname") or "")
    serial = str(entry.get("serial_no") or "")

    def number(key: str) -> float:
        return float(entry.get(key) or 0)

    return [
        _MEMBER_INFO.metric(ValueType.GAUGE, 1, vdom, hostname, serial, group),
        _SESSIONS.metric(ValueType.GAUGE, number("sessions"), vdom, hostname),
        _PACKETS.metric(ValueType.COUNTER, number("tpacket"), vdom, hostname),
        _VIRUS_EVENTS.metric(ValueType.COUNTER, number("vir_usage"), vdom, hostname),
        _NETWORK_USAGE.metric(ValueType.GAUGE, number("net_usage") / 100, vdom, hostname),
        _BYTES.metric(ValueType.COUNTER, number("tbyte"), vdom, hostname),
        _IPS_EVENTS.metric(ValueType.COUNTER, number("intr_usage"), vdom, hostname),
        _CPU_USAGE.metric(ValueType.GAUGE, number("cpu_usage") / 100, vdom, hostname),
        _MEMORY_USAGE.metric(ValueType.GAUGE, number("mem_usage") / 100, vdom, hostname),
    ]


def probe_system_ha_statistics(client: ApiClient, meta: TargetMetadata) -> list[Metric]:
    """Report load and traffic figures of every HA cluster member."""
    statistics = client.get("api/v2/monitor/system/ha-statistics", "")
    config = client.get("api/v2/cmdb/system/ha", "")
    try:
        if not isinstance(statistics, dict):
            raise TypeError(f"expected an object, got {statistics!r}")
        vdom = str(statistics.get("vdom") or "")
        group = _group_name(config)
        return [
            metric
            for entry in statistics.get("results") or []
            for metric in _member_metrics(vdom, group, entry)
        ]
    except (AttributeError, TypeError, ValueError) as exc:
        raise ProbeError(f"malformed HA statistics response: {exc}") from exc