"""Managed switch, switch port and port counter probe."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from fortiprobe.metrics import ApiClient, Desc, Metric, ProbeError, TargetMetadata, ValueType

_PATH = "api/v2/monitor/switch-controller/managed-switch"
# Only the first 1000 switches are fetched; the endpoint is not paginated here.
_QUERY = "vdom=*&start=0&poe=true&port_stats=true&transceiver=true&count=1000"

_PORT_LABELS = ("vdom", "switch_name", "port")

_SWITCH_INFO = Desc(
    "fortigate_managed_switch_info",
    "Infos about a managed switch",
    ("vdom", "switch_name", "os_version", "serial", "state", "status"),
)
_MAX_POE_BUDGET = Desc(
    "fortigate_managed_switch_max_poe_budget_watt",
    "Max poe budget watt",
    ("vdom", "switch_name"),
)
_PORT_INFO = Desc(
    "fortigate_managed_switch_port_info",
    "Infos about a switch port",
    ("vdom", "switch_name", "port", "vlan", "duplex", "status", "poe_status", "poe_capable"),
)
_PORT_STATUS = Desc(
    "fortigate_managed_switch_port_status", "Port status up=1 down=0", _PORT_LABELS
)
_PORT_POWER = Desc("fortigate_managed_switch_port_power_watt", "Port power in watt", _PORT_LABELS)
_PORT_POWER_STATUS = Desc(
    "fortigate_managed_switch_port_power_status", "Port power status", _PORT_LABELS
)


def _counter(name: str, help_text: str) -> Desc:
    return Desc(f"fortigate_managed_switch_{name}", help_text, _PORT_LABELS)


# Port counters in the order they are reported, keyed by their JSON field.
_PORT_STAT_DESCS: tuple[tuple[str, Desc], ...] = (
    ("rx-bytes", _counter("rx_bytes_total", "Total number of received bytes")),
    ("tx-bytes", _counter("tx_bytes_total", "Total number of transmitted bytes")),
    ("rx-packets", _counter("rx_packets_total", "Total number of received packets")),
    ("tx-packets", _counter("tx_packets_total", "Total number of transmitted packets")),
    ("rx-ucast", _counter("rx_ucast_packets_total", "Total number of received unicast packets")),
    (
        "tx-ucast",
        _counter("tx_ucast_packets_total", "Total number of transmitted unicast packets"),
    ),
    (
        "rx-mcast",
        _counter("rx_mcast_packets_total", "Total number of received multicast packets"),
    ),
    (
        "tx-mcast",
        _counter("tx_mcast_packets_total", "Total number of transmitted multicast packets"),
    ),
    (
        "rx-bcast",
        _counter("rx_bcast_packets_total", "Total number of received broadcast packets"),
    ),
    (
        "tx-bcast",
        _counter("tx_bcast_packets_total", "Total number of transmitted broadcast packets"),
    ),
    ("rx-errors", _counter("rx_errors_total", "Total number of received errors")),
    ("tx-errors", _counter("tx_errors_total", "Total number of transmitted errors")),
    ("rx-drops", _counter("rx_drops_total", "Total number of received drops")),
    ("tx-drops", _counter("tx_drops_total", "Total number of transmitted drops")),
    ("rx-oversize", _counter("rx_oversize_total", "Total number of received oversize")),
    ("tx-oversize", _counter("tx_oversize_total", "Total number of transmitted oversize")),
    ("undersize", _counter("under_size_total", "Total number of under size")),
    ("fragments", _counter("fragments_total", "Total number of fragments")),
    ("jabbers", _counter("jabbers_total", "Total number of jabbers")),
    ("collisions", _counter("collisions_total", "Total number of collisions")),
    ("crc-alignments", _counter("crc_alignments_total", "Total number of crc alignments")),
    ("l3packets", _counter("l3_packets_total", "Total number of l3 packets")),
)


def _str(data: dict[str, Any], key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise TypeError(f"field {key!r} must be a string, got {value!r}")
    return value


def _float(data: dict[str, Any], key: str) -> float:
    value = data.get(key)
    if value is None:
        return 0.0
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"field {key!r} must be a number, got {value!r}")
    return float(value)


def _bool(data: dict[str, Any], key: str) -> bool:
    value = data.get(key)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise TypeError(f"field {key!r} must be a boolean, got {value!r}")
    return value


@dataclass(frozen=True)
class SwitchPort:
    """One physical port of a managed switch."""

    interface: str = ""
    status: str = ""
    duplex: str = ""
    speed: float = 0.0
    port_power: float = 0.0
    power_status: float = 0.0
    vlan: str = ""
    poe_capable: bool = False
    poe_status: str = ""

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> SwitchPort:
        """Build a port from its JSON object; missing fields take zero values."""
        return cls(
            interface=_str(data, "interface"),
            status=_str(data, "status"),
            duplex=_str(data, "duplex"),
            speed=_float(data, "speed"),
            port_power=_float(data, "port_power"),
            power_status=_float(data, "power_status"),
            vlan=_str(data, "vlan"),
            poe_capable=_bool(data, "poe_capable"),
            poe_status=_str(data, "poe_status"),
        )


@dataclass(frozen=True)
class ManagedSwitch:
    """A switch managed by the device, with its ports and port counters."""

    name: str = ""
    vdom: str = ""
    serial: str = ""
    os_version: str = ""
    state: str = ""
    status: str = ""
    connecting_from: str = ""
    join_time_raw: float = 0.0
    max_poe_budget: float = 0.0
    ports: tuple[SwitchPort, ...] = ()
    port_stats: dict[str, dict[str, float]] = field(default_factory=dict)

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> ManagedSwitch:
        """Build a switch from its JSON object; missing fields take zero values."""
        ports = tuple(SwitchPort.from_json(port) for port in data.get("ports") or [])
        port_stats = {
            str(port_name): {key: _float(stats, key) for key, _ in _PORT_STAT_DESCS}
            for port_name, stats in (data.get("port_stats") or {}).items()
        }
        return cls(
            name=_str(data, "name"),
            vdom=_str(data, "vdom"),
            serial=_str(data, "serial"),
            os_version=_str(data, "os_version"),
            state=_str(data, "state"),
            status=_str(data, "status"),
            connecting_from=_str(data, "connecting_from"),
            join_time_raw=_float(data, "join_time_raw"),
            max_poe_budget=_float(data, "max_poe_budget"),
            ports=ports,
            port_stats=port_stats,
        )


def _switches(payload: Any) -> list[ManagedSwitch]:
    return [
        ManagedSwitch.from_json(result)
        for response in payload or []
        for result in response.get("results") or []
    ]


def _switch_metrics(switch: ManagedSwitch) -> list[Metric]:
    vdom, name = switch.vdom, switch.name
    metrics = [
        _SWITCH_INFO.metric(
            ValueType.COUNTER,
            1,
            vdom,
            name,
            switch.os_version,
            switch.serial,
            switch.state,
            switch.status,
        ),
        _MAX_POE_BUDGET.metric(ValueType.COUNTER, switch.max_poe_budget, vdom, name),
    ]
    for port in switch.ports:
        metrics.append(
            _PORT_STATUS.metric(
                ValueType.GAUGE, 1.0 if port.status == "up" else 0.0, vdom, name, port.interface
            )
        )
        metrics.append(
            _PORT_INFO.metric(
                ValueType.GAUGE,
                1,
                vdom,
                name,
                port.interface,
                port.vlan,
                port.duplex,
                port.status,
                port.poe_status,
                "true" if port.poe_capable else "false",
            )
        )
        metrics.append(
            _PORT_POWER.metric(ValueType.GAUGE, port.port_power, vdom, name, port.interface)
        )
        metrics.append(
            _PORT_POWER_STATUS.metric(
                ValueType.GAUGE, port.power_status, vdom, name, port.interface
            )
        )
    for port_name, stats in switch.port_stats.items():
        metrics.extend(
            desc.metric(ValueType.COUNTER, stats[key], vdom, name, port_name)
            for key, desc in _PORT_STAT_DESCS
        )
    return metrics


def probe_managed_switch(client: ApiClient, meta: TargetMetadata) -> list[Metric]:
    """Report managed switches, their ports, PoE figures and port counters."""
    payload = client.get(_PATH, _QUERY)
    try:
        switches = _switches(payload)
    except (AttributeError, TypeError, ValueError) as exc:
        raise ProbeError(f"malformed managed switch response: {exc}") from exc
    return [metric for switch in switches for metric in _switch_metrics(switch)]