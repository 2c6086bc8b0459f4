"""OSPF neighbor state probe."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator

from fortiprobe.metrics import ApiClient, Desc, Metric, ProbeError, TargetMetadata, ValueType

_NEIGHBOR_INFO = Desc(
    "fortigate_ospf_neighbor_info",
    "List all discovered OSPF neighbors, return state as value (1 - Down, 2 - Attempt, "
    "3 - Init, 4 - Two way, 5 - Exchange start, 6 - Exchange, 7 - Loading, 8 - Full)",
    ("vdom", "state", "priority", "router_id", "neighbor_ip"),
)

_STATES = {
    "Down": 1.0,
    "Attempt": 2.0,
    "Init": 3.0,
    "Two way": 4.0,
    "Exchange start": 5.0,
    "Exchange": 6.0,
    "Loading": 7.0,
    "Full": 8.0,
}


@dataclass(frozen=True)
class OSPFNeighbor:
    """One OSPF neighbor as reported by the device."""

    neighbor_ip: str
    router_id: str
    state: str
    priority: int


def ospf_state_to_number(state: str) -> float:
    """Map an OSPF state name to its number; unknown states count as Down."""
    return _STATES.get(state, 1.0)


def _neighbors(payload: Any) -> Iterator[tuple[str, OSPFNeighbor]]:
    for response in payload or []:
        vdom = str(response.get("vdom") or "")
        for entry in response.get("results") or []:
            yield vdom, OSPFNeighbor(
                neighbor_ip=str(entry.get("neighbor_ip") or ""),
                router_id=str(entry.get("router_id") or ""),
                state=str(entry.get("state") or ""),
                priority=int(entry.get("priority") or 0),
            )


def probe_ospf_neighbors(client: ApiClient, meta: TargetMetadata) -> list[Metric]:
    """Report every OSPF neighbor with its state number as value."""
    if meta.version_major < 7:
        # The endpoint does not exist before 7.0.0.
        return []
    payload = client.get("api/v2/monitor/router/ospf/neighbors", "vdom=*")
    try:
        neighbors = list(_neighbors(payload))
    except (AttributeError, TypeError, ValueError) as exc:
        raise ProbeError(f"malformed OSPF neighbors response: {exc}") from exc
    return [
        _NEIGHBOR_INFO.metric(
            ValueType.GAUGE,
            ospf_state_to_number(peer.state),
            vdom,
            peer.state,
            str(peer.priority),
            peer.router_id,
            peer.neighbor_ip,
        )
        for vdom, peer in neighbors
    ]