"""Running the selected probes against one device and gathering their metrics."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Callable, Iterable, Iterator, Sequence
from urllib.parse import urlsplit

from fortiprobe.managed_switch import probe_managed_switch
from fortiprobe.metrics import ApiClient, Metric, ProbeError, TargetMetadata
from fortiprobe.ospf_neighbors import probe_ospf_neighbors
from fortiprobe.system_available_certificates import probe_system_available_certificates
from fortiprobe.system_fortimanager import probe_system_fortimanager_status
from fortiprobe.system_ha_checksum import probe_system_ha_checksum
from fortiprobe.system_ha_statistics import probe_system_ha_statistics

log = logging.getLogger(__name__)

ProbeFunc = Callable[[ApiClient, TargetMetadata], "list[Metric]"]

PROBES: tuple[tuple[str, ProbeFunc], ...] = (
    ("System/AvailableCertificates", probe_system_available_certificates),
    ("System/Fortimanager/Status", probe_system_fortimanager_status),
    ("System/HAStatistics", probe_system_ha_statistics),
    ("System/HAChecksum", probe_system_ha_checksum),
    ("Switch/ManagedSwitch", probe_managed_switch),
    ("OSPF/Neighbors", probe_ospf_neighbors),
)

_VERSION = re.compile(r"^v?(\d+)\.(\d+)")


def base_url(target: str) -> str:
    """Reduce a target URL to its scheme and host; only http and https are accepted."""
    parts = urlsplit(target)
    if parts.scheme not in ("http", "https"):
        raise ValueError(f"Unsupported scheme {parts.scheme!r}")
    host = parts.netloc.rpartition("@")[2]
    return f"{parts.scheme}://{host}"


def is_wanted(name: str, include: Iterable[str] = (), exclude: Iterable[str] = ()) -> bool:
    """Decide by name prefix whether a probe runs; exclusion wins over inclusion."""
    include = list(include)
    wanted = not include or any(name.startswith(prefix) for prefix in include)
    if any(name.startswith(prefix) for prefix in exclude):
        return False
    return wanted


def check_connectivity(client: ApiClient) -> TargetMetadata:
    """Query the system status and return the device's OS version.

    Raises :class:`ProbeError` when the device is unreachable, reports a
    status other than success, or reports a version that cannot be parsed.
    """
    status = client.get("api/v2/monitor/system/status", "")
    if not isinstance(status, dict):
        raise ProbeError(f"API connectivity test returned {status!r}")
    if status.get("status") != "success":
        raise ProbeError(f"API connectivity test returned status: {status.get('status')}")
    version = str(status.get("version") or "")
    match = _VERSION.match(version)
    if match is None:
        raise ProbeError(f"Failed to parse OS version: {version!r}")
    return TargetMetadata(int(match.group(1)), int(match.group(2)))


@dataclass
class ProbeCollector:
    """Runs probes in order and keeps every metric they produce."""

    probes: Sequence[tuple[str, ProbeFunc]] = PROBES
    _metrics: list[Metric] = field(default_factory=list, init=False, repr=False)

    def run(
        self,
        client: ApiClient,
        meta: TargetMetadata,
        include: Iterable[str] = (),
        exclude: Iterable[str] = (),
    ) -> bool:
        """Run every wanted probe; return False if any of them failed."""
        include, exclude = list(include), list(exclude)
        success = True
        for name, probe in self.probes:
            if not is_wanted(name, include, exclude):
                continue
            try:
                self._metrics.extend(probe(client, meta))
            except ProbeError as exc:
                log.error("Error: probe %s failed: %s", name, exc)
                success = False
        return success

    def collect(self) -> Iterator[Metric]:
        """Yield the metrics gathered so far."""
        yield from self._metrics