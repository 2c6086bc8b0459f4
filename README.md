# fortiprobe

fortiprobe turns the JSON replies of a FortiGate REST API into Prometheus metrics.
It can also render those metrics in the Prometheus text exposition format.

## Probes

Each probe is a function that takes an `ApiClient` and a `TargetMetadata` and
returns a list of `Metric` objects. `ProbeCollector` runs the probes in the order
shown here:

| Name                           | Function                                                             | API path(s)                                                         |
|--------------------------------|----------------------------------------------------------------------|---------------------------------------------------------------------|
| `System/AvailableCertificates` | `fortiprobe.system_available_certificates.probe_system_available_certificates` | `api/v2/monitor/system/available-certificates`           |
| `System/Fortimanager/Status`   | `fortiprobe.system_fortimanager.probe_system_fortimanager_status`    | `api/v2/monitor/system/fortimanager/status`                         |
| `System/HAStatistics`          | `fortiprobe.system_ha_statistics.probe_system_ha_statistics`         | `api/v2/monitor/system/ha-statistics`, `api/v2/cmdb/system/ha`      |
| `System/HAChecksum`            | `fortiprobe.system_ha_checksum.probe_system_ha_checksum`             | `api/v2/monitor/system/ha-checksums`                                |
| `Switch/ManagedSwitch`         | `fortiprobe.managed_switch.probe_managed_switch`                     | `api/v2/monitor/switch-controller/managed-switch`                   |
| `OSPF/Neighbors`               | `fortiprobe.ospf_neighbors.probe_ospf_neighbors`                     | `api/v2/monitor/router/ospf/neighbors`                              |

Notes on individual probes:

- `probe_ospf_neighbors` returns no metrics when the device runs an OS older than
  7.0, because the endpoint does not exist there. The metric value is the neighbor
  state number from `ospf_state_to_number`: Down=1 through Full=8, and any unknown
  state counts as 1.
- `probe_system_fortimanager_status` emits one-hot series for every
  `ConnectionStatus` value (`down`, `handshake`, `up`) and for every
  `RegistrationStatus` value (`unknown`, `inprogress`, `registered`,
  `unregistered`).
- `probe_managed_switch` fetches at most 1000 switches. `ManagedSwitch.from_json`
  and `SwitchPort.from_json` parse the reply. Missing fields become zero values,
  and fields of the wrong JSON type raise an error.
- `probe_system_ha_statistics` divides the CPU, memory and network usage figures by
  100 to report them as ratios. If the HA configuration cannot be read, the `group`
  label is left empty.

A probe raises `ProbeError` when a reply does not have the expected shape. It does
the same when the client raises `ProbeError`.

## Supplying a client

The package does not perform HTTP requests itself. You provide an object that
satisfies `fortiprobe.metrics.ApiClient`, meaning it has a single method
`get(path, query)`. The method returns the decoded JSON body and raises
`ProbeError` on failure. Here is a minimal client that uses the standard library:

```python
import json
import urllib.error
import urllib.request

from fortiprobe.metrics import ProbeError


class UrllibClient:
    def __init__(self, base, api_key):
        self.base = base
        self.api_key = api_key

    def get(self, path, query):
        url = f"{self.base}/{path}" + (f"?{query}" if query else "")
        request = urllib.request.Request(
            url, headers={"Authorization": f"Bearer {self.api_key}"}
        )
        try:
            with urllib.request.urlopen(request) as reply:
                return json.load(reply)
        except (urllib.error.URLError, ValueError) as exc:
            raise ProbeError(str(exc)) from exc
```

## Usage

```python
from fortiprobe.metrics import render
from fortiprobe.probe import ProbeCollector, base_url, check_connectivity

client = UrllibClient(base_url("https://fortigate.example.com/some/path"), api_key="placeholder")
meta = check_connectivity(client)

collector = ProbeCollector()
ok = collector.run(client, meta, include=["System/"], exclude=["System/HAStatistics"])
print(render(collector.collect()))
```

- `check_connectivity(client)` queries `api/v2/monitor/system/status` and returns
  a `TargetMetadata` holding the major and minor OS version. It raises
  `ProbeError` in three cases: the call fails, the status is not `success`, or the
  version string (for example `v7.0.1`) cannot be parsed.
- `base_url(target)` reduces a URL to its scheme and host, dropping any user
  information. It raises `ValueError` for any scheme other than `http` or `https`.

### Choosing probes

`include` and `exclude` are lists of name prefixes, and `is_wanted(name, include,
exclude)` applies them:

- If `include` is empty, every probe runs. Otherwise a probe runs only if its name
  starts with one of the prefixes in `include`.
- A probe whose name starts with any prefix in `exclude` is skipped. Exclusion
  takes precedence over inclusion.

### Result of a run

`ProbeCollector.run` returns `False` if any selected probe raised `ProbeError`, and
the failure is logged. Metrics from the probes that succeeded are still kept.
`collect()` yields every metric gathered so far, including those from earlier runs
on the same collector. To run a different set of probes, pass `probes=` with a
sequence of `(name, function)` pairs.

## Metrics and rendering

`fortiprobe.metrics` contains the following building blocks:

- `Desc(name, help, label_names)` validates the metric and label names.
- `Desc.metric(value_type, value, *label_values)` builds a `Metric`. It requires
  exactly one string per label name.
- `Metric.labels()` returns the labels as a dict.
- `ValueType` is one of `COUNTER`, `GAUGE` or `UNTYPED`.
- `render(metrics)` writes `# HELP` and `# TYPE` lines followed by the samples.
  Families are sorted by name and samples are sorted by labels. It raises
  `ValueError` if a family mixes help texts or types, or if it contains two
  samples with identical labels.

## What this package does not do

- It has no HTTP client for the device API. You must supply your own `ApiClient`.
- It provides no HTTP server or `/metrics` endpoint, and no command-line program.
  `render` returns text for you to serve however you like.
- It does not read any configuration file of targets, tokens or probe lists.
  Targets, credentials and include/exclude prefixes are passed in by the caller.
- It covers only the six probes listed above.

## Running the tests

```
pip install -e .[test]
pytest
```