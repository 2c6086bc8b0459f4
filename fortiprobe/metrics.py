"""Constant metrics, the client contract used by probes, and text exposition."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Iterable, Protocol

_METRIC_NAME = re.compile(r"^[a-zA-Z_:][a-zA-Z0-9_:]*$")
_LABEL_NAME = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")


class ValueType(Enum):
    """Kind of a sample as announced in the TYPE line."""

    COUNTER = "counter"
    GAUGE = "gauge"
    UNTYPED = "untyped"


class ProbeError(Exception):
    """Raised when a probe cannot fetch or decode what it needs."""


@dataclass(frozen=True)
class TargetMetadata:
    """Facts about the probed device that probes may depend on."""

    version_major: int
    version_minor: int


class ApiClient(Protocol):
    """Anything that can fetch and decode a JSON document from the device API."""

    def get(self, path: str, query: str) -> Any:
        """Return the decoded JSON body of ``path`` requested with ``query``.

        Implementations raise :class:`ProbeError` when the request fails.
        """


@dataclass(frozen=True)
class Desc:
    """Name, help text and label names shared by metrics of one family."""

    name: str
    help: str
    label_names: tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "label_names", tuple(self.label_names))
        if not _METRIC_NAME.match(self.name):
            raise ValueError(f"invalid metric name {self.name!r}")
        for label in self.label_names:
            if not _LABEL_NAME.match(label) or label.startswith("__"):
                raise ValueError(f"invalid label name {label!r}")
        if len(set(self.label_names)) != len(self.label_names):
            raise ValueError(f"duplicate label names in {self.name!r}")

    def metric(self, value_type: ValueType, value: float, *args: str) -> Metric:
        """Build a constant metric with one label value per label name."""
        if len(args) != len(self.label_names):
            raise ValueError(
                f"{self.name}: expected {len(self.label_names)} label values, got {len(args)}"
            )
        for arg in args:
            if not isinstance(arg, str):
                raise TypeError(f"{self.name}: label values must be str, got {arg!r}")
        return Metric(self, value_type, float(value), tuple(args))


@dataclass(frozen=True)
class Metric:
    """A single sample: a description, a type, a value and label values."""

    desc: Desc
    value_type: ValueType
    value: float
    label_values: tuple[str, ...]

    def labels(self) -> dict[str, str]:
        """Return the labels of this sample as a mapping."""
        return dict(zip(self.desc.label_names, self.label_values))


def _format_value(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    if value == 0:
        return "-0" if math.copysign(1.0, value) < 0 else "0"
    sign = "-" if value < 0 else ""
    _, digit_tuple, exponent = Decimal(repr(abs(value))).as_tuple()
    digits = "".join(map(str, digit_tuple))
    stripped = digits.rstrip("0")
    exponent += len(digits) - len(stripped)
    digits = stripped
    point = len(digits) + exponent
    exp10 = point - 1
    if exp10 < -4 or exp10 >= 6:
        mantissa = digits[0] + ("." + digits[1:] if len(digits) > 1 else "")
        return f"{sign}{mantissa}e{'+' if exp10 >= 0 else '-'}{abs(exp10):02d}"
    if point <= 0:
        return f"{sign}0.{'0' * -point}{digits}"
    if point >= len(digits):
        return f"{sign}{digits}{'0' * (point - len(digits))}"
    return f"{sign}{digits[:point]}.{digits[point:]}"


def _escape_label(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")


def _escape_help(text: str) -> str:
    return text.replace("\\", "\\\\").replace("\n", "\\n")


def render(metrics: Iterable[Metric]) -> str:
    """Render metrics in the text exposition format, sorted by name and labels."""
    families: dict[str, list[Metric]] = {}
    for metric in metrics:
        families.setdefault(metric.desc.name, []).append(metric)

    lines: list[str] = []
    for name in sorted(families):
        members = families[name]
        first = members[0]
        samples: dict[tuple[tuple[str, str], ...], Metric] = {}
        for metric in members:
            if metric.desc.help != first.desc.help or metric.value_type is not first.value_type:
                raise ValueError(f"inconsistent help or type for {name!r}")
            key = tuple(sorted(metric.labels().items()))
            if key in samples:
                raise ValueError(f"duplicate sample for {name!r} with labels {dict(key)}")
            samples[key] = metric
        lines.append(f"# HELP {name} {_escape_help(first.desc.help)}")
        lines.append(f"# TYPE {name} {first.value_type.value}")
        for key in sorted(samples):
            label_text = ",".join(f'{k}="{_escape_label(v)}"' for k, v in key)
            series = f"{name}{{{label_text}}}" if label_text else name
            lines.append(f"{series} {_format_value(samples[key].value)}")
    return "".join(line + "\n" for line in lines)