"""Probes that turn FortiGate REST API responses into Prometheus metrics and render them as text."""

__version__ = "0.1.0"