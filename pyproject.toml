[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "fortiprobe"
version = "0.1.0"
description = "Probes that turn FortiGate REST API responses into Prometheus metrics"
requires-python = ">=3.10"
dependencies = []
keywords = ["fortigate", "prometheus", "metrics", "monitoring", "exposition"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Networking :: Monitoring",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["fortiprobe"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
