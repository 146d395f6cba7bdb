[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "sdnagent"
version = "0.1.0"
description = "Traffic control qdisc handling, OpenFlow flow sets, conntrack zones, route lookup and guest network descriptions for an SDN host agent"
requires-python = ">=3.10"
dependencies = []
keywords = ["sdn", "openvswitch", "openflow", "tc", "qdisc", "networking", "conntrack"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Networking",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["sdnagent"]

[tool.pytest.ini_options]
addopts = "-ra"
