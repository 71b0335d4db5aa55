[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "minnet"
version = "0.1.0"
description = "Small networking toolkit: wire-format parsing and serialization of Ethernet, ARP and IPv4, plus socket and file-descriptor wrappers"
requires-python = ">=3.10"
dependencies = []
keywords = ["networking", "ethernet", "arp", "ipv4", "checksum", "sockets", "parser"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
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
packages = ["minnet"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
strict = true
