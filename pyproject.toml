[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "linkwire"
version = "0.1.0"
description = "Data link layer channels, MAC addresses and network interface listing"
requires-python = ">=3.10"
dependencies = [
    "psutil",
]
keywords = ["networking", "ethernet", "datalink", "mac-address", "af-packet", "raw-socket"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
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
test = [
    "pytest",
]

[project.scripts]
linkwire-interfaces = "linkwire.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["linkwire"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
