[build-system]
requires = ["setuptools>=61"]
build-backend = "setuptools.build_meta"

[project]
name = "sysprobe"
version = "0.1.0"
description = "Read hosts, services, users, processes, open files, log lines and network packets as Python objects"
requires-python = ">=3.10"
dependencies = []
keywords = ["monitoring", "ps", "lsof", "hosts", "services", "packets", "logs", "dns", "http", "tls"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: System Administrators",
    "Intended Audience :: Developers",
    "Operating System :: POSIX :: Linux",
    "Operating System :: MacOS",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Monitoring",
]

[project.optional-dependencies]
test = ["pytest", "pytest-asyncio"]

[project.scripts]
sysprobe = "sysprobe.cli:main"

[tool.setuptools.packages.find]
include = ["sysprobe*"]

[tool.pytest.ini_options]
addopts = "-ra"
