"""Inspect hosts, services, users, processes, open files, log lines and network packets."""

__version__ = "0.1.0"