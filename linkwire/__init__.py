"""Data link layer channels, MAC addresses and network interface listing."""

__version__ = "0.1.0"

__all__ = ["backend", "cli", "datalink", "dummy", "linux", "macaddr"]