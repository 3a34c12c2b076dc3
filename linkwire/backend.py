"""The default data link backend for this machine."""

from __future__ import annotations

from linkwire import linux
from linkwire.datalink import Config, EthernetChannel, NetworkInterface


def channel(
    interface: NetworkInterface, config: Config | None = None
) -> EthernetChannel:
    """Open a data link channel on ``interface``.

    The configuration is a hint: options that do not apply to the backend
    are ignored. Raises OSError when the channel cannot be opened.
    """
    if config is None:
        config = Config()
    return linux.channel(interface, linux.LinuxConfig.from_config(config))


def interfaces() -> list[NetworkInterface]:
    """List the network interfaces available on this machine."""
    return linux.interfaces()