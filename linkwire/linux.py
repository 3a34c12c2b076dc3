"""Data link channels over Linux ``AF_PACKET`` sockets, and interface listing."""

from __future__ import annotations

import errno
import ipaddress
import select
import socket
import struct
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

import psutil

from linkwire.datalink import (
    IFF_BROADCAST,
    IFF_DORMANT,
    IFF_LOOPBACK,
    IFF_LOWER_UP,
    IFF_MULTICAST,
    IFF_POINTOPOINT,
    IFF_RUNNING,
    IFF_UP,
    ChannelType,
    Config,
    DataLinkReceiver,
    DataLinkSender,
    EthernetChannel,
    FanoutOption,
    FanoutType,
    IpInterface,
    Layer2,
    Layer3,
    NetworkInterface,
)
from linkwire.macaddr import MacAddr, ParseMacAddrError

SOL_PACKET = 263
PACKET_ADD_MEMBERSHIP = 1
PACKET_MR_PROMISC = 1
PACKET_FANOUT = 18
PACKET_FANOUT_HASH = 0
PACKET_FANOUT_LB = 1
PACKET_FANOUT_CPU = 2
PACKET_FANOUT_ROLLOVER = 3
PACKET_FANOUT_RND = 4
PACKET_FANOUT_QM = 5
PACKET_FANOUT_CBPF = 6
PACKET_FANOUT_EBPF = 7
PACKET_FANOUT_FLAG_ROLLOVER = 0x1000
PACKET_FANOUT_FLAG_UNIQUEID = 0x2000
PACKET_FANOUT_FLAG_DEFRAG = 0x8000

ETH_P_ALL = 0x0003

_FANOUT_MODES = {
    FanoutType.HASH: PACKET_FANOUT_HASH,
    FanoutType.LB: PACKET_FANOUT_LB,
    FanoutType.CPU: PACKET_FANOUT_CPU,
    FanoutType.ROLLOVER: PACKET_FANOUT_ROLLOVER,
    FanoutType.RND: PACKET_FANOUT_RND,
    FanoutType.QM: PACKET_FANOUT_QM,
    FanoutType.CBPF: PACKET_FANOUT_CBPF,
    FanoutType.EBPF: PACKET_FANOUT_EBPF,
}

_SYSFS_NET = Path("/sys/class/net")

_PSUTIL_FLAG_BITS = {
    "up": IFF_UP,
    "broadcast": IFF_BROADCAST,
    "loopback": IFF_LOOPBACK,
    "pointopoint": IFF_POINTOPOINT,
    "running": IFF_RUNNING,
    "multicast": IFF_MULTICAST,
    "dormant": IFF_DORMANT,
    "lower_up": IFF_LOWER_UP,
    "lowerup": IFF_LOWER_UP,
}


@dataclass(frozen=True)
class LinuxConfig:
    """Options for the ``AF_PACKET`` backend. Timeouts are in seconds."""

    write_buffer_size: int = 4096
    read_buffer_size: int = 4096
    read_timeout: float | None = None
    write_timeout: float | None = None
    channel_type: ChannelType = field(default_factory=Layer2)
    fanout: FanoutOption | None = None
    promiscuous: bool = True

    @classmethod
    def from_config(cls, config: Config) -> LinuxConfig:
        """Take the options that apply to this backend from a generic config."""
        return cls(
            write_buffer_size=config.write_buffer_size,
            read_buffer_size=config.read_buffer_size,
            read_timeout=config.read_timeout,
            write_timeout=config.write_timeout,
            channel_type=config.channel_type,
            fanout=config.linux_fanout,
            promiscuous=config.promiscuous,
        )


def fanout_argument(fanout: FanoutOption) -> int:
    """The ``PACKET_FANOUT`` socket option value for ``fanout``."""
    mode = _FANOUT_MODES[fanout.fanout_type]
    if fanout.defrag:
        mode |= PACKET_FANOUT_FLAG_DEFRAG
    if fanout.rollover:
        mode |= PACKET_FANOUT_FLAG_ROLLOVER
    return fanout.group_id | (mode << 16)


def _wait(sock: socket.socket, timeout: float | None, *, write: bool) -> None:
    if write:
        _, ready, _ = select.select([], [sock], [], timeout)
    else:
        ready, _, _ = select.select([sock], [], [], timeout)
    if not ready:
        raise TimeoutError("Timed out")


class _PacketSender(DataLinkSender):
    def __init__(
        self,
        sock: socket.socket,
        address: object,
        write_buffer_size: int,
        timeout: float | None,
    ) -> None:
        self._sock = sock
        self._address = address
        self._write_buffer_size = write_buffer_size
        self._timeout = timeout

    def build_and_send(
        self,
        num_packets: int,
        packet_size: int,
        func: Callable[[bytearray], object],
    ) -> bool:
        if packet_size <= 0:
            raise ValueError("packet size must be positive")
        if num_packets * packet_size > self._write_buffer_size:
            return False
        for _ in range(num_packets):
            buffer = bytearray(packet_size)
            func(buffer)
            _wait(self._sock, self._timeout, write=True)
            self._sock.sendto(buffer, self._address)
        return True

    def send_to(self, packet: bytes, dst: NetworkInterface | None = None) -> bool:
        _wait(self._sock, self._timeout, write=True)
        self._sock.sendto(packet, self._address)
        return True

    def close(self) -> None:
        self._sock.close()


class _PacketReceiver(DataLinkReceiver):
    def __init__(
        self, sock: socket.socket, read_buffer_size: int, timeout: float | None
    ) -> None:
        self._sock = sock
        self._read_buffer_size = read_buffer_size
        self._timeout = timeout

    def next(self) -> bytes:
        _wait(self._sock, self._timeout, write=False)
        return self._sock.recv(self._read_buffer_size)

    def close(self) -> None:
        self._sock.close()


def channel(
    interface: NetworkInterface, config: LinuxConfig | Config | None = None
) -> EthernetChannel:
    """Open an ``AF_PACKET`` socket bound to ``interface``. Raises OSError on failure."""
    if config is None:
        config = LinuxConfig()
    elif isinstance(config, Config):
        config = LinuxConfig.from_config(config)
    if not hasattr(socket, "AF_PACKET"):
        raise OSError(errno.EAFNOSUPPORT, "AF_PACKET sockets are not supported here")

    if isinstance(config.channel_type, Layer3):
        sock_type, proto = socket.SOCK_DGRAM, config.channel_type.ethertype
    else:
        sock_type, proto = socket.SOCK_RAW, ETH_P_ALL

    sock = socket.socket(socket.AF_PACKET, sock_type, socket.htons(proto))
    try:
        sock.bind((interface.name, proto))
        if config.promiscuous:
            mreq = struct.pack("@iHH8s", interface.index, PACKET_MR_PROMISC, 0, b"")
            sock.setsockopt(SOL_PACKET, PACKET_ADD_MEMBERSHIP, mreq)
        if config.fanout is not None:
            arg = struct.pack("@I", fanout_argument(config.fanout))
            sock.setsockopt(SOL_PACKET, PACKET_FANOUT, arg)
        sock.setblocking(False)
    except BaseException:
        sock.close()
        raise

    hw_addr = bytes(interface.mac) if interface.mac is not None else bytes(6)
    address = (interface.name, proto, 0, 0, hw_addr)
    sender = _PacketSender(sock, address, config.write_buffer_size, config.write_timeout)
    receiver = _PacketReceiver(sock, config.read_buffer_size, config.read_timeout)
    return EthernetChannel(sender, receiver)


def _mask_to_prefix(netmask: str | None) -> int:
    if not netmask:
        return 0
    try:
        mask = ipaddress.ip_address(netmask.split("%", 1)[0])
    except ValueError:
        return 0
    bits = mask.max_prefixlen
    value = int(mask)
    ones = bin(value).count("1")
    expected = ((1 << bits) - 1) ^ ((1 << (bits - ones)) - 1)
    return ones if value == expected else 0


def _to_network(address: str, netmask: str | None) -> IpInterface | None:
    try:
        ip = ipaddress.ip_address(address.split("%", 1)[0])
    except ValueError:
        return None
    prefix = _mask_to_prefix(netmask)
    if prefix > ip.max_prefixlen:
        return None
    return ipaddress.ip_interface((ip, prefix))


def _read_int(path: Path, base: int = 10) -> int | None:
    try:
        return int(path.read_text().strip(), base)
    except (OSError, ValueError):
        return None


def _sysfs_flags(name: str) -> int | None:
    base = _SYSFS_NET / name
    flags = _read_int(base / "flags", 16)
    if flags is None:
        return None
    if _read_int(base / "carrier") == 1 and flags & IFF_UP:
        flags |= IFF_LOWER_UP
    if _read_int(base / "dormant") == 1:
        flags |= IFF_DORMANT
    return flags


def _psutil_flags(stats: object | None) -> int:
    if stats is None:
        return 0
    text = getattr(stats, "flags", None)
    if isinstance(text, str) and text:
        flags = 0
        for word in text.split(","):
            flags |= _PSUTIL_FLAG_BITS.get(word.strip().lower(), 0)
        return flags
    return IFF_UP if getattr(stats, "isup", False) else 0


def _interface_index(name: str) -> int:
    try:
        return socket.if_nametoindex(name)
    except (OSError, AttributeError):
        return 0


def interfaces() -> list[NetworkInterface]:
    """List the network interfaces of this machine with their addresses and flags."""
    try:
        addresses = psutil.net_if_addrs()
    except OSError:
        return []
    try:
        stats = psutil.net_if_stats()
    except OSError:
        stats = {}

    result = []
    for name, entries in addresses.items():
        mac: MacAddr | None = None
        ips: list[IpInterface] = []
        for entry in entries:
            if entry.family == psutil.AF_LINK:
                try:
                    mac = MacAddr.parse(entry.address)
                except ParseMacAddrError:
                    pass
            elif entry.family in (socket.AF_INET, socket.AF_INET6):
                network = _to_network(entry.address, entry.netmask)
                if network is not None:
                    ips.append(network)
        flags = _sysfs_flags(name)
        if flags is None:
            flags = _psutil_flags(stats.get(name))
        result.append(
            NetworkInterface(
                name=name,
                description="",
                index=_interface_index(name),
                mac=mac,
                ips=ips,
                flags=flags,
            )
        )
    return result