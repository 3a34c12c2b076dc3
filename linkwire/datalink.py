"""Core types for sending and receiving packets at the data link layer."""

from __future__ import annotations

import abc
import enum
import ipaddress
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from typing import Union

from linkwire.macaddr import MacAddr

EtherType = int
"""An EtherType value (16 bits)."""

IpInterface = Union[ipaddress.IPv4Interface, ipaddress.IPv6Interface]

IFF_UP = 0x1
IFF_BROADCAST = 0x2
IFF_LOOPBACK = 0x8
IFF_POINTOPOINT = 0x10
IFF_RUNNING = 0x40
IFF_MULTICAST = 0x1000
IFF_LOWER_UP = 0x10000
IFF_DORMANT = 0x20000


@dataclass(frozen=True)
class Layer2:
    """Send and receive layer 2 packets directly, including headers."""


@dataclass(frozen=True)
class Layer3:
    """Send and receive "cooked" network layer packets of one EtherType."""

    ethertype: EtherType

    def __post_init__(self) -> None:
        if not 0 <= self.ethertype <= 0xFFFF:
            raise ValueError(f"EtherType out of range: {self.ethertype!r}")


ChannelType = Union[Layer2, Layer3]


class FanoutType(enum.Enum):
    """Socket fanout mode (Linux only)."""

    HASH = enum.auto()
    LB = enum.auto()
    CPU = enum.auto()
    ROLLOVER = enum.auto()
    RND = enum.auto()
    QM = enum.auto()
    CBPF = enum.auto()
    EBPF = enum.auto()


@dataclass(frozen=True)
class FanoutOption:
    """Fanout settings (Linux only)."""

    group_id: int
    fanout_type: FanoutType
    defrag: bool
    rollover: bool

    def __post_init__(self) -> None:
        if not 0 <= self.group_id <= 0xFFFF:
            raise ValueError(f"fanout group id out of range: {self.group_id!r}")


@dataclass(frozen=True)
class Config:
    """Options for every backend; each backend may ignore what does not apply.

    Timeouts are in seconds, ``None`` meaning no timeout.
    """

    write_buffer_size: int = 4096
    read_buffer_size: int = 4096
    read_timeout: float | None = None
    write_timeout: float | None = None
    channel_type: ChannelType = field(default_factory=Layer2)
    bpf_fd_attempts: int = 1000
    linux_fanout: FanoutOption | None = None
    promiscuous: bool = True
    filter: str = ""


class DataLinkSender(abc.ABC):
    """Sends packets at the data link layer."""

    @abc.abstractmethod
    def build_and_send(
        self,
        num_packets: int,
        packet_size: int,
        func: Callable[[bytearray], object],
    ) -> bool:
        """Call ``func`` on ``num_packets`` buffers of ``packet_size`` bytes and send each.

        Returns False when the sender has no room for that many packets.
        Raises OSError when sending fails.
        """

    @abc.abstractmethod
    def send_to(self, packet: bytes, dst: NetworkInterface | None = None) -> bool:
        """Send one packet; ``dst`` is currently ignored.

        Returns False when the sender cannot send. Raises OSError on failure.
        """


class DataLinkReceiver(abc.ABC):
    """Receives packets at the data link layer."""

    @abc.abstractmethod
    def next(self) -> bytes:
        """Block until the next frame arrives and return it. Raises OSError on failure."""

    def __iter__(self) -> Iterator[bytes]:
        return self

    def __next__(self) -> bytes:
        return self.next()


@dataclass
class EthernetChannel:
    """A channel that sends and receives Ethernet frames."""

    sender: DataLinkSender
    receiver: DataLinkReceiver

    def __iter__(self) -> Iterator[DataLinkSender | DataLinkReceiver]:
        yield self.sender
        yield self.receiver


_FLAG_NAMES = (
    "UP",
    "BROADCAST",
    "LOOPBACK",
    "POINTOPOINT",
    "MULTICAST",
    "RUNNING",
    "DORMANT",
    "LOWERUP",
)


@dataclass
class NetworkInterface:
    """A network interface and its addresses."""

    name: str
    description: str = ""
    index: int = 0
    mac: MacAddr | None = None
    ips: list[IpInterface] = field(default_factory=list)
    flags: int = 0

    def is_up(self) -> bool:
        return bool(self.flags & IFF_UP)

    def is_broadcast(self) -> bool:
        return bool(self.flags & IFF_BROADCAST)

    def is_loopback(self) -> bool:
        """True for a loopback interface."""
        return bool(self.flags & IFF_LOOPBACK)

    def is_point_to_point(self) -> bool:
        return bool(self.flags & IFF_POINTOPOINT)

    def is_multicast(self) -> bool:
        return bool(self.flags & IFF_MULTICAST)

    def is_running(self) -> bool:
        return bool(self.flags & IFF_RUNNING)

    def is_dormant(self) -> bool:
        """True when the driver has signalled that the interface is dormant."""
        return bool(self.flags & IFF_DORMANT)

    def is_lower_up(self) -> bool:
        """True when the driver has signalled carrier on."""
        return bool(self.flags & IFF_LOWER_UP)

    def _flags_text(self) -> str:
        if self.flags <= 0:
            return f"{self.flags:X}"
        checks = (
            self.is_up(),
            self.is_broadcast(),
            self.is_loopback(),
            self.is_point_to_point(),
            self.is_multicast(),
            self.is_running(),
            self.is_dormant(),
            self.is_lower_up(),
        )
        names = ",".join(name for name, on in zip(_FLAG_NAMES, checks) if on)
        return f"{self.flags:X}<{names}>"

    def __str__(self) -> str:
        mac = str(self.mac) if self.mac is not None else "N/A"
        ips = ""
        if self.ips:
            lines = (
                f"       inet: {ip}" if ip.version == 4 else f"      inet6: {ip}"
                for ip in self.ips
            )
            ips = "\n" + "\n".join(lines)
        return (
            f"{self.name}: flags={self._flags_text()}\n"
            f"      index: {self.index}\n"
            f"      ether: {mac}{ips}"
        )