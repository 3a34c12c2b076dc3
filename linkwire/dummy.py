"""A fake network backed by in-memory FIFO queues, for tests."""

from __future__ import annotations

import queue
from collections.abc import Callable

from linkwire.datalink import (
    Config,
    DataLinkReceiver,
    DataLinkSender,
    EthernetChannel,
    NetworkInterface,
)
from linkwire.macaddr import MacAddr

# Items on the inbound queue are frames (bytes) or exceptions to raise.
InboundQueue = "queue.Queue[bytes | BaseException]"
OutboundQueue = "queue.Queue[bytes]"


class DummyConfig:
    """The queues that make up a fake network.

    The receiver reads frames (or exceptions, which it raises) from ``receiver``;
    the sender puts every frame it sends on ``sender``. A queue left out is
    created here, and its other end is handed out once by ``inject_handle()``
    or ``read_handle()``.
    """

    def __init__(
        self,
        receiver: queue.Queue | None = None,
        sender: queue.Queue | None = None,
    ) -> None:
        self._inject: queue.Queue | None = None
        self._read: queue.Queue | None = None
        if receiver is None:
            receiver = queue.Queue()
            self._inject = receiver
        if sender is None:
            sender = queue.Queue()
            self._read = sender
        self.receiver = receiver
        self.sender = sender

    @classmethod
    def from_config(cls, config: Config) -> DummyConfig:
        """Ignore the generic config and return a default dummy config."""
        return cls()

    def inject_handle(self) -> queue.Queue | None:
        """Take the queue that feeds the fake network; None once taken or if supplied."""
        handle, self._inject = self._inject, None
        return handle

    def read_handle(self) -> queue.Queue | None:
        """Take the queue of sent frames; None once taken or if supplied."""
        handle, self._read = self._read, None
        return handle


class _MockSender(DataLinkSender):
    def __init__(self, outbound: queue.Queue) -> None:
        self._outbound = outbound

    def build_and_send(
        self,
        num_packets: int,
        packet_size: int,
        func: Callable[[bytearray], object],
    ) -> bool:
        for _ in range(num_packets):
            buffer = bytearray(packet_size)
            func(buffer)
            self._outbound.put(bytes(buffer))
        return True

    def send_to(self, packet: bytes, dst: NetworkInterface | None = None) -> bool:
        self._outbound.put(bytes(packet))
        return True


class _MockReceiver(DataLinkReceiver):
    def __init__(self, inbound: queue.Queue) -> None:
        self._inbound = inbound

    def next(self) -> bytes:
        # With nothing injected this blocks indefinitely, like an idle network.
        item = self._inbound.get()
        if isinstance(item, BaseException):
            raise item
        return bytes(item)


def channel(
    interface: NetworkInterface, config: DummyConfig | None = None
) -> EthernetChannel:
    """Create a channel on the fake network described by ``config``."""
    if config is None:
        config = DummyConfig()
    return EthernetChannel(_MockSender(config.sender), _MockReceiver(config.receiver))


def interfaces() -> list[NetworkInterface]:
    """Three fake interfaces, ``eth0`` to ``eth2``."""
    return [dummy_interface(i) for i in range(3)]


def dummy_interface(i: int) -> NetworkInterface:
    """A fake interface named ``eth<i>`` with index ``i`` and MAC ``01:02:03:04:05:<i>``."""
    return NetworkInterface(
        name=f"eth{i}",
        description="",
        index=i,
        mac=MacAddr(1, 2, 3, 4, 5, i),
        ips=[],
        flags=0,
    )