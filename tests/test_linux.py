import ipaddress
import socket
from collections import namedtuple
from unittest import mock

import psutil
import pytest

from linkwire.datalink import (
    IFF_BROADCAST,
    IFF_MULTICAST,
    IFF_UP,
    Config,
    FanoutOption,
    FanoutType,
    Layer3,
)
from linkwire.linux import (
    PACKET_FANOUT_CBPF,
    PACKET_FANOUT_CPU,
    PACKET_FANOUT_EBPF,
    PACKET_FANOUT_FLAG_DEFRAG,
    PACKET_FANOUT_FLAG_ROLLOVER,
    PACKET_FANOUT_HASH,
    PACKET_FANOUT_LB,
    PACKET_FANOUT_QM,
    PACKET_FANOUT_RND,
    PACKET_FANOUT_ROLLOVER,
    LinuxConfig,
    _mask_to_prefix,
    _PacketReceiver,
    _PacketSender,
    fanout_argument,
    interfaces,
)
from linkwire.macaddr import MacAddr

Addr = namedtuple("Addr", "family address netmask broadcast ptp")
Stats = namedtuple("Stats", "isup flags")


def test_linux_config_defaults():
    config = LinuxConfig()
    assert config.write_buffer_size == 4096
    assert config.read_buffer_size == 4096
    assert config.read_timeout is None
    assert config.fanout is None
    assert config.promiscuous is True


def test_linux_config_from_config():
    fanout = FanoutOption(7, FanoutType.CPU, defrag=False, rollover=True)
    generic = Config(
        write_buffer_size=100,
        read_buffer_size=200,
        read_timeout=1.5,
        write_timeout=2.5,
        channel_type=Layer3(0x0800),
        linux_fanout=fanout,
        promiscuous=False,
    )
    config = LinuxConfig.from_config(generic)
    assert config.write_buffer_size == 100
    assert config.read_buffer_size == 200
    assert config.read_timeout == 1.5
    assert config.write_timeout == 2.5
    assert config.channel_type == Layer3(0x0800)
    assert config.fanout == fanout
    assert config.promiscuous is False


@pytest.mark.parametrize(
    "fanout_type, mode",
    [
        (FanoutType.HASH, PACKET_FANOUT_HASH),
        (FanoutType.LB, PACKET_FANOUT_LB),
        (FanoutType.CPU, PACKET_FANOUT_CPU),
        (FanoutType.ROLLOVER, PACKET_FANOUT_ROLLOVER),
        (FanoutType.RND, PACKET_FANOUT_RND),
        (FanoutType.QM, PACKET_FANOUT_QM),
        (FanoutType.CBPF, PACKET_FANOUT_CBPF),
        (FanoutType.EBPF, PACKET_FANOUT_EBPF),
    ],
)
def test_fanout_argument_modes(fanout_type, mode):
    arg = fanout_argument(FanoutOption(123, fanout_type, defrag=False, rollover=False))
    assert arg & 0xFFFF == 123
    assert arg >> 16 == mode


def test_fanout_argument_flags():
    arg = fanout_argument(FanoutOption(5, FanoutType.LB, defrag=True, rollover=True))
    assert arg & 0xFFFF == 5
    assert (arg >> 16) & PACKET_FANOUT_FLAG_DEFRAG
    assert (arg >> 16) & PACKET_FANOUT_FLAG_ROLLOVER
    assert (arg >> 16) & 0xFFF == PACKET_FANOUT_LB


def test_mask_to_prefix():
    assert _mask_to_prefix("255.255.255.0") == 24
    assert _mask_to_prefix("ffff:ffff:ffff:ffff::") == 64
    assert _mask_to_prefix("255.0.255.0") == 0
    assert _mask_to_prefix(None) == 0


@pytest.fixture
def udp_pair():
    receiver = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    receiver.bind(("127.0.0.1", 0))
    receiver.settimeout(2)
    sender = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    sender.setblocking(False)
    yield sender, receiver
    sender.close()
    receiver.close()


def test_send_to_delivers_packet(udp_pair):
    sock, peer = udp_pair
    tx = _PacketSender(sock, peer.getsockname(), 4096, None)
    assert tx.send_to(b"\x01\x02\x03") is True
    assert peer.recv(100) == b"\x01\x02\x03"


def test_build_and_send_builds_each_packet(udp_pair):
    sock, peer = udp_pair
    tx = _PacketSender(sock, peer.getsockname(), 4096, None)
    counter = iter(range(3))

    def build(buf):
        assert len(buf) == 20
        buf[0] = next(counter)
        buf[19] = 201

    assert tx.build_and_send(3, 20, build) is True
    for expected in range(3):
        packet = peer.recv(100)
        assert len(packet) == 20
        assert packet[0] == expected
        assert packet[19] == 201


def test_build_and_send_too_large(udp_pair):
    sock, peer = udp_pair
    tx = _PacketSender(sock, peer.getsockname(), 40, None)
    calls = []
    assert tx.build_and_send(3, 20, calls.append) is False
    assert calls == []


def test_build_and_send_zero_size(udp_pair):
    sock, peer = udp_pair
    tx = _PacketSender(sock, peer.getsockname(), 4096, None)
    with pytest.raises(ValueError):
        tx.build_and_send(1, 0, lambda buf: None)


def test_receiver_returns_packet(udp_pair):
    sock, peer = udp_pair
    listener = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    listener.bind(("127.0.0.1", 0))
    listener.setblocking(False)
    try:
        rx = _PacketReceiver(listener, 4096, 2.0)
        sock.sendto(b"frame", listener.getsockname())
        assert rx.next() == b"frame"
    finally:
        listener.close()


def test_receiver_times_out():
    listener = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    listener.bind(("127.0.0.1", 0))
    listener.setblocking(False)
    try:
        rx = _PacketReceiver(listener, 4096, 0.05)
        with pytest.raises(TimeoutError):
            rx.next()
    finally:
        listener.close()


def test_interfaces_from_psutil():
    addrs = {
        "fake-if0": [
            Addr(psutil.AF_LINK, "02:00:00:00:00:01", None, None, None),
            Addr(socket.AF_INET, "192.0.2.5", "255.255.255.0", None, None),
            Addr(socket.AF_INET6, "fe80::1%fake-if0", "ffff:ffff:ffff:ffff::", None, None),
        ],
        "fake-if1": [
            Addr(socket.AF_INET, "198.51.100.7", "255.0.255.0", None, None),
        ],
    }
    stats = {
        "fake-if0": Stats(True, "up,broadcast,multicast"),
        "fake-if1": Stats(False, ""),
    }
    with mock.patch.object(psutil, "net_if_addrs", return_value=addrs), mock.patch.object(
        psutil, "net_if_stats", return_value=stats
    ):
        result = interfaces()

    assert [iface.name for iface in result] == ["fake-if0", "fake-if1"]
    first, second = result
    assert first.mac == MacAddr.parse("02:00:00:00:00:01")
    assert first.ips == [
        ipaddress.ip_interface("192.0.2.5/24"),
        ipaddress.ip_interface("fe80::1/64"),
    ]
    assert first.flags == IFF_UP | IFF_BROADCAST | IFF_MULTICAST
    assert first.is_up() and first.is_multicast()
    assert second.mac is None
    assert second.ips == [ipaddress.ip_interface("198.51.100.7/0")]
    assert second.flags == 0
    assert first.index == 0


def test_real_interfaces_have_unique_names():
    names = [iface.name for iface in interfaces()]
    assert len(names) == len(set(names))