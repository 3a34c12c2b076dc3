# linkwire

Send and receive raw frames at the data link layer, work with MAC addresses,
and list the network interfaces of the current machine.

## Install

```
pip install linkwire
```

## Listing interfaces

```
linkwire-interfaces
```

This prints every interface with its flags, index, MAC address and IP
networks, for example:

```
eth0: flags=11043<UP,BROADCAST,MULTICAST,RUNNING,LOWERUP>
      index: 2
      ether: 02:00:00:00:00:01
       inet: 192.0.2.10/24
```

The same list is available from Python through `linkwire.backend.interfaces()`,
which returns `NetworkInterface` objects (`name`, `description`, `index`,
`mac`, `ips`, `flags`) with helpers such as `is_up()`, `is_loopback()`,
`is_running()` and `is_lower_up()`. Addresses and flags are gathered with
psutil and, where present, `/sys/class/net`.

## MAC addresses

```python
from linkwire.macaddr import MacAddr, ParseMacAddrError

mac = MacAddr.parse("12:34:56:78:90:ab")
print(mac)                 # 12:34:56:78:90:ab
mac.is_local()             # True
mac.is_unicast()           # True
MacAddr.broadcast().is_broadcast()  # True
mac.octets()               # (18, 52, 86, 120, 144, 171)
bytes(mac)                 # b'\x124Vx\x90\xab'

try:
    MacAddr.parse("12:34:56")
except ParseMacAddrError as err:
    print(err.kind)        # ParseMacAddrErrorKind.TOO_FEW_COMPONENTS
```

`ParseMacAddrError` is a `ValueError`. A `MacAddr` compares equal to a
six-element `bytes`, tuple or list holding the same octets, and
`MacAddr.from_bytes()` builds one from exactly six octets.

## Channels

`linkwire.backend.channel(interface, config)` opens an `AF_PACKET` socket
bound to the interface and returns an `EthernetChannel` holding a
`DataLinkSender` and a `DataLinkReceiver`. Raw sockets need root or the
`CAP_NET_RAW` capability.

```python
from linkwire import backend
from linkwire.datalink import Config

iface = next(i for i in backend.interfaces() if i.name == "eth0")
sender, receiver = backend.channel(iface, Config(read_timeout=1.0))
frame = receiver.next()
sender.send_to(frame, None)
```

- `receiver.next()` returns the next frame as `bytes`; the receiver is also
  an iterator. It raises `TimeoutError` when `read_timeout` passes with
  nothing to read, and `OSError` on socket errors.
- `sender.send_to(packet, dst)` sends one frame; `dst` is ignored.
- `sender.build_and_send(num_packets, packet_size, func)` calls `func` on a
  fresh `bytearray` for each packet and sends it. It returns `False` without
  sending when `num_packets * packet_size` exceeds `write_buffer_size`.

`Config` carries buffer sizes, read and write timeouts in seconds, the
channel type (`Layer2()` or `Layer3(ethertype)`), promiscuous mode and an
optional `FanoutOption(group_id, fanout_type, defrag, rollover)` for
spreading traffic over several sockets. `linkwire.linux.fanout_argument()`
gives the socket option value a `FanoutOption` maps to.

## Testing without a network

`linkwire.dummy` provides an in-memory network backed by queues:

```python
from linkwire import dummy

config = dummy.DummyConfig()
inject = config.inject_handle()
read = config.read_handle()
chan = dummy.channel(dummy.dummy_interface(0), config)

inject.put(b"\x00" * 20)
assert len(chan.receiver.next()) == 20

inject.put(OSError("link down"))   # next() raises it

chan.sender.send_to(b"\x01\x02", None)
assert read.get_nowait() == b"\x01\x02"
```

`dummy.interfaces()` returns three fake interfaces, `eth0` to `eth2`.

## What it does not do

- Channels work only on Linux, over `AF_PACKET`. There is no BPF, netmap,
  pcap or Windows backend; elsewhere `backend.channel()` raises `OSError`.
- It does not parse or build protocol headers (Ethernet, ARP, IP, TCP, UDP):
  frames are handled as plain bytes.