"""Ethernet (MAC) addresses: parsing, formatting and classification."""

from __future__ import annotations

import enum
import string
from collections.abc import Iterable

ETHER_ADDR_LEN = 6
"""The number of bytes in an Ethernet (MAC) address."""

_LOCAL_ADDR_BIT = 0x02
_MULTICAST_ADDR_BIT = 0x01
_HEX_DIGITS = frozenset(string.hexdigits)


class ParseMacAddrErrorKind(enum.Enum):
    """The reason a MAC address string could not be parsed."""

    TOO_MANY_COMPONENTS = "Too many components in a MAC address string"
    TOO_FEW_COMPONENTS = "Too few components in a MAC address string"
    INVALID_COMPONENT = "Invalid component in a MAC address string"

    @property
    def description(self) -> str:
        return self.value


class ParseMacAddrError(ValueError):
    """Raised when a string is not a valid colon-separated MAC address."""

    def __init__(self, kind: ParseMacAddrErrorKind) -> None:
        super().__init__(kind.description)
        self.kind = kind

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ParseMacAddrError):
            return self.kind is other.kind
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.kind)


def _parse_component(text: str) -> int:
    digits = text[1:] if text.startswith("+") else text
    if not digits or not set(digits) <= _HEX_DIGITS:
        raise ParseMacAddrError(ParseMacAddrErrorKind.INVALID_COMPONENT)
    value = int(digits, 16)
    if value > 0xFF:
        raise ParseMacAddrError(ParseMacAddrErrorKind.INVALID_COMPONENT)
    return value


def _as_octets(other: object) -> tuple[int, ...] | None:
    if isinstance(other, MacAddr):
        return tuple(other)
    if isinstance(other, (bytes, bytearray, tuple, list)) and len(other) == ETHER_ADDR_LEN:
        return tuple(other)
    return None


class MacAddr(tuple):
    """An immutable 48-bit Ethernet address."""

    __slots__ = ()

    def __new__(cls, a: int, b: int, c: int, d: int, e: int, f: int) -> MacAddr:
        octets = (a, b, c, d, e, f)
        for octet in octets:
            if not isinstance(octet, int) or not 0 <= octet <= 0xFF:
                raise ValueError(f"MAC address octet out of range: {octet!r}")
        return super().__new__(cls, octets)

    @classmethod
    def parse(cls, text: str) -> MacAddr:
        """Parse a colon-separated hexadecimal address such as ``12:34:56:78:90:ab``."""
        parts: list[int] = []
        for component in text.split(":"):
            if len(parts) == ETHER_ADDR_LEN:
                raise ParseMacAddrError(ParseMacAddrErrorKind.TOO_MANY_COMPONENTS)
            parts.append(_parse_component(component))
        if len(parts) != ETHER_ADDR_LEN:
            raise ParseMacAddrError(ParseMacAddrErrorKind.TOO_FEW_COMPONENTS)
        return cls(*parts)

    @classmethod
    def zero(cls) -> MacAddr:
        """The all-zero address."""
        return cls(0, 0, 0, 0, 0, 0)

    @classmethod
    def broadcast(cls) -> MacAddr:
        """The broadcast address ``ff:ff:ff:ff:ff:ff``."""
        return cls(*([0xFF] * ETHER_ADDR_LEN))

    @classmethod
    def from_bytes(cls, data: Iterable[int]) -> MacAddr:
        """Build an address from exactly six octets."""
        octets = bytes(data)
        if len(octets) != ETHER_ADDR_LEN:
            raise ValueError(
                f"invalid length {len(octets)}, expected either a string representation "
                "of a MAC address or 6-element byte array"
            )
        return cls(*octets)

    def is_zero(self) -> bool:
        """True for the all-zero address."""
        return self == MacAddr.zero()

    def is_universal(self) -> bool:
        """True for a universally administered address (UAA)."""
        return not self.is_local()

    def is_local(self) -> bool:
        """True for a locally administered address (LAA)."""
        return self[0] & _LOCAL_ADDR_BIT == _LOCAL_ADDR_BIT

    def is_unicast(self) -> bool:
        """True for a unicast address."""
        return not self.is_multicast()

    def is_multicast(self) -> bool:
        """True for a multicast address."""
        return self[0] & _MULTICAST_ADDR_BIT == _MULTICAST_ADDR_BIT

    def is_broadcast(self) -> bool:
        """True for the broadcast address."""
        return self == MacAddr.broadcast()

    def octets(self) -> tuple[int, int, int, int, int, int]:
        """The six octets that make up the address."""
        return tuple(self)  # type: ignore[return-value]

    def __bytes__(self) -> bytes:
        return bytes(tuple(self))

    def __eq__(self, other: object) -> bool:
        octets = _as_octets(other)
        if octets is None:
            return NotImplemented
        return tuple(self) == octets

    def __ne__(self, other: object) -> bool:
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, MacAddr):
            return NotImplemented
        return tuple(self) < tuple(other)

    def __le__(self, other: object) -> bool:
        if not isinstance(other, MacAddr):
            return NotImplemented
        return tuple(self) <= tuple(other)

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, MacAddr):
            return NotImplemented
        return tuple(self) > tuple(other)

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, MacAddr):
            return NotImplemented
        return tuple(self) >= tuple(other)

    def __hash__(self) -> int:
        return hash(tuple(self))

    def __str__(self) -> str:
        return ":".join(f"{octet:02x}" for octet in self)

    def __repr__(self) -> str:
        return f"MacAddr('{self}')"