"""Target addresses in the SOCKS5-style wire form used by shadowsocks."""

from __future__ import annotations

import ipaddress
import re
import struct
from dataclasses import dataclass
from typing import Protocol, Union

from .errors import AddressDomainInvalidEncoding, AddressTypeNotSupported

ADDR_TYPE_IPV4 = 0x01
ADDR_TYPE_DOMAIN_NAME = 0x03
ADDR_TYPE_IPV6 = 0x04

_PORT = re.compile(r"\+?[0-9]+")
_V4_SOCKET = re.compile(r"([0-9.]+):([0-9]+)")
_V6_SOCKET = re.compile(r"\[([^\]]+)\]:([0-9]+)")


class AddressError(ValueError):
    """Raised when text cannot be parsed as an address."""


class _ExactReader(Protocol):
    async def readexactly(self, n: int) -> bytes: ...


@dataclass(frozen=True)
class SocketAddress:
    """An IP address with a port."""

    ip: ipaddress.IPv4Address | ipaddress.IPv6Address
    port: int

    def __post_init__(self) -> None:
        if not isinstance(self.ip, (ipaddress.IPv4Address, ipaddress.IPv6Address)):
            object.__setattr__(self, "ip", ipaddress.ip_address(self.ip))

    def serialized_len(self) -> int:
        if self.ip.version == 4:
            return 1 + 4 + 2
        return 1 + 8 * 2 + 2

    def to_bytes(self) -> bytes:
        kind = ADDR_TYPE_IPV4 if self.ip.version == 4 else ADDR_TYPE_IPV6
        return bytes([kind]) + self.ip.packed + struct.pack("!H", self.port)

    def __str__(self) -> str:
        if self.ip.version == 4:
            return f"{self.ip}:{self.port}"
        return f"[{self.ip}]:{self.port}"


@dataclass(frozen=True)
class DomainNameAddress:
    """A domain name with a port."""

    domain: str
    port: int

    def serialized_len(self) -> int:
        return 1 + 1 + len(self.domain.encode("utf-8")) + 2

    def to_bytes(self) -> bytes:
        raw = self.domain.encode("utf-8")
        if len(raw) > 0xFF:
            raise ValueError("domain name length must be smaller than 256")
        return (
            bytes([ADDR_TYPE_DOMAIN_NAME, len(raw)])
            + raw
            + struct.pack("!H", self.port)
        )

    def __str__(self) -> str:
        return f"{self.domain}:{self.port}"


Address = Union[SocketAddress, DomainNameAddress]


def _socket_address(text: str) -> SocketAddress | None:
    match = _V4_SOCKET.fullmatch(text)
    if match:
        try:
            ip: ipaddress.IPv4Address | ipaddress.IPv6Address = ipaddress.IPv4Address(
                match.group(1)
            )
        except ValueError:
            return None
    else:
        match = _V6_SOCKET.fullmatch(text)
        if not match:
            return None
        try:
            ip = ipaddress.IPv6Address(match.group(1))
        except ValueError:
            return None
    port = int(match.group(2))
    if port > 0xFFFF:
        return None
    return SocketAddress(ip, port)


def parse_address(text: str) -> Address:
    """Parse ``ip:port``, ``[ipv6]:port`` or ``domain:port``."""
    socket_address = _socket_address(text)
    if socket_address is not None:
        return socket_address

    parts = text.split(":")
    if len(parts) < 2:
        raise AddressError(f"address {text!r} has no port")
    domain, port_text = parts[0], parts[1]
    if not domain:
        raise AddressError(f"address {text!r} is missing a domain")
    if not _PORT.fullmatch(port_text) or int(port_text) > 0xFFFF:
        raise AddressError(f"address {text!r} has an invalid port")
    return DomainNameAddress(domain, int(port_text))


async def read_address(reader: _ExactReader) -> Address:
    """Read one wire-form address from a reader with ``readexactly``."""
    (addr_type,) = await reader.readexactly(1)

    if addr_type == ADDR_TYPE_IPV4:
        buf = await reader.readexactly(6)
        (port,) = struct.unpack("!H", buf[4:])
        return SocketAddress(ipaddress.IPv4Address(buf[:4]), port)

    if addr_type == ADDR_TYPE_IPV6:
        buf = await reader.readexactly(18)
        (port,) = struct.unpack("!H", buf[16:])
        return SocketAddress(ipaddress.IPv6Address(buf[:16]), port)

    if addr_type == ADDR_TYPE_DOMAIN_NAME:
        (length,) = await reader.readexactly(1)
        raw = await reader.readexactly(length + 2)
        (port,) = struct.unpack("!H", raw[length:])
        try:
            domain = raw[:length].decode("utf-8")
        except UnicodeDecodeError:
            raise AddressDomainInvalidEncoding() from None
        return DomainNameAddress(domain, port)

    raise AddressTypeNotSupported(addr_type)