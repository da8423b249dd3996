"""Connection options and small protocol helpers."""

from __future__ import annotations

import enum
import ipaddress
import random
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, Optional, Union

from .address import SocketAddress

MAXIMUM_UDP_PAYLOAD_SIZE = 65536
"""The maximum UDP payload size."""

AEAD2022_MAX_PADDING_SIZE = 900

IPAddress = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]


@dataclass
class TcpSocketOpts:
    """Options applied to outbound TCP sockets."""

    send_buffer_size: Optional[int] = None
    recv_buffer_size: Optional[int] = None
    nodelay: bool = False
    fastopen: bool = False
    keepalive: Optional[timedelta] = None


@dataclass
class ConnectOpts:
    """Options for connecting to a remote server."""

    fwmark: Optional[int] = None
    bind_local_addr: Optional[IPAddress] = None
    bind_interface: Optional[str] = None
    tcp: TcpSocketOpts = field(default_factory=TcpSocketOpts)


@dataclass
class UdpSocketControlData:
    """Session bookkeeping carried with UDP packets."""

    client_session_id: int = 0
    server_session_id: int = 0
    packet_id: int = 0
    user: Optional[Any] = None


class AddrFamily(enum.Enum):
    """Address family of a socket address."""

    IPV4 = "AF_INET"
    IPV6 = "AF_INET6"


def addr_family(addr: Union[SocketAddress, IPAddress]) -> AddrFamily:
    """Return the family of a socket address or IP address."""
    ip = addr.ip if isinstance(addr, SocketAddress) else addr
    if isinstance(ip, ipaddress.IPv4Address):
        return AddrFamily.IPV4
    if isinstance(ip, ipaddress.IPv6Address):
        return AddrFamily.IPV6
    raise TypeError(f"{addr!r} is not an IP socket address")


def aead_2022_padding_size(payload: bytes) -> int:
    """Return the AEAD 2022 padding length: random for an empty payload, else 0."""
    if payload:
        return 0
    return random.randrange(AEAD2022_MAX_PADDING_SIZE)