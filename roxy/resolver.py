"""Asynchronous DNS resolution to socket addresses."""

from __future__ import annotations

import ipaddress
from typing import Any, Iterable, List, Optional, Tuple, Union

import dns.asyncresolver
import dns.exception
import dns.rdatatype
import dns.resolver

from .address import SocketAddress

IPAddress = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]

CACHE_SIZE = 1024


class ResolveError(OSError):
    """Raised when a host name cannot be resolved."""


def _name_server(addr: Union[SocketAddress, Tuple[str, int]]) -> SocketAddress:
    if isinstance(addr, SocketAddress):
        return addr
    host, port = addr
    return SocketAddress(ipaddress.ip_address(host), int(port))


class Resolver:
    """Resolves host names over UDP using the given name servers."""

    def __init__(
        self,
        nameservers: Iterable[Union[SocketAddress, Tuple[str, int]]] = (),
        *,
        resolver: Optional[Any] = None,
    ) -> None:
        if resolver is None:
            resolver = dns.asyncresolver.Resolver(configure=False)
            resolver.cache = dns.resolver.LRUCache(CACHE_SIZE)
            servers = [_name_server(addr) for addr in nameservers]
            if servers:
                resolver.nameserver_ports = {str(s.ip): s.port for s in servers}
                resolver.nameservers = [str(s.ip) for s in servers]
        self._inner = resolver

    @classmethod
    def from_resolver(cls, resolver: Any) -> Resolver:
        """Wrap an existing asynchronous resolver."""
        return cls(resolver=resolver)

    @property
    def inner(self) -> Any:
        """The underlying asynchronous resolver."""
        return self._inner

    async def lookup_ip(self, host: str) -> List[IPAddress]:
        """Return the IP addresses of ``host``, IPv4 first, then IPv6."""
        try:
            return [ipaddress.ip_address(host)]
        except ValueError:
            pass

        for rdtype in (dns.rdatatype.A, dns.rdatatype.AAAA):
            try:
                answer = await self._inner.resolve(host, rdtype)
            except dns.resolver.NoAnswer:
                continue
            except dns.exception.DNSException as exc:
                raise ResolveError(f"failed to resolve {host!r}") from exc
            ips = [ipaddress.ip_address(record.address) for record in answer]
            if ips:
                return ips
        raise ResolveError(f"no addresses found for {host!r}")

    async def resolve(self, host: str, port: int) -> SocketAddress:
        """Return the first socket address of ``host``."""
        ips = await self.lookup_ip(host)
        return SocketAddress(ips[0], port)

    async def lookup(self, host: str, port: int) -> List[SocketAddress]:
        """Return every socket address of ``host``."""
        return [SocketAddress(ip, port) for ip in await self.lookup_ip(host)]