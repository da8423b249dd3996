"""Client side of a shadowsocks TCP tunnel."""

from __future__ import annotations

import asyncio
import enum
import logging
import socket
import struct
from typing import Any, Optional

from .address import Address, DomainNameAddress, SocketAddress
from .crypto_stream import CryptoStream
from .errors import ProtocolError
from .kinds import CipherKind
from .options import ConnectOpts, aead_2022_padding_size
from .relay import copy_from_encrypted, copy_to_encrypted
from .resolver import Resolver

_logger = logging.getLogger(__name__)

_SO_MARK = getattr(socket, "SO_MARK", 36)
_SO_BINDTODEVICE = getattr(socket, "SO_BINDTODEVICE", 25)


class _ReadState(enum.Enum):
    ESTABLISHED = "established"
    CHECK_REQUEST_NONCE = "check_request_nonce"


def make_first_packet_buffer(kind: CipherKind, addr: Address, payload: bytes) -> bytes:
    """Return the target address followed by the payload, padded for AEAD 2022.

    Sending the address together with the first data keeps the handshake
    from standing out on the wire.
    """
    payload = bytes(payload)
    buffer = bytearray(addr.to_bytes())
    if kind.is_aead2022():
        padding = aead_2022_padding_size(payload)
        buffer += struct.pack("!H", padding)
        buffer += bytes(padding)
    buffer += payload
    return bytes(buffer)


def _set_before_connect(sock: socket.socket, addr: SocketAddress, opts: ConnectOpts) -> None:
    local = opts.bind_local_addr
    if local is not None and local.version == addr.ip.version:
        sock.bind((str(local), 0))
    if opts.tcp.send_buffer_size is not None:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_SNDBUF, opts.tcp.send_buffer_size)
    if opts.tcp.recv_buffer_size is not None:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_RCVBUF, opts.tcp.recv_buffer_size)


def _set_after_connect(sock: socket.socket, opts: ConnectOpts) -> None:
    if opts.tcp.nodelay:
        sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
    if opts.tcp.keepalive is not None:
        seconds = max(1, int(opts.tcp.keepalive.total_seconds()))
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_KEEPALIVE, 1)
        idle = getattr(socket, "TCP_KEEPIDLE", getattr(socket, "TCP_KEEPALIVE", None))
        if idle is not None:
            sock.setsockopt(socket.IPPROTO_TCP, idle, seconds)
        interval = getattr(socket, "TCP_KEEPINTVL", None)
        if interval is not None:
            sock.setsockopt(socket.IPPROTO_TCP, interval, seconds)


async def _connect_server(
    addr: SocketAddress, opts: ConnectOpts
) -> "tuple[asyncio.StreamReader, asyncio.StreamWriter]":
    family = socket.AF_INET if addr.ip.version == 4 else socket.AF_INET6
    sock = socket.socket(family, socket.SOCK_STREAM)
    try:
        sock.setblocking(False)
        if opts.fwmark is not None:
            try:
                sock.setsockopt(socket.SOL_SOCKET, _SO_MARK, opts.fwmark)
            except OSError as err:
                _logger.error("set SO_MARK failed: %s", err)
                raise
        if opts.bind_interface:
            try:
                sock.setsockopt(
                    socket.SOL_SOCKET, _SO_BINDTODEVICE, opts.bind_interface.encode()
                )
            except OSError as err:
                _logger.error("set SO_BINDTODEVICE error: %s", err)
                raise
        _set_before_connect(sock, addr, opts)
        await asyncio.get_running_loop().sock_connect(sock, (str(addr.ip), addr.port))
        _set_after_connect(sock, opts)
    except BaseException:
        sock.close()
        raise
    return await asyncio.open_connection(sock=sock)


class ProxyStream:
    """An encrypted stream to a shadowsocks server for one target address.

    The target address goes out with the first write.
    """

    def __init__(self, stream: CryptoStream, target: Address) -> None:
        self._stream = stream
        self._target: Optional[Address] = target
        self._read_state = (
            _ReadState.CHECK_REQUEST_NONCE
            if stream.kind.is_aead2022()
            else _ReadState.ESTABLISHED
        )

    @property
    def kind(self) -> CipherKind:
        return self._stream.kind

    @staticmethod
    async def connect(
        server: Address,
        kind: CipherKind,
        key: bytes,
        target: Address,
        resolver: Resolver,
        opts: Optional[ConnectOpts] = None,
    ) -> ProxyStream:
        """Connect to the shadowsocks ``server`` and prepare a tunnel to ``target``."""
        opts = opts if opts is not None else ConnectOpts()
        if isinstance(server, DomainNameAddress):
            server_addr = await resolver.resolve(server.domain, server.port)
        else:
            server_addr = server
        reader, writer = await _connect_server(server_addr, opts)
        return ProxyStream(CryptoStream(reader, writer, kind, key), target)

    async def read(self, size: int) -> bytes:
        """Return up to ``size`` decrypted bytes, or b"" at the end of the stream."""
        data = await self._stream.read(size)
        if self._read_state is _ReadState.CHECK_REQUEST_NONCE and data:
            sent = self._stream.sent_nonce or None
            if sent != self._stream.received_request_nonce:
                raise ProtocolError("received TCP response header with unmatched salt")
            self._read_state = _ReadState.ESTABLISHED
        return data

    async def write(self, data: bytes) -> int:
        """Encrypt and send ``data``; the first call also sends the target address.

        Writing b"" first sends the handshake alone, for protocols where the
        server speaks first.
        """
        if self._target is not None:
            packet = make_first_packet_buffer(self.kind, self._target, data)
            await self._stream.write(packet)
            self._target = None
            return len(data)
        return await self._stream.write(data)

    async def proxy(self, local_reader: Any, local_writer: Any) -> None:
        """Relay between a local connection and the tunnel until either side ends."""
        outbound = asyncio.ensure_future(copy_to_encrypted(self.kind, local_reader, self))
        inbound = asyncio.ensure_future(copy_from_encrypted(self.kind, self, local_writer))
        try:
            done, _ = await asyncio.wait(
                {outbound, inbound}, return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            for task in (outbound, inbound):
                if not task.done():
                    task.cancel()
            await asyncio.gather(outbound, inbound, return_exceptions=True)
        first = outbound if outbound in done else inbound
        first.result()

    async def close(self) -> None:
        """Close the connection to the server."""
        await self._stream.close()