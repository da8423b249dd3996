"""AEAD stream framing for shadowsocks TCP tunnels.

A stream starts with the salt, followed by chunks. Each chunk is an encrypted
two-byte big-endian length with its tag, then the encrypted data with its tag.
"""

from __future__ import annotations

import asyncio
import struct
from typing import Optional, Protocol

from .aead import AuthenticationError
from .cipher import Cipher
from .errors import DataTooLong, DecryptDataError, DecryptLengthError
from .kinds import CipherKind

MAX_PACKET_SIZE = 0x3FFF
"""AEAD chunk payloads must not exceed this many bytes."""

_LENGTH = struct.Struct("!H")


class _Reader(Protocol):
    async def read(self, n: int) -> bytes: ...


class _Writer(Protocol):
    def write(self, data: bytes) -> object: ...

    async def drain(self) -> None: ...


async def _read_exact(reader: _Reader, size: int) -> bytes:
    """Read exactly ``size`` bytes; return b"" on a clean EOF before any byte."""
    received = bytearray()
    while len(received) < size:
        chunk = await reader.read(size - len(received))
        if not chunk:
            if received:
                raise asyncio.IncompleteReadError(bytes(received), size)
            return b""
        received += chunk
    return bytes(received)


def decrypt_length(cipher: Cipher, data: bytes) -> int:
    """Decrypt a length chunk and return the payload length it announces."""
    try:
        plain = cipher.decrypt(data)
    except AuthenticationError:
        raise DecryptLengthError() from None
    (length,) = _LENGTH.unpack(plain[:2])
    if length > MAX_PACKET_SIZE:
        # The two high bits are reserved by the protocol.
        raise DataTooLong(length)
    return length


class DecryptedReader:
    """Reads and decrypts an AEAD stream from an asynchronous reader."""

    def __init__(self, kind: CipherKind, key: bytes) -> None:
        self.kind = kind
        self._key = bytes(key)
        self._cipher: Optional[Cipher] = None
        self._salt: Optional[bytes] = None
        self._handshaked = False
        self._pending = b""
        self._pos = 0

    @property
    def salt(self) -> Optional[bytes]:
        """The salt received from the peer, once read."""
        return self._salt

    @property
    def handshaked(self) -> bool:
        """Whether the salt has been received."""
        return self._handshaked

    async def read(self, reader: _Reader, size: int) -> bytes:
        """Return up to ``size`` decrypted bytes, or b"" at the end of the stream."""
        if size <= 0:
            raise ValueError("size must be positive")

        if self._cipher is None:
            await self._read_salt(reader)

        while self._pos >= len(self._pending):
            length = await self._read_length(reader)
            if length is None:
                return b""
            self._pending = await self._read_data(reader, length)
            self._pos = 0

        chunk = self._pending[self._pos : self._pos + size]
        self._pos += len(chunk)
        return chunk

    async def _read_salt(self, reader: _Reader) -> None:
        salt_len = self.kind.salt_len()
        salt = await _read_exact(reader, salt_len)
        if len(salt) < salt_len:
            raise asyncio.IncompleteReadError(salt, salt_len)
        # The salt is only remembered here; replay checks belong after the
        # first successful decryption so attackers cannot flood the filter.
        self._salt = salt
        self._cipher = Cipher(self.kind, self._key, salt)
        self._handshaked = True

    async def _read_length(self, reader: _Reader) -> Optional[int]:
        assert self._cipher is not None
        length_len = 2 + self.kind.tag_len()
        raw = await _read_exact(reader, length_len)
        if not raw:
            return None
        return decrypt_length(self._cipher, raw)

    async def _read_data(self, reader: _Reader, size: int) -> bytes:
        assert self._cipher is not None
        data_len = size + self.kind.tag_len()
        raw = await _read_exact(reader, data_len)
        if not raw:
            raise asyncio.IncompleteReadError(b"", data_len)
        try:
            return self._cipher.decrypt(raw)
        except AuthenticationError:
            raise DecryptDataError() from None


class EncryptedWriter:
    """Encrypts data into AEAD chunks; the salt goes out with the first chunk."""

    def __init__(self, kind: CipherKind, key: bytes, nonce: bytes) -> None:
        self.kind = kind
        self._cipher = Cipher(kind, key, nonce)
        self._salt = bytes(nonce)
        self._unsent_salt = self._salt

    @property
    def salt(self) -> bytes:
        """The salt sent at the start of the stream."""
        return self._salt

    def encrypt_chunk(self, data: bytes) -> bytes:
        """Return the wire form of one chunk, preceded by the salt if not yet sent."""
        data = bytes(data)
        if len(data) > MAX_PACKET_SIZE:
            raise DataTooLong(len(data))
        packet = (
            self._unsent_salt
            + self._cipher.encrypt(_LENGTH.pack(len(data)))
            + self._cipher.encrypt(data)
        )
        self._unsent_salt = b""
        return packet

    async def write(self, writer: _Writer, data: bytes) -> int:
        """Encrypt ``data`` into as many chunks as needed and write them.

        An empty ``data`` still produces one empty chunk, so the salt and any
        handshake reach the peer. Returns the number of plaintext bytes written.
        """
        data = bytes(data)
        chunks = [
            data[start : start + MAX_PACKET_SIZE]
            for start in range(0, len(data), MAX_PACKET_SIZE)
        ] or [b""]
        for chunk in chunks:
            writer.write(self.encrypt_chunk(chunk))
            await writer.drain()
        return len(data)