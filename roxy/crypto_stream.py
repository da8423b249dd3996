"""A bidirectional encrypted stream for the shadowsocks tunnel."""

from __future__ import annotations

from typing import Any, Optional

from .cipher import generate_nonce
from .kinds import CipherCategory, CipherKind, UnsupportedCipherError
from .tcp_aead import DecryptedReader, EncryptedWriter


class CryptoStream:
    """Reads decrypted data from and writes encrypted data to a pair of streams.

    ``reader`` needs an awaitable ``read(n)``; ``writer`` needs ``write``,
    an awaitable ``drain`` and ``close``.
    """

    def __init__(
        self,
        reader: Any,
        writer: Any,
        kind: CipherKind,
        key: bytes,
        *,
        nonce: Optional[bytes] = None,
    ) -> None:
        if kind.category() is not CipherCategory.AEAD:
            raise UnsupportedCipherError(f"{kind} streams are not supported")
        if nonce is None:
            # Uniqueness of the local salt is not checked.
            nonce = generate_nonce(kind, kind.salt_len())
        self._reader = reader
        self._writer = writer
        self._kind = kind
        self._dec = DecryptedReader(kind, key)
        self._enc = EncryptedWriter(kind, key, nonce)
        self._handshaked = False

    @property
    def kind(self) -> CipherKind:
        return self._kind

    @property
    def sent_nonce(self) -> bytes:
        """The salt sent to the peer."""
        return self._enc.salt

    @property
    def received_request_nonce(self) -> Optional[bytes]:
        """The request salt echoed by the server; AEAD streams carry none."""
        return None

    @property
    def handshaked(self) -> bool:
        """Whether the peer's salt has been received."""
        return self._handshaked

    async def read(self, size: int) -> bytes:
        """Return up to ``size`` decrypted bytes, or b"" at the end of the stream."""
        data = await self._dec.read(self._reader, size)
        if not self._handshaked and self._dec.handshaked:
            self._handshaked = True
        return data

    async def write(self, data: bytes) -> int:
        """Encrypt and send ``data``; returns the number of plaintext bytes."""
        return await self._enc.write(self._writer, data)

    async def drain(self) -> None:
        """Wait until the underlying writer has flushed its buffer."""
        await self._writer.drain()

    async def close(self) -> None:
        """Close the underlying writer."""
        self._writer.close()
        wait_closed = getattr(self._writer, "wait_closed", None)
        if wait_closed is not None:
            try:
                await wait_closed()
            except (ConnectionError, OSError):
                pass