"""AEAD primitives used by the shadowsocks ciphers.

Each cipher encrypts into ``ciphertext || tag`` and decrypts from that form.
"""

from __future__ import annotations

import abc
from typing import Any

from Crypto.Cipher import AES, ChaCha20_Poly1305


class AuthenticationError(ValueError):
    """Raised when a ciphertext fails to authenticate."""


class _AeadCipher(abc.ABC):
    KEY_SIZE: int
    NONCE_SIZE: int
    TAG_SIZE = 16

    def __init__(self, key: bytes) -> None:
        if len(key) != self.KEY_SIZE:
            raise ValueError(
                f"{type(self).__name__} requires a {self.KEY_SIZE}-byte key, "
                f"got {len(key)} bytes"
            )
        self._key = bytes(key)

    @abc.abstractmethod
    def _new(self, nonce: bytes) -> Any:
        """Return a fresh pycryptodome cipher object for ``nonce``."""

    def _check_nonce(self, nonce: bytes) -> bytes:
        if len(nonce) != self.NONCE_SIZE:
            raise ValueError(
                f"{type(self).__name__} requires a {self.NONCE_SIZE}-byte nonce, "
                f"got {len(nonce)} bytes"
            )
        return bytes(nonce)

    def _seal(self, nonce: bytes, plaintext: bytes) -> bytes:
        engine = self._new(self._check_nonce(nonce))
        ciphertext, tag = engine.encrypt_and_digest(bytes(plaintext))
        return ciphertext + tag

    def _open(self, nonce: bytes, data: bytes) -> bytes:
        engine = self._new(self._check_nonce(nonce))
        if len(data) < self.TAG_SIZE:
            raise AuthenticationError("ciphertext is shorter than the tag")
        body, tag = bytes(data[: -self.TAG_SIZE]), bytes(data[-self.TAG_SIZE :])
        try:
            return engine.decrypt_and_verify(body, tag)
        except ValueError:
            raise AuthenticationError("ciphertext failed to authenticate") from None


class Aes128Gcm(_AeadCipher):
    """AES-128 in GCM mode."""

    KEY_SIZE = 16
    NONCE_SIZE = 12

    def _new(self, nonce: bytes) -> Any:
        return AES.new(self._key, AES.MODE_GCM, nonce=nonce, mac_len=self.TAG_SIZE)

    def encrypt(self, nonce: bytes, plaintext: bytes) -> bytes:
        """Encrypt ``plaintext`` and return the ciphertext followed by the tag."""
        return self._seal(nonce, plaintext)

    def decrypt(self, nonce: bytes, data: bytes) -> bytes:
        """Authenticate and decrypt ``ciphertext || tag``."""
        return self._open(nonce, data)


class Aes256Gcm(_AeadCipher):
    """AES-256 in GCM mode."""

    KEY_SIZE = 32
    NONCE_SIZE = 12

    def _new(self, nonce: bytes) -> Any:
        return AES.new(self._key, AES.MODE_GCM, nonce=nonce, mac_len=self.TAG_SIZE)

    def encrypt(self, nonce: bytes, plaintext: bytes) -> bytes:
        """Encrypt ``plaintext`` and return the ciphertext followed by the tag."""
        return self._seal(nonce, plaintext)

    def decrypt(self, nonce: bytes, data: bytes) -> bytes:
        """Authenticate and decrypt ``ciphertext || tag``."""
        return self._open(nonce, data)


class XChaCha20Poly1305(_AeadCipher):
    """XChaCha20-Poly1305 with a 24-byte nonce."""

    KEY_SIZE = 32
    NONCE_SIZE = 24

    def _new(self, nonce: bytes) -> Any:
        return ChaCha20_Poly1305.new(key=self._key, nonce=nonce)

    def encrypt(self, nonce: bytes, plaintext: bytes) -> bytes:
        """Encrypt ``plaintext`` and return the ciphertext followed by the tag."""
        return self._seal(nonce, plaintext)

    def decrypt(self, nonce: bytes, data: bytes) -> bytes:
        """Authenticate and decrypt ``ciphertext || tag``."""
        return self._open(nonce, data)