"""Session cipher for the AEAD shadowsocks stream protocol."""

from __future__ import annotations

import secrets

from Crypto.Hash import SHA1
from Crypto.Protocol.KDF import HKDF

from .aead import Aes128Gcm, Aes256Gcm
from .kinds import CipherKind, UnsupportedCipherError

_SUBKEY_INFO = b"ss-subkey"

_VARIANTS = {
    CipherKind.AES_128_GCM: Aes128Gcm,
    CipherKind.AES_256_GCM: Aes256Gcm,
}


class Cipher:
    """An AEAD cipher keyed by an HKDF-SHA1 subkey with an incrementing nonce.

    Every encryption or decryption, successful or not, advances the nonce,
    which is a little-endian counter starting at zero.
    """

    def __init__(self, kind: CipherKind, key: bytes, iv_or_salt: bytes) -> None:
        try:
            variant = _VARIANTS[kind]
        except KeyError:
            raise UnsupportedCipherError(f"{kind} has no session cipher") from None
        subkey = HKDF(bytes(key), len(key), bytes(iv_or_salt), SHA1, context=_SUBKEY_INFO)
        self.kind = kind
        self._aead = variant(subkey)
        self._nonce_len = variant.NONCE_SIZE
        self._counter = 0

    def tag_len(self) -> int:
        return self.kind.tag_len()

    def _next_nonce(self) -> bytes:
        nonce = self._counter.to_bytes(self._nonce_len, "little")
        self._counter = (self._counter + 1) % (1 << (8 * self._nonce_len))
        return nonce

    def encrypt(self, plaintext: bytes) -> bytes:
        """Encrypt ``plaintext`` into ``ciphertext || tag``."""
        return self._aead.encrypt(self._next_nonce(), plaintext)

    def decrypt(self, data: bytes) -> bytes:
        """Decrypt ``ciphertext || tag``; raises AuthenticationError on failure."""
        return self._aead.decrypt(self._next_nonce(), data)


def random_iv_or_salt(length: int) -> bytes:
    """Return ``length`` random bytes that are not all zero."""
    if length <= 0:
        return b""
    while True:
        value = secrets.token_bytes(length)
        if any(value):
            return value


def generate_nonce(kind: CipherKind, length: int) -> bytes:
    """Generate an IV or salt of ``length`` bytes for ``kind``."""
    return random_iv_or_salt(length)