"""Cipher kinds understood by the shadowsocks protocol."""

from __future__ import annotations

import enum


class UnsupportedCipherError(ValueError):
    """Raised for an unknown cipher name or a property a cipher does not define."""


class CipherCategory(enum.Enum):
    """Protocol family a cipher belongs to."""

    AEAD = "aead"
    AEAD2022 = "aead2022"


class CipherKind(enum.Enum):
    """A shadowsocks encryption method, valued by its configuration name."""

    AES_128_GCM = "aes-128-gcm"
    AES_256_GCM = "aes-256-gcm"
    AEAD2022_BLAKE3_AES_128_GCM = "2022-blake3-aes-128-gcm"
    AEAD2022_BLAKE3_AES_256_GCM = "2022-blake3-aes-256-gcm"
    AEAD2022_BLAKE3_CHACHA20_POLY1305 = "2022-blake3-chacha20-poly1305"
    AEAD2022_BLAKE3_CHACHA8_POLY1305 = "2022-blake3-chacha8-poly1305"

    def __str__(self) -> str:
        return self.value

    @staticmethod
    def parse(text: str) -> CipherKind:
        """Return the kind named by ``text``."""
        try:
            return CipherKind(text)
        except ValueError:
            raise UnsupportedCipherError(f"unknown cipher {text!r}") from None

    def is_aead(self) -> bool:
        return self in (CipherKind.AES_128_GCM, CipherKind.AES_256_GCM)

    def is_aead2022(self) -> bool:
        return not self.is_aead()

    def category(self) -> CipherCategory:
        return CipherCategory.AEAD if self.is_aead() else CipherCategory.AEAD2022

    def key_len(self) -> int:
        """Key length in bytes."""
        try:
            return _KEY_LEN[self]
        except KeyError:
            raise UnsupportedCipherError(f"key length of {self} is not defined") from None

    def tag_len(self) -> int:
        """Authentication tag length in bytes."""
        if self.is_aead():
            return 16
        raise UnsupportedCipherError(f"tag length of {self} is not defined")

    def salt_len(self) -> int:
        """Salt length in bytes, equal to the key length."""
        return self.key_len()

    def nonce_len(self) -> int:
        """Nonce length in bytes; only AEAD 2022 ciphers carry one."""
        if not self.is_aead2022():
            raise UnsupportedCipherError("only AEAD 2022 ciphers have a nonce length")
        raise UnsupportedCipherError(f"nonce length of {self} is not defined")


_KEY_LEN = {
    CipherKind.AES_128_GCM: 128 // 8,
    CipherKind.AES_256_GCM: 256 // 8,
}