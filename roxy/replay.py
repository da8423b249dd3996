"""Protection against replayed salts and nonces."""

from __future__ import annotations

import hashlib
import logging
import math
import secrets
import threading
import time
from collections import OrderedDict
from typing import Iterator

from .kinds import CipherKind

SERVER_STREAM_TIMESTAMP_MAX_DIFF = 30

_logger = logging.getLogger(__name__)


class BloomFilter:
    """A bloom filter sized for a number of items and a false-positive rate."""

    def __init__(self, items: int, fp_rate: float) -> None:
        if items <= 0:
            raise ValueError("a bloom filter needs room for at least one item")
        if not 0.0 < fp_rate < 1.0:
            raise ValueError("false-positive rate must be between 0 and 1")
        self._size = math.ceil(-items * math.log(fp_rate) / (math.log(2) ** 2))
        self._hashes = max(1, round(self._size / items * math.log(2)))
        self._bitmap = bytearray((self._size + 7) // 8)
        self._seed = secrets.token_bytes(16)

    def _positions(self, item: bytes) -> Iterator[int]:
        digest = hashlib.blake2b(bytes(item), digest_size=16, key=self._seed).digest()
        first = int.from_bytes(digest[:8], "little")
        second = int.from_bytes(digest[8:], "little") | 1
        for round_ in range(self._hashes):
            yield (first + round_ * second) % self._size

    def check(self, item: bytes) -> bool:
        """Return True if ``item`` may have been set."""
        return all(
            self._bitmap[pos >> 3] & (1 << (pos & 7)) for pos in self._positions(item)
        )

    def set(self, item: bytes) -> None:
        """Record ``item``."""
        for pos in self._positions(item):
            self._bitmap[pos >> 3] |= 1 << (pos & 7)

    def clear(self) -> None:
        """Forget every item."""
        self._bitmap = bytearray(len(self._bitmap))


class PingPongBloom:
    """Two bloom filters used in turn, each holding half of ``item_count``."""

    def __init__(self, item_count: int = 10_000, fp_rate: float = 1e-15) -> None:
        self._capacity = item_count // 2
        self._blooms = (
            BloomFilter(self._capacity, fp_rate),
            BloomFilter(self._capacity, fp_rate),
        )
        self._counts = [0, 0]
        self._current = 0

    def check_and_set(self, item: bytes) -> bool:
        """Return True if ``item`` was seen; otherwise record it and return False."""
        if any(bloom.check(item) for bloom in self._blooms):
            return True

        if self._counts[self._current] >= self._capacity:
            self._current = (self._current + 1) % 2
            self._counts[self._current] = 0
            self._blooms[self._current].clear()
            _logger.debug(
                "bloom filter based replay protector full, capacity=%d filters=%d",
                self._capacity,
                len(self._blooms),
            )

        self._blooms[self._current].set(item)
        self._counts[self._current] += 1
        return False


class ReplayProtector:
    """Detects repeated IVs, salts or nonces.

    AEAD 2022 headers carry a timestamp, so only nonces seen within the valid
    time window are remembered; other ciphers use ping-pong bloom filters.
    """

    def __init__(self, expiry: float = SERVER_STREAM_TIMESTAMP_MAX_DIFF * 2) -> None:
        self._expiry = expiry
        self._bloom = PingPongBloom()
        self._bloom_lock = threading.Lock()
        self._nonces: OrderedDict[bytes, float] = OrderedDict()
        self._nonces_lock = threading.Lock()

    def _expire(self, now: float) -> None:
        while self._nonces:
            oldest, stamp = next(iter(self._nonces.items()))
            if now - stamp < self._expiry:
                break
            del self._nonces[oldest]

    def check_nonce_and_set(self, kind: CipherKind, nonce: bytes) -> bool:
        """Return True if ``nonce`` was seen before; otherwise remember it."""
        key = bytes(nonce)
        if kind.is_aead2022():
            with self._nonces_lock:
                now = time.monotonic()
                self._expire(now)
                seen = key in self._nonces
                self._nonces[key] = now
                self._nonces.move_to_end(key)
                return seen

        with self._bloom_lock:
            return self._bloom.check_and_set(key)