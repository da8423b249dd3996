"""Copying data between plain and encrypted streams."""

from __future__ import annotations

import inspect
from typing import Any

from .kinds import CipherCategory, CipherKind
from .tcp_aead import MAX_PACKET_SIZE as AEAD_MAX_PACKET_SIZE

AEAD2022_MAX_PACKET_SIZE = 0xFFFF
"""AEAD 2022 chunk payloads must not exceed this many bytes."""


async def _maybe_await(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


async def _write_all(writer: Any, chunk: bytes) -> int:
    written = 0
    while written < len(chunk):
        result = await _maybe_await(writer.write(chunk[written:]))
        if result is None:
            # Stream-style writers buffer everything they are given.
            return len(chunk)
        if result == 0:
            raise OSError("write zero byte into writer")
        written += result
    return written


async def _flush(writer: Any) -> None:
    drain = getattr(writer, "drain", None)
    if drain is not None:
        await _maybe_await(drain())


async def copy_stream(reader: Any, writer: Any, buffer_size: int) -> int:
    """Copy everything from ``reader`` to ``writer`` and flush at the end.

    ``reader.read(n)`` must be awaitable; ``writer.write`` may be plain or
    awaitable and may return the number of bytes it accepted. Returns the
    number of bytes copied.
    """
    if buffer_size <= 0:
        raise ValueError("buffer size must be positive")
    total = 0
    while True:
        chunk = await reader.read(buffer_size)
        if not chunk:
            break
        total += await _write_all(writer, chunk)
        await _flush(writer)
    await _flush(writer)
    return total


async def copy_from_encrypted(kind: CipherKind, reader: Any, writer: Any) -> int:
    """Copy from a decrypting reader to a plain writer."""
    if kind.category() is CipherCategory.AEAD:
        buffer_size = AEAD_MAX_PACKET_SIZE + kind.tag_len()
    else:
        buffer_size = AEAD2022_MAX_PACKET_SIZE + kind.tag_len()
    return await copy_stream(reader, writer, buffer_size)


async def copy_to_encrypted(kind: CipherKind, reader: Any, writer: Any) -> int:
    """Copy from a plain reader to an encrypting writer."""
    if kind.category() is CipherCategory.AEAD:
        buffer_size = AEAD_MAX_PACKET_SIZE
    else:
        buffer_size = AEAD2022_MAX_PACKET_SIZE
    return await copy_stream(reader, writer, buffer_size)