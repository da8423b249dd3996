import asyncio

import pytest

from roxy.kinds import CipherKind, UnsupportedCipherError
from roxy.relay import copy_from_encrypted, copy_stream, copy_to_encrypted
from roxy.tcp_aead import MAX_PACKET_SIZE


def stream_of(data):
    reader = asyncio.StreamReader()
    reader.feed_data(bytes(data))
    reader.feed_eof()
    return reader


class Sink:
    def __init__(self):
        self.data = bytearray()
        self.writes = []
        self.drains = 0

    def write(self, data):
        self.data += data
        self.writes.append(bytes(data))

    async def drain(self):
        self.drains += 1


class PartialWriter:
    """Accepts at most ``limit`` bytes per call and reports the count."""

    def __init__(self, limit):
        self.limit = limit
        self.data = bytearray()

    async def write(self, data):
        accepted = bytes(data[: self.limit])
        self.data += accepted
        return len(accepted)


class ZeroWriter:
    async def write(self, data):
        return 0


class ChunkedReader:
    def __init__(self, chunks):
        self.chunks = list(chunks)
        self.sizes = []

    async def read(self, n):
        self.sizes.append(n)
        return self.chunks.pop(0) if self.chunks else b""


@pytest.mark.asyncio
async def test_copy_stream_copies_everything():
    payload = bytes(range(256)) * 10
    sink = Sink()
    copied = await copy_stream(stream_of(payload), sink, 100)
    assert copied == len(payload)
    assert bytes(sink.data) == payload
    assert all(len(w) <= 100 for w in sink.writes)
    assert sink.drains >= 1


@pytest.mark.asyncio
async def test_copy_stream_empty_reader():
    sink = Sink()
    assert await copy_stream(stream_of(b""), sink, 16) == 0
    assert sink.data == bytearray()
    assert sink.drains == 1


@pytest.mark.asyncio
async def test_copy_stream_handles_partial_writes():
    payload = b"abcdefghij" * 5
    writer = PartialWriter(3)
    assert await copy_stream(stream_of(payload), writer, 16) == len(payload)
    assert bytes(writer.data) == payload


@pytest.mark.asyncio
async def test_copy_stream_write_zero_raises():
    with pytest.raises(OSError):
        await copy_stream(stream_of(b"data"), ZeroWriter(), 16)


@pytest.mark.asyncio
async def test_copy_stream_rejects_bad_buffer_size():
    with pytest.raises(ValueError):
        await copy_stream(stream_of(b"data"), Sink(), 0)


@pytest.mark.asyncio
async def test_copy_to_encrypted_uses_packet_size_buffer():
    reader = ChunkedReader([b"one", b"two"])
    sink = Sink()
    copied = await copy_to_encrypted(CipherKind.AES_128_GCM, reader, sink)
    assert copied == 6
    assert bytes(sink.data) == b"onetwo"
    assert set(reader.sizes) == {MAX_PACKET_SIZE}


@pytest.mark.asyncio
async def test_copy_from_encrypted_adds_tag_to_buffer():
    kind = CipherKind.AES_256_GCM
    reader = ChunkedReader([b"payload"])
    sink = Sink()
    assert await copy_from_encrypted(kind, reader, sink) == len(b"payload")
    assert bytes(sink.data) == b"payload"
    assert set(reader.sizes) == {MAX_PACKET_SIZE + kind.tag_len()}


@pytest.mark.asyncio
async def test_copy_from_encrypted_aead2022_tag_undefined():
    with pytest.raises(UnsupportedCipherError):
        await copy_from_encrypted(
            CipherKind.AEAD2022_BLAKE3_AES_128_GCM, stream_of(b""), Sink()
        )


@pytest.mark.asyncio
async def test_copy_to_encrypted_aead2022_copies():
    reader = ChunkedReader([b"xyz"])
    sink = Sink()
    copied = await copy_to_encrypted(
        CipherKind.AEAD2022_BLAKE3_AES_256_GCM, reader, sink
    )
    assert copied == 3
    assert bytes(sink.data) == b"xyz"
    assert set(reader.sizes) == {0xFFFF}