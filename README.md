# roxy

Asyncio building blocks for a Shadowsocks AEAD client.

## Modules

- `roxy.kinds` has `CipherKind`. It names every supported method: `aes-128-gcm`, `aes-256-gcm`
  and the `2022-blake3-*` family. `CipherKind.parse` turns a method name into a kind.
  `key_len`, `salt_len` and `tag_len` are defined only for the two AES-GCM methods. For the
  2022 methods they raise `UnsupportedCipherError`, and so does `nonce_len` for every method.
- `roxy.address` has `SocketAddress` and `DomainNameAddress`.
  - `to_bytes()` serializes them in the SOCKS5 address format, and `serialized_len()` gives the
    length of that form.
  - `parse_address` reads `ip:port`, `[ipv6]:port` or `domain:port` text and raises
    `AddressError` when it cannot.
  - `read_address` reads the wire format from any object with an awaitable `readexactly`.
- `roxy.errors` holds the protocol exceptions. All of them derive from `ProtocolError`.
- `roxy.aead` has the primitives `Aes128Gcm`, `Aes256Gcm` and `XChaCha20Poly1305`. They encrypt
  to `ciphertext || tag`, and `AuthenticationError` is raised when decryption fails.
- `roxy.cipher` has `Cipher`. It is the AES-GCM session cipher, keyed with an HKDF-SHA1 subkey
  and using a little-endian counter nonce. `generate_nonce` and `random_iv_or_salt` return
  random salts that are never all zero.
- `roxy.tcp_aead` has `DecryptedReader` and `EncryptedWriter` for AEAD stream chunks, whose
  payloads are at most `0x3FFF` bytes. It also has `decrypt_length`.
- `roxy.relay` has `copy_stream`, `copy_from_encrypted` and `copy_to_encrypted`. They pump data
  between readers and writers.
- `roxy.crypto_stream` has `CryptoStream`, an encrypted read/write pair over a reader and a
  writer.
- `roxy.proxy` has `ProxyStream`.
  - `ProxyStream.connect` opens a TCP connection to a server, resolving its name first if
    needed.
  - The first `write` sends the target address along with the data.
  - `proxy` relays a local connection until either side ends.
  - `make_first_packet_buffer` builds that first packet.
- `roxy.resolver` has `Resolver`. It is an asynchronous DNS resolver that queries only the name
  servers you give it. It tries A records first, then AAAA, and raises `ResolveError` on
  failure.
- `roxy.replay` has `ReplayProtector`, which detects repeated salts or nonces.
  - For AEAD methods it uses `PingPongBloom`, a pair of `BloomFilter`s.
  - For 2022 methods it uses a set of nonces that expires after a time window.
- `roxy.options` holds the dataclasses `ConnectOpts`, `TcpSocketOpts` and
  `UdpSocketControlData`. It also has `addr_family` and `aead_2022_padding_size`.
- `roxy.clock` has `now_timestamp`, which reads a coarse monotonic clock as 32.32 fixed-point
  seconds.
- `roxy.cron` parses cron expressions with 5, 6 or 7 fields into a `Cron` value. It raises
  `CronError` for a wrong field count, a bad range or an unknown month or day name.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Example

```python
import asyncio

from roxy.address import parse_address
from roxy.kinds import CipherKind
from roxy.proxy import ProxyStream
from roxy.resolver import Resolver


async def handle(local_reader, local_writer):
    kind = CipherKind.parse("aes-256-gcm")
    key = bytes(kind.key_len())  # derive the real key from your configuration
    server = parse_address("proxy.example.com:8388")
    target = parse_address("example.com:80")
    resolver = Resolver([("192.0.2.53", 53)])

    stream = await ProxyStream.connect(server, kind, key, target, resolver, None)
    try:
        await stream.proxy(local_reader, local_writer)
    finally:
        await stream.close()
```

## Cron expressions

```python
from roxy.cron import Cron, parse_cron

schedule = parse_cron("*/5 * * * *")
assert schedule.minutes == frozenset(range(0, 60, 5))
assert schedule.hours is Cron.ALL
```

## What it does not do

- There is no command-line program and no listening server. You supply the local connections
  yourself, for example from `asyncio.start_server`.
- There is no parser for server configuration files or URLs, and no way to derive a key from a
  password.
- Encrypted streams support only `aes-128-gcm` and `aes-256-gcm`. Passing a `2022-blake3-*`
  method to `CryptoStream` or `Cipher` raises `UnsupportedCipherError`.
- There is no UDP relay.
- `roxy.cron` only parses schedules. It does not compute when a schedule next fires.