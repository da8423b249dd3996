import pytest

from roxy.kinds import CipherCategory, CipherKind, UnsupportedCipherError

ALL_NAMES = [
    "aes-128-gcm",
    "aes-256-gcm",
    "2022-blake3-aes-128-gcm",
    "2022-blake3-aes-256-gcm",
    "2022-blake3-chacha20-poly1305",
    "2022-blake3-chacha8-poly1305",
]

AEAD2022_NAMES = [name for name in ALL_NAMES if name.startswith("2022-")]


@pytest.mark.parametrize("name", ALL_NAMES)
def test_parse_round_trip(name):
    assert str(CipherKind.parse(name)) == name


def test_parse_known():
    assert CipherKind.parse("aes-256-gcm") is CipherKind.AES_256_GCM


@pytest.mark.parametrize("name", ["", "AES-128-GCM", "chacha20-ietf-poly1305", "rc4"])
def test_parse_unknown(name):
    with pytest.raises(UnsupportedCipherError):
        CipherKind.parse(name)


@pytest.mark.parametrize("name", ALL_NAMES)
def test_aead_and_aead2022_are_exclusive(name):
    kind = CipherKind.parse(name)
    assert kind.is_aead() != kind.is_aead2022()
    assert kind.is_aead2022() == name.startswith("2022-")


def test_categories():
    assert CipherKind.AES_128_GCM.category() is CipherCategory.AEAD
    assert CipherKind.AEAD2022_BLAKE3_AES_128_GCM.category() is CipherCategory.AEAD2022
    for name in ALL_NAMES:
        kind = CipherKind.parse(name)
        expected = CipherCategory.AEAD if kind.is_aead() else CipherCategory.AEAD2022
        assert kind.category() is expected


def test_key_lengths():
    assert CipherKind.AES_128_GCM.key_len() == 128 // 8
    assert CipherKind.AES_256_GCM.key_len() == 256 // 8


def test_salt_len_equals_key_len():
    for kind in (CipherKind.AES_128_GCM, CipherKind.AES_256_GCM):
        assert kind.salt_len() == kind.key_len()


def test_tag_len():
    assert CipherKind.AES_128_GCM.tag_len() == 16
    assert CipherKind.AES_256_GCM.tag_len() == 16


def test_nonce_len_rejects_aead():
    with pytest.raises(UnsupportedCipherError):
        CipherKind.AES_128_GCM.nonce_len()


@pytest.mark.parametrize("name", AEAD2022_NAMES)
def test_aead2022_lengths_undefined(name):
    kind = CipherKind.parse(name)
    with pytest.raises(UnsupportedCipherError):
        kind.key_len()
    with pytest.raises(UnsupportedCipherError):
        kind.tag_len()
    with pytest.raises(UnsupportedCipherError):
        kind.nonce_len()