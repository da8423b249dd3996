import pytest

from roxy.errors import (
    AddressDomainInvalidEncoding,
    AddressTypeNotSupported,
    DataTooLong,
    DecryptDataError,
    DecryptLengthError,
    InvalidSocketType,
    InvalidTimestamp,
    PacketTooShort,
    ProtocolError,
)


def test_packet_too_short_message_and_fields():
    err = PacketTooShort(10, 5)
    assert str(err) == "packet too short, at least 10 bytes, but found 5 bytes"
    assert (err.expected, err.found) == (10, 5)


def test_invalid_socket_type_uses_hex():
    err = InvalidSocketType(0x1, 0x0)
    assert str(err) == "invalid socket type, expecting 0x1, but found 0x0"


def test_address_type_not_supported():
    err = AddressTypeNotSupported(0x1F)
    assert str(err) == "address type 0x1f not supported"
    assert err.addr_type == 0x1F


def test_invalid_timestamp_keeps_values():
    err = InvalidTimestamp(100, 130)
    assert (err.timestamp, err.now) == (100, 130)
    assert str(err).startswith("invalid timestamp 100 - now 130 = ")


def test_data_too_long_keeps_size():
    err = DataTooLong(0x4000)
    assert err.size == 0x4000
    assert "0x4000" in str(err)


def test_fixed_messages():
    assert str(DecryptLengthError()) == "decrypt length failed"
    assert str(AddressDomainInvalidEncoding()) == "address domain name must be UTF-8 encoding"


@pytest.mark.parametrize(
    "error,fragment",
    [
        (PacketTooShort(1, 0), "packet too short"),
        (InvalidSocketType(1, 0), "invalid socket type"),
        (InvalidTimestamp(1, 2), "invalid timestamp 1"),
        (DecryptLengthError(), "decrypt length failed"),
        (DecryptDataError(), "decrypt"),
        (DataTooLong(0x4000), "0x4000"),
        (AddressDomainInvalidEncoding(), "UTF-8"),
        (AddressTypeNotSupported(9), "0x9"),
    ],
)
def test_all_are_protocol_errors(error, fragment):
    assert isinstance(error, ProtocolError)
    message = str(error)
    assert fragment in message
    assert message.strip() == message and message != ""