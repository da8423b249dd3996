"""Errors raised by the shadowsocks protocol layer."""


class ProtocolError(Exception):
    """Base class for shadowsocks protocol failures."""


class PacketTooShort(ProtocolError):
    """A packet was shorter than the protocol requires."""

    def __init__(self, expected: int, found: int) -> None:
        super().__init__(
            f"packet too short, at least {expected} bytes, but found {found} bytes"
        )
        self.expected = expected
        self.found = found


class InvalidSocketType(ProtocolError):
    """The socket type byte did not have the expected value."""

    def __init__(self, expected: int, found: int) -> None:
        super().__init__(
            f"invalid socket type, expecting {expected:#x}, but found {found:#x}"
        )
        self.expected = expected
        self.found = found


class InvalidTimestamp(ProtocolError):
    """A header timestamp was too far from the local clock."""

    def __init__(self, timestamp: int, now: int) -> None:
        super().__init__(
            f"invalid timestamp {timestamp} - now {now} = {timestamp - now}"
        )
        self.timestamp = timestamp
        self.now = now


class DecryptLengthError(ProtocolError):
    """A length chunk failed to authenticate."""

    def __init__(self) -> None:
        super().__init__("decrypt length failed")


class DecryptDataError(ProtocolError):
    """A data chunk failed to authenticate."""

    def __init__(self) -> None:
        super().__init__("decrypt data failed")


class DataTooLong(ProtocolError):
    """A chunk length exceeded the AEAD limit of 0x3FFF."""

    def __init__(self, size: int) -> None:
        super().__init__(
            f"buffer size too large ({size:#x}), AEAD encryption protocol requires "
            "buffer to be smaller than 0x3FFF, the higher two bits must be set to zero"
        )
        self.size = size


class AddressDomainInvalidEncoding(ProtocolError):
    """A domain name in an address was not valid UTF-8."""

    def __init__(self) -> None:
        super().__init__("address domain name must be UTF-8 encoding")


class AddressTypeNotSupported(ProtocolError):
    """An address carried an unknown type byte."""

    def __init__(self, addr_type: int) -> None:
        super().__init__(f"address type {addr_type:#x} not supported")
        self.addr_type = addr_type