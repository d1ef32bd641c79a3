"""Immutable value types shared by the driver layers.

All models are frozen dataclasses so they can be passed between tasks
without copying.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Union

from .errors import InvalidArgumentError

# Channels 126 and 127 fit in the 7-bit register but are not usable
CHANNEL_COUNT = 126
ADDRESS_LENGTH = 5


@dataclass(frozen=True, order=True)
class Channel:
    """A validated radio channel number in ``[0, 126)``.

    Attributes:
        number: Channel number as written to the channel register

    Example:
        >>> Channel.from_number(80)
        Channel(number=80)
        >>> int(Channel.from_number(80))
        80
    """
    number: int

    def __post_init__(self) -> None:
        if isinstance(self.number, bool) or not isinstance(self.number, int):
            raise InvalidArgumentError(f"Channel must be an integer, got {self.number!r}")
        if not 0 <= self.number < CHANNEL_COUNT:
            raise InvalidArgumentError(
                f"Channel must be in [0, {CHANNEL_COUNT}), got {self.number}"
            )

    @classmethod
    def from_number(cls, number: int) -> Channel:
        """Build a channel, raising InvalidArgumentError when out of range."""
        return cls(number)

    def __int__(self) -> int:
        return self.number

    def __index__(self) -> int:
        return self.number

    def __str__(self) -> str:
        return str(self.number)


AddressLike = Union["Address", bytes, bytearray, Iterable[int]]


@dataclass(frozen=True)
class Address:
    """A 5-byte radio address used to filter incoming traffic.

    Any 5-byte value is accepted; whether the remote side listens on it is
    not the driver's concern.
    """
    value: bytes

    def __post_init__(self) -> None:
        # bytes(5) would silently build five zero bytes, bytes("..") needs an encoding
        if isinstance(self.value, (int, str)):
            raise InvalidArgumentError(
                f"Address must be a 5-byte sequence, got {type(self.value).__name__}"
            )
        try:
            value = bytes(self.value)
        except (TypeError, ValueError) as e:
            raise InvalidArgumentError(f"Invalid address {self.value!r}: {e}") from None
        if len(value) != ADDRESS_LENGTH:
            raise InvalidArgumentError(
                f"Address must be {ADDRESS_LENGTH} bytes long, got {len(value)}"
            )
        object.__setattr__(self, "value", value)

    @classmethod
    def ensure(cls, address: AddressLike) -> Address:
        """Return ``address`` unchanged if it already is an Address, wrap it otherwise."""
        if isinstance(address, cls):
            return address
        return cls(address)

    @classmethod
    def from_hex(cls, text: str) -> Address:
        """Parse an address like ``"E7E7E7E7E7"``."""
        try:
            value = bytes.fromhex(text)
        except ValueError as e:
            raise InvalidArgumentError(f"Invalid hex address {text!r}: {e}") from None
        return cls(value)

    def hex(self) -> str:
        return self.value.hex().upper()

    def __bytes__(self) -> bytes:
        return self.value

    def __str__(self) -> str:
        return self.hex()


DEFAULT_ADDRESS = Address(b"\xe7" * ADDRESS_LENGTH)


@dataclass(frozen=True)
class Ack:
    """Result of one packet exchange with the dongle.

    Attributes:
        received: True if the remote radio acknowledged the packet
        power_detector: Power detector flag reported with the ack (not
            reported by the current wire format, always False)
        retry: Number of retransmissions before the ack (not reported by
            the current wire format, always 0)
        length: Length of the ack payload; 0 when nothing was received
    """
    received: bool = False
    power_detector: bool = False
    retry: int = 0
    length: int = 0
