"""Low-level driver for one Crazyradio dongle.

The RadioDriver owns an opened DeviceHandle and remembers the last channel
and address written to the radio. Writes are skipped when the requested
value is already programmed, which turns a channel scan from one address
write per channel into a single write.

This module handles:
- Opening a dongle by index or serial number
- Programming channel and address (write-through cache)
- Sending a packet and decoding the acknowledgment

Note: A RadioDriver is NOT safe for concurrent use. Share it between tasks
      through SharedRadio.
"""
from __future__ import annotations

import logging
from functools import partial
from typing import Optional, Tuple

from anyio import to_thread

from ..errors import (
    DeviceClosedError,
    DongleVersionNotSupportedError,
    InvalidArgumentError,
    NotFoundError,
)
from ..models import Ack, Address, AddressLike, Channel
from ..protocol import (
    AckParser,
    BULK_IN_ENDPOINT,
    BULK_OUT_ENDPOINT,
    ConfigurationRequest,
    MAX_ACK_SIZE,
)
from ..transport.base import DeviceHandle
from ..transport.usb import DEFAULT_TIMEOUT_MS, UsbDeviceHandle
from .dongle_finder import DongleInfo, find_dongles

logger = logging.getLogger(__name__)

MIN_FIRMWARE_VERSION = 0.3


class RadioDriver:
    """Driver for a single Crazyradio dongle.

    Responsibilities:
    - Cache the programmed channel and address
    - Issue configuration control transfers only on change
    - Exchange one packet and decode the ack

    Example:
        >>> radio = await RadioDriver.open_first()
        >>> await radio.set_channel(Channel.from_number(80))
        >>> await radio.set_address(DEFAULT_ADDRESS)
        >>> ack, payload = await radio.send_packet(b"\\xff")
        >>> await radio.close()
    """

    def __init__(self, device: DeviceHandle):
        """Initialize driver.

        Args:
            device: Opened and claimed device handle. The driver takes
                ownership and closes it in close().
        """
        self._device = device
        # None means never programmed: the first set_* always writes
        self._current_channel: Optional[Channel] = None
        self._current_address: Optional[Address] = None
        self._closed = False

    # --- Opening ---

    @classmethod
    async def open_nth(cls, nth: int, timeout_ms: int = DEFAULT_TIMEOUT_MS) -> RadioDriver:
        """Open the nth connected dongle (bus enumeration order).

        Raises:
            InvalidArgumentError: if nth is negative
            NotFoundError: if fewer than nth + 1 dongles are connected
            DongleVersionNotSupportedError: if the firmware is too old
            TransportFailureError: if the device cannot be claimed
        """
        if isinstance(nth, bool) or not isinstance(nth, int) or nth < 0:
            raise InvalidArgumentError(f"Dongle index must be a non-negative integer, got {nth!r}")

        dongles = await to_thread.run_sync(find_dongles)
        if nth >= len(dongles):
            raise NotFoundError(f"Dongle #{nth} not found ({len(dongles)} connected)")
        return await cls._open(dongles[nth], timeout_ms)

    @classmethod
    async def open_first(cls, timeout_ms: int = DEFAULT_TIMEOUT_MS) -> RadioDriver:
        """Open the first connected dongle."""
        return await cls.open_nth(0, timeout_ms=timeout_ms)

    @classmethod
    async def open_by_serial(cls, serial: str, timeout_ms: int = DEFAULT_TIMEOUT_MS) -> RadioDriver:
        """Open the dongle with the given USB serial number.

        Raises:
            NotFoundError: if no connected dongle has this serial
        """
        if serial:
            dongles = await to_thread.run_sync(
                partial(find_dongles, matcher=lambda info: info.serial_number == serial)
            )
            if dongles:
                return await cls._open(dongles[0], timeout_ms)
        raise NotFoundError(f"No dongle with serial {serial!r}")

    @classmethod
    async def _open(cls, info: DongleInfo, timeout_ms: int) -> RadioDriver:
        if info.version < MIN_FIRMWARE_VERSION:
            raise DongleVersionNotSupportedError(
                f"Dongle {info.device_id} runs firmware {info.version}, "
                f"{MIN_FIRMWARE_VERSION} or later is required"
            )
        handle = await UsbDeviceHandle.open(info.device, timeout_ms=timeout_ms)
        logger.info(f"Opened dongle {info.device_id} (firmware {info.version})")
        return cls(handle)

    async def close(self) -> None:
        """Close the underlying device handle. Later calls are no-ops."""
        if self._closed:
            return
        self._closed = True
        await self._device.close()
        self._current_channel = None
        self._current_address = None
        logger.info("Dongle closed")

    async def __aenter__(self) -> RadioDriver:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    # --- Configuration ---

    @property
    def current_channel(self) -> Optional[Channel]:
        """Last channel successfully programmed, or None."""
        return self._current_channel

    @property
    def current_address(self) -> Optional[Address]:
        """Last address successfully programmed, or None."""
        return self._current_address

    async def set_channel(self, channel: Channel) -> None:
        """Program the radio channel unless it is already active.

        The cache is only updated once the control transfer succeeded, so a
        failed write is retried by the next call.

        Raises:
            TransportFailureError: if the control transfer fails
            DeviceClosedError: if the driver has been closed
        """
        self._check_open()
        if channel == self._current_channel:
            return

        await self._device.control_transfer_out(
            ConfigurationRequest.SET_RADIO_CHANNEL, int(channel)
        )
        self._current_channel = channel
        logger.debug(f"Channel set to {channel}")

    async def set_address(self, address: AddressLike) -> None:
        """Program the 5-byte radio address unless it is already active.

        Raises:
            TransportFailureError: if the control transfer fails
            DeviceClosedError: if the driver has been closed
        """
        address = Address.ensure(address)
        self._check_open()
        if address == self._current_address:
            return

        await self._device.control_transfer_out(
            ConfigurationRequest.SET_RADIO_ADDRESS, 0, 0, bytes(address)
        )
        self._current_address = address
        logger.debug(f"Address set to {address}")

    # --- Data ---

    async def send_packet(self, packet: bytes) -> Tuple[Ack, bytes]:
        """Send one packet and wait for the dongle's ack report.

        Args:
            packet: Raw packet bytes, sent verbatim

        Returns:
            (Ack, payload). The payload is empty when no ack was received.

        Raises:
            TransportFailureError: if either bulk transfer fails
            DeviceClosedError: if the driver has been closed
        """
        self._check_open()
        await self._device.bulk_transfer_out(BULK_OUT_ENDPOINT, bytes(packet))
        response = await self._device.bulk_transfer_in(BULK_IN_ENDPOINT, MAX_ACK_SIZE)
        ack, payload = AckParser.parse(response)
        logger.debug(f"Sent {len(packet)} bytes, ack={ack.received}, payload={len(payload)} bytes")
        return ack, payload

    @property
    def is_closed(self) -> bool:
        return self._closed

    def _check_open(self) -> None:
        # pyusb silently reopens a disposed device, so refuse here
        if self._closed:
            raise DeviceClosedError("Dongle has been closed")
