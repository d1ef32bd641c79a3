"""pyusb implementation of the DeviceHandle interface.

pyusb calls block the calling thread, so every transfer is handed to a
worker thread with ``anyio.to_thread.run_sync``. The awaiting task suspends
until the transfer completes, fails, or hits the pyusb timeout.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, TypeVar

import usb.core
import usb.util
from anyio import to_thread

from ..errors import DeviceClosedError, TransportFailureError
from ..protocol.constants import VENDOR_OUT_REQUEST_TYPE
from .base import DeviceHandle

logger = logging.getLogger(__name__)

USB_CONFIGURATION = 1
USB_INTERFACE = 0
DEFAULT_TIMEOUT_MS = 1000

T = TypeVar("T")

# Errors pyusb raises for a failed transfer (disconnect, stall, bad endpoint,
# missing backend support)
USB_FAILURES = (usb.core.USBError, ValueError, NotImplementedError)


def device_version(device: Any) -> float:
    """Firmware version encoded in bcdDevice, e.g. 0x0052 -> 0.52."""
    bcd = device.bcdDevice
    return float("{0:x}.{1:x}".format(bcd >> 8, bcd & 0xFF))


class UsbDeviceHandle(DeviceHandle):
    """DeviceHandle backed by a pyusb ``usb.core.Device``.

    Use :meth:`open` to configure the device and claim its interface; the
    constructor assumes that has already happened.

    Example:
        >>> device = usb.core.find(idVendor=0x1915, idProduct=0x7777)
        >>> handle = await UsbDeviceHandle.open(device)
        >>> await handle.bulk_transfer_out(0x01, b"\\xff")
        >>> await handle.close()
    """

    def __init__(self, device: Any, timeout_ms: int = DEFAULT_TIMEOUT_MS):
        """Wrap an already claimed pyusb device.

        Args:
            device: pyusb device object
            timeout_ms: Per-transfer timeout passed to pyusb
        """
        self._device = device
        self._timeout_ms = timeout_ms
        self._closed = False

    @classmethod
    async def open(cls, device: Any, timeout_ms: int = DEFAULT_TIMEOUT_MS) -> UsbDeviceHandle:
        """Select configuration 1 and claim interface 0 in a worker thread.

        Raises:
            TransportFailureError: if the device cannot be configured or claimed
        """
        await cls._run("open", _claim_device, device)
        logger.debug(f"Claimed interface {USB_INTERFACE} on bus {device.bus} address {device.address}")
        return cls(device, timeout_ms=timeout_ms)

    @property
    def device(self) -> Any:
        """Underlying pyusb device."""
        return self._device

    @property
    def is_closed(self) -> bool:
        return self._closed

    async def control_transfer_out(
        self,
        request: int,
        value: int,
        index: int = 0,
        data: bytes = b"",
    ) -> None:
        self._check_open()
        await self._run(
            "control transfer",
            self._device.ctrl_transfer,
            VENDOR_OUT_REQUEST_TYPE,
            request,
            value,
            index,
            bytes(data),
            self._timeout_ms,
        )

    async def bulk_transfer_out(self, endpoint: int, data: bytes) -> None:
        self._check_open()
        await self._run(
            "bulk out transfer", self._device.write, endpoint, bytes(data), self._timeout_ms
        )

    async def bulk_transfer_in(self, endpoint: int, length: int) -> bytes:
        self._check_open()
        response = await self._run(
            "bulk in transfer", self._device.read, endpoint, length, self._timeout_ms
        )
        return bytes(response)

    async def close(self) -> None:
        """Release the interface and dispose pyusb resources."""
        if self._closed:
            return
        self._closed = True
        try:
            await to_thread.run_sync(_release_device, self._device)
        except USB_FAILURES as e:
            # Device may already be unplugged
            logger.warning(f"Error releasing USB device: {e}")
        logger.debug("USB device released")

    # Internal methods

    def _check_open(self) -> None:
        if self._closed:
            raise DeviceClosedError("USB device handle has been closed")

    @staticmethod
    async def _run(what: str, func: Callable[..., T], *args: Any) -> T:
        """Run a blocking pyusb call in a worker thread, translating errors."""
        try:
            return await to_thread.run_sync(func, *args)
        except USB_FAILURES as e:
            logger.error(f"USB {what} failed: {e}")
            raise TransportFailureError(f"{what}: {e}") from e


def _claim_device(device: Any) -> None:
    """Configure the device and claim the radio interface (blocking).

    On failure the pyusb handle opened by set_configuration is disposed
    before the error propagates.
    """
    try:
        try:
            cfg = device.get_active_configuration()
        except usb.core.USBError:
            cfg = None
        if cfg is None or cfg.bConfigurationValue != USB_CONFIGURATION:
            device.set_configuration(USB_CONFIGURATION)
        usb.util.claim_interface(device, USB_INTERFACE)
    except USB_FAILURES:
        usb.util.dispose_resources(device)
        raise


def _release_device(device: Any) -> None:
    """Release the radio interface and free pyusb resources (blocking)."""
    try:
        usb.util.release_interface(device, USB_INTERFACE)
    finally:
        usb.util.dispose_resources(device)
