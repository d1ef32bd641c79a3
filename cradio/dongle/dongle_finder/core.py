from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional

import usb.core
import usb.util
from anyio import to_thread

from ...errors import TransportFailureError
from ...transport.usb import device_version

logger = logging.getLogger(__name__)

CRADIO_VID = 0x1915
CRADIO_PID = 0x7777


@dataclass(frozen=True)
class DongleInfo:
    """
    Representation of one Crazyradio dongle as seen by pyusb.

    Attributes:
        bus: USB bus number.
        address: Device address on the bus.
        vid: USB Vendor ID.
        pid: USB Product ID.
        manufacturer: USB manufacturer string, if readable.
        product: USB product string, if readable.
        serial_number: USB serial string, if readable.
        version: Firmware version decoded from bcdDevice (e.g. 0.52).
        device: The pyusb device object, used to open the dongle.
    """
    bus: int
    address: int
    vid: int
    pid: int
    manufacturer: Optional[str]
    product: Optional[str]
    serial_number: Optional[str]
    version: float
    device: Any = field(default=None, compare=False, repr=False)

    @property
    def device_id(self) -> str:
        """
        Identifier for the dongle.

        Prefer the USB serial_number (stable across ports and reboots);
        fall back to the bus location if serial is missing.
        """
        if self.serial_number:
            return self.serial_number
        return f"{self.bus}-{self.address}"


def _read_string(device, index: int) -> Optional[str]:
    """Read a USB string descriptor, returning None if unreadable.

    Reading strings needs write access to the device node, so on systems
    without udev rules this fails for an otherwise visible dongle.
    """
    if not index:
        return None
    try:
        return usb.util.get_string(device, index)
    except (usb.core.USBError, ValueError, NotImplementedError) as e:
        logger.debug(f"Cannot read string descriptor {index}: {e}")
        return None


def _device_to_info(device) -> DongleInfo:
    """Convert a pyusb device to DongleInfo."""
    return DongleInfo(
        bus=device.bus,
        address=device.address,
        vid=device.idVendor,
        pid=device.idProduct,
        manufacturer=_read_string(device, device.iManufacturer),
        product=_read_string(device, device.iProduct),
        serial_number=_read_string(device, device.iSerialNumber),
        version=device_version(device),
        device=device,
    )


def find_dongles(
    *,
    matcher: Optional[Callable[[DongleInfo], bool]] = None,
    vid: int = CRADIO_VID,
    pid: int = CRADIO_PID,
) -> List[DongleInfo]:
    """
    Find all dongles with the given VID/PID, in bus enumeration order.

    Args:
        matcher: Optional predicate; only dongles for which it returns
            True are kept.
        vid: USB Vendor ID to look for.
        pid: USB Product ID to look for.

    This blocks the calling thread; from async code use `list_serials()`
    or run it with `anyio.to_thread.run_sync`.

    Returns:
        List of DongleInfo objects.

    Raises:
        TransportFailureError: if pyusb has no usable libusb backend
    """
    try:
        devices = list(usb.core.find(find_all=True, idVendor=vid, idProduct=pid))
    except usb.core.NoBackendError as e:
        logger.error(f"No USB backend available: {e}")
        raise TransportFailureError(f"no USB backend: {e}") from e

    results: List[DongleInfo] = []

    for device in devices:
        info = _device_to_info(device)
        if matcher is None or matcher(info):
            results.append(info)

    return results


async def list_serials() -> List[str]:
    """Serial numbers of all connected Crazyradio dongles.

    Dongles whose serial cannot be read are skipped.
    """
    dongles = await to_thread.run_sync(find_dongles)
    return [info.serial_number for info in dongles if info.serial_number]
