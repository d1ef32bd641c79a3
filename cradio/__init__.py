"""Crazyradio SDK - async driver for the Crazyradio USB dongle."""

from .errors import (
    RadioError,
    NotFoundError,
    InvalidArgumentError,
    DongleVersionNotSupportedError,
    TransportFailureError,
    DeviceClosedError,
)
from .models import Ack, Address, Channel, DEFAULT_ADDRESS
from .transport import DeviceHandle, UsbDeviceHandle
from .dongle import RadioDriver, SharedRadio, list_serials

__all__ = [
    "RadioError",
    "NotFoundError",
    "InvalidArgumentError",
    "DongleVersionNotSupportedError",
    "TransportFailureError",
    "DeviceClosedError",
    "Ack",
    "Address",
    "Channel",
    "DEFAULT_ADDRESS",
    "DeviceHandle",
    "UsbDeviceHandle",
    "RadioDriver",
    "SharedRadio",
    "list_serials",
]
