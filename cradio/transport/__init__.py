"""USB transport layer for the Crazyradio dongle."""

from .base import DeviceHandle
from .usb import UsbDeviceHandle

__all__ = ["DeviceHandle", "UsbDeviceHandle"]
