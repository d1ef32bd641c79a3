"""Error taxonomy for the Crazyradio driver.

Every error raised by this package derives from RadioError, so callers can
catch a single type when they do not care about the exact failure.
"""
from __future__ import annotations


class RadioError(RuntimeError):
    """Base class for all radio driver errors."""
    pass


class NotFoundError(RadioError):
    """Raised when the requested dongle (by index or serial) does not exist."""
    pass


class InvalidArgumentError(RadioError, ValueError):
    """Raised for an out-of-range channel or a malformed device index."""
    pass


class DongleVersionNotSupportedError(RadioError):
    """Raised when the dongle firmware is too old for this driver."""
    pass


class TransportFailureError(RadioError):
    """Raised when a USB control or bulk transfer fails.

    Attributes:
        detail: Description of the underlying failure (disconnect, stall,
            permission revoked, ...)
    """

    def __init__(self, detail: str):
        super().__init__(f"USB transfer failed: {detail}")
        self.detail = detail


class DeviceClosedError(RadioError):
    """Raised when a driver is used after it has been closed."""
    pass
