"""Abstract base class for the USB device handle.

The DeviceHandle interface is the seam between the radio driver and the
platform USB bindings. The driver only needs vendor control-out transfers
and bulk transfers; everything else (configuration, interface claiming,
kernel drivers) is the implementation's business.

Key principles:
- Every transfer is a coroutine; callers suspend while it completes
- Failures surface as TransportFailureError, never as backend exceptions
- A handle is used by one task at a time (the caller serializes access)
"""
from __future__ import annotations

from abc import ABC, abstractmethod


class DeviceHandle(ABC):
    """Abstract handle to an opened, claimed USB interface.

    Implementations can be backed by pyusb, WebUSB, or an in-memory fake
    for tests.
    """

    @abstractmethod
    async def control_transfer_out(
        self,
        request: int,
        value: int,
        index: int = 0,
        data: bytes = b"",
    ) -> None:
        """Issue a vendor control-out transfer to the device.

        Args:
            request: bRequest code
            value: wValue field
            index: wIndex field
            data: Payload to send in the data stage (may be empty)

        Raises:
            TransportFailureError: if the transfer fails
        """
        pass

    @abstractmethod
    async def bulk_transfer_out(self, endpoint: int, data: bytes) -> None:
        """Write ``data`` to a bulk-out endpoint.

        Raises:
            TransportFailureError: if the transfer fails
        """
        pass

    @abstractmethod
    async def bulk_transfer_in(self, endpoint: int, length: int) -> bytes:
        """Read up to ``length`` bytes from a bulk-in endpoint.

        Raises:
            TransportFailureError: if the transfer fails
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Release the interface and free backend resources.

        Should be safe to call multiple times.
        """
        pass

    async def __aenter__(self) -> DeviceHandle:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
