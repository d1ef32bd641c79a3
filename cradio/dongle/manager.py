"""Shared access to one dongle from many tasks.

SharedRadio is the public entry point once a dongle has been opened. It
owns the RadioDriver and hands it to one task at a time through a fair
lock, so configuration writes from different callers never interleave
inside a single exchange.
"""
from __future__ import annotations

import logging
from typing import List, Tuple, Union

from anyio import Lock

from ..models import Ack, Address, AddressLike, Channel
from .connection import RadioDriver

logger = logging.getLogger(__name__)


class SharedRadio:
    """Lock-gated facade over a RadioDriver.

    Every call acquires the lock, programs the radio, exchanges a packet and
    releases the lock, even when a transfer fails. Waiting callers are served
    in arrival order.

    Example:
        >>> radio = SharedRadio(await RadioDriver.open_first())
        >>> found = await radio.scan(Channel(0), Channel(80), DEFAULT_ADDRESS, b"\\xff")
        >>> ack, payload = await radio.send_packet(found[0], DEFAULT_ADDRESS, b"\\xff")
    """

    def __init__(self, radio: RadioDriver):
        """Take ownership of ``radio``.

        Args:
            radio: Opened driver. Nothing else may keep using it directly.
        """
        self._radio = radio
        self._lock = Lock()

    async def send_packet(
        self,
        channel: Channel,
        address: AddressLike,
        payload: bytes,
    ) -> Tuple[Ack, bytes]:
        """Send ``payload`` on ``channel`` to ``address`` as one atomic exchange.

        Channel is programmed first, then address, then the packet is sent.

        Returns:
            (Ack, ack payload)

        Raises:
            TransportFailureError: if any transfer fails
            InvalidArgumentError: if the address is not 5 bytes long; nothing
                is written to the dongle
        """
        address = Address.ensure(address)
        async with self._lock:
            await self._radio.set_channel(channel)
            await self._radio.set_address(address)
            return await self._radio.send_packet(payload)

    async def scan(
        self,
        start: Union[Channel, int],
        stop: Union[Channel, int],
        address: AddressLike,
        payload: bytes,
    ) -> List[Channel]:
        """Probe every channel from ``start`` to ``stop`` inclusive.

        The lock is taken and released once per channel so other callers
        can send packets while a scan is running.

        Args:
            start: First channel to probe (Channel or raw number)
            stop: Last channel to probe; ``stop < start`` scans nothing.
                Raw numbers are validated as the scan reaches them.
            address: Address to send the probe to
            payload: Probe packet

        Returns:
            Channels that acknowledged the probe, in ascending order.

        Raises:
            TransportFailureError: if any transfer fails; channels found so
                far are discarded
            InvalidArgumentError: if a channel number is out of range, or if
                the address is malformed (checked before the first probe)
        """
        address = Address.ensure(address)
        found: List[Channel] = []

        for number in range(int(start), int(stop) + 1):
            channel = Channel.from_number(number)
            async with self._lock:
                await self._radio.set_address(address)
                await self._radio.set_channel(channel)
                ack, _ = await self._radio.send_packet(payload)
            if ack.received:
                found.append(channel)

        logger.info(
            f"Scan {int(start)}-{int(stop)} found {len(found)} channel(s): "
            f"{[int(channel) for channel in found]}"
        )
        return found

    async def close(self) -> None:
        """Close the dongle once no caller holds it."""
        async with self._lock:
            await self._radio.close()

    async def __aenter__(self) -> SharedRadio:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
