"""Parser for the dongle's bulk-in acknowledgment frames.

Frame layout::

    byte 0      status (0 = no ack within the firmware retry budget)
    bytes 1..N  ack payload returned by the remote radio

Pure functions with no side effects.
"""
from __future__ import annotations

from typing import Tuple

from ..errors import TransportFailureError
from ..models import Ack
from .constants import ACK_STATUS_NONE


class AckParser:
    """Decodes raw bulk-in responses into (Ack, payload) pairs."""

    @staticmethod
    def parse(response: bytes) -> Tuple[Ack, bytes]:
        """Decode one bulk-in response.

        Args:
            response: Raw bytes read from the bulk-in endpoint

        Returns:
            Tuple of the decoded Ack and the ack payload. The payload is
            empty when no ack was received.

        Raises:
            TransportFailureError: if the response does not even carry a
                status byte

        Examples:
            >>> AckParser.parse(b"\\x01\\xaa\\xbb")
            (Ack(received=True, power_detector=False, retry=0, length=2), b'\\xaa\\xbb')
            >>> AckParser.parse(b"\\x00")
            (Ack(received=False, power_detector=False, retry=0, length=0), b'')
        """
        if not response:
            raise TransportFailureError("empty response from bulk-in endpoint")

        status = response[0]
        if status == ACK_STATUS_NONE:
            return Ack(), b""

        payload = bytes(response[1:])
        # power_detector and retry stay at their defaults: the status byte
        # layout for them is not part of this wire format
        return Ack(received=True, length=len(payload)), payload
