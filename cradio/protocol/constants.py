"""Wire-level constants of the Crazyradio USB protocol."""
from __future__ import annotations

from enum import IntEnum


class ConfigurationRequest(IntEnum):
    """Vendor control requests used to program the radio."""
    SET_RADIO_CHANNEL = 0x01
    SET_RADIO_ADDRESS = 0x02


# bmRequestType: host-to-device | vendor | device recipient
VENDOR_OUT_REQUEST_TYPE = 0x40

BULK_OUT_ENDPOINT = 0x01
BULK_IN_ENDPOINT = 0x81
MAX_ACK_SIZE = 64  # bytes, one full-speed bulk packet

ACK_STATUS_NONE = 0x00
