"""Wire format of the Crazyradio USB protocol."""

from .constants import (
    ConfigurationRequest,
    VENDOR_OUT_REQUEST_TYPE,
    BULK_OUT_ENDPOINT,
    BULK_IN_ENDPOINT,
    MAX_ACK_SIZE,
)
from .parser import AckParser

__all__ = [
    "ConfigurationRequest",
    "VENDOR_OUT_REQUEST_TYPE",
    "BULK_OUT_ENDPOINT",
    "BULK_IN_ENDPOINT",
    "MAX_ACK_SIZE",
    "AckParser",
]
