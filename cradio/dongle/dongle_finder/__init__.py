from .core import (
    CRADIO_VID,
    CRADIO_PID,
    DongleInfo,
    find_dongles,
    list_serials,
)

__all__ = [
    "CRADIO_VID",
    "CRADIO_PID",
    "DongleInfo",
    "find_dongles",
    "list_serials",
]
