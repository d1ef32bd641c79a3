"""Dongle layer for the Crazyradio USB radio.

This module provides:
- Single-owner driver with configuration cache (RadioDriver)
- Lock-gated shared access and channel scan (SharedRadio)
- Device discovery utilities (find_dongles, list_serials)
"""

from .connection import RadioDriver, MIN_FIRMWARE_VERSION
from .manager import SharedRadio
from .dongle_finder import DongleInfo, find_dongles, list_serials

__all__ = [
    # Driver
    'RadioDriver',
    'SharedRadio',
    'MIN_FIRMWARE_VERSION',

    # Finder
    'DongleInfo',
    'find_dongles',
    'list_serials',
]
