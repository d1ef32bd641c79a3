#!/usr/bin/env python3
"""
Interactive Crazyradio scan script.

Opens the first dongle (or the one with the serial given on the command
line), scans all channels for a remote radio listening on the default
address, then pings the first channel found a few times.
"""

import sys
import logging
from pathlib import Path

import anyio

# Add package to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from cradio import DEFAULT_ADDRESS, NotFoundError, RadioDriver, SharedRadio, list_serials

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s'
)

# CRTP null packet
PING = b"\xff"


async def main():
    serials = await list_serials()
    print(f"Connected dongles: {serials or 'none'}")

    try:
        if len(sys.argv) > 1:
            driver = await RadioDriver.open_by_serial(sys.argv[1])
        else:
            driver = await RadioDriver.open_first()
    except NotFoundError as e:
        print(f"Failed to open dongle: {e}")
        return

    async with SharedRadio(driver) as radio:
        print("\nScanning channels 0-125...")
        found = await radio.scan(0, 125, DEFAULT_ADDRESS, PING)
        if not found:
            print("No remote radio answered.")
            return

        print(f"Found: {', '.join(str(channel) for channel in found)}")

        channel = found[0]
        print(f"\nPinging channel {channel}...")
        for i in range(5):
            ack, payload = await radio.send_packet(channel, DEFAULT_ADDRESS, PING)
            print(f"[{i+1}/5] ack={ack.received} payload={payload.hex() or '-'}")
            await anyio.sleep(0.2)


if __name__ == "__main__":
    try:
        anyio.run(main)
    except KeyboardInterrupt:
        print("\nInterrupted by user.")
