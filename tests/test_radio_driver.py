"""Unit tests for RadioDriver (configuration cache, packet exchange, opening)."""

import unittest
from unittest.mock import AsyncMock, MagicMock, patch

from fake_device import FakeDeviceHandle

from cradio.dongle.connection import RadioDriver
from cradio.dongle.dongle_finder import DongleInfo
from cradio.errors import (
    DeviceClosedError,
    DongleVersionNotSupportedError,
    InvalidArgumentError,
    NotFoundError,
    TransportFailureError,
)
from cradio.models import Ack, Address, Channel, DEFAULT_ADDRESS


class TestRadioDriverConfigure(unittest.IsolatedAsyncioTestCase):
    """Tests for the write-through channel/address cache."""

    def setUp(self):
        self.device = FakeDeviceHandle()
        self.radio = RadioDriver(self.device)

    def test_starts_unprogrammed(self):
        self.assertIsNone(self.radio.current_channel)
        self.assertIsNone(self.radio.current_address)

    async def test_set_channel_writes_once(self):
        """Setting the same channel twice issues a single transfer."""
        await self.radio.set_channel(Channel(42))
        await self.radio.set_channel(Channel(42))

        self.assertEqual(self.device.log, [("channel", 42)])
        self.assertEqual(self.radio.current_channel, Channel(42))

    async def test_set_channel_change_writes(self):
        await self.radio.set_channel(Channel(1))
        await self.radio.set_channel(Channel(2))
        await self.radio.set_channel(Channel(2))

        self.assertEqual(self.device.log, [("channel", 1), ("channel", 2)])

    async def test_set_address_writes_once(self):
        await self.radio.set_address(DEFAULT_ADDRESS)
        await self.radio.set_address(b"\xe7" * 5)

        self.assertEqual(self.device.log, [("address", b"\xe7" * 5)])
        self.assertEqual(self.radio.current_address, DEFAULT_ADDRESS)

    async def test_set_address_wrong_length(self):
        with self.assertRaises(InvalidArgumentError):
            await self.radio.set_address(b"\xe7" * 4)
        self.assertEqual(self.device.log, [])

    async def test_failed_channel_write_keeps_cache(self):
        """A failed transfer leaves the cache as it was, so the next call retries."""
        await self.radio.set_channel(Channel(10))
        self.device.fail_on_control = 2

        with self.assertRaises(TransportFailureError):
            await self.radio.set_channel(Channel(20))
        self.assertEqual(self.radio.current_channel, Channel(10))

        await self.radio.set_channel(Channel(20))
        self.assertEqual(self.device.log, [("channel", 10), ("channel", 20)])
        self.assertEqual(self.radio.current_channel, Channel(20))

    async def test_failed_address_write_keeps_cache(self):
        self.device.fail_on_control = 1

        with self.assertRaises(TransportFailureError):
            await self.radio.set_address(DEFAULT_ADDRESS)
        self.assertIsNone(self.radio.current_address)

        await self.radio.set_address(DEFAULT_ADDRESS)
        self.assertEqual(self.device.log, [("address", b"\xe7" * 5)])

    async def test_use_after_close_refused(self):
        """A closed driver never reaches the device again."""
        await self.radio.close()

        with self.assertRaises(DeviceClosedError):
            await self.radio.set_channel(Channel(3))
        with self.assertRaises(DeviceClosedError):
            await self.radio.set_address(DEFAULT_ADDRESS)
        with self.assertRaises(DeviceClosedError):
            await self.radio.send_packet(b"\xff")
        self.assertEqual(self.device.log, [])
        self.assertTrue(self.radio.is_closed)

    async def test_close_twice(self):
        device = MagicMock()
        device.close = AsyncMock()
        radio = RadioDriver(device)

        await radio.close()
        await radio.close()

        device.close.assert_awaited_once()

    async def test_close_resets_cache(self):
        await self.radio.set_channel(Channel(3))
        await self.radio.close()

        self.assertTrue(self.device.closed)
        self.assertIsNone(self.radio.current_channel)


class TestRadioDriverSendPacket(unittest.IsolatedAsyncioTestCase):
    """Tests for the packet exchange."""

    def setUp(self):
        self.device = FakeDeviceHandle()
        self.radio = RadioDriver(self.device)

    async def test_send_then_read(self):
        self.device.responses.append(bytes([0x01, 0xAA, 0xBB]))

        ack, payload = await self.radio.send_packet(b"\x3c\x01")

        self.assertEqual(self.device.log, [("out", b"\x3c\x01"), ("in", 64)])
        self.assertEqual(ack, Ack(received=True, length=2))
        self.assertEqual(payload, b"\xaa\xbb")

    async def test_no_ack(self):
        self.device.responses.append(b"\x00")

        ack, payload = await self.radio.send_packet(b"\xff")

        self.assertEqual(ack, Ack(received=False, length=0))
        self.assertEqual(payload, b"")

    async def test_out_failure(self):
        """A failed write never reads and returns no ack."""
        self.device.fail_on_out = 1

        with self.assertRaises(TransportFailureError):
            await self.radio.send_packet(b"\xff")
        self.assertEqual(self.device.log, [])

    async def test_in_failure(self):
        device = MagicMock()
        device.bulk_transfer_out = AsyncMock()
        device.bulk_transfer_in = AsyncMock(side_effect=TransportFailureError("stall"))
        radio = RadioDriver(device)

        with self.assertRaises(TransportFailureError) as ctx:
            await radio.send_packet(b"\xff")
        self.assertEqual(ctx.exception.detail, "stall")

    async def test_does_not_touch_configuration(self):
        await self.radio.send_packet(b"\xff")
        self.assertEqual(self.device.control_log, [])


def make_info(serial="E7E7E7E7E7", version=0.52, device=None):
    return DongleInfo(
        bus=1,
        address=4,
        vid=0x1915,
        pid=0x7777,
        manufacturer="Bitcraze AB",
        product="Crazyradio PA USB dongle",
        serial_number=serial,
        version=version,
        device=device or MagicMock(),
    )


class TestRadioDriverOpen(unittest.IsolatedAsyncioTestCase):
    """Tests for opening dongles by index and serial."""

    def setUp(self):
        self.dongles = [make_info("AAAA000001"), make_info("AAAA000002")]

        def find_dongles(matcher=None):
            return [info for info in self.dongles if matcher is None or matcher(info)]

        find_patcher = patch('cradio.dongle.connection.find_dongles', side_effect=find_dongles)
        self.mock_find = find_patcher.start()
        self.addCleanup(find_patcher.stop)

        open_patcher = patch('cradio.dongle.connection.UsbDeviceHandle.open', new_callable=AsyncMock)
        self.mock_open = open_patcher.start()
        self.mock_open.return_value = FakeDeviceHandle()
        self.addCleanup(open_patcher.stop)

    async def test_open_nth(self):
        radio = await RadioDriver.open_nth(1)

        self.assertIsInstance(radio, RadioDriver)
        self.assertIs(self.mock_open.call_args.args[0], self.dongles[1].device)

    async def test_open_first(self):
        await RadioDriver.open_first()
        self.assertIs(self.mock_open.call_args.args[0], self.dongles[0].device)

    async def test_open_nth_out_of_range(self):
        with self.assertRaises(NotFoundError):
            await RadioDriver.open_nth(2)
        self.mock_open.assert_not_called()

    async def test_open_nth_negative(self):
        with self.assertRaises(InvalidArgumentError):
            await RadioDriver.open_nth(-1)
        self.mock_find.assert_not_called()

    async def test_open_first_none_connected(self):
        self.dongles.clear()
        with self.assertRaises(NotFoundError):
            await RadioDriver.open_first()

    async def test_open_by_serial(self):
        await RadioDriver.open_by_serial("AAAA000002")
        self.assertIs(self.mock_open.call_args.args[0], self.dongles[1].device)

    async def test_open_by_serial_not_found(self):
        for serial in ("", "BBBB000001"):
            with self.assertRaises(NotFoundError):
                await RadioDriver.open_by_serial(serial)
        self.mock_open.assert_not_called()

    async def test_old_firmware_rejected(self):
        self.dongles[:] = [make_info(version=0.2)]

        with self.assertRaises(DongleVersionNotSupportedError):
            await RadioDriver.open_first()
        self.mock_open.assert_not_called()

    async def test_async_context_closes(self):
        device = FakeDeviceHandle()
        async with RadioDriver(device) as radio:
            await radio.set_channel(Channel(1))
        self.assertTrue(device.closed)


if __name__ == '__main__':
    unittest.main()
