"""Tests for the USB HID connection, with hidapi and pyusb mocked."""

from __future__ import annotations

import sys
from unittest.mock import MagicMock, patch

import pytest

from dp100_mcp.config import DeviceConfig
from dp100_mcp.transport.usb_connection import USBConnection


def _fake_hid(manufacturer: str = "ALIENTEK", product: str = "ATK-MDP100"):
    """Build a stand-in for the ``hid`` module and its device handle."""
    device = MagicMock()
    device.get_manufacturer_string.return_value = manufacturer
    device.get_product_string.return_value = product
    device.write.side_effect = lambda data: len(data)
    module = MagicMock()
    module.device.return_value = device
    return module, device


def test_open_with_hidapi():
    hid_module, device = _fake_hid()
    with patch.dict(sys.modules, {"hid": hid_module}):
        conn = USBConnection()
        info = conn.open()

    device.open.assert_called_once_with(0x2E3C, 0xAF01)
    device.set_nonblocking.assert_called_once_with(False)
    assert conn.connected
    assert info.manufacturer == "ALIENTEK"
    assert info.product == "ATK-MDP100"
    assert info.backend == "hidapi"


def test_open_rejects_unexpected_product():
    hid_module, device = _fake_hid(product="SOMETHING-ELSE")
    with patch.dict(sys.modules, {"hid": hid_module}):
        conn = USBConnection()
        with pytest.raises(ConnectionError, match="product"):
            conn.open()

    device.close.assert_called_once()
    assert not conn.connected


def test_open_rejects_unexpected_manufacturer():
    hid_module, _ = _fake_hid(manufacturer="ACME")
    with patch.dict(sys.modules, {"hid": hid_module}):
        with pytest.raises(ConnectionError, match="manufacturer"):
            USBConnection().open()


def test_open_skips_string_check_when_disabled():
    hid_module, _ = _fake_hid(product="CLONE")
    config = DeviceConfig(verify_strings=False)
    with patch.dict(sys.modules, {"hid": hid_module}):
        conn = USBConnection(config)
        conn.open()
    assert conn.connected


def test_open_falls_back_to_pyusb():
    hid_module, device = _fake_hid()
    device.open.side_effect = OSError("open failed")

    usb_dev = MagicMock()
    usb_dev.is_kernel_driver_active.return_value = False
    usb_core = MagicMock()
    usb_core.find.return_value = usb_dev
    usb_util = MagicMock()
    usb_util.get_string.side_effect = ["ALIENTEK", "ATK-MDP100"]
    usb_pkg = MagicMock(core=usb_core, util=usb_util)

    modules = {"hid": hid_module, "usb": usb_pkg, "usb.core": usb_core, "usb.util": usb_util}
    with patch.dict(sys.modules, modules):
        conn = USBConnection()
        info = conn.open()

    assert info.backend == "pyusb"
    usb_core.find.assert_called_once_with(idVendor=0x2E3C, idProduct=0xAF01)
    usb_util.claim_interface.assert_called_once()


def test_open_fails_when_no_backend_finds_device():
    hid_module, device = _fake_hid()
    device.open.side_effect = OSError("open failed")
    usb_core = MagicMock()
    usb_core.find.return_value = None
    usb_util = MagicMock()
    usb_pkg = MagicMock(core=usb_core, util=usb_util)

    modules = {"hid": hid_module, "usb": usb_pkg, "usb.core": usb_core, "usb.util": usb_util}
    with patch.dict(sys.modules, modules):
        with pytest.raises(ConnectionError, match="Could not open DP100"):
            USBConnection().open()


def test_write_and_read_when_not_connected():
    conn = USBConnection()
    with pytest.raises(ConnectionError):
        conn.write(b"\x00")
    with pytest.raises(ConnectionError):
        conn.read()


def test_write_sends_bytes_verbatim():
    hid_module, device = _fake_hid()
    frame = bytes([251, 48, 0, 0, 0x0F, 0x31])
    with patch.dict(sys.modules, {"hid": hid_module}):
        conn = USBConnection()
        conn.open()
        assert conn.write(frame) == 6
    device.write.assert_called_once_with(frame)


def test_write_failure_raises():
    hid_module, device = _fake_hid()
    device.write.side_effect = None
    device.write.return_value = -1
    with patch.dict(sys.modules, {"hid": hid_module}):
        conn = USBConnection()
        conn.open()
        with pytest.raises(OSError):
            conn.write(b"\x01")


def test_read_returns_bytes():
    hid_module, device = _fake_hid()
    device.read.return_value = [251, 48, 0, 0, 0x31, 0x0F]
    with patch.dict(sys.modules, {"hid": hid_module}):
        conn = USBConnection()
        conn.open()
        data = conn.read()
    device.read.assert_called_once_with(512)
    assert data == bytes([251, 48, 0, 0, 0x31, 0x0F])


def test_context_manager_closes():
    hid_module, device = _fake_hid()
    with patch.dict(sys.modules, {"hid": hid_module}):
        with USBConnection() as conn:
            assert conn.connected
    assert not conn.connected
    device.close.assert_called_once()


def test_close_is_idempotent():
    conn = USBConnection()
    conn.close()
    conn.close()
    assert not conn.connected
