"""Tests for the command registry and request builders."""

import pytest

from dp100_mcp.protocol.commands import (
    CommandId,
    build_command,
    build_device_info,
    build_firmware_info,
    build_basic_info,
    build_system_info,
    build_disconnect,
)
from dp100_mcp.protocol.errors import PayloadTooLarge


def test_command_enum_values():
    """Function codes match the device's report table."""
    assert CommandId.DEVICE_INFO == 16
    assert CommandId.FIRMWARE_INFO == 17
    assert CommandId.START_TRANSACTION == 18
    assert CommandId.DATA_TRANSACTION == 19
    assert CommandId.END_TRANSACTION == 20
    assert CommandId.DEVICE_UPGRADE == 21
    assert CommandId.BASIC_INFO == 48
    assert CommandId.BASIC_SET == 53
    assert CommandId.SYSTEM_INFO == 64
    assert CommandId.SYSTEM_SET == 69
    assert CommandId.SCAN_OUT == 80
    assert CommandId.SERIAL_OUT == 85
    assert CommandId.DISCONNECT == 128
    assert CommandId.NONE == 255


def test_all_codes_fit_in_a_byte():
    for command in CommandId:
        assert 0 <= command.wire <= 0xFF
        assert isinstance(command.wire, int)


def test_lookup():
    assert CommandId.lookup(48) is CommandId.BASIC_INFO
    assert CommandId.lookup(255) is CommandId.NONE
    assert CommandId.lookup(0) is None


@pytest.mark.parametrize(
    "name, expected",
    [
        ("basic_info", CommandId.BASIC_INFO),
        ("BasicInfo", CommandId.BASIC_INFO),
        ("SYSTEM_SET", CommandId.SYSTEM_SET),
        ("scan-out", CommandId.SCAN_OUT),
        ("None", CommandId.NONE),
    ],
)
def test_from_name(name, expected):
    assert CommandId.from_name(name) is expected


def test_from_name_unknown():
    with pytest.raises(ValueError):
        CommandId.from_name("self_destruct")


def test_build_command_uses_wire_value():
    frame = build_command(CommandId.BASIC_SET, b"\x01")
    assert frame[:4] == bytes([251, 53, 0, 1])
    assert frame[4] == 0x01


def test_build_command_address_override():
    frame = build_command(CommandId.BASIC_INFO, address=7)
    assert frame[0] == 7


def test_build_command_payload_limit():
    with pytest.raises(PayloadTooLarge):
        build_command(CommandId.SERIAL_OUT, bytes(256))


def test_build_basic_info():
    """BasicInfo request, known answer."""
    assert build_basic_info() == bytes([251, 48, 0, 0, 0x0F, 0x31])


@pytest.mark.parametrize(
    "builder, command",
    [
        (build_device_info, CommandId.DEVICE_INFO),
        (build_firmware_info, CommandId.FIRMWARE_INFO),
        (build_basic_info, CommandId.BASIC_INFO),
        (build_system_info, CommandId.SYSTEM_INFO),
        (build_disconnect, CommandId.DISCONNECT),
    ],
)
def test_read_builders_have_no_payload(builder, command):
    frame = builder()
    assert len(frame) == 6
    assert frame[1] == command.wire
    assert frame[3] == 0
