"""Command identifiers and request builders.

Each command is a single-byte function code used both in host requests
and in the function-type byte of device replies. Values follow the
webdp100 HID report table.
"""

from __future__ import annotations

from enum import IntEnum

from ..config import DEFAULT_DEVICE_ADDRESS
from .framing import build_frame


class CommandId(IntEnum):
    """Function codes understood by the DP100."""

    DEVICE_INFO = 16
    FIRMWARE_INFO = 17
    START_TRANSACTION = 18
    DATA_TRANSACTION = 19
    END_TRANSACTION = 20
    DEVICE_UPGRADE = 21
    BASIC_INFO = 48
    BASIC_SET = 53
    SYSTEM_INFO = 64
    SYSTEM_SET = 69
    SCAN_OUT = 80
    SERIAL_OUT = 85
    DISCONNECT = 128
    NONE = 255

    @property
    def wire(self) -> int:
        """The byte transmitted for this command."""
        return int(self)

    @classmethod
    def lookup(cls, code: int) -> CommandId | None:
        """Return the member for ``code``, or None if the code is unknown."""
        try:
            return cls(code)
        except ValueError:
            return None

    @classmethod
    def from_name(cls, name: str) -> CommandId:
        """Resolve a command from a name such as ``basic_info`` or ``BasicInfo``.

        Raises:
            ValueError: If no command has that name.
        """
        key = name.strip().replace("-", "_")
        if key.upper() in cls.__members__:
            return cls[key.upper()]
        # CamelCase spelling used by the webdp100 table
        snake = "".join(
            f"_{c}" if c.isupper() and i else c for i, c in enumerate(key)
        )
        if snake.upper() in cls.__members__:
            return cls[snake.upper()]
        raise ValueError(
            f"Unknown command '{name}'. Valid: {[c.name.lower() for c in cls]}"
        )


def build_command(
    command: CommandId,
    payload: bytes = b"",
    address: int = DEFAULT_DEVICE_ADDRESS,
) -> bytes:
    """Build the request frame for a command."""
    return build_frame(command.wire, payload, address)


def build_device_info(address: int = DEFAULT_DEVICE_ADDRESS) -> bytes:
    """Build a DeviceInfo (16) request."""
    return build_command(CommandId.DEVICE_INFO, address=address)


def build_firmware_info(address: int = DEFAULT_DEVICE_ADDRESS) -> bytes:
    """Build a FirmwareInfo (17) request."""
    return build_command(CommandId.FIRMWARE_INFO, address=address)


def build_basic_info(address: int = DEFAULT_DEVICE_ADDRESS) -> bytes:
    """Build a BasicInfo (48) request."""
    return build_command(CommandId.BASIC_INFO, address=address)


def build_system_info(address: int = DEFAULT_DEVICE_ADDRESS) -> bytes:
    """Build a SystemInfo (64) request."""
    return build_command(CommandId.SYSTEM_INFO, address=address)


def build_disconnect(address: int = DEFAULT_DEVICE_ADDRESS) -> bytes:
    return build_command(CommandId.DISCONNECT, address=address)
