"""Frame builder and parser for DP100 HID reports.

Frame layout::

    +---------+---------+----------+--------+------------------+----------+
    | Address | Command | Sequence | Length |     Payload      | Checksum |
    | 1 byte  | 1 byte  |  1 byte  | 1 byte | ``Length`` bytes |  2 bytes |
    +---------+---------+----------+--------+------------------+----------+

- Address: device bus address (251 unless configured otherwise)
- Command: :class:`~dp100_mcp.protocol.commands.CommandId` wire value
- Sequence: always 0; multi-frame sequencing is not used
- Checksum: :func:`~dp100_mcp.utils.crc.crc16` over header + payload

The two directions do not order the checksum bytes the same way.
Outbound frames carry the low byte of ``crc16()`` first. Inbound frames
are checked by reading the trailer as a big-endian value and comparing it
with ``crc16()``, so a valid reply carries the high byte first. Both
orderings are what the firmware exchanges and must stay as they are.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from ..config import DEFAULT_DEVICE_ADDRESS
from ..utils.crc import crc16
from .errors import ChecksumMismatch, PayloadTooLarge, TooShort

HEADER_SIZE = 4
CHECKSUM_SIZE = 2
MIN_FRAME_SIZE = HEADER_SIZE + CHECKSUM_SIZE
MAX_PAYLOAD = 0xFF


@dataclass(frozen=True)
class Frame:
    """A parsed inbound frame."""

    address: int
    function_type: int
    sequence: int
    length: int
    payload: bytes
    checksum_valid: bool = True

    @property
    def command(self):
        """The matching ``CommandId``, or None for codes outside the registry."""
        from .commands import CommandId

        return CommandId.lookup(self.function_type)

    def to_dict(self) -> dict:
        command = self.command
        return {
            "address": self.address,
            "function_type": self.function_type,
            "command": command.name if command is not None else None,
            "sequence": self.sequence,
            "length": self.length,
            "payload_hex": self.payload.hex(" "),
            "checksum_valid": self.checksum_valid,
        }

    def __repr__(self) -> str:
        return (
            f"Frame(address={self.address}, "
            f"function_type=0x{self.function_type:02X}, "
            f"sequence={self.sequence}, "
            f"payload={self.payload.hex(' ') if self.payload else '(empty)'})"
        )


def _header(address: int, command: int, sequence: int, payload: bytes) -> bytes:
    if len(payload) > MAX_PAYLOAD:
        raise PayloadTooLarge(len(payload), MAX_PAYLOAD)
    return bytes([address, command, sequence, len(payload)])


def build_frame(
    command: int,
    payload: bytes = b"",
    address: int = DEFAULT_DEVICE_ADDRESS,
) -> bytes:
    """Build an outbound (host to device) frame.

    Args:
        command: Single-byte command code.
        payload: Command-specific payload, at most 255 bytes.
        address: Device bus address.

    Returns:
        ``4 + len(payload) + 2`` bytes ready to hand to the transport.

    Raises:
        PayloadTooLarge: If the payload exceeds 255 bytes.
    """
    payload = bytes(payload)
    body = _header(address, int(command), 0, payload) + payload
    checksum = crc16(body)
    return body + bytes([checksum & 0xFF, (checksum >> 8) & 0xFF])


def build_reply_frame(
    function_type: int,
    payload: bytes = b"",
    address: int = DEFAULT_DEVICE_ADDRESS,
    sequence: int = 0,
) -> bytes:
    """Build a device-to-host frame the way :func:`parse_frame` verifies it.

    Used to simulate device responses. The checksum trailer is written
    high byte first, the reverse of :func:`build_frame`.
    """
    payload = bytes(payload)
    body = _header(address, function_type, sequence, payload) + payload
    return body + crc16(body).to_bytes(2, "big")


def parse_frame(raw: bytes | bytearray | Iterable[int]) -> Frame:
    """Validate an inbound buffer and extract its frame.

    Bytes beyond the frame's declared length are ignored, since HID
    reports are usually larger than the frame they carry.

    Args:
        raw: Bytes read from the transport.

    Returns:
        The parsed ``Frame``.

    Raises:
        TooShort: If the buffer cannot hold the header, or holds less
            than the length byte declares.
        ChecksumMismatch: If the trailer does not match the computed CRC.
    """
    data = bytes(raw)
    if len(data) < MIN_FRAME_SIZE:
        raise TooShort(MIN_FRAME_SIZE, len(data), data)

    address, function_type, sequence, length = data[:HEADER_SIZE]

    expected_size = MIN_FRAME_SIZE + length
    if len(data) < expected_size:
        raise TooShort(expected_size, len(data), data)

    data = data[:expected_size]
    computed = crc16(data[:-CHECKSUM_SIZE])
    received = (data[-2] << 8) | data[-1]
    if computed != received:
        raise ChecksumMismatch(computed, received, data)

    return Frame(
        address=address,
        function_type=function_type,
        sequence=sequence,
        length=length,
        payload=data[HEADER_SIZE:-CHECKSUM_SIZE],
        checksum_valid=True,
    )
