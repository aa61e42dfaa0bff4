"""CRC-16 used to seal DP100 frames.

The accumulator is plain CRC-16/MODBUS (init 0xFFFF, reflected polynomial
0xA001). The device firmware expects the two bytes of the result swapped,
so :func:`crc16` returns ``(raw_low << 8) | raw_high``. Both the frame
encoder and the frame decoder use the swapped value.
"""

from __future__ import annotations

CRC_INIT = 0xFFFF
CRC_POLY = 0xA001


def crc16_modbus(data: bytes) -> int:
    """Standard CRC-16/MODBUS accumulator, without any byte swap."""
    crc = CRC_INIT
    for byte in data:
        crc ^= byte
        for _ in range(8):
            if crc & 0x0001:
                crc = (crc >> 1) ^ CRC_POLY
            else:
                crc >>= 1
    return crc & 0xFFFF


def crc16(data: bytes) -> int:
    """Checksum as the DP100 uses it: the MODBUS CRC with its bytes swapped.

    Args:
        data: Bytes to checksum (header + payload).

    Returns:
        16-bit value whose high byte is the raw CRC's low byte.
    """
    raw = crc16_modbus(data)
    return ((raw << 8) & 0xFF00) | (raw >> 8)
