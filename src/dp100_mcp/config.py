"""Device configuration.

The defaults match the stock ALIENTEK DP100. Devices with unusual
descriptors or a different bus address can be reached by passing a
``DeviceConfig`` with overridden fields to the transport and executor.
"""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_DEVICE_ADDRESS = 251
VENDOR_ID = 0x2E3C
PRODUCT_ID = 0xAF01
MANUFACTURER_STRING = "ALIENTEK"
PRODUCT_STRING = "ATK-MDP100"
HID_REPORT_SIZE = 64
MAX_READ_SIZE = 512


@dataclass(frozen=True)
class DeviceConfig:
    """Immutable settings for one DP100 session."""

    address: int = DEFAULT_DEVICE_ADDRESS
    vendor_id: int = VENDOR_ID
    product_id: int = PRODUCT_ID
    manufacturer: str = MANUFACTURER_STRING
    product: str = PRODUCT_STRING
    read_size: int = MAX_READ_SIZE
    verify_strings: bool = True

    def __post_init__(self) -> None:
        if not 0 <= self.address <= 0xFF:
            raise ValueError(f"Device address must be 0-255, got {self.address}")
        for name in ("vendor_id", "product_id"):
            value = getattr(self, name)
            if not 0 <= value <= 0xFFFF:
                raise ValueError(f"{name} must be 0-0xFFFF, got {value:#x}")
        if not HID_REPORT_SIZE <= self.read_size <= MAX_READ_SIZE:
            raise ValueError(
                f"read_size must be {HID_REPORT_SIZE}-{MAX_READ_SIZE}, "
                f"got {self.read_size}"
            )
        if self.verify_strings and not (self.manufacturer and self.product):
            raise ValueError(
                "manufacturer and product strings are required when "
                "verify_strings is enabled"
            )
