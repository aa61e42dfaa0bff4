"""USB HID connection to the ALIENTEK DP100.

Supports both ``hidapi`` (preferred) and ``pyusb`` backends. Reads block
until the device answers; there is no timeout at this layer.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..config import DeviceConfig

logger = logging.getLogger(__name__)

HID_INTERFACE = 0
EP_IN = 0x81
EP_OUT = 0x01


@dataclass
class DeviceInfo:
    """Basic device identification from USB descriptors."""

    vendor_id: int
    product_id: int
    manufacturer: str = ""
    product: str = ""
    backend: str = ""


class USBConnection:
    """Manages the USB HID connection to the power supply.

    Usage::

        with USBConnection() as conn:
            conn.write(frame_bytes)
            response = conn.read(512)
    """

    def __init__(self, config: DeviceConfig | None = None) -> None:
        self._config = config or DeviceConfig()
        self._device = None
        self._backend: str = ""
        self._connected = False
        self._device_info = DeviceInfo(
            vendor_id=self._config.vendor_id,
            product_id=self._config.product_id,
        )

    @property
    def connected(self) -> bool:
        return self._connected

    @property
    def device_info(self) -> DeviceInfo:
        return self._device_info

    def __enter__(self) -> USBConnection:
        self.open()
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def open(self) -> DeviceInfo:
        """Open the first matching device, trying hidapi first, then pyusb.

        When ``verify_strings`` is configured the manufacturer and product
        descriptor strings must match, otherwise the device is released.

        Returns:
            DeviceInfo with USB descriptor information.

        Raises:
            ConnectionError: If the device cannot be found, opened, or
                identified.
        """
        vid, pid = self._config.vendor_id, self._config.product_id
        try:
            self._open_hidapi()
        except (ImportError, OSError) as e:
            logger.debug("hidapi backend failed: %s, trying pyusb", e)
            try:
                self._open_pyusb()
            except (ImportError, OSError, ValueError) as e:
                raise ConnectionError(
                    f"Could not open DP100 ({vid:#06x}:{pid:#06x}). "
                    f"Ensure the device is connected and you have permissions. "
                    f"Last error: {e}"
                ) from e

        if self._config.verify_strings:
            try:
                self._verify_strings()
            except ConnectionError:
                self.close()
                raise

        logger.info(
            "Connected via %s: %s %s",
            self._backend,
            self._device_info.manufacturer,
            self._device_info.product,
        )
        return self._device_info

    def _open_hidapi(self) -> None:
        """Open using the hidapi library."""
        import hid

        device = hid.device()
        device.open(self._config.vendor_id, self._config.product_id)
        device.set_nonblocking(False)

        self._device = device
        self._backend = "hidapi"
        self._connected = True
        self._device_info = DeviceInfo(
            vendor_id=self._config.vendor_id,
            product_id=self._config.product_id,
            manufacturer=device.get_manufacturer_string() or "",
            product=device.get_product_string() or "",
            backend=self._backend,
        )

    def _open_pyusb(self) -> None:
        """Open using pyusb + libusb."""
        import usb.core
        import usb.util

        dev = usb.core.find(
            idVendor=self._config.vendor_id, idProduct=self._config.product_id
        )
        if dev is None:
            raise ConnectionError("Device not found via pyusb")

        # Detach kernel driver if needed
        if dev.is_kernel_driver_active(HID_INTERFACE):
            dev.detach_kernel_driver(HID_INTERFACE)

        usb.util.claim_interface(dev, HID_INTERFACE)

        self._device = dev
        self._backend = "pyusb"
        self._connected = True
        self._device_info = DeviceInfo(
            vendor_id=self._config.vendor_id,
            product_id=self._config.product_id,
            manufacturer=usb.util.get_string(dev, dev.iManufacturer) or "",
            product=usb.util.get_string(dev, dev.iProduct) or "",
            backend=self._backend,
        )

    def _verify_strings(self) -> None:
        expected = (self._config.manufacturer, self._config.product)
        actual = (self._device_info.manufacturer, self._device_info.product)
        for label, want, got in zip(("manufacturer", "product"), expected, actual):
            if want != got:
                raise ConnectionError(
                    f"Unexpected {label} string, expected '{want}' got '{got}'"
                )

    def close(self) -> None:
        """Close the USB connection."""
        if not self._connected:
            return

        try:
            if self._backend == "hidapi":
                self._device.close()
            elif self._backend == "pyusb":
                import usb.util
                usb.util.release_interface(self._device, HID_INTERFACE)
        except (ImportError, OSError) as e:
            logger.warning("Error closing device: %s", e)
        finally:
            self._device = None
            self._connected = False
            logger.info("Disconnected")

    def write(self, data: bytes) -> int:
        """Write one report to the device, verbatim.

        Args:
            data: An encoded frame.

        Returns:
            Number of bytes written.

        Raises:
            ConnectionError: If not connected.
            OSError: If the write fails.
        """
        if not self._connected:
            raise ConnectionError("Not connected to device")

        if self._backend == "hidapi":
            written = self._device.write(data)
            if written < 0:
                raise OSError(f"hidapi write failed for report {data.hex(' ')}")
            return written
        elif self._backend == "pyusb":
            return self._device.write(EP_OUT, data, timeout=0)
        else:
            raise RuntimeError(f"Unknown backend: {self._backend}")

    def read(self, size: int | None = None) -> bytes:
        """Block until the device sends a report and return its bytes.

        Args:
            size: Maximum number of bytes to read; defaults to the
                configured ``read_size``.

        Raises:
            ConnectionError: If not connected.
            OSError: If the read fails.
        """
        if not self._connected:
            raise ConnectionError("Not connected to device")

        size = size or self._config.read_size
        if self._backend == "hidapi":
            return bytes(self._device.read(size))
        elif self._backend == "pyusb":
            return bytes(self._device.read(EP_IN, size, timeout=0))
        else:
            raise RuntimeError(f"Unknown backend: {self._backend}")
