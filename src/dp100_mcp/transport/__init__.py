"""Device transports: the capability interface and the USB HID implementation."""

from .base import Transport
from .usb_connection import USBConnection, DeviceInfo
