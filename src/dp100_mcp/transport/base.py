"""The read/write capability the transaction layer needs from a device."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class Transport(Protocol):
    """Blocking report channel to one device.

    Implementations raise ``OSError`` (``ConnectionError`` when the
    channel is not open) on failure.
    """

    def write(self, data: bytes) -> int:
        """Send ``data`` as one report and return the number of bytes written."""
        ...

    def read(self, size: int) -> bytes:
        """Block until a report arrives and return at most ``size`` bytes of it."""
        ...
