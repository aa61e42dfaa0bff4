"""Exceptions raised by the DP100 codec and transaction layer.

Every error carries the values needed to diagnose it (sizes, checksums,
the offending bytes). Nothing in the codec retries or recovers; callers
decide what to do.
"""

from __future__ import annotations

from enum import Enum


class DP100Error(Exception):
    """Base class for all DP100 protocol errors."""


class EncodeError(DP100Error):
    """An outbound frame could not be built."""


class PayloadTooLarge(EncodeError):
    """Payload does not fit in the one-byte length field."""

    def __init__(self, size: int, limit: int = 255) -> None:
        self.size = size
        self.limit = limit
        super().__init__(
            f"Payload size {size} too big to fit in a byte (max {limit})"
        )


class DecodeError(DP100Error):
    """An inbound buffer is not a valid frame."""

    def __init__(self, message: str, raw: bytes = b"") -> None:
        self.raw = bytes(raw)
        super().__init__(message)


class TooShort(DecodeError):
    """Buffer is shorter than the header or than the declared frame."""

    def __init__(self, expected: int, actual: int, raw: bytes = b"") -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Frame needs at least {expected} bytes, buffer has {actual}: "
            f"{bytes(raw).hex(' ') or '(empty)'}",
            raw,
        )


class ChecksumMismatch(DecodeError):
    """Received checksum does not match the one computed over the frame."""

    def __init__(self, computed: int, received: int, raw: bytes = b"") -> None:
        self.computed = computed
        self.received = received
        super().__init__(
            f"CRC error: received 0x{received:04X}, computed 0x{computed:04X}",
            raw,
        )


class Phase(Enum):
    """Step of a request/response exchange."""

    ENCODE = "encode"
    WRITE = "write"
    READ = "read"
    DECODE = "decode"


class ExchangeError(DP100Error):
    """A request/response exchange failed.

    ``phase`` tells which step failed; the underlying exception is kept as
    ``error`` and chained as ``__cause__``.
    """

    def __init__(self, phase: Phase, error: Exception) -> None:
        self.phase = phase
        self.error = error
        super().__init__(f"{phase.value} failed: {error}")
