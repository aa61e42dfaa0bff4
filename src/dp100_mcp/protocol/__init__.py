"""Protocol layer: frame codec, CRC, command registry, and exchanges."""

from .framing import Frame, build_frame, build_reply_frame, parse_frame
from .commands import CommandId, build_command
from .errors import (
    DP100Error,
    EncodeError,
    PayloadTooLarge,
    DecodeError,
    TooShort,
    ChecksumMismatch,
    ExchangeError,
    Phase,
)
from .transaction import TransactionExecutor
