"""One request/response exchange with the device.

An exchange is encode, write, read, decode, performed once with no retry
and no timeout. Whatever fails is raised as :class:`ExchangeError` tagged
with the phase it failed in.
"""

from __future__ import annotations

import logging

from ..config import DeviceConfig
from ..transport.base import Transport
from .commands import CommandId, build_command
from .errors import DecodeError, EncodeError, ExchangeError, Phase
from .framing import Frame, parse_frame

logger = logging.getLogger(__name__)


class TransactionExecutor:
    """Runs exchanges over a single transport.

    The executor owns the transport handle exclusively and does no
    locking; callers sharing it across threads must serialize access.

    Usage::

        executor = TransactionExecutor(transport)
        frame = executor.execute(CommandId.BASIC_INFO)
    """

    def __init__(
        self,
        transport: Transport,
        config: DeviceConfig | None = None,
    ) -> None:
        self._transport = transport
        self._config = config or DeviceConfig()

    @property
    def config(self) -> DeviceConfig:
        return self._config

    @property
    def transport(self) -> Transport:
        return self._transport

    def execute(self, command: CommandId, payload: bytes = b"") -> Frame:
        """Send a command and return the device's parsed reply.

        Args:
            command: Command to send.
            payload: Request payload, at most 255 bytes.

        Returns:
            The decoded reply frame.

        Raises:
            ExchangeError: If encoding, writing, reading or decoding fails.
        """
        try:
            request = build_command(command, payload, self._config.address)
        except EncodeError as e:
            raise ExchangeError(Phase.ENCODE, e) from e

        logger.debug("-> %s %s", command.name, request.hex(" "))
        try:
            self._transport.write(request)
        except OSError as e:
            raise ExchangeError(Phase.WRITE, e) from e

        try:
            response = self._transport.read(self._config.read_size)
        except OSError as e:
            raise ExchangeError(Phase.READ, e) from e

        response = bytes(response)
        logger.debug("<- %s", response.hex(" ") or "(empty)")
        try:
            return parse_frame(response)
        except DecodeError as e:
            raise ExchangeError(Phase.DECODE, e) from e
