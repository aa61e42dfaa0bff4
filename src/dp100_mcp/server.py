"""MCP server entry point for the ALIENTEK DP100.

Exposes request/response exchanges with the power supply as tools via
the Model Context Protocol, using the official Python MCP SDK with stdio
transport. Reply payloads are returned as hex, uninterpreted.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from mcp.server.fastmcp import FastMCP

from .config import DeviceConfig
from .protocol.commands import CommandId
from .protocol.errors import ExchangeError
from .protocol.transaction import TransactionExecutor
from .transport.usb_connection import USBConnection

logger = logging.getLogger(__name__)

mcp = FastMCP(
    "dp100",
    instructions="MCP server for the ALIENTEK DP100 USB power supply",
)

# Global connection state
_connection: USBConnection | None = None
_executor: TransactionExecutor | None = None


def _get_executor() -> TransactionExecutor:
    """Get the executor for the open connection, raising if not connected."""
    if _executor is None or _connection is None or not _connection.connected:
        raise RuntimeError(
            "Not connected to device. Use the 'connect' tool first."
        )
    return _executor


def _exchange(command: CommandId, payload: bytes = b"") -> dict[str, Any]:
    executor = _get_executor()
    try:
        frame = executor.execute(command, payload)
    except ExchangeError as e:
        logger.warning("%s exchange failed: %s", command.name, e)
        return {"error": str(e), "phase": e.phase.value}
    result = frame.to_dict()
    result["request"] = command.name
    return result


# ─── CONNECTION TOOLS ─────────────────────────────────────────────────

@mcp.tool()
def connect(
    address: int = 251,
    verify_strings: bool = True,
) -> dict[str, Any]:
    """Open the USB HID connection to the DP100.

    Finds the device by USB vendor/product ID (0x2E3C:0xAF01) and checks
    its manufacturer and product strings.

    Args:
        address: Protocol bus address of the device (default 251).
        verify_strings: Reject devices whose descriptor strings differ.
    """
    global _connection, _executor
    if _connection is not None and _connection.connected:
        return {
            "connected": True,
            "message": "Already connected",
            "product": _connection.device_info.product,
        }

    try:
        config = DeviceConfig(address=address, verify_strings=verify_strings)
    except ValueError as e:
        return {"error": str(e)}

    connection = USBConnection(config)
    try:
        info = connection.open()
    except ConnectionError as e:
        return {"connected": False, "error": str(e)}

    _connection = connection
    _executor = TransactionExecutor(connection, config)
    return {
        "connected": True,
        "manufacturer": info.manufacturer,
        "product": info.product,
        "backend": info.backend,
        "address": config.address,
    }


@mcp.tool()
def disconnect() -> dict[str, bool]:
    """Close the USB connection to the power supply."""
    global _connection, _executor
    if _connection is not None:
        _connection.close()
    _connection = None
    _executor = None
    return {"disconnected": True}


# ─── COMMAND TOOLS ───────────────────────────────────────────────────

@mcp.tool()
def list_commands() -> dict[str, Any]:
    """List the command names and their function codes."""
    return {"commands": {c.name.lower(): c.wire for c in CommandId}}


@mcp.tool()
def exec_command(command: str, payload_hex: str = "") -> dict[str, Any]:
    """Send one command and return the device's reply frame.

    Args:
        command: Command name, e.g. 'basic_info' or 'SystemInfo'.
        payload_hex: Request payload as hex, e.g. '01 02'. Empty by default.
    """
    try:
        cmd = CommandId.from_name(command)
        payload = bytes.fromhex(payload_hex)
    except ValueError as e:
        return {"error": str(e)}
    return _exchange(cmd, payload)


@mcp.tool()
def basic_info() -> dict[str, Any]:
    """Request the BasicInfo (48) report."""
    return _exchange(CommandId.BASIC_INFO)


@mcp.tool()
def system_info() -> dict[str, Any]:
    """Request the SystemInfo (64) report."""
    return _exchange(CommandId.SYSTEM_INFO)


# ─── MCP RESOURCES ───────────────────────────────────────────────────

@mcp.resource("dp100://commands")
def resource_commands() -> str:
    """Command registry."""
    return json.dumps(list_commands())


# ─── ENTRY POINT ─────────────────────────────────────────────────────

def main():
    """Run the MCP server with stdio transport."""
    logging.basicConfig(level=logging.INFO)
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
