"""Protocol codec and MCP server for the ALIENTEK DP100 power supply."""

__version__ = "0.1.0"
