"""MCP Client - Tool discovery and execution.

The MCP Client connects to one MCP Server over streamable HTTP,
discovers its tools and executes tool calls.
"""

from mcp_client.client import (
    MCPClient,
    MCPClientError,
    MCPConnectionError,
    ToolCallError,
    ToolsNotSupportedError,
)
from mcp_client.discovery import ToolCatalog

__all__ = [
    "MCPClient",
    "MCPClientError",
    "MCPConnectionError",
    "ToolCallError",
    "ToolsNotSupportedError",
    "ToolCatalog",
]
