"""Orchestrator - one pass over a server's tools.

Resolves the server address, selects tools by name and calls them in
order through the MCP Client.
"""

from orchestrator.runner import ToolRunner, run_once
from orchestrator.selection import parse_tool_filter, resolve_server_url, select_tools

__all__ = [
    "ToolRunner",
    "run_once",
    "parse_tool_filter",
    "resolve_server_url",
    "select_tools",
]
