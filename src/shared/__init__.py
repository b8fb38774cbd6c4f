"""Shared utilities and data models for the MCP tool runner."""

from shared.models import (
    AddressSource,
    ConnectionState,
    ResolvedAddress,
    RunSummary,
    ToolDescriptor,
    ToolResult,
    ToolResultStatus,
    ToolSelection,
)
from shared.config import Settings, get_settings
from shared.logging import get_logger, setup_logging

__all__ = [
    "AddressSource",
    "ConnectionState",
    "ResolvedAddress",
    "RunSummary",
    "ToolDescriptor",
    "ToolResult",
    "ToolResultStatus",
    "ToolSelection",
    "Settings",
    "get_settings",
    "get_logger",
    "setup_logging",
]
