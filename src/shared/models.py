"""Core data models for the MCP tool runner.

Shared data structures passed between the client wrapper, the tool
catalog and the orchestrator.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ConnectionState(str, Enum):
    """Lifecycle of the single server connection."""
    UNCONNECTED = "unconnected"
    CONNECTED = "connected"
    CLOSED = "closed"
    ERRORED = "errored"


class AddressSource(str, Enum):
    """Where the server URL came from."""
    COMMAND_LINE = "command_line"
    ENVIRONMENT = "environment"
    DEFAULT = "default"


class ResolvedAddress(BaseModel):
    """Server URL together with the source that supplied it."""
    model_config = ConfigDict(frozen=True)

    url: str
    source: AddressSource


class ToolDescriptor(BaseModel):
    """
    A tool as reported by the server's discovery call.

    Built fresh on every discovery; names are unique within one response.
    """
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Tool name as exposed by the server")
    description: str = Field(default="", description="Human readable description")


class ToolSelection(BaseModel):
    """Outcome of applying the tool-name filter to a discovery snapshot."""
    selected: list[ToolDescriptor] = Field(default_factory=list)
    not_found: list[str] = Field(default_factory=list)

    @property
    def names(self) -> list[str]:
        return [tool.name for tool in self.selected]


class ToolResultStatus(str, Enum):
    """Status of tool execution."""
    SUCCESS = "success"
    ERROR = "error"


class ToolResult(BaseModel):
    """
    Result of a single tool invocation.

    `texts` holds the text content items in reply order; other content
    types are dropped.
    """
    tool_name: str
    status: ToolResultStatus
    texts: list[str] = Field(default_factory=list)
    error: Optional[str] = None
    is_error: bool = Field(default=False, description="Server flagged the reply as an error")
    execution_time_ms: float = 0


class RunSummary(BaseModel):
    """Everything one pass of the runner did."""
    server_url: str
    selected: list[str] = Field(default_factory=list)
    not_found: list[str] = Field(default_factory=list)
    results: list[ToolResult] = Field(default_factory=list)

    @property
    def succeeded(self) -> list[str]:
        return [r.tool_name for r in self.results if r.status == ToolResultStatus.SUCCESS]

    @property
    def failed(self) -> list[str]:
        return [r.tool_name for r in self.results if r.status == ToolResultStatus.ERROR]
