"""Tool Discovery for MCP Client.

Keeps the latest discovery result as an immutable snapshot.
"""

from datetime import datetime, timezone
from typing import Optional

from shared.logging import get_logger
from shared.models import ToolDescriptor
from mcp_client.client import MCPClient, MCPClientError, ToolsNotSupportedError

logger = get_logger(__name__)


class ToolCatalog:
    """
    Latest known tool list for one connection.

    Discovery publishes a new tuple on every refresh; readers take
    `tools` when they need it and keep that snapshot. A tool-list-changed
    notification replaces the snapshot without touching copies already
    handed out, so no locking is needed.
    """

    def __init__(self, client: MCPClient) -> None:
        self.client = client

        self._tools: tuple[ToolDescriptor, ...] = ()
        self._refreshed_at: Optional[datetime] = None
        self._refresh_count = 0

    @property
    def tools(self) -> tuple[ToolDescriptor, ...]:
        """Current snapshot, in discovery order."""
        return self._tools

    @property
    def refreshed_at(self) -> Optional[datetime]:
        return self._refreshed_at

    @property
    def refresh_count(self) -> int:
        return self._refresh_count

    def attach(self) -> None:
        """Refresh automatically when the server reports a tool list change."""
        self.client.on_tools_changed(self.refresh)

    async def refresh(self) -> tuple[ToolDescriptor, ...]:
        """
        Re-run discovery and publish the result.

        Discovery failures are logged and leave the previous snapshot
        in place (empty before the first successful discovery).

        Returns:
            The snapshot after the refresh
        """
        try:
            tools = await self.client.list_tools()
        except ToolsNotSupportedError as e:
            logger.warning("Tools not supported by the server", error=str(e))
            return self._tools
        except MCPClientError as e:
            logger.error("Failed to refresh tool catalog", error=str(e))
            return self._tools

        self._publish(tools)
        return self._tools

    def _publish(self, tools: list[ToolDescriptor]) -> None:
        self._tools = tuple(tools)
        self._refreshed_at = datetime.now(timezone.utc)
        self._refresh_count += 1
        logger.info("Tool catalog refreshed", tool_count=len(self._tools))

    def get(self, name: str) -> Optional[ToolDescriptor]:
        """Look up a tool by name, ignoring case."""
        wanted = name.lower()
        for tool in self._tools:
            if tool.name.lower() == wanted:
                return tool
        return None

    def names(self) -> list[str]:
        return [tool.name for tool in self._tools]
