"""Single-pass tool runner.

Connects, discovers, selects, calls each selected tool in order and
closes the connection.
"""

import time
from typing import Any, Callable, Iterable, Optional

import click
from mcp import types

from shared.config import Settings
from shared.logging import bind_context, clear_context, get_logger
from shared.models import ResolvedAddress, RunSummary, ToolResult, ToolResultStatus
from mcp_client.client import MCPClient, MCPClientError
from mcp_client.discovery import ToolCatalog
from orchestrator.selection import parse_tool_filter, select_tools

logger = get_logger(__name__)


def extract_text(content: Iterable[Any]) -> list[str]:
    """Return the text of every text content item, skipping other types."""
    return [item.text for item in content if isinstance(item, types.TextContent)]


class ToolRunner:
    """
    Calls the selected tools of a connected server one at a time.

    Output of each call is written through `echo`; logs go through
    structlog.
    """

    def __init__(
        self,
        client: MCPClient,
        catalog: ToolCatalog,
        tool_filter: Optional[list[str]] = None,
        arguments: Optional[dict[str, Any]] = None,
        echo: Callable[[str], Any] = click.echo,
    ) -> None:
        self.client = client
        self.catalog = catalog
        self.tool_filter = tool_filter or []
        self.arguments = arguments or {}
        self.echo = echo

    async def invoke(self, tool_name: str) -> ToolResult:
        """
        Call one tool and print its text output.

        Failures are logged and returned as an error result.
        """
        logger.info("Calling tool", tool=tool_name)
        start = time.perf_counter()

        try:
            reply = await self.client.call_tool(tool_name, self.arguments)
        except MCPClientError as e:
            logger.error("Error calling tool", tool=tool_name, error=str(e))
            return ToolResult(
                tool_name=tool_name,
                status=ToolResultStatus.ERROR,
                error=str(e),
                execution_time_ms=(time.perf_counter() - start) * 1000,
            )

        texts = extract_text(reply.content)
        self.echo("results:")
        for text in texts:
            self.echo(f"- {text}")

        if reply.isError:
            logger.warning("Tool reported an error", tool=tool_name)

        return ToolResult(
            tool_name=tool_name,
            status=ToolResultStatus.ERROR if reply.isError else ToolResultStatus.SUCCESS,
            texts=texts,
            error="Tool reported an error" if reply.isError else None,
            is_error=bool(reply.isError),
            execution_time_ms=(time.perf_counter() - start) * 1000,
        )

    async def run(self, server_url: str) -> RunSummary:
        """Select from the current catalog snapshot and call each tool in turn."""
        snapshot = self.catalog.tools
        selection = select_tools(snapshot, self.tool_filter)
        summary = RunSummary(
            server_url=server_url,
            selected=selection.names,
            not_found=selection.not_found,
        )

        if not selection.selected:
            logger.info("No tools selected or found to execute")
            return summary

        logger.info("Executing tools", count=len(selection.selected))
        for tool in selection.selected:
            summary.results.append(await self.invoke(tool.name))

        logger.info(
            "Run complete",
            succeeded=len(summary.succeeded),
            failed=len(summary.failed),
        )
        return summary


async def run_once(
    address: ResolvedAddress,
    settings: Settings,
    client_factory: Callable[..., MCPClient] = MCPClient,
    echo: Callable[[str], Any] = click.echo,
) -> RunSummary:
    """
    Run one full pass against the server at `address`.

    The connection is closed on every path, including a failed connect.

    Raises:
        MCPConnectionError: If the connection cannot be established
    """
    tool_filter = parse_tool_filter(settings.tools_to_call)
    bind_context(server_url=address.url)

    try:
        async with client_factory(server_name=settings.server_name) as client:
            await client.connect(address.url)

            catalog = ToolCatalog(client)
            catalog.attach()
            await catalog.refresh()

            runner = ToolRunner(
                client,
                catalog,
                tool_filter=tool_filter,
                arguments=settings.tool_arguments,
                echo=echo,
            )
            summary = await runner.run(address.url)

            if settings.wait_for_close:
                logger.info("Waiting for the connection to close")
                await client.wait_closed()

            return summary
    finally:
        clear_context()
