"""MCP Client for tool discovery and execution.

Wraps the MCP SDK's streamable HTTP transport and client session behind a
small interface: connect, list tools, call a tool, close. Server-initiated
notifications are handled here as well.
"""

import asyncio
from contextlib import AsyncExitStack
from typing import Any, Awaitable, Callable, Optional

import httpx
from mcp import ClientSession, types
from mcp.client.streamable_http import streamable_http_client
from mcp.shared.exceptions import McpError

from shared.config import DEFAULT_SERVER_NAME
from shared.logging import get_logger
from shared.models import ConnectionState, ToolDescriptor

logger = get_logger(__name__)

CLIENT_VERSION = "1.0.0"

# Same limits the SDK applies to its own client; SSE reads stay open for long
HTTP_TIMEOUT = httpx.Timeout(30.0, read=300.0)

ToolsChangedListener = Callable[[], Awaitable[Any]]


def describe_error(error: BaseException) -> str:
    """Render an error, looking through single-member exception groups."""
    while len(getattr(error, "exceptions", ())) == 1:
        error = error.exceptions[0]
    return str(error) or type(error).__name__


class MCPClientError(Exception):
    """Base exception for MCP Client errors."""
    pass


class MCPConnectionError(MCPClientError):
    """Connection to MCP Server failed."""
    pass


class ToolsNotSupportedError(MCPClientError):
    """Server does not support tool discovery."""
    pass


class ToolCallError(MCPClientError):
    """A single tool call failed."""
    pass


def validate_server_url(server_url: str) -> str:
    """
    Check that `server_url` is an absolute http(s) URL.

    Raises:
        MCPConnectionError: If the URL is malformed
    """
    try:
        url = httpx.URL(server_url)
    except httpx.InvalidURL as e:
        raise MCPConnectionError(f"Invalid MCP Server URL {server_url!r}: {e}") from e

    if url.scheme not in ("http", "https") or not url.host:
        raise MCPConnectionError(f"Invalid MCP Server URL {server_url!r}: expected http(s)://host/...")
    return server_url


class MCPClient:
    """
    Client for a single MCP Server connection.

    Provides methods for:
    - Connecting over streamable HTTP
    - Discovering available tools
    - Executing tool calls
    - Observing server notifications (log messages, tool list changes)

    Use as an async context manager so the connection is always closed.
    """

    def __init__(
        self,
        server_name: str = DEFAULT_SERVER_NAME,
        headers: Optional[dict[str, str]] = None,
    ) -> None:
        """
        Initialize MCP Client.

        Args:
            server_name: Name of the target server, used in the client identity
            headers: Optional extra HTTP headers sent with every request
        """
        self.server_name = server_name
        self.headers = headers
        self.client_info = types.Implementation(
            name=f"mcp-client-for-{server_name}",
            version=CLIENT_VERSION,
        )

        self._exit_stack: Optional[AsyncExitStack] = None
        self._session: Optional[ClientSession] = None
        self._init_result: Optional[types.InitializeResult] = None
        self._state = ConnectionState.UNCONNECTED
        self._closed = asyncio.Event()
        self._tools_changed_listeners: list[ToolsChangedListener] = []
        self._background_tasks: set[asyncio.Task] = set()

    @property
    def state(self) -> ConnectionState:
        """Current connection state."""
        return self._state

    @property
    def server_info(self) -> Optional[types.Implementation]:
        """Server name and version reported during the handshake."""
        if self._init_result is None:
            return None
        return self._init_result.serverInfo

    def on_tools_changed(self, listener: ToolsChangedListener) -> None:
        """Register a coroutine function run when the server's tool list changes."""
        self._tools_changed_listeners.append(listener)

    async def __aenter__(self) -> "MCPClient":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()

    async def connect(self, server_url: str) -> None:
        """
        Open the transport and perform the MCP handshake.

        Args:
            server_url: Absolute URL of the server's MCP endpoint

        Raises:
            MCPConnectionError: On a malformed URL, network failure or
                rejected handshake
        """
        if self._session is not None:
            raise MCPClientError("Client is already connected")

        try:
            url = validate_server_url(server_url)
        except MCPConnectionError as e:
            logger.error("Failed to connect to MCP server", server_url=server_url, error=str(e))
            self._state = ConnectionState.ERRORED
            raise

        stack = AsyncExitStack()
        try:
            http_client = await stack.enter_async_context(
                httpx.AsyncClient(
                    headers=self.headers,
                    timeout=HTTP_TIMEOUT,
                    follow_redirects=True,
                )
            )
            read_stream, write_stream, _ = await stack.enter_async_context(
                streamable_http_client(url, http_client=http_client)
            )
            session = await stack.enter_async_context(
                ClientSession(
                    read_stream,
                    write_stream,
                    logging_callback=self._handle_log_message,
                    message_handler=self._handle_message,
                    client_info=self.client_info,
                )
            )
            self._init_result = await session.initialize()
        except BaseException as e:
            # A transport failure cancels initialize(); unwinding the stack
            # lets the transport's task group raise the real error instead
            self._state = ConnectionState.ERRORED
            cause = await self._unwind_failed_connect(stack, e)
            if not isinstance(cause, Exception):
                raise cause
            logger.error("Failed to connect to MCP server", server_url=url, error=describe_error(cause))
            raise MCPConnectionError(f"Cannot connect to MCP Server: {describe_error(cause)}") from cause

        self._exit_stack = stack
        self._session = session
        self._state = ConnectionState.CONNECTED
        logger.info(
            "Connected to server",
            server_url=url,
            server=self.server_info.name if self.server_info else None,
        )

    def _require_session(self) -> ClientSession:
        if self._session is None:
            raise MCPClientError("Client is not connected. Call connect() first.")
        return self._session

    async def list_tools(self) -> list[ToolDescriptor]:
        """
        List tools exposed by the server.

        Returns:
            Tool descriptors in the order the server reported them

        Raises:
            ToolsNotSupportedError: If the server does not offer tools
            MCPClientError: If discovery fails for another reason
        """
        session = self._require_session()

        capabilities = self._init_result.capabilities if self._init_result else None
        if capabilities is not None and capabilities.tools is None:
            raise ToolsNotSupportedError("Server does not advertise the tools capability")

        try:
            result = await session.list_tools()
        except McpError as e:
            raise ToolsNotSupportedError(f"Tools not supported by the server ({e})") from e
        except Exception as e:
            raise MCPClientError(f"Tool discovery failed: {e}") from e

        tools = [
            ToolDescriptor(name=tool.name, description=tool.description or "")
            for tool in result.tools
        ]
        logger.info("Available tools", tools=[tool.name for tool in tools])
        return tools

    async def call_tool(self, tool_name: str, arguments: dict[str, Any]) -> types.CallToolResult:
        """
        Call a tool and wait for its reply.

        Args:
            tool_name: Name of the tool to call
            arguments: Tool arguments as a dictionary

        Raises:
            ToolCallError: If the call fails
        """
        session = self._require_session()

        logger.debug("Executing tool", tool=tool_name)
        try:
            return await session.call_tool(tool_name, arguments)
        except Exception as e:
            raise ToolCallError(f"Error calling tool {tool_name!r}: {e}") from e

    async def _handle_log_message(self, params: types.LoggingMessageNotificationParams) -> None:
        logger.info(
            "Server log message",
            server_level=params.level,
            server_logger=params.logger,
            data=params.data,
        )

    async def _handle_message(self, message: Any) -> None:
        """Handle incoming server messages and transport errors."""
        if isinstance(message, Exception):
            logger.error("Transport error", error=str(message))
            self._state = ConnectionState.ERRORED
            self._closed.set()
            return

        if not isinstance(message, types.ServerNotification):
            return

        if isinstance(message.root, types.ToolListChangedNotification):
            logger.info("Tool list changed notification received")
            # The refresh sends a request, so it cannot run inside the receive loop
            for listener in self._tools_changed_listeners:
                self._spawn(listener())

    def _spawn(self, coro: Awaitable[Any]) -> None:
        task = asyncio.ensure_future(coro)
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)

    async def wait_closed(self) -> None:
        """Wait until the connection is closed or the transport fails."""
        await self._closed.wait()

    async def close(self) -> None:
        """Close the connection. Safe to call more than once."""
        if self._background_tasks:
            tasks = list(self._background_tasks)
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)

        stack, self._exit_stack = self._exit_stack, None
        self._session = None

        if stack is not None:
            try:
                await stack.aclose()
            finally:
                if self._state != ConnectionState.ERRORED:
                    self._state = ConnectionState.CLOSED
                logger.info("Connection closed", server=self.server_name)

        self._closed.set()

    async def _unwind_failed_connect(
        self, stack: AsyncExitStack, error: BaseException
    ) -> BaseException:
        """
        Unwind a half-open connection after a failed connect.

        Returns the exception that best describes the failure: whatever the
        unwinding raised (typically the transport's own error group), or
        `error` itself when the unwinding swallowed it.
        """
        try:
            suppressed = await stack.__aexit__(type(error), error, error.__traceback__)
        except BaseException as unwound:
            return unwound
        if suppressed and isinstance(error, asyncio.CancelledError):
            # The transport absorbed its own cancellation without a reason
            return MCPConnectionError("Connection cancelled by the transport")
        return error
