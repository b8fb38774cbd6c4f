"""Server address resolution and tool selection."""

from typing import Iterable, Optional

from shared.config import (
    DEFAULT_SERVER_URL,
    SERVER_URL_ENV_KEY,
    TOOLS_TO_CALL_ENV_KEY,
    Settings,
)
from shared.logging import get_logger
from shared.models import AddressSource, ResolvedAddress, ToolDescriptor, ToolSelection

logger = get_logger(__name__)


def resolve_server_url(cli_value: Optional[str], settings: Settings) -> ResolvedAddress:
    """
    Pick the server URL: command line, then environment, then the default.

    Empty strings count as unset.
    """
    if cli_value:
        logger.info("Using URL from command line argument", server_url=cli_value)
        return ResolvedAddress(url=cli_value, source=AddressSource.COMMAND_LINE)

    if settings.server_url:
        logger.info(
            "Using URL from environment variable",
            env_var=SERVER_URL_ENV_KEY,
            server_url=settings.server_url,
        )
        return ResolvedAddress(url=settings.server_url, source=AddressSource.ENVIRONMENT)

    logger.warning(
        "Neither command line argument nor environment variable is set, using default URL",
        env_var=SERVER_URL_ENV_KEY,
        server_url=DEFAULT_SERVER_URL,
    )
    return ResolvedAddress(url=DEFAULT_SERVER_URL, source=AddressSource.DEFAULT)


def parse_tool_filter(raw: Optional[str]) -> list[str]:
    """
    Split a comma-separated tool list.

    Entries are trimmed, empty entries dropped, order kept.
    """
    if not raw:
        logger.info(
            "Tool filter not set, will call all discovered tools",
            env_var=TOOLS_TO_CALL_ENV_KEY,
        )
        return []

    names = [name.strip() for name in raw.split(",")]
    names = [name for name in names if name]

    if names:
        logger.info("Only calling specified tools", tools=names)
    return names


def select_tools(
    discovered: Iterable[ToolDescriptor],
    tool_filter: list[str],
) -> ToolSelection:
    """
    Apply a case-insensitive name filter to discovered tools.

    An empty filter selects everything. Selected tools keep discovery
    order. Filter entries matching nothing are reported once as a warning
    and returned in `not_found`.
    """
    discovered = list(discovered)
    if not tool_filter:
        return ToolSelection(selected=discovered)

    requested = {name.lower() for name in tool_filter}
    selected = [tool for tool in discovered if tool.name.lower() in requested]

    found = {tool.name.lower() for tool in selected}
    not_found = [name for name in tool_filter if name.lower() not in found]

    if not_found:
        logger.warning("Requested tools were not found on the server", not_found=not_found)

    return ToolSelection(selected=selected, not_found=not_found)
