"""Command-line entry point for the MCP tool runner."""

import asyncio
import sys
from typing import Optional

import click

from shared.config import LOG_LEVELS, get_settings
from shared.logging import get_logger, setup_logging
from mcp_client.client import MCPClientError
from orchestrator.runner import run_once
from orchestrator.selection import resolve_server_url

logger = get_logger(__name__)


@click.command()
@click.argument("server_url", required=False)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    help="Logging level (overrides MCP_LOG_LEVEL)",
)
@click.option("--json-logs", is_flag=True, help="Emit logs as JSON")
@click.option(
    "--wait-for-close",
    is_flag=True,
    help="Keep the connection open until the server closes it",
)
def cli(
    server_url: Optional[str],
    log_level: Optional[str],
    json_logs: bool,
    wait_for_close: bool,
) -> None:
    """Connect to an MCP server, call its tools and print the results.

    SERVER_URL defaults to $MCP_SERVER_URL, then to a built-in URL.
    """
    settings = get_settings()

    overrides: dict = {}
    if log_level:
        overrides["log_level"] = log_level.upper()
    if json_logs:
        overrides["json_logs"] = True
    if wait_for_close:
        overrides["wait_for_close"] = True
    if overrides:
        settings = settings.model_copy(update=overrides)

    setup_logging(settings.log_level, json_output=settings.json_logs)

    address = resolve_server_url(server_url, settings)

    try:
        asyncio.run(run_once(address, settings))
    except MCPClientError as e:
        logger.error("Run aborted", server_url=address.url, error=str(e))
        sys.exit(1)


def main() -> None:
    """Run the MCP tool runner."""
    cli()


if __name__ == "__main__":
    main()
