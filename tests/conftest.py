"""Shared fixtures for the MCP tool runner tests."""

import socket

import pytest

from shared.config import get_settings


SETTINGS_ENV_VARS = (
    "MCP_SERVER_URL",
    "TOOLS_TO_CALL",
    "MCP_TOOL_ARGUMENTS",
    "MCP_SERVER_NAME",
    "MCP_LOG_LEVEL",
    "MCP_JSON_LOGS",
    "MCP_WAIT_FOR_CLOSE",
    "MCP_CONFIG_PATH",
)


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    """Run every test without ambient env vars, `.env` or YAML settings."""
    for name in SETTINGS_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("MCP_CONFIG_PATH", str(tmp_path / "missing.yaml"))
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def closed_port():
    """A local TCP port with nothing listening on it."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        port = sock.getsockname()[1]
    return port
