"""Tests for shared configuration and models."""

import pytest
from pydantic import ValidationError

from shared.models import RunSummary, ToolResult, ToolResultStatus


class TestSettings:
    """Tests for Settings."""

    def test_defaults(self):
        """Test defaults when nothing is configured."""
        from shared.config import DEFAULT_SERVER_NAME, Settings

        settings = Settings()

        assert settings.server_url is None
        assert settings.tools_to_call is None
        assert settings.tool_arguments == {"name": "itsuki"}
        assert settings.server_name == DEFAULT_SERVER_NAME
        assert settings.log_level == "INFO"
        assert settings.json_logs is False
        assert settings.wait_for_close is False

    def test_reads_environment(self, monkeypatch):
        """Test that env vars are picked up, including the unprefixed filter."""
        from shared.config import Settings

        monkeypatch.setenv("MCP_SERVER_URL", "http://env.example/mcp")
        monkeypatch.setenv("TOOLS_TO_CALL", "greet,echo")
        monkeypatch.setenv("MCP_TOOL_ARGUMENTS", '{"name": "yotsuba", "count": 2}')
        monkeypatch.setenv("MCP_WAIT_FOR_CLOSE", "true")

        settings = Settings()

        assert settings.server_url == "http://env.example/mcp"
        assert settings.tools_to_call == "greet,echo"
        assert settings.tool_arguments == {"name": "yotsuba", "count": 2}
        assert settings.wait_for_close is True

    def test_reads_dotenv_file(self, tmp_path):
        """Test loading from a .env file in the working directory."""
        from shared.config import Settings

        (tmp_path / ".env").write_text("MCP_SERVER_URL=http://dotenv.example/mcp\n")

        assert Settings().server_url == "http://dotenv.example/mcp"

    def test_yaml_file_below_environment(self, monkeypatch, tmp_path):
        """Test that the YAML file is read but the environment wins."""
        from shared.config import Settings

        config_file = tmp_path / "settings.yaml"
        config_file.write_text(
            "server_url: http://yaml.example/mcp\n"
            "tools_to_call: greet\n"
            "log_level: debug\n"
        )
        monkeypatch.setenv("MCP_CONFIG_PATH", str(config_file))

        settings = Settings()
        assert settings.server_url == "http://yaml.example/mcp"
        assert settings.tools_to_call == "greet"
        assert settings.log_level == "DEBUG"

        monkeypatch.setenv("MCP_SERVER_URL", "http://env.example/mcp")
        assert Settings().server_url == "http://env.example/mcp"

    def test_invalid_log_level_raises(self):
        """Test that an unknown log level is rejected."""
        from shared.config import Settings

        with pytest.raises(ValidationError, match="log_level"):
            Settings(log_level="verbose")

    def test_settings_are_immutable(self):
        """Test that resolved settings cannot be changed in place."""
        from shared.config import Settings

        settings = Settings()

        with pytest.raises(ValidationError):
            settings.server_url = "http://other.example/mcp"

    def test_get_settings_is_cached(self):
        """Test that get_settings returns the same instance."""
        from shared.config import get_settings

        assert get_settings() is get_settings()


class TestRunSummary:
    """Tests for RunSummary."""

    def test_succeeded_and_failed(self):
        """Test splitting results by status."""
        summary = RunSummary(
            server_url="http://localhost/mcp",
            selected=["greet", "echo"],
            results=[
                ToolResult(tool_name="greet", status=ToolResultStatus.SUCCESS, texts=["hi"]),
                ToolResult(tool_name="echo", status=ToolResultStatus.ERROR, error="boom"),
            ],
        )

        assert summary.succeeded == ["greet"]
        assert summary.failed == ["echo"]
