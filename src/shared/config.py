"""Configuration management for the MCP tool runner.

Settings come from the environment (and a `.env` file), with an optional
YAML settings file underneath. Configuration is loaded once and cached.
"""

import os
from functools import lru_cache
from typing import Any, Optional

from pydantic import Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)


SERVER_URL_ENV_KEY = "MCP_SERVER_URL"
TOOLS_TO_CALL_ENV_KEY = "TOOLS_TO_CALL"
CONFIG_PATH_ENV_KEY = "MCP_CONFIG_PATH"

DEFAULT_CONFIG_PATH = "config/settings.yaml"
DEFAULT_SERVER_URL = "https://mcp-health-node-v1-770535842811.us-east1.run.app/mcp"
DEFAULT_SERVER_NAME = "sse-server"

# Placeholder payload sent to every tool unless overridden
DEFAULT_TOOL_ARGUMENTS: dict[str, Any] = {"name": "itsuki"}

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Settings(BaseSettings):
    """Main application settings."""
    server_url: Optional[str] = Field(default=None, description="MCP server URL")
    tools_to_call: Optional[str] = Field(
        default=None,
        validation_alias=TOOLS_TO_CALL_ENV_KEY,
        description="Comma-separated tool names to call; unset calls every tool",
    )
    tool_arguments: dict[str, Any] = Field(
        default_factory=lambda: dict(DEFAULT_TOOL_ARGUMENTS),
        description="Argument object sent with every tool call",
    )
    server_name: str = Field(default=DEFAULT_SERVER_NAME)
    log_level: str = Field(default="INFO")
    json_logs: bool = Field(default=False)
    wait_for_close: bool = Field(default=False)

    model_config = SettingsConfigDict(
        env_prefix="MCP_",
        env_file=".env",
        extra="ignore",
        frozen=True,
        populate_by_name=True,
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        if v.upper() not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {list(LOG_LEVELS)}")
        return v.upper()

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Environment wins over `.env`, which wins over the YAML file."""
        yaml_path = os.environ.get(CONFIG_PATH_ENV_KEY, DEFAULT_CONFIG_PATH)
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls, yaml_file=yaml_path),
            file_secret_settings,
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
