"""Configuration loading from environment and YAML files."""

from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_TOOL_GROUPS = ["query", "modify", "synthesis"]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Host and port (loopback only by default; the bridge trusts its caller)
    host: str = "127.0.0.1"
    port: int = 3000

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"
    debug_logging: bool = False

    # Server info
    server_name: str = "omnioutliner-mcp"
    server_version: str = "1.0.0"
    protocol_version: str = "2024-11-05"

    # Script execution
    osascript_path: str = "/usr/bin/osascript"
    script_timeout: int = 30

    # Tool group configuration file; empty means search the default locations
    tools_config_path: str = ""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @property
    def effective_log_level(self) -> str:
        """DEBUG when debug logging is switched on, otherwise log_level."""
        return "DEBUG" if self.debug_logging else self.log_level.upper()


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def _default_config() -> dict[str, Any]:
    return {"enabled_groups": list(DEFAULT_TOOL_GROUPS)}


def load_tools_config(config_path: str | Path | None = None) -> dict[str, Any]:
    """
    Load tool group configuration from YAML file.

    Args:
        config_path: Path to the config file. If None, uses the configured
            path or the default locations.

    Returns:
        Dictionary with configuration data.
    """
    if config_path is None:
        configured = get_settings().tools_config_path
        possible_paths = [Path(configured)] if configured else []
        possible_paths += [
            Path("config/tools.yaml"),
            Path(__file__).parent.parent.parent / "config" / "tools.yaml",
        ]
        for path in possible_paths:
            if path.exists():
                config_path = path
                break
        else:
            return _default_config()

    config_path = Path(config_path)
    if not config_path.exists():
        return _default_config()

    with open(config_path, "r", encoding="utf-8") as f:
        config = yaml.safe_load(f) or {}

    return config


def get_enabled_groups(config: dict[str, Any] | None = None) -> list[str]:
    """Get list of enabled tool group names."""
    if config is None:
        config = load_tools_config()
    return config.get("enabled_groups", list(DEFAULT_TOOL_GROUPS))
