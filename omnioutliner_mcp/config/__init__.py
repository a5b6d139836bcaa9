"""Configuration loading and management."""

from omnioutliner_mcp.config.loader import Settings, get_settings, load_tools_config

__all__ = ["Settings", "get_settings", "load_tools_config"]
