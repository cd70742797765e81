"""
Cloudwright configuration.

- Pydantic-based settings (environment variables, .env files)
- Workspace credentials from the YAML config file
"""

from cloudwright.config.credentials import (
    PlatformConfig,
    get_config_path,
    parse_toolsets,
    resolve_platform_config,
)
from cloudwright.config.settings import Settings, get_settings

__all__ = [
    "PlatformConfig",
    "Settings",
    "get_config_path",
    "get_settings",
    "parse_toolsets",
    "resolve_platform_config",
]
