"""
Workspace and credential resolution.

Search order for the config file:
1. Explicit path (--config flag)
2. .cloudwright/config.yaml (current directory)
3. ~/.cloudwright/config.yaml (user home)

The workspace comes from CLOUDWRIGHT_WORKSPACE, else the file's current
context. The API key comes from the file's entry for that workspace, else
CLOUDWRIGHT_API_KEY.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import structlog
import yaml

from cloudwright.config.settings import Settings
from cloudwright.errors import ConfigurationError

logger = structlog.get_logger()

TOOLSETS = frozenset({"agents", "jobs", "modelapis", "mcpservers", "sandboxes", "integrations"})


@dataclass(frozen=True)
class PlatformConfig:
    """Everything needed to talk to one workspace."""

    api_url: str
    workspace: str
    api_key: str
    env: str
    read_only: bool = False


def get_config_path(explicit_path: str | Path | None = None) -> Path | None:
    if explicit_path:
        path = Path(explicit_path)
        if path.exists():
            return path
        return None

    cwd_config = Path.cwd() / ".cloudwright" / "config.yaml"
    if cwd_config.exists():
        return cwd_config

    home_config = Path.home() / ".cloudwright" / "config.yaml"
    if home_config.exists():
        return home_config

    return None


def load_config_file(path: Path | None) -> dict[str, Any]:
    if path is None or not path.exists():
        return {}
    try:
        with open(path) as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.warning("failed_to_load_config", path=str(path), error=str(e))
        return {}
    if not isinstance(data, dict):
        logger.warning("invalid_config_file", path=str(path))
        return {}
    logger.debug("loaded_config", path=str(path))
    return data


def _workspace_entry(data: dict[str, Any], workspace: str) -> dict[str, Any]:
    for entry in data.get("workspaces") or []:
        if isinstance(entry, dict) and entry.get("name") == workspace:
            return entry
    return {}


def resolve_platform_config(
    settings: Settings,
    config_path: str | Path | None = None,
) -> PlatformConfig:
    data = load_config_file(get_config_path(config_path))

    workspace = settings.workspace or (data.get("context") or {}).get("workspace")
    if not workspace:
        raise ConfigurationError("no workspace found")

    entry = _workspace_entry(data, workspace)
    api_key = (entry.get("credentials") or {}).get("apiKey") or settings.api_key
    if not api_key:
        raise ConfigurationError(
            "no valid credentials found (set CLOUDWRIGHT_API_KEY or add them to the config file)"
        )

    env = entry.get("env") or settings.env
    return PlatformConfig(
        api_url=settings.endpoint(env),
        workspace=workspace,
        api_key=api_key,
        env=env,
        read_only=settings.read_only,
    )


def parse_toolsets(value: str | None) -> set[str]:
    """Parse a comma-separated toolset list; ``all`` (or nothing) enables every toolset."""
    selected = {item.strip() for item in (value or "").split(",") if item.strip()}
    if not selected or "all" in selected:
        return set(TOOLSETS)
    unknown = selected - TOOLSETS
    if unknown:
        raise ConfigurationError(f"unknown toolsets: {', '.join(sorted(unknown))}")
    return selected
