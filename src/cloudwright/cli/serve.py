"""
MCP server command.
"""

from __future__ import annotations

from cloudwright.cli.ux import error
from cloudwright.config.credentials import parse_toolsets, resolve_platform_config
from cloudwright.config.settings import get_settings
from cloudwright.errors import CloudwrightError
from cloudwright.server import build_server, run
from cloudwright.tools import Toolkit


def serve_command(
    read_only: bool = False,
    toolsets: str | None = None,
    config_path: str | None = None,
) -> int:
    """
    Serve the lifecycle tools over stdio.

    Args:
        read_only: Only register list_* and get_* tools (also CLOUDWRIGHT_READ_ONLY)
        toolsets: Comma-separated toolsets to enable (also CLOUDWRIGHT_TOOLSETS)
        config_path: Explicit config file path

    Returns:
        Exit code (0 = success, 1 = error)
    """
    settings = get_settings()
    try:
        config = resolve_platform_config(settings, config_path)
        enabled = parse_toolsets(toolsets or settings.toolsets)
        toolkit = Toolkit.from_config(config, settings)
    except CloudwrightError as exc:
        error(str(exc))
        return 1

    server = build_server(toolkit, read_only=read_only or config.read_only, toolsets=enabled)
    run(server)
    return 0
