"""
MCP server exposing the resource lifecycle tools.

Run with: cloudwright serve (stdio transport)
"""

from __future__ import annotations

import functools
import inspect
from typing import Any, Awaitable, Callable, Iterable

import structlog
from mcp.server.fastmcp import FastMCP
from mcp.server.fastmcp.exceptions import ToolError

from cloudwright.config.credentials import parse_toolsets
from cloudwright.errors import CloudwrightError
from cloudwright.tools import Toolkit

logger = structlog.get_logger()

INSTRUCTIONS = (
    "Cloudwright: create, list, inspect and delete agents, jobs, model APIs, MCP servers, "
    "sandboxes and integrations on a hosted agent platform. Create and delete calls "
    "wait for the resource to settle unless waitForCompletion is 'false'."
)

# (tool name, description, mutates)
ToolEntry = tuple[str, str, bool]

TOOLSET_TOOLS: dict[str, list[ToolEntry]] = {
    "agents": [
        ("list_agents", "List agents, optionally filtered by name.", False),
        ("get_agent", "Get an agent by name.", False),
        ("create_agent", "Create an agent and wait until it is deployed.", True),
        ("delete_agent", "Delete an agent and wait until it is gone.", True),
    ],
    "jobs": [
        ("list_jobs", "List jobs, optionally filtered by name.", False),
        ("get_job", "Get a job by name.", False),
        ("create_job", "Create a job and wait until it is deployed.", True),
        ("delete_job", "Delete a job and wait until it is gone.", True),
    ],
    "modelapis": [
        ("list_model_apis", "List model APIs, optionally filtered by name.", False),
        ("get_model_api", "Get a model API by name.", False),
        (
            "create_model_api",
            "Create a model API from an existing integration or a provider and api key.",
            True,
        ),
        ("delete_model_api", "Delete a model API and wait until it is gone.", True),
    ],
    "mcpservers": [
        ("list_mcp_servers", "List MCP servers, optionally filtered by name.", False),
        ("get_mcp_server", "Get an MCP server by name.", False),
        (
            "create_mcp_server",
            "Create an MCP server from an existing integration or an inline integration type.",
            True,
        ),
        ("delete_mcp_server", "Delete an MCP server and wait until it is gone.", True),
    ],
    "sandboxes": [
        ("list_sandboxes", "List sandboxes, optionally filtered by name.", False),
        ("get_sandbox", "Get a sandbox by name.", False),
        ("create_sandbox", "Create a sandbox from an image and wait until it is deployed.", True),
        ("delete_sandbox", "Delete a sandbox and wait until it is gone.", True),
    ],
    "integrations": [
        ("list_integrations", "List integration connections, optionally filtered by name.", False),
        ("get_integration", "Get an integration connection by name.", False),
        ("create_integration", "Create an integration connection.", True),
        ("delete_integration", "Delete an integration connection.", True),
    ],
}


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def _as_tool(method: Callable[..., Awaitable[str]]) -> Callable[..., Awaitable[str]]:
    """Expose a toolkit action with camelCase argument names.

    Lifecycle failures surface as tool errors carrying the failure message.
    """
    signature = inspect.signature(method)
    renamed = {_camel(name): name for name in signature.parameters}

    @functools.wraps(method)
    async def tool(**kwargs: Any) -> str:
        arguments = {renamed.get(key, key): value for key, value in kwargs.items()}
        try:
            return await method(**arguments)
        except CloudwrightError as exc:
            logger.warning("tool_failed", tool=method.__name__, error=str(exc))
            raise ToolError(str(exc)) from exc

    # FastMCP builds the argument schema from this signature
    tool.__signature__ = signature.replace(  # type: ignore[attr-defined]
        parameters=[param.replace(name=_camel(param.name)) for param in signature.parameters.values()]
    )
    return tool


def enabled_tools(read_only: bool = False, toolsets: Iterable[str] | None = None) -> list[ToolEntry]:
    selected = set(toolsets) if toolsets is not None else parse_toolsets(None)
    entries = []
    for toolset, tools in TOOLSET_TOOLS.items():
        if toolset not in selected:
            continue
        for entry in tools:
            if read_only and entry[2]:
                continue
            entries.append(entry)
    return entries


def build_server(
    toolkit: Toolkit,
    *,
    read_only: bool = False,
    toolsets: Iterable[str] | None = None,
) -> FastMCP:
    """Register the enabled toolkit actions on a new FastMCP server."""
    server = FastMCP(name="cloudwright", instructions=INSTRUCTIONS)
    entries = enabled_tools(read_only, toolsets)
    for name, description, _ in entries:
        server.add_tool(_as_tool(getattr(toolkit, name)), name=name, description=description)
    logger.info("server_built", tools=len(entries), read_only=read_only)
    return server


def run(server: FastMCP) -> None:
    server.run(transport="stdio")
