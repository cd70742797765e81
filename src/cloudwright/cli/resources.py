"""
Create, list, get and delete commands for platform resources.
"""

from __future__ import annotations

import asyncio
from typing import Sequence

from cloudwright.cli.ux import console, error, header, info, print_json, print_key_value, success, warning
from cloudwright.config.credentials import resolve_platform_config
from cloudwright.config.settings import get_settings
from cloudwright.errors import CloudwrightError, SpecValidationError
from cloudwright.lifecycle.descriptors import descriptor_for
from cloudwright.lifecycle.models import InlineIntegration, ResourceKind, ResourceSpec
from cloudwright.tools import Toolkit

# CLI spelling -> resource kind
KIND_CHOICES = {
    "agent": ResourceKind.AGENT,
    "job": ResourceKind.JOB,
    "modelapi": ResourceKind.MODEL_API,
    "mcpserver": ResourceKind.TOOL_SERVER,
    "sandbox": ResourceKind.SANDBOX,
}


def parse_pairs(items: Sequence[str] | None) -> dict[str, str]:
    """Parse repeated ``KEY=VALUE`` arguments."""
    pairs: dict[str, str] = {}
    for item in items or []:
        key, sep, value = item.partition("=")
        if not sep or not key.strip():
            raise SpecValidationError(f"invalid value '{item}', expected KEY=VALUE")
        pairs[key.strip()] = value
    return pairs


def load_toolkit(config_path: str | None = None) -> Toolkit:
    settings = get_settings()
    config = resolve_platform_config(settings, config_path)
    return Toolkit.from_config(config, settings)


def build_resource_spec(
    kind: ResourceKind,
    name: str,
    *,
    integration: str | None = None,
    integration_type: str | None = None,
    secrets: Sequence[str] | None = None,
    config: Sequence[str] | None = None,
    provider: str | None = None,
    api_key: str | None = None,
    model: str | None = None,
    endpoint: str | None = None,
    image: str | None = None,
    memory: int | None = None,
    ports: str | None = None,
    env: str | None = None,
) -> ResourceSpec:
    secret_map = parse_pairs(secrets)
    if api_key:
        secret_map["apiKey"] = api_key

    inline_type = provider or integration_type
    inline = None
    if inline_type is not None:
        inline = InlineIntegration(type=inline_type, secrets=secret_map, config=parse_pairs(config))

    attributes = {
        "image": image,
        "memory": memory,
        "ports": ports,
        "env": env,
        "model": model,
        "endpoint": endpoint,
    }
    return ResourceSpec(
        name=name,
        kind=kind,
        integration_ref=integration or None,
        inline_integration=inline,
        attributes={key: value for key, value in attributes.items() if value is not None},
    )


def create_command(
    kind: str,
    name: str,
    *,
    wait: bool = True,
    config_path: str | None = None,
    toolkit: Toolkit | None = None,
    **fields,
) -> int:
    """
    Create a resource and optionally wait until it is deployed.

    Returns:
        Exit code (0 = success, 1 = error)
    """
    resource_kind = KIND_CHOICES[kind]
    header(f"Create {descriptor_for(resource_kind).display_name}: {name}")

    try:
        spec = build_resource_spec(resource_kind, name, **fields)
        toolkit = toolkit or load_toolkit(config_path)
        if wait:
            info("Waiting for deployment")
        outcome = asyncio.run(toolkit.create(spec, "true" if wait else "false"))
    except CloudwrightError as exc:
        error(str(exc))
        return 1

    if outcome.warning:
        warning(outcome.message)
    else:
        success(outcome.message)
    if outcome.resource:
        print_key_value(outcome.resource)
    return 0


def delete_command(
    kind: str,
    name: str,
    *,
    wait: bool = True,
    config_path: str | None = None,
    toolkit: Toolkit | None = None,
) -> int:
    """
    Delete a resource and optionally wait until it is gone.

    Returns:
        Exit code (0 = success, 1 = error)
    """
    resource_kind = KIND_CHOICES[kind]
    header(f"Delete {descriptor_for(resource_kind).display_name}: {name}")

    try:
        toolkit = toolkit or load_toolkit(config_path)
        outcome = asyncio.run(toolkit.delete(resource_kind, name, "true" if wait else "false"))
    except CloudwrightError as exc:
        error(str(exc))
        return 1

    if outcome.warning:
        warning(outcome.message)
    else:
        success(outcome.message)
    return 0


def get_command(
    kind: str,
    name: str,
    *,
    config_path: str | None = None,
    toolkit: Toolkit | None = None,
) -> int:
    """Print a resource as JSON."""
    try:
        toolkit = toolkit or load_toolkit(config_path)
        resource = asyncio.run(toolkit.get(KIND_CHOICES[kind], name))
    except CloudwrightError as exc:
        error(str(exc))
        return 1

    print_json(resource)
    console.print()
    return 0


def list_command(
    kind: str,
    name_filter: str | None = None,
    *,
    config_path: str | None = None,
    toolkit: Toolkit | None = None,
) -> int:
    """Print the resources of one kind whose name contains ``name_filter``."""
    try:
        toolkit = toolkit or load_toolkit(config_path)
        resources = asyncio.run(toolkit.list_resources(KIND_CHOICES[kind], name_filter))
    except CloudwrightError as exc:
        error(str(exc))
        return 1

    if not resources:
        info(f"No {descriptor_for(KIND_CHOICES[kind]).display_name} resources found")
        return 0
    print_json(resources)
    console.print()
    return 0
