"""Per-kind descriptors driving the generic create/delete orchestrators."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from cloudwright.errors import SpecValidationError
from cloudwright.lifecycle.models import ResourceKind, ResourceSpec

PayloadBuilder = Callable[[ResourceSpec, Optional[str], Optional[str]], Dict[str, Any]]
AttributeValidator = Callable[[ResourceSpec], None]


class IntegrationRequirement(str, Enum):
    NONE = "none"
    OPTIONAL = "optional"
    REQUIRED = "required"


def parse_env(value: str | dict[str, str] | None) -> list[dict[str, str]]:
    """Parse ``FOO=bar,BAR=baz`` (or a mapping) into runtime env entries."""
    if not value:
        return []
    if isinstance(value, dict):
        return [{"name": str(k), "value": str(v)} for k, v in value.items()]
    entries = []
    for item in value.split(","):
        item = item.strip()
        if not item:
            continue
        key, sep, val = item.partition("=")
        if not sep or not key.strip():
            raise SpecValidationError(f"invalid env entry '{item}', expected NAME=VALUE")
        entries.append({"name": key.strip(), "value": val})
    return entries


def parse_ports(value: str | list[int] | None) -> list[dict[str, Any]]:
    """Parse ``8080,8081`` into TCP port entries."""
    if not value:
        return []
    raw = value.split(",") if isinstance(value, str) else value
    ports = []
    for item in raw:
        text = str(item).strip()
        if not text:
            continue
        try:
            port = int(text)
        except ValueError:
            raise SpecValidationError(f"invalid port '{text}'") from None
        if not 0 < port < 65536:
            raise SpecValidationError(f"invalid port '{text}'")
        ports.append({"target": port, "protocol": "TCP"})
    return ports


def _parse_memory(value: Any) -> int | None:
    if value in (None, "", 0):
        return None
    try:
        memory = int(float(value))
    except (TypeError, ValueError):
        raise SpecValidationError(f"invalid memory '{value}'") from None
    if memory <= 0:
        raise SpecValidationError(f"invalid memory '{value}'")
    return memory


def _container_runtime(spec: ResourceSpec) -> dict[str, Any]:
    attrs = spec.attributes
    runtime: dict[str, Any] = {}
    if attrs.get("image"):
        runtime["image"] = attrs["image"]
    memory = _parse_memory(attrs.get("memory"))
    if memory:
        runtime["memory"] = memory
    if attrs.get("generation"):
        runtime["generation"] = attrs["generation"]
    envs = parse_env(attrs.get("env"))
    if envs:
        runtime["envs"] = envs
    ports = parse_ports(attrs.get("ports"))
    if ports:
        runtime["ports"] = ports
    return runtime


def _payload(spec: ResourceSpec, runtime: dict[str, Any], integration: str | None) -> dict[str, Any]:
    body: dict[str, Any] = {"runtime": runtime}
    if integration:
        body["integrationConnections"] = [integration]
    return {"metadata": {"name": spec.name}, "spec": body}


def _container_payload(spec: ResourceSpec, integration: str | None, runtime_type: str | None) -> dict[str, Any]:
    return _payload(spec, _container_runtime(spec), integration)


def _model_payload(spec: ResourceSpec, integration: str | None, runtime_type: str | None) -> dict[str, Any]:
    runtime: dict[str, Any] = {}
    if spec.attributes.get("model"):
        runtime["model"] = spec.attributes["model"]
    if runtime_type:
        runtime["type"] = runtime_type
    return _payload(spec, runtime, integration)


def _tool_server_payload(spec: ResourceSpec, integration: str | None, runtime_type: str | None) -> dict[str, Any]:
    return _payload(spec, {"type": "mcp"}, integration)


def _validate_container(spec: ResourceSpec) -> None:
    _container_runtime(spec)


def _validate_nothing(spec: ResourceSpec) -> None:
    return None


@dataclass(frozen=True)
class ResourceDescriptor:
    """Static description of how one resource kind is created and reported.

    ``type_label``/``ref_label`` name the caller-facing fields in validation
    messages. ``required_secret`` is the secret key an inline integration
    must carry; ``runtime_type_from_integration`` makes the orchestrator look
    up a referenced integration's type to fill the runtime type.
    """

    kind: ResourceKind
    display_name: str
    collection: str
    response_key: str
    integration: IntegrationRequirement
    build_payload: PayloadBuilder
    validate_attributes: AttributeValidator = _validate_nothing
    ref_label: str = "integration_connection_name"
    type_label: str = "integration_type"
    type_key: str = "integrationType"
    required_secret: str | None = None
    secret_label: str | None = None
    runtime_type_from_integration: bool = False
    detail_fields: List[str] = field(default_factory=list)

    def shape(
        self,
        spec: ResourceSpec,
        integration: str | None,
        created: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Resource block returned to the caller."""
        resource: dict[str, Any] = {"name": spec.name}
        if integration:
            resource["integrationConnection"] = integration
            if spec.inline_integration is not None:
                resource[self.type_key] = spec.inline_integration.type
        for attr in self.detail_fields:
            if spec.attributes.get(attr):
                resource[attr] = spec.attributes[attr]
        if created and created.get("status"):
            resource["status"] = created["status"]
        return resource


DESCRIPTORS: Dict[ResourceKind, ResourceDescriptor] = {
    ResourceKind.AGENT: ResourceDescriptor(
        kind=ResourceKind.AGENT,
        display_name="Agent",
        collection="agents",
        response_key="agent",
        integration=IntegrationRequirement.OPTIONAL,
        build_payload=_container_payload,
        validate_attributes=_validate_container,
        detail_fields=["image"],
    ),
    ResourceKind.JOB: ResourceDescriptor(
        kind=ResourceKind.JOB,
        display_name="Job",
        collection="jobs",
        response_key="job",
        integration=IntegrationRequirement.OPTIONAL,
        build_payload=_container_payload,
        validate_attributes=_validate_container,
        detail_fields=["image"],
    ),
    ResourceKind.MODEL_API: ResourceDescriptor(
        kind=ResourceKind.MODEL_API,
        display_name="Model API",
        collection="models",
        response_key="model_api",
        integration=IntegrationRequirement.REQUIRED,
        build_payload=_model_payload,
        type_label="provider",
        type_key="provider",
        required_secret="apiKey",
        secret_label="api key",
        runtime_type_from_integration=True,
        detail_fields=["model", "endpoint"],
    ),
    ResourceKind.TOOL_SERVER: ResourceDescriptor(
        kind=ResourceKind.TOOL_SERVER,
        display_name="MCP server",
        collection="functions",
        response_key="mcp_server",
        integration=IntegrationRequirement.REQUIRED,
        build_payload=_tool_server_payload,
    ),
    ResourceKind.SANDBOX: ResourceDescriptor(
        kind=ResourceKind.SANDBOX,
        display_name="Sandbox",
        collection="sandboxes",
        response_key="sandbox",
        integration=IntegrationRequirement.NONE,
        build_payload=_container_payload,
        validate_attributes=_validate_container,
        detail_fields=["image"],
    ),
}


def descriptor_for(kind: ResourceKind) -> ResourceDescriptor:
    try:
        return DESCRIPTORS[kind]
    except KeyError:
        raise KeyError(f"Resource kind '{kind}' is not registered") from None
