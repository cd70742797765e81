"""Integration resolution for resource creation, plus standalone integrations."""

from __future__ import annotations

from typing import Any

import structlog

from cloudwright.clients.base import classify
from cloudwright.clients.platform import PlatformClient
from cloudwright.errors import OrchestrationError, PlatformAPIError, SpecValidationError
from cloudwright.lifecycle.descriptors import IntegrationRequirement, ResourceDescriptor
from cloudwright.lifecycle.models import IntegrationSpec, Outcome, ResourceSpec


def inline_integration_name(resource_name: str, integration_type: str) -> str:
    return f"{resource_name}-{integration_type}-integration"


def validate_integration_fields(spec: ResourceSpec, descriptor: ResourceDescriptor) -> None:
    """Check the integration fields of a request without touching the network."""
    has_ref = bool(spec.integration_ref)
    inline = spec.inline_integration

    if descriptor.integration is IntegrationRequirement.NONE:
        if has_ref or inline is not None:
            raise SpecValidationError(
                f"{descriptor.display_name.lower()} does not accept an integration"
            )
        return

    if has_ref and inline is not None:
        raise SpecValidationError(
            f"specify either {descriptor.ref_label} or {descriptor.type_label}, not both"
        )

    if inline is not None:
        if not inline.type:
            raise SpecValidationError(f"{descriptor.type_label} cannot be empty")
        if descriptor.required_secret and not inline.secrets.get(descriptor.required_secret):
            label = descriptor.secret_label or descriptor.required_secret
            raise SpecValidationError(
                f"{label} is required when specifying {descriptor.type_label}"
            )
        return

    if not has_ref and descriptor.integration is IntegrationRequirement.REQUIRED:
        raise SpecValidationError(
            f"must provide either {descriptor.ref_label} to reference an existing integration "
            f"or {descriptor.type_label} to create a new one"
        )


class IntegrationResolver:
    """Decides which integration a new resource is attached to.

    A reference is returned as-is and left for the platform to validate. An
    inline integration is created under a name derived from the resource; a
    409 on that call means an earlier attempt already created it, so the
    derived name is used anyway.
    """

    def __init__(self, client: PlatformClient, *, logger: Any = None) -> None:
        self._client = client
        self._logger = logger or structlog.get_logger()

    async def resolve(self, spec: ResourceSpec, descriptor: ResourceDescriptor) -> str | None:
        validate_integration_fields(spec, descriptor)

        if spec.integration_ref:
            return spec.integration_ref

        inline = spec.inline_integration
        if inline is None:
            return None

        name = inline_integration_name(spec.name, inline.type)
        try:
            response = await self._client.create_integration(
                name, inline.type, inline.secrets, inline.config
            )
        except PlatformAPIError as exc:
            raise OrchestrationError(
                f"failed to create inline integration: {exc}", exc.status_code
            ) from exc

        if response.status_code == 409:
            self._logger.info("integration_exists", integration=name, resource=spec.name)
            return name
        if not response.ok:
            raise OrchestrationError(
                f"failed to create integration with status {response.status_code}",
                response.status_code,
            )

        self._logger.info(
            "integration_created",
            integration=name,
            integration_type=inline.type,
            resource=spec.name,
        )
        return name

    async def integration_type(self, name: str) -> str | None:
        """Look up the type of an existing integration."""
        response = await self._client.get_integration(name)
        if not response.ok:
            raise classify(
                response,
                f"failed to get integration connection '{name}' with status {response.status_code}",
            )
        body = response.body or {}
        integration_type = (body.get("spec") or {}).get("integration")
        if not integration_type:
            raise OrchestrationError(f"no integration connection found for '{name}'")
        return integration_type


class IntegrationManager:
    """Create, read and delete integrations on their own."""

    def __init__(self, client: PlatformClient, *, logger: Any = None) -> None:
        self._client = client
        self._logger = logger or structlog.get_logger()

    async def create(self, spec: IntegrationSpec) -> Outcome:
        if not spec.name:
            raise SpecValidationError("name is required")
        if not spec.type:
            raise SpecValidationError("integration_type is required")

        response = await self._client.create_integration(spec.name, spec.type, spec.secrets, spec.config)
        if response.status_code == 409:
            raise OrchestrationError(f"integration with name '{spec.name}' already exists", 409)
        if not response.ok:
            raise OrchestrationError(
                f"failed to create integration with status {response.status_code}",
                response.status_code,
            )

        self._logger.info("integration_created", integration=spec.name, integration_type=spec.type)
        return Outcome(
            success=True,
            message=f"Integration '{spec.name}' created successfully",
            resource_key="integration",
            resource={"name": spec.name, "type": spec.type},
        )

    async def list_all(self) -> list[dict[str, Any]]:
        response = await self._client.list_integrations()
        if not response.ok:
            raise classify(response, f"list integrations failed with status {response.status_code}")
        return [item for item in response.body or [] if isinstance(item, dict)]

    async def get(self, name: str) -> dict[str, Any]:
        response = await self._client.get_integration(name)
        if not response.ok:
            raise classify(response, f"get integration '{name}' failed with status {response.status_code}")
        if not response.body:
            raise OrchestrationError(f"integration '{name}' not found", 404)
        return response.body

    async def delete(self, name: str) -> Outcome:
        response = await self._client.delete_integration(name)
        if not response.ok:
            raise OrchestrationError(
                f"delete integration failed with status {response.status_code}",
                response.status_code,
            )
        self._logger.info("integration_deleted", integration=name)
        return Outcome(success=True, message=f"Integration '{name}' deleted successfully")
