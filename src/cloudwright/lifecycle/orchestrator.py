"""Generic create/delete orchestration for every resource kind."""

from __future__ import annotations

from typing import Any, Callable

import structlog

from cloudwright.clients.platform import PlatformClient
from cloudwright.errors import (
    LifecycleError,
    OrchestrationError,
    PlatformAPIError,
    SpecValidationError,
)
from cloudwright.lifecycle.descriptors import descriptor_for
from cloudwright.lifecycle.integrations import IntegrationResolver, validate_integration_fields
from cloudwright.lifecycle.models import Outcome, ResourceKind, ResourceSpec
from cloudwright.lifecycle.poller import LifecyclePoller
from cloudwright.lifecycle.status import StatusChecker, status_checker_for

CheckerFactory = Callable[[ResourceKind, PlatformClient], StatusChecker]


def parse_wait_flag(value: str | None) -> bool:
    """``"true"``, empty or missing mean wait; anything else means don't."""
    if value is None or value == "":
        return True
    return value == "true"


def _require_name(name: str | None) -> str:
    if not name or not name.strip():
        raise SpecValidationError("name is required")
    return name


class CreateOrchestrator:
    """Validate → resolve integration → create → optionally wait for DEPLOYED.

    Once the create call has succeeded the outcome is always a success; a
    failed or timed-out status check only adds a warning.
    """

    def __init__(
        self,
        client: PlatformClient,
        poller: LifecyclePoller | None = None,
        *,
        resolver: IntegrationResolver | None = None,
        checker_factory: CheckerFactory = status_checker_for,
        logger: Any = None,
    ) -> None:
        self._client = client
        self._logger = logger or structlog.get_logger()
        self._poller = poller or LifecyclePoller(logger=self._logger)
        self._resolver = resolver or IntegrationResolver(client, logger=self._logger)
        self._checker_factory = checker_factory

    async def create(self, spec: ResourceSpec, wait_for_completion: bool = True) -> Outcome:
        descriptor = descriptor_for(spec.kind)
        name = _require_name(spec.name)
        validate_integration_fields(spec, descriptor)
        descriptor.validate_attributes(spec)

        log = self._logger.bind(kind=spec.kind.value, name=name)
        display = descriptor.display_name

        integration = await self._resolver.resolve(spec, descriptor)

        runtime_type = None
        if descriptor.runtime_type_from_integration and integration:
            if spec.inline_integration is not None:
                runtime_type = spec.inline_integration.type
            else:
                runtime_type = await self._resolver.integration_type(integration)

        payload = descriptor.build_payload(spec, integration, runtime_type)
        try:
            response = await self._client.create_resource(descriptor.collection, payload)
        except PlatformAPIError as exc:
            raise OrchestrationError(f"failed to create {display}: {exc}", exc.status_code) from exc

        if response.status_code == 409:
            raise OrchestrationError(f"{display} with name '{name}' already exists", 409)
        if not response.ok:
            raise OrchestrationError(
                f"failed to create {display} with status {response.status_code}",
                response.status_code,
            )
        log.info("resource_created", integration=integration)

        created = response.body if isinstance(response.body, dict) else None
        resource = descriptor.shape(spec, integration, created)
        suffix = ""
        if spec.inline_integration is not None:
            suffix = f" with inline integration '{integration}'"

        if not wait_for_completion:
            log.info("status_wait_skipped")
            return Outcome(
                success=True,
                message=f"{display} '{name}' created successfully{suffix}",
                resource_key=descriptor.response_key,
                resource=resource,
            )

        log.info("waiting_for_deployment")
        checker = self._checker_factory(spec.kind, self._client)
        try:
            await self._poller.wait_until_ready(checker, name)
        except LifecycleError as exc:
            log.warning("status_check_failed", error=str(exc))
            return Outcome(
                success=True,
                message=f"{display} '{name}' created successfully{suffix} (status check failed: {exc})",
                resource_key=descriptor.response_key,
                resource=resource,
                warning=str(exc),
            )

        return Outcome(
            success=True,
            message=f"{display} '{name}' created and deployed successfully{suffix}",
            resource_key=descriptor.response_key,
            resource=resource,
        )


class DeleteOrchestrator:
    """Delete → optionally wait for the resource to disappear.

    Deletion succeeds only on a 2xx answer or when the resource is already
    absent (404); every other status is a hard failure.
    """

    def __init__(
        self,
        client: PlatformClient,
        poller: LifecyclePoller | None = None,
        *,
        checker_factory: CheckerFactory = status_checker_for,
        logger: Any = None,
    ) -> None:
        self._client = client
        self._logger = logger or structlog.get_logger()
        self._poller = poller or LifecyclePoller(logger=self._logger)
        self._checker_factory = checker_factory

    async def delete(self, kind: ResourceKind, name: str, wait_for_completion: bool = True) -> Outcome:
        descriptor = descriptor_for(kind)
        name = _require_name(name)
        log = self._logger.bind(kind=kind.value, name=name)
        display = descriptor.display_name

        try:
            response = await self._client.delete_resource(descriptor.collection, name)
        except PlatformAPIError as exc:
            raise OrchestrationError(f"failed to delete {display}: {exc}", exc.status_code) from exc

        if response.status_code == 404:
            log.info("resource_already_absent")
            return Outcome(success=True, message=f"{display} '{name}' was already deleted")
        if not response.ok:
            raise OrchestrationError(
                f"delete {display} failed with status {response.status_code}",
                response.status_code,
            )

        if not wait_for_completion:
            log.info("deletion_wait_skipped")
            return Outcome(success=True, message=f"{display} '{name}' deletion initiated successfully")

        log.info("waiting_for_deletion")
        checker = self._checker_factory(kind, self._client)
        try:
            await self._poller.wait_until_deleted(checker, name)
        except LifecycleError as exc:
            log.warning("deletion_check_failed", error=str(exc))
            return Outcome(
                success=True,
                message=f"{display} '{name}' deletion initiated (status check failed: {exc})",
                warning=str(exc),
            )

        return Outcome(success=True, message=f"{display} '{name}' deleted successfully")
