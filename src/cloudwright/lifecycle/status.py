"""Per-kind status checkers used by the lifecycle poller."""

from __future__ import annotations

from typing import Any, ClassVar, Dict, Protocol

import structlog

from cloudwright.clients.base import classify
from cloudwright.clients.platform import PlatformClient
from cloudwright.lifecycle.models import LifecycleStatus, ResourceKind

logger = structlog.get_logger()


class StatusChecker(Protocol):
    """Fetches one resource kind and reads its lifecycle status."""

    kind: ResourceKind

    async def fetch(self, name: str) -> dict[str, Any] | None:
        """Return the resource, ``None`` when the body is empty.

        Raises ``ResourceNotFoundError`` on 404 and ``PlatformAPIError`` on
        any other failure.
        """
        ...

    def extract_status(self, resource: dict[str, Any]) -> str:
        ...


class PlatformStatusChecker:
    """Status checker backed by a platform collection."""

    kind: ClassVar[ResourceKind]
    collection: ClassVar[str]

    def __init__(self, client: PlatformClient) -> None:
        self._client = client

    async def fetch(self, name: str) -> dict[str, Any] | None:
        response = await self._client.get_resource(self.collection, name)
        if not response.ok:
            raise classify(
                response,
                f"get {self.kind.value} '{name}' failed with status {response.status_code}",
            )
        return response.body or None

    def extract_status(self, resource: dict[str, Any]) -> str:
        if not isinstance(resource, dict):
            logger.warning("status_not_extractable", kind=self.kind.value, resource=repr(resource))
            return LifecycleStatus.DEPLOYING.value
        status = resource.get("status")
        # Freshly created resources may not report a status yet.
        if not status:
            return LifecycleStatus.DEPLOYING.value
        return str(status)


class AgentStatusChecker(PlatformStatusChecker):
    kind = ResourceKind.AGENT
    collection = "agents"


class JobStatusChecker(PlatformStatusChecker):
    kind = ResourceKind.JOB
    collection = "jobs"


class ModelAPIStatusChecker(PlatformStatusChecker):
    kind = ResourceKind.MODEL_API
    collection = "models"


class ToolServerStatusChecker(PlatformStatusChecker):
    kind = ResourceKind.TOOL_SERVER
    collection = "functions"


class SandboxStatusChecker(PlatformStatusChecker):
    kind = ResourceKind.SANDBOX
    collection = "sandboxes"


STATUS_CHECKERS: Dict[ResourceKind, type[PlatformStatusChecker]] = {
    checker.kind: checker
    for checker in (
        AgentStatusChecker,
        JobStatusChecker,
        ModelAPIStatusChecker,
        ToolServerStatusChecker,
        SandboxStatusChecker,
    )
}


def status_checker_for(kind: ResourceKind, client: PlatformClient) -> PlatformStatusChecker:
    try:
        checker_cls = STATUS_CHECKERS[kind]
    except KeyError:
        raise KeyError(f"No status checker registered for '{kind}'") from None
    return checker_cls(client)
