"""Resource, integration and lifecycle status models."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ResourceKind(str, Enum):
    AGENT = "agent"
    JOB = "job"
    MODEL_API = "model_api"
    TOOL_SERVER = "mcp_server"
    SANDBOX = "sandbox"


class LifecycleStatus(str, Enum):
    CREATED = "CREATED"
    UPDATED = "UPDATED"
    UPLOADING = "UPLOADING"
    BUILDING = "BUILDING"
    DEPLOYING = "DEPLOYING"
    DEACTIVATING = "DEACTIVATING"
    DEPLOYED = "DEPLOYED"
    FAILED = "FAILED"
    TERMINATED = "TERMINATED"
    DEACTIVATED = "DEACTIVATED"
    DELETING = "DELETING"
    DELETED = "DELETED"


BUILDING_STATUSES = frozenset(
    {
        LifecycleStatus.CREATED.value,
        LifecycleStatus.UPDATED.value,
        LifecycleStatus.UPLOADING.value,
        LifecycleStatus.BUILDING.value,
        LifecycleStatus.DEPLOYING.value,
        LifecycleStatus.DEACTIVATING.value,
    }
)

# Creation polling stops on any of these; only DEPLOYED is a success.
FINAL_STATUSES = frozenset(
    {
        LifecycleStatus.DEPLOYED.value,
        LifecycleStatus.FAILED.value,
        LifecycleStatus.TERMINATED.value,
        LifecycleStatus.DEACTIVATED.value,
        LifecycleStatus.DELETING.value,
    }
)


def is_building_status(status: str) -> bool:
    return status in BUILDING_STATUSES


def is_final_status(status: str) -> bool:
    return status in FINAL_STATUSES


@dataclass(frozen=True)
class InlineIntegration:
    """Integration created on the fly for a single resource."""

    type: str
    secrets: dict[str, str] = field(default_factory=dict)
    config: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class IntegrationSpec:
    name: str
    type: str
    secrets: dict[str, str] = field(default_factory=dict)
    config: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class ResourceSpec:
    """Creation request for a platform resource.

    ``attributes`` carries the kind-specific settings (image, memory, model,
    ports, env) that the descriptor turns into the request payload.
    """

    name: str
    kind: ResourceKind
    integration_ref: str | None = None
    inline_integration: InlineIntegration | None = None
    attributes: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class PollPolicy:
    """Bounded retry budget for status polling.

    ``timeout`` is an optional external deadline in seconds; whichever of the
    deadline or ``max_attempts * interval`` runs out first ends the poll.
    """

    max_attempts: int = 60
    interval: float = 2.0
    timeout: float | None = None

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.interval < 0:
            raise ValueError("interval must not be negative")

    @property
    def budget_seconds(self) -> float:
        return self.max_attempts * self.interval


@dataclass
class Outcome:
    """Result of a create or delete orchestration."""

    success: bool
    message: str
    resource_key: str | None = None
    resource: dict[str, Any] | None = None
    warning: str | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"success": self.success, "message": self.message}
        if self.resource_key and self.resource is not None:
            payload[self.resource_key] = self.resource
        return payload
