"""
Resource lifecycle orchestration.

Resolves integrations for new resources, issues create/delete calls and
polls the platform until resources settle.
"""

from cloudwright.lifecycle.descriptors import (
    DESCRIPTORS,
    IntegrationRequirement,
    ResourceDescriptor,
    descriptor_for,
)
from cloudwright.lifecycle.integrations import IntegrationManager, IntegrationResolver
from cloudwright.lifecycle.models import (
    BUILDING_STATUSES,
    FINAL_STATUSES,
    InlineIntegration,
    IntegrationSpec,
    LifecycleStatus,
    Outcome,
    PollPolicy,
    ResourceKind,
    ResourceSpec,
)
from cloudwright.lifecycle.orchestrator import (
    CreateOrchestrator,
    DeleteOrchestrator,
    parse_wait_flag,
)
from cloudwright.lifecycle.poller import LifecyclePoller
from cloudwright.lifecycle.status import StatusChecker, status_checker_for

__all__ = [
    "BUILDING_STATUSES",
    "FINAL_STATUSES",
    "DESCRIPTORS",
    "CreateOrchestrator",
    "DeleteOrchestrator",
    "InlineIntegration",
    "IntegrationManager",
    "IntegrationRequirement",
    "IntegrationResolver",
    "IntegrationSpec",
    "LifecyclePoller",
    "LifecycleStatus",
    "Outcome",
    "PollPolicy",
    "ResourceDescriptor",
    "ResourceKind",
    "ResourceSpec",
    "StatusChecker",
    "descriptor_for",
    "parse_wait_flag",
    "status_checker_for",
]
