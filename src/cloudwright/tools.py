"""
Caller-facing actions for each resource kind.

Every action takes plain strings and mappings, the way a tool caller sends
them, converts them into lifecycle requests and returns the outcome as a
JSON string. Failures raise ``CloudwrightError`` with a single message.
"""

import json
from typing import Any, Dict, List, Optional

import structlog

from cloudwright.clients.base import classify
from cloudwright.clients.platform import PlatformClient
from cloudwright.config.credentials import PlatformConfig
from cloudwright.config.settings import Settings
from cloudwright.errors import ResourceNotFoundError
from cloudwright.lifecycle.descriptors import descriptor_for
from cloudwright.lifecycle.integrations import IntegrationManager
from cloudwright.lifecycle.models import (
    InlineIntegration,
    IntegrationSpec,
    Outcome,
    PollPolicy,
    ResourceKind,
    ResourceSpec,
)
from cloudwright.lifecycle.orchestrator import CreateOrchestrator, DeleteOrchestrator, parse_wait_flag
from cloudwright.lifecycle.poller import LifecyclePoller
from cloudwright.logging import bind_context


def _dump(payload: Any) -> str:
    return json.dumps(payload, indent=2, default=str)


def _inline(
    integration_type: Optional[str],
    secret: Optional[Dict[str, str]],
    config: Optional[Dict[str, str]],
) -> Optional[InlineIntegration]:
    if not integration_type:
        return None
    return InlineIntegration(type=integration_type, secrets=dict(secret or {}), config=dict(config or {}))


def _name_matches(resource: Dict[str, Any], name_filter: Optional[str]) -> bool:
    if not name_filter:
        return True
    name = (resource.get("metadata") or {}).get("name") or ""
    return name_filter.lower() in str(name).lower()


class Toolkit:
    """List/create/get/delete actions for every resource kind plus integrations."""

    def __init__(
        self,
        client: PlatformClient,
        *,
        poll_policy: Optional[PollPolicy] = None,
        logger: Any = None,
    ) -> None:
        self._client = client
        self._logger = logger or structlog.get_logger()
        poller = LifecyclePoller(poll_policy, logger=self._logger)
        self._creator = CreateOrchestrator(client, poller, logger=self._logger)
        self._deleter = DeleteOrchestrator(client, poller, logger=self._logger)
        self._integrations = IntegrationManager(client, logger=self._logger)

    @classmethod
    def from_config(cls, config: PlatformConfig, settings: Settings) -> "Toolkit":
        client = PlatformClient(
            config.api_url,
            config.api_key,
            config.workspace,
            timeout=settings.http_timeout,
            max_retries=settings.http_max_retries,
            backoff_factor=settings.http_backoff_factor,
        )
        logger = bind_context(workspace=config.workspace)
        return cls(client, poll_policy=settings.poll_policy(), logger=logger)

    async def create(self, spec: ResourceSpec, wait_for_completion: Optional[str] = None) -> Outcome:
        return await self._creator.create(spec, parse_wait_flag(wait_for_completion))

    async def delete(self, kind: ResourceKind, name: str, wait_for_completion: Optional[str] = None) -> Outcome:
        return await self._deleter.delete(kind, name, parse_wait_flag(wait_for_completion))

    async def list_resources(self, kind: ResourceKind, filter: Optional[str] = None) -> List[Dict[str, Any]]:
        """Resources of one kind whose name contains ``filter``, ignoring case."""
        descriptor = descriptor_for(kind)
        response = await self._client.list_resources(descriptor.collection)
        if not response.ok:
            raise classify(
                response,
                f"list {descriptor.collection} failed with status {response.status_code}",
            )
        resources = [item for item in response.body or [] if isinstance(item, dict)]
        return [item for item in resources if _name_matches(item, filter)]

    async def get(self, kind: ResourceKind, name: str) -> Dict[str, Any]:
        descriptor = descriptor_for(kind)
        response = await self._client.get_resource(descriptor.collection, name)
        if not response.ok:
            raise classify(
                response,
                f"get {descriptor.display_name} failed with status {response.status_code}",
            )
        if not response.body:
            raise ResourceNotFoundError(f"{descriptor.display_name} '{name}' not found", 404)
        return response.body

    # Agents

    async def create_agent(
        self,
        name: str,
        image: Optional[str] = None,
        memory: Optional[int] = None,
        env: Optional[str] = None,
        integration_connection_name: Optional[str] = None,
        integration_type: Optional[str] = None,
        secret: Optional[Dict[str, str]] = None,
        config: Optional[Dict[str, str]] = None,
        wait_for_completion: Optional[str] = None,
    ) -> str:
        spec = ResourceSpec(
            name=name,
            kind=ResourceKind.AGENT,
            integration_ref=integration_connection_name or None,
            inline_integration=_inline(integration_type, secret, config),
            attributes={"image": image, "memory": memory, "env": env},
        )
        return _dump((await self.create(spec, wait_for_completion)).to_dict())

    async def list_agents(self, filter: Optional[str] = None) -> str:
        return _dump(await self.list_resources(ResourceKind.AGENT, filter))

    async def get_agent(self, name: str) -> str:
        return _dump(await self.get(ResourceKind.AGENT, name))

    async def delete_agent(self, name: str, wait_for_completion: Optional[str] = None) -> str:
        return _dump((await self.delete(ResourceKind.AGENT, name, wait_for_completion)).to_dict())

    # Jobs

    async def create_job(
        self,
        name: str,
        image: Optional[str] = None,
        memory: Optional[int] = None,
        env: Optional[str] = None,
        integration_connection_name: Optional[str] = None,
        integration_type: Optional[str] = None,
        secret: Optional[Dict[str, str]] = None,
        config: Optional[Dict[str, str]] = None,
        wait_for_completion: Optional[str] = None,
    ) -> str:
        spec = ResourceSpec(
            name=name,
            kind=ResourceKind.JOB,
            integration_ref=integration_connection_name or None,
            inline_integration=_inline(integration_type, secret, config),
            attributes={"image": image, "memory": memory, "env": env},
        )
        return _dump((await self.create(spec, wait_for_completion)).to_dict())

    async def list_jobs(self, filter: Optional[str] = None) -> str:
        return _dump(await self.list_resources(ResourceKind.JOB, filter))

    async def get_job(self, name: str) -> str:
        return _dump(await self.get(ResourceKind.JOB, name))

    async def delete_job(self, name: str, wait_for_completion: Optional[str] = None) -> str:
        return _dump((await self.delete(ResourceKind.JOB, name, wait_for_completion)).to_dict())

    # Model APIs

    async def create_model_api(
        self,
        name: str,
        model: Optional[str] = None,
        endpoint: Optional[str] = None,
        integration_connection_name: Optional[str] = None,
        provider: Optional[str] = None,
        api_key: Optional[str] = None,
        config: Optional[Dict[str, str]] = None,
        wait_for_completion: Optional[str] = None,
    ) -> str:
        secrets = {"apiKey": api_key} if api_key else {}
        spec = ResourceSpec(
            name=name,
            kind=ResourceKind.MODEL_API,
            integration_ref=integration_connection_name or None,
            inline_integration=_inline(provider, secrets, config),
            attributes={"model": model, "endpoint": endpoint},
        )
        return _dump((await self.create(spec, wait_for_completion)).to_dict())

    async def list_model_apis(self, filter: Optional[str] = None) -> str:
        return _dump(await self.list_resources(ResourceKind.MODEL_API, filter))

    async def get_model_api(self, name: str) -> str:
        return _dump(await self.get(ResourceKind.MODEL_API, name))

    async def delete_model_api(self, name: str, wait_for_completion: Optional[str] = None) -> str:
        return _dump((await self.delete(ResourceKind.MODEL_API, name, wait_for_completion)).to_dict())

    # MCP servers

    async def create_mcp_server(
        self,
        name: str,
        integration_connection_name: Optional[str] = None,
        integration_type: Optional[str] = None,
        secret: Optional[Dict[str, str]] = None,
        config: Optional[Dict[str, str]] = None,
        wait_for_completion: Optional[str] = None,
    ) -> str:
        spec = ResourceSpec(
            name=name,
            kind=ResourceKind.TOOL_SERVER,
            integration_ref=integration_connection_name or None,
            inline_integration=_inline(integration_type, secret, config),
        )
        return _dump((await self.create(spec, wait_for_completion)).to_dict())

    async def list_mcp_servers(self, filter: Optional[str] = None) -> str:
        return _dump(await self.list_resources(ResourceKind.TOOL_SERVER, filter))

    async def get_mcp_server(self, name: str) -> str:
        return _dump(await self.get(ResourceKind.TOOL_SERVER, name))

    async def delete_mcp_server(self, name: str, wait_for_completion: Optional[str] = None) -> str:
        return _dump((await self.delete(ResourceKind.TOOL_SERVER, name, wait_for_completion)).to_dict())

    # Sandboxes

    async def create_sandbox(
        self,
        name: str,
        image: Optional[str] = None,
        memory: Optional[int] = None,
        ports: Optional[str] = None,
        env: Optional[str] = None,
        wait_for_completion: Optional[str] = None,
    ) -> str:
        spec = ResourceSpec(
            name=name,
            kind=ResourceKind.SANDBOX,
            attributes={"image": image, "memory": memory, "ports": ports, "env": env},
        )
        return _dump((await self.create(spec, wait_for_completion)).to_dict())

    async def list_sandboxes(self, filter: Optional[str] = None) -> str:
        return _dump(await self.list_resources(ResourceKind.SANDBOX, filter))

    async def get_sandbox(self, name: str) -> str:
        return _dump(await self.get(ResourceKind.SANDBOX, name))

    async def delete_sandbox(self, name: str, wait_for_completion: Optional[str] = None) -> str:
        return _dump((await self.delete(ResourceKind.SANDBOX, name, wait_for_completion)).to_dict())

    # Integrations

    async def create_integration(
        self,
        name: str,
        integration_type: str,
        secret: Optional[Dict[str, str]] = None,
        config: Optional[Dict[str, str]] = None,
    ) -> str:
        spec = IntegrationSpec(
            name=name,
            type=integration_type,
            secrets=dict(secret or {}),
            config=dict(config or {}),
        )
        return _dump((await self._integrations.create(spec)).to_dict())

    async def list_integrations(self, filter: Optional[str] = None) -> str:
        integrations = await self._integrations.list_all()
        return _dump([item for item in integrations if _name_matches(item, filter)])

    async def get_integration(self, name: str) -> str:
        return _dump(await self._integrations.get(name))

    async def delete_integration(self, name: str) -> str:
        return _dump((await self._integrations.delete(name)).to_dict())
