from __future__ import annotations

from typing import Any
from urllib.parse import quote

from cloudwright import __version__
from cloudwright.clients.base import ApiResponse, BaseHTTPClient

DEFAULT_USER_AGENT = f"cloudwright/{__version__}"
WORKSPACE_HEADER = "X-Blaxel-Workspace"
INTEGRATIONS_COLLECTION = "integrations/connections"


class PlatformClient(BaseHTTPClient):
    """Platform REST client for workspace resources and integrations.

    Resources live in collections (``agents``, ``models``, ``functions``, ...)
    and are addressed by name. Every method returns the raw ``ApiResponse``
    so the lifecycle layer can decide how each status code is treated.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str | None,
        workspace: str | None = None,
        *,
        timeout: float = 30.0,
        max_retries: int = 3,
        backoff_factor: float = 2.0,
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        super().__init__(
            base_url,
            timeout=timeout,
            max_retries=max_retries,
            backoff_factor=backoff_factor,
        )
        self._api_key = api_key
        self._workspace = workspace
        self._user_agent = user_agent

    @property
    def workspace(self) -> str | None:
        return self._workspace

    def _headers(self) -> dict[str, str]:
        headers = super()._headers()
        headers["User-Agent"] = self._user_agent
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        if self._workspace:
            headers[WORKSPACE_HEADER] = self._workspace
        return headers

    async def create_resource(self, collection: str, payload: dict[str, Any]) -> ApiResponse:
        return await self.post(f"/{collection}", json=payload)

    async def list_resources(self, collection: str) -> ApiResponse:
        return await self.get(f"/{collection}")

    async def get_resource(self, collection: str, name: str) -> ApiResponse:
        return await self.get(f"/{collection}/{quote(name, safe='')}")

    async def delete_resource(self, collection: str, name: str) -> ApiResponse:
        return await self.delete(f"/{collection}/{quote(name, safe='')}")

    async def create_integration(
        self,
        name: str,
        integration_type: str,
        secrets: dict[str, str] | None = None,
        config: dict[str, str] | None = None,
    ) -> ApiResponse:
        spec: dict[str, Any] = {"integration": integration_type}
        if secrets:
            spec["secret"] = dict(secrets)
        if config:
            spec["config"] = dict(config)
        payload = {"metadata": {"name": name}, "spec": spec}
        return await self.create_resource(INTEGRATIONS_COLLECTION, payload)

    async def list_integrations(self) -> ApiResponse:
        return await self.list_resources(INTEGRATIONS_COLLECTION)

    async def get_integration(self, name: str) -> ApiResponse:
        return await self.get_resource(INTEGRATIONS_COLLECTION, name)

    async def delete_integration(self, name: str) -> ApiResponse:
        return await self.delete_resource(INTEGRATIONS_COLLECTION, name)
