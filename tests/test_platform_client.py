import inspect
import json

import httpx
import pytest
import respx
from httpx import Response

from cloudwright.clients.base import ApiResponse, BaseHTTPClient, classify
from cloudwright.clients.platform import WORKSPACE_HEADER, PlatformClient
from cloudwright.errors import (
    PlatformAPIError,
    ResourceConflictError,
    ResourceNotFoundError,
    RetryableHTTPError,
    UnauthorizedError,
)

API_URL = "https://api.example.test/v0"


def _client(**kwargs):
    kwargs.setdefault("backoff_factor", 0)
    return PlatformClient(API_URL, "secret-key", "acme", **kwargs)


@pytest.mark.asyncio
async def test_get_resource_sends_auth_and_workspace():
    with respx.mock:
        route = respx.get(f"{API_URL}/agents/my-agent").mock(
            return_value=Response(200, json={"status": "DEPLOYED"})
        )

        response = await _client().get_resource("agents", "my-agent")

        assert response.ok
        assert response.body == {"status": "DEPLOYED"}
        request = route.calls.last.request
        assert request.headers["Authorization"] == "Bearer secret-key"
        assert request.headers[WORKSPACE_HEADER] == "acme"
        assert request.headers["User-Agent"].startswith("cloudwright/")


@pytest.mark.asyncio
async def test_not_found_and_conflict_are_returned():
    with respx.mock:
        respx.get(f"{API_URL}/agents/missing").mock(return_value=Response(404, json={"error": "nope"}))
        respx.post(f"{API_URL}/agents").mock(return_value=Response(409, json={"error": "exists"}))

        client = _client()
        missing = await client.get_resource("agents", "missing")
        conflict = await client.create_resource("agents", {"metadata": {"name": "a"}})

        assert missing.status_code == 404
        assert conflict.status_code == 409
        assert not conflict.ok


@pytest.mark.asyncio
async def test_retry_on_503():
    with respx.mock:
        route = respx.get(f"{API_URL}/models/m")
        route.side_effect = [
            Response(503),
            Response(200, json={"status": "DEPLOYED"}),
        ]

        response = await _client(max_retries=2).get_resource("models", "m")

        assert response.body == {"status": "DEPLOYED"}
        assert route.call_count == 2


@pytest.mark.asyncio
async def test_retry_exhausted_raises():
    with respx.mock:
        route = respx.get(f"{API_URL}/models/m").mock(return_value=Response(502, text="bad gateway"))

        with pytest.raises(RetryableHTTPError) as exc_info:
            await _client(max_retries=3).get_resource("models", "m")

        assert exc_info.value.status_code == 502
        assert route.call_count == 3


@pytest.mark.asyncio
async def test_network_error_is_retried():
    with respx.mock:
        route = respx.delete(f"{API_URL}/sandboxes/s")
        route.side_effect = [httpx.ConnectError("refused"), Response(204)]

        response = await _client(max_retries=2).delete_resource("sandboxes", "s")

        assert response.status_code == 204
        assert response.body is None


@pytest.mark.asyncio
async def test_create_integration_payload():
    with respx.mock:
        route = respx.post(f"{API_URL}/integrations/connections").mock(
            return_value=Response(200, json={})
        )

        await _client().create_integration("conn", "github", {"token": "t"}, None)

        body = json.loads(route.calls.last.request.content)
        assert body == {
            "metadata": {"name": "conn"},
            "spec": {"integration": "github", "secret": {"token": "t"}},
        }


def test_classify():
    assert isinstance(classify(ApiResponse(404), "x"), ResourceNotFoundError)
    assert isinstance(classify(ApiResponse(409), "x"), ResourceConflictError)
    assert isinstance(classify(ApiResponse(403), "x"), UnauthorizedError)
    error = classify(ApiResponse(400), "bad request")
    assert type(error) is PlatformAPIError
    assert error.status_code == 400


@pytest.mark.asyncio
async def test_list_resources_and_integrations():
    with respx.mock:
        agents = respx.get(f"{API_URL}/agents").mock(
            return_value=Response(200, json=[{"metadata": {"name": "a"}}])
        )
        connections = respx.get(f"{API_URL}/integrations/connections").mock(
            return_value=Response(200, json=[])
        )

        client = _client()
        listed = await client.list_resources("agents")
        integrations = await client.list_integrations()

        assert listed.body == [{"metadata": {"name": "a"}}]
        assert integrations.body == []
        assert agents.calls.last.request.headers[WORKSPACE_HEADER] == "acme"
        assert connections.called


def test_client_exposes_only_platform_verbs():
    assert not hasattr(BaseHTTPClient, "put")
    assert "params" not in inspect.signature(BaseHTTPClient.get).parameters
