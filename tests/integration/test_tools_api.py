"""Integration tests for the tools API endpoints."""

import pytest
from httpx import AsyncClient

from skillchat_server.tools import ServerSpec, TransportKind


@pytest.mark.asyncio
async def test_list_tools_without_servers(async_client: AsyncClient):
    """Test that no configured servers means no tools."""
    response = await async_client.get("/api/v1/tools")

    assert response.status_code == 200
    assert response.json() == {"tools": []}


@pytest.mark.asyncio
async def test_list_tools(async_client: AsyncClient, test_app, echo_tool_manager):
    """Test that registered tools are listed with their owning server."""
    test_app.state.tool_manager = echo_tool_manager

    response = await async_client.get("/api/v1/tools")

    assert response.status_code == 200
    tools = response.json()["tools"]
    assert len(tools) == 1
    assert tools[0]["name"] == "echo"
    assert tools[0]["server"] == "echo-server"
    assert tools[0]["input_schema"] == {"type": "object", "properties": {}}


@pytest.mark.asyncio
async def test_list_servers_reports_failures(
    async_client: AsyncClient, test_app, fake_transport_cls, make_tool_manager
):
    """Test that server status shows connected, failed and disabled servers."""
    transports = {
        "files": fake_transport_cls(ServerSpec(name="files", command="x"), {"read": str}),
        "remote": fake_transport_cls(
            ServerSpec(name="remote", transport=TransportKind.HTTP, url="http://x/mcp"),
            connect_error=ConnectionError("refused"),
        ),
        "off": fake_transport_cls(ServerSpec(name="off", command="y", enabled=False)),
    }
    manager = make_tool_manager(transports)
    await manager.initialize()
    test_app.state.tool_manager = manager

    response = await async_client.get("/api/v1/tools/servers")

    assert response.status_code == 200
    servers = {s["name"]: s for s in response.json()["servers"]}
    assert servers["files"]["connected"] is True
    assert servers["files"]["tool_count"] == 1
    assert servers["files"]["transport"] == "stdio"
    assert servers["remote"]["connected"] is False
    assert servers["remote"]["transport"] == "http"
    assert servers["remote"]["error"] == "refused"
    assert servers["off"]["enabled"] is False
    assert servers["off"]["connected"] is False


@pytest.mark.asyncio
async def test_health_reports_tool_counts(async_client: AsyncClient, test_app, echo_tool_manager):
    test_app.state.tool_manager = echo_tool_manager

    data = (await async_client.get("/api/v1/health")).json()

    assert data["ollama_connected"] is True
    assert data["tool_servers_connected"] == 1
    assert data["tools_registered"] == 1
