"""Tools router exposing the tool registry and tool server status."""

from typing import Annotated

from fastapi import APIRouter, Depends

from skillchat_server.dependencies import get_tool_manager
from skillchat_server.models.tools import (
    ServerStatusListResponse,
    ServerStatusResponse,
    ToolListResponse,
    ToolResponse,
)
from skillchat_server.tools import ToolServerManager

router = APIRouter(prefix="/api/v1/tools", tags=["tools"])


@router.get(
    "",
    response_model=ToolListResponse,
    summary="List registered tools",
)
async def list_tools(
    tool_manager: Annotated[ToolServerManager, Depends(get_tool_manager)],
) -> ToolListResponse:
    """List every tool currently available to the model."""
    tools = [
        ToolResponse(
            name=descriptor.name,
            description=descriptor.description,
            server=descriptor.server_name,
            input_schema=descriptor.input_schema,
        )
        for descriptor in tool_manager.registry.descriptors()
    ]
    return ToolListResponse(tools=tools)


@router.get(
    "/servers",
    response_model=ServerStatusListResponse,
    summary="List tool server status",
)
async def list_servers(
    tool_manager: Annotated[ToolServerManager, Depends(get_tool_manager)],
) -> ServerStatusListResponse:
    """Report connection status for every configured tool server."""
    servers = [
        ServerStatusResponse(
            name=s.name,
            transport=s.transport,
            enabled=s.enabled,
            connected=s.connected,
            tool_count=s.tool_count,
            error=s.error,
        )
        for s in tool_manager.server_statuses()
    ]
    return ServerStatusListResponse(servers=servers)
