"""Tool-server layer: MCP transports, the tool registry and the manager.

This package connects to MCP tool servers over stdio or streamable HTTP,
keeps a name-indexed registry of the tools they expose, and executes tool
calls on behalf of the chat loop.
"""

from skillchat_server.tools.manager import ServerStatus, ToolServerManager
from skillchat_server.tools.registry import ToolRegistry
from skillchat_server.tools.transport import (
    HttpTransport,
    StdioTransport,
    Transport,
    create_transport,
)
from skillchat_server.tools.types import (
    ServerSpec,
    ToolDescriptor,
    TransportKind,
    load_server_specs,
)

__all__ = [
    "HttpTransport",
    "ServerSpec",
    "ServerStatus",
    "StdioTransport",
    "ToolDescriptor",
    "ToolRegistry",
    "ToolServerManager",
    "Transport",
    "TransportKind",
    "create_transport",
    "load_server_specs",
]
