"""Lifecycle of all tool-server connections and dispatch of tool calls.

One ToolServerManager is built from the configured server specs in the app
lifespan and handed explicitly to every orchestrator that needs it.
"""

import asyncio
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from skillchat_server.errors import SkillChatError
from skillchat_server.tools.registry import ToolRegistry
from skillchat_server.tools.transport import Transport, create_transport, describe_error
from skillchat_server.tools.types import ServerSpec, ToolDescriptor

logger = logging.getLogger(__name__)

TransportFactory = Callable[[ServerSpec], Transport]


@dataclass
class ServerStatus:
    """Point-in-time status of one configured tool server."""

    name: str
    transport: str
    enabled: bool
    connected: bool
    tool_count: int
    error: str | None = None


class ToolServerManager:
    """Connects to the configured tool servers and routes tool calls to them.

    Per-server failures during initialize() are logged and skipped, never
    raised. execute_tool() never raises either: every failure comes back as
    text the model can read and react to.
    """

    def __init__(
        self,
        server_specs: Sequence[ServerSpec],
        transport_factory: TransportFactory | None = None,
        registry: ToolRegistry | None = None,
    ) -> None:
        """Initialize the manager.

        Args:
            server_specs: Server configurations in configuration order
            transport_factory: Builds a transport for a spec (defaults to
                create_transport with the working directory as base)
            registry: Registry to populate (a fresh one by default)
        """
        self.server_specs = list(server_specs)
        self.registry = registry or ToolRegistry()
        self._transport_factory = transport_factory or (
            lambda spec: create_transport(spec, base_dir=Path.cwd())
        )
        self._connections: dict[str, Transport] = {}
        self._errors: dict[str, str] = {}
        self._initialized = False

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    @property
    def connected_server_names(self) -> list[str]:
        """Names of servers with a live connection, in configuration order."""
        return [
            spec.name
            for spec in self.server_specs
            if spec.name in self._connections and self._connections[spec.name].is_connected
        ]

    async def initialize(self) -> None:
        """Connect to every enabled server and register the tools they expose.

        Connections are attempted concurrently. Registration happens afterwards
        in configuration order, so a tool name exposed by several servers ends
        up owned by the last of them. Calling this again is a no-op until
        shutdown() has been called.
        """
        if self._initialized:
            return

        enabled = []
        for spec in self.server_specs:
            if spec.enabled:
                enabled.append(spec)
            else:
                logger.info(f"Tool server '{spec.name}' is disabled; skipping")

        outcomes = await asyncio.gather(*(self._connect_server(spec) for spec in enabled))

        for spec, outcome in zip(enabled, outcomes):
            if outcome is None:
                continue
            transport, descriptors = outcome
            self._connections[spec.name] = transport
            self.registry.register(spec.name, descriptors)

        self._initialized = True
        logger.info(
            f"Connected {len(self._connections)}/{len(enabled)} tool servers, "
            f"{len(self.registry)} tools registered"
        )

    async def _connect_server(
        self, spec: ServerSpec
    ) -> tuple[Transport, list[ToolDescriptor]] | None:
        """Connect one server and list its tools. Returns None on any failure."""
        transport: Transport | None = None
        try:
            transport = self._transport_factory(spec)
            await transport.connect()
            descriptors = await transport.list_tools()
        except Exception as e:
            reason = e.message if isinstance(e, SkillChatError) else describe_error(e)
            logger.warning(f"Skipping tool server '{spec.name}': {reason}")
            self._errors[spec.name] = reason
            if transport is not None:
                await self._close_transport(transport)
            return None

        self._errors.pop(spec.name, None)
        logger.info(f"Connected to tool server '{spec.name}' ({len(descriptors)} tools)")
        return transport, descriptors

    def get_available_tools(self) -> list[dict[str, Any]]:
        """Tool schemas to send with a completion request (empty before initialize)."""
        return self.registry.as_model_tool_schemas()

    async def execute_tool(self, tool_name: str, arguments_json: str) -> str:
        """Run a tool on its owning server.

        Args:
            tool_name: Registered tool name
            arguments_json: JSON object text with the arguments (may be empty)

        Returns:
            The tool output, or an error message starting with "Error"
        """
        descriptor = self.registry.resolve(tool_name)
        if descriptor is None:
            logger.warning(f"Model requested unknown tool '{tool_name}'")
            return f"Error: Tool '{tool_name}' not found."

        transport = self._connections.get(descriptor.server_name)
        if transport is None or not transport.is_connected:
            logger.warning(
                f"Tool '{tool_name}' requested but '{descriptor.server_name}' is not connected"
            )
            return f"Error: MCP server '{descriptor.server_name}' not connected."

        logger.info(f"Executing tool '{tool_name}' on '{descriptor.server_name}'")
        try:
            return await transport.call_tool(tool_name, arguments_json)
        except Exception as e:
            reason = e.message if isinstance(e, SkillChatError) else describe_error(e)
            logger.warning(f"Tool '{tool_name}' failed: {reason}")
            return f"Error executing tool '{tool_name}': {reason}"

    async def disconnect(self, server_name: str) -> bool:
        """Close one server's connection and drop the tools it owns.

        Returns:
            True if the server was connected
        """
        transport = self._connections.pop(server_name, None)
        if transport is None:
            return False

        dropped = self.registry.remove_server(server_name)
        await self._close_transport(transport)
        logger.info(f"Disconnected tool server '{server_name}' ({dropped} tools dropped)")
        return True

    async def shutdown(self) -> None:
        """Close every connection and empty the registry. Safe to call repeatedly."""
        connections = list(self._connections.values())
        self._connections.clear()
        for transport in connections:
            await self._close_transport(transport)

        self.registry.clear()
        self._errors.clear()
        self._initialized = False
        if connections:
            logger.info(f"Shut down {len(connections)} tool server connections")

    async def _close_transport(self, transport: Transport) -> None:
        try:
            await transport.close()
        except Exception as e:
            logger.warning(f"Error closing tool server '{transport.name}': {describe_error(e)}")

    def server_statuses(self) -> list[ServerStatus]:
        """Status of every configured server, in configuration order."""
        tool_counts: dict[str, int] = {}
        for descriptor in self.registry.descriptors():
            tool_counts[descriptor.server_name] = tool_counts.get(descriptor.server_name, 0) + 1

        statuses = []
        for spec in self.server_specs:
            transport = self._connections.get(spec.name)
            statuses.append(
                ServerStatus(
                    name=spec.name,
                    transport=spec.transport.value,
                    enabled=spec.enabled,
                    connected=transport is not None and transport.is_connected,
                    tool_count=tool_counts.get(spec.name, 0),
                    error=self._errors.get(spec.name),
                )
            )
        return statuses
