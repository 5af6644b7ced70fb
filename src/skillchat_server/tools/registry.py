"""Name-indexed directory of every tool currently available to the model."""

import logging
from collections.abc import Iterable
from typing import Any

from skillchat_server.tools.types import ToolDescriptor

logger = logging.getLogger(__name__)


class ToolRegistry:
    """Maps a tool name to its descriptor (and through it, the owning server).

    Tool names are global across servers. When two servers expose the same
    name, the registration made last wins and a warning is logged; the
    manager registers servers in configuration order, so the outcome is
    deterministic.
    """

    def __init__(self) -> None:
        self._tools: dict[str, ToolDescriptor] = {}

    def register(self, server_name: str, descriptors: Iterable[ToolDescriptor]) -> int:
        """Register the tools exposed by one server.

        Args:
            server_name: Name of the owning server
            descriptors: Tools the server listed

        Returns:
            Number of tools registered
        """
        count = 0
        for descriptor in descriptors:
            if descriptor.server_name != server_name:
                descriptor = ToolDescriptor(
                    name=descriptor.name,
                    description=descriptor.description,
                    input_schema=descriptor.input_schema,
                    server_name=server_name,
                )

            existing = self._tools.get(descriptor.name)
            if existing is not None and existing.server_name != server_name:
                logger.warning(
                    f"Tool '{descriptor.name}' from '{server_name}' replaces the one "
                    f"from '{existing.server_name}'"
                )

            self._tools[descriptor.name] = descriptor
            count += 1

        logger.debug(f"Registered {count} tools from '{server_name}'")
        return count

    def resolve(self, tool_name: str) -> ToolDescriptor | None:
        """Look up a tool by name. Returns None if it is not registered."""
        return self._tools.get(tool_name)

    def remove_server(self, server_name: str) -> int:
        """Drop every tool currently owned by a server. Returns how many were dropped."""
        owned = [name for name, d in self._tools.items() if d.server_name == server_name]
        for name in owned:
            del self._tools[name]
        return len(owned)

    def clear(self) -> None:
        self._tools.clear()

    def descriptors(self) -> list[ToolDescriptor]:
        """All registered tools in registration order."""
        return list(self._tools.values())

    def as_model_tool_schemas(self) -> list[dict[str, Any]]:
        """All registered tools in the function-tool shape the completion API expects."""
        return [descriptor.to_model_schema() for descriptor in self._tools.values()]

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, tool_name: object) -> bool:
        return tool_name in self._tools
