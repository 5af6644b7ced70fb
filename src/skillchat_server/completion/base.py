"""Completion backend boundary used by the chat loop."""

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol

from skillchat_server.sessions.types import Message, ToolCallRequest

FINISH_STOP = "stop"
FINISH_TOOL_CALLS = "tool_calls"


@dataclass
class CompletionResult:
    """One response from the completion backend.

    Attributes:
        text: Assistant text (may be empty when the model only calls tools)
        tool_calls: Tool calls requested by the model, in order
        finish_reason: Why generation stopped ("stop", "tool_calls", "length", ...)
    """

    text: str = ""
    tool_calls: list[ToolCallRequest] = field(default_factory=list)
    finish_reason: str = FINISH_STOP

    @property
    def has_tool_calls(self) -> bool:
        return bool(self.tool_calls)


class CompletionClient(Protocol):
    """Anything that can turn a conversation plus tool schemas into a response."""

    async def complete(
        self, messages: Sequence[Message], tools: list[dict[str, Any]]
    ) -> CompletionResult:
        """Request one completion.

        Raises:
            CompletionError: If the backend call fails
        """
        ...
