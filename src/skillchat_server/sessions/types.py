"""Data types for conversations and chat turns.

This module defines the message variants a conversation is made of, the
tool-call request/record types exchanged with the chat loop, and the result
of one turn.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone


def utc_timestamp() -> str:
    """Current UTC time as an ISO-8601 string with a Z suffix."""
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def new_message_id() -> str:
    return uuid.uuid4().hex[:10]


@dataclass
class ToolCallRequest:
    """A tool call the model asked for.

    Attributes:
        call_id: Opaque id from the completion backend, echoed by the ToolMessage
        tool_name: Registered name of the tool
        arguments_json: Raw JSON object text; empty means no arguments
    """

    call_id: str
    tool_name: str
    arguments_json: str = ""


@dataclass
class UserMessage:
    """A message from the user."""

    role: str = "user"
    content: str = ""
    message_id: str = field(default_factory=new_message_id)
    timestamp: str = field(default_factory=utc_timestamp)

    def __post_init__(self) -> None:
        """Validate role is always 'user'."""
        self.role = "user"


@dataclass
class SystemMessage:
    """A system prompt message."""

    role: str = "system"
    content: str = ""
    skill_id: str | None = None
    message_id: str = field(default_factory=new_message_id)
    timestamp: str = field(default_factory=utc_timestamp)

    def __post_init__(self) -> None:
        """Validate role is always 'system'."""
        self.role = "system"


@dataclass
class AssistantMessage:
    """A response from the model: text, tool calls, or both."""

    role: str = "assistant"
    content: str | None = None
    tool_calls: list[ToolCallRequest] = field(default_factory=list)
    message_id: str = field(default_factory=new_message_id)
    timestamp: str = field(default_factory=utc_timestamp)

    def __post_init__(self) -> None:
        """Validate role is always 'assistant'."""
        self.role = "assistant"


@dataclass
class ToolMessage:
    """The full output of one tool call, correlated by call_id."""

    role: str = "tool"
    call_id: str = ""
    tool_name: str = ""
    content: str = ""
    message_id: str = field(default_factory=new_message_id)
    timestamp: str = field(default_factory=utc_timestamp)

    def __post_init__(self) -> None:
        """Validate role is always 'tool'."""
        self.role = "tool"


# Union type for all message types
Message = SystemMessage | UserMessage | AssistantMessage | ToolMessage


@dataclass
class ToolCallRecord:
    """What the caller gets to see about one executed tool call.

    Attributes:
        call_id: Id of the originating ToolCallRequest
        tool_name: Name of the tool
        arguments_json: Arguments as sent by the model
        result: Truncated preview of the tool output
    """

    call_id: str
    tool_name: str
    arguments_json: str
    result: str


@dataclass
class TurnResult:
    """Outcome of one user turn.

    Attributes:
        response: Final assistant text (or a fixed message on round limit)
        tool_calls: Every tool call executed during the turn, in order
        success: False when the turn ended on an error or the round limit
        error: Why the turn failed, if it did
        rounds: Number of completion requests made
    """

    response: str
    tool_calls: list[ToolCallRecord] = field(default_factory=list)
    success: bool = True
    error: str | None = None
    rounds: int = 0


@dataclass
class SessionCreationOptions:
    """Options for creating a new session."""

    model: str
    system_prompt: str | None = None
    skill_id: str | None = None
