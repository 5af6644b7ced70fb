"""Session management for skillchat-server.

This package provides the conversation state machine, in-memory chat
sessions and CRUD operations for them.
"""

from skillchat_server.sessions.conversation import Conversation
from skillchat_server.sessions.manager import SessionManager, SessionNotFoundError
from skillchat_server.sessions.session import ChatSession
from skillchat_server.sessions.types import (
    AssistantMessage,
    Message,
    SessionCreationOptions,
    SystemMessage,
    ToolCallRecord,
    ToolCallRequest,
    ToolMessage,
    TurnResult,
    UserMessage,
)

__all__ = [
    # Core classes
    "ChatSession",
    "Conversation",
    "SessionManager",
    "SessionNotFoundError",
    # Message types
    "Message",
    "UserMessage",
    "SystemMessage",
    "AssistantMessage",
    "ToolMessage",
    # Turn types
    "ToolCallRequest",
    "ToolCallRecord",
    "TurnResult",
    "SessionCreationOptions",
]
