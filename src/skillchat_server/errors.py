"""Exception hierarchy for skillchat-server.

Every failure the tool-orchestration engine can raise derives from
SkillChatError, which carries a stable error code and a details mapping
so the HTTP layer can render it without inspecting the message text.
"""

from typing import Any


class SkillChatError(Exception):
    """Base class for all skillchat-server errors."""

    def __init__(
        self,
        message: str,
        error_code: str = "SKILLCHAT_ERROR",
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)


class ConfigurationError(SkillChatError):
    """Invalid or incomplete configuration (e.g. an HTTP server without a URL)."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message, "CONFIG_ERROR", details)


class ServerConnectionError(SkillChatError):
    """A tool server process could not be spawned or its endpoint reached."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message, "CONNECTION_ERROR", details)


class ProtocolError(SkillChatError):
    """A tool server answered with a malformed response."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message, "PROTOCOL_ERROR", details)


class ToolExecutionError(SkillChatError):
    """A tool call failed or the tool server reported an error result."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message, "TOOL_EXEC_ERROR", details)


class CompletionError(SkillChatError):
    """The completion backend could not produce a response."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message, "COMPLETION_ERROR", details)
