"""ChatSession: one in-memory chat with its conversation and settings.

Sessions are never written to disk; they live as long as the server process.
"""

import asyncio
import uuid

from skillchat_server.sessions.conversation import Conversation
from skillchat_server.sessions.types import Message, UserMessage, utc_timestamp


class ChatSession:
    """A single chat session.

    Attributes:
        session_id: Unique session identifier (10-char hex)
        model: The model name used for completions
        conversation: The message history
        skill_id: Id of the loaded skill, if any
        lock: Serializes turns on this session
    """

    def __init__(
        self,
        session_id: str,
        model: str,
        conversation: Conversation | None = None,
        skill_id: str | None = None,
    ):
        self.session_id = session_id
        self.model = model
        self.conversation = conversation or Conversation()
        self.skill_id = skill_id
        self.created_at = utc_timestamp()
        self.updated_at = self.created_at
        self.lock = asyncio.Lock()

    @property
    def messages(self) -> tuple[Message, ...]:
        return self.conversation.messages

    @property
    def message_count(self) -> int:
        return len(self.conversation)

    def touch(self) -> None:
        """Mark the session as updated now."""
        self.updated_at = utc_timestamp()

    def set_system_prompt(self, content: str, skill_id: str | None = None) -> None:
        """Set or replace the system prompt without touching the history."""
        self.conversation.load_system_prompt(content, skill_id=skill_id)
        self.skill_id = skill_id
        self.touch()

    def load_skill(self, skill_id: str, system_prompt: str) -> None:
        """Start over with a skill: clear the history, then install its prompt."""
        self.conversation.clear()
        self.set_system_prompt(system_prompt, skill_id=skill_id)

    def clear(self) -> None:
        """Drop the history, keeping the system prompt."""
        self.conversation.clear()
        self.touch()

    @staticmethod
    def generate_session_id() -> str:
        """Generate a new unique session ID.

        Returns:
            10-character hexadecimal string
        """
        return uuid.uuid4().hex[:10]

    def get_preview(self, max_length: int = 100) -> str:
        """Get a preview of the session (first user message).

        Args:
            max_length: Maximum length of the preview

        Returns:
            Preview string, truncated if necessary
        """
        for message in self.conversation:
            if isinstance(message, UserMessage):
                content = message.content
                if len(content) > max_length:
                    return content[: max_length - 3] + "..."
                return content
        return ""
