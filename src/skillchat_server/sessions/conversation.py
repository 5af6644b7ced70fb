"""Ordered message history of one chat session.

The conversation holds at most one SystemMessage, and when present it is the
first element. Every mutation goes through this class so callers cannot
break that rule.
"""

import logging
from collections.abc import Iterator

from skillchat_server.sessions.types import Message, SystemMessage

logger = logging.getLogger(__name__)


class Conversation:
    """Message history with a unique, leading system prompt."""

    def __init__(self, system_prompt: str | None = None) -> None:
        self._messages: list[Message] = []
        if system_prompt:
            self.load_system_prompt(system_prompt)

    @property
    def messages(self) -> tuple[Message, ...]:
        """Read-only view of the history, oldest first."""
        return tuple(self._messages)

    @property
    def system_prompt(self) -> SystemMessage | None:
        if self._messages and isinstance(self._messages[0], SystemMessage):
            return self._messages[0]
        return None

    def load_system_prompt(self, text: str, skill_id: str | None = None) -> None:
        """Install a system prompt, replacing any existing one.

        Args:
            text: The system prompt content
            skill_id: Id of the skill the prompt was built from, if any
        """
        self._remove_system_prompt()
        self._messages.insert(0, SystemMessage(content=text, skill_id=skill_id))
        logger.debug("Loaded system prompt")

    def append(self, message: Message) -> None:
        """Append a message. A SystemMessage replaces the system prompt instead."""
        if isinstance(message, SystemMessage):
            self._remove_system_prompt()
            self._messages.insert(0, message)
            return
        self._messages.append(message)

    def clear(self) -> None:
        """Drop every message except the system prompt."""
        system = self.system_prompt
        self._messages = [system] if system is not None else []

    def truncate(self, length: int) -> None:
        """Drop every message after the first `length` ones."""
        if length < 0:
            raise ValueError("length must not be negative")
        del self._messages[length:]

    def remove_system_prompt(self) -> bool:
        """Remove the system prompt. Returns False if there was none."""
        return self._remove_system_prompt()

    def _remove_system_prompt(self) -> bool:
        if self.system_prompt is None:
            return False
        self._messages.pop(0)
        return True

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(tuple(self._messages))
