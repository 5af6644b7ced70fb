"""SessionManager for CRUD operations on in-memory chat sessions."""

import logging

from skillchat_server.sessions.session import ChatSession
from skillchat_server.sessions.types import SessionCreationOptions

logger = logging.getLogger(__name__)


class SessionNotFoundError(LookupError):
    """Raised when a session id does not exist."""

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Session {session_id} not found")


class SessionManager:
    """Creates, lists, fetches and deletes chat sessions.

    Sessions are held in memory for the lifetime of the process.
    """

    def __init__(self) -> None:
        self._sessions: dict[str, ChatSession] = {}

    def create_session(self, options: SessionCreationOptions) -> ChatSession:
        """Create a new chat session.

        Args:
            options: Session creation options (model, optional system prompt)

        Returns:
            The newly created ChatSession
        """
        session_id = ChatSession.generate_session_id()
        while session_id in self._sessions:
            session_id = ChatSession.generate_session_id()

        session = ChatSession(session_id=session_id, model=options.model)
        if options.system_prompt:
            session.set_system_prompt(options.system_prompt, skill_id=options.skill_id)

        self._sessions[session_id] = session
        logger.info(f"Created new session {session_id} with model {options.model}")
        return session

    def list_sessions(self) -> list[ChatSession]:
        """List all sessions, newest update first."""
        return sorted(self._sessions.values(), key=lambda s: s.updated_at, reverse=True)

    def get_session(self, session_id: str) -> ChatSession:
        """Get a specific session by ID.

        Raises:
            SessionNotFoundError: If session doesn't exist
        """
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    def delete_session(self, session_id: str) -> None:
        """Delete a session.

        Raises:
            SessionNotFoundError: If session doesn't exist
        """
        if self._sessions.pop(session_id, None) is None:
            raise SessionNotFoundError(session_id)
        logger.info(f"Deleted session {session_id}")

    def __len__(self) -> int:
        return len(self._sessions)
