"""Sessions router for chat session CRUD operations.

This module provides REST API endpoints for:
- Creating new sessions (optionally from a skill)
- Listing, retrieving and deleting sessions
- Getting session messages
- Clearing history, loading a skill and setting the system prompt
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, status

from skillchat_server.dependencies import get_session_manager, get_skill_service
from skillchat_server.models.sessions import (
    CreateSessionRequest,
    LoadSkillRequest,
    MessageResponse,
    MessagesResponse,
    SessionDetailResponse,
    SessionListItem,
    SessionListResponse,
    SessionResponse,
    SetSystemPromptRequest,
    ToolCallRequestResponse,
)
from skillchat_server.services import SkillService, build_system_prompt
from skillchat_server.services.skills import Skill
from skillchat_server.sessions import (
    AssistantMessage,
    ChatSession,
    Message,
    SessionCreationOptions,
    SessionManager,
    SessionNotFoundError,
    SystemMessage,
    ToolMessage,
    UserMessage,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/sessions", tags=["sessions"])


def message_to_response(message: Message) -> MessageResponse:
    """Convert a conversation message to its API representation.

    Raises:
        TypeError: If the message is not one of the known variants
    """
    if isinstance(message, SystemMessage):
        return MessageResponse(
            role=message.role,
            content=message.content,
            message_id=message.message_id,
            timestamp=message.timestamp,
            skill_id=message.skill_id,
        )
    if isinstance(message, UserMessage):
        return MessageResponse(
            role=message.role,
            content=message.content,
            message_id=message.message_id,
            timestamp=message.timestamp,
        )
    if isinstance(message, AssistantMessage):
        return MessageResponse(
            role=message.role,
            content=message.content,
            message_id=message.message_id,
            timestamp=message.timestamp,
            tool_calls=[
                ToolCallRequestResponse(
                    call_id=call.call_id,
                    tool_name=call.tool_name,
                    arguments_json=call.arguments_json,
                )
                for call in message.tool_calls
            ]
            or None,
        )
    if isinstance(message, ToolMessage):
        return MessageResponse(
            role=message.role,
            content=message.content,
            message_id=message.message_id,
            timestamp=message.timestamp,
            call_id=message.call_id,
            tool_name=message.tool_name,
        )
    raise TypeError(f"Unknown message type: {type(message).__name__}")


def _session_response(session: ChatSession) -> SessionResponse:
    return SessionResponse(
        session_id=session.session_id,
        model=session.model,
        skill_id=session.skill_id,
        created_at=session.created_at,
        updated_at=session.updated_at,
        message_count=session.message_count,
    )


def _get_session_or_404(session_manager: SessionManager, session_id: str) -> ChatSession:
    try:
        return session_manager.get_session(session_id)
    except SessionNotFoundError:
        logger.warning(f"Session {session_id} not found")
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Session {session_id} not found",
        )


def _load_skill_or_error(skill_service: SkillService, skill_id: str) -> Skill:
    try:
        return skill_service.load_skill(skill_id)
    except FileNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Skill '{skill_id}' not found",
        )
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )


@router.post(
    "",
    response_model=SessionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new session",
)
async def create_session(
    request_body: CreateSessionRequest,
    request: Request,
    session_manager: Annotated[SessionManager, Depends(get_session_manager)],
    skill_service: Annotated[SkillService, Depends(get_skill_service)],
) -> SessionResponse:
    """Create a new chat session.

    When skill_id is given, the skill's system prompt is loaded; otherwise
    the optional system_prompt is used as is.

    Args:
        request_body: Session creation parameters
        request: FastAPI request object
        session_manager: Injected SessionManager
        skill_service: Injected SkillService

    Returns:
        Created session metadata

    Raises:
        HTTPException: 404 if the skill doesn't exist, 400 if it cannot be loaded
    """
    settings = request.app.state.settings
    system_prompt = request_body.system_prompt

    if request_body.skill_id:
        skill = _load_skill_or_error(skill_service, request_body.skill_id)
        system_prompt = build_system_prompt(skill)
        logger.info(f"Loaded skill {skill.skill_id} for new session")

    options = SessionCreationOptions(
        model=request_body.model or settings.model,
        system_prompt=system_prompt,
        skill_id=request_body.skill_id,
    )
    session = session_manager.create_session(options)
    return _session_response(session)


@router.get(
    "",
    response_model=SessionListResponse,
    summary="List all sessions",
)
async def list_sessions(
    session_manager: Annotated[SessionManager, Depends(get_session_manager)],
) -> SessionListResponse:
    """List all sessions, most recently updated first."""
    items = [
        SessionListItem(
            session_id=session.session_id,
            model=session.model,
            skill_id=session.skill_id,
            created_at=session.created_at,
            updated_at=session.updated_at,
            message_count=session.message_count,
            preview=session.get_preview(),
        )
        for session in session_manager.list_sessions()
    ]
    return SessionListResponse(sessions=items)


@router.get(
    "/{session_id}",
    response_model=SessionDetailResponse,
    summary="Get session details",
)
async def get_session(
    session_id: str,
    session_manager: Annotated[SessionManager, Depends(get_session_manager)],
) -> SessionDetailResponse:
    """Get full details of a specific session including message history.

    Raises:
        HTTPException: 404 if session not found
    """
    session = _get_session_or_404(session_manager, session_id)
    return SessionDetailResponse(
        **_session_response(session).model_dump(),
        messages=[message_to_response(m) for m in session.messages],
    )


@router.delete(
    "/{session_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a session",
)
async def delete_session(
    session_id: str,
    session_manager: Annotated[SessionManager, Depends(get_session_manager)],
) -> None:
    """Delete a chat session.

    Raises:
        HTTPException: 404 if session not found
    """
    try:
        session_manager.delete_session(session_id)
    except SessionNotFoundError:
        logger.warning(f"Session {session_id} not found")
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Session {session_id} not found",
        )


@router.get(
    "/{session_id}/messages",
    response_model=MessagesResponse,
    summary="Get session messages",
)
async def get_messages(
    session_id: str,
    session_manager: Annotated[SessionManager, Depends(get_session_manager)],
) -> MessagesResponse:
    """Get the message history of a session, oldest first.

    Raises:
        HTTPException: 404 if session not found
    """
    session = _get_session_or_404(session_manager, session_id)
    return MessagesResponse(messages=[message_to_response(m) for m in session.messages])


@router.post(
    "/{session_id}/clear",
    response_model=SessionResponse,
    summary="Clear session history",
)
async def clear_session(
    session_id: str,
    session_manager: Annotated[SessionManager, Depends(get_session_manager)],
) -> SessionResponse:
    """Drop the conversation history, keeping the system prompt.

    Raises:
        HTTPException: 404 if session not found
    """
    session = _get_session_or_404(session_manager, session_id)
    async with session.lock:
        session.clear()
    logger.info(f"Cleared history of session {session_id}")
    return _session_response(session)


@router.put(
    "/{session_id}/skill",
    response_model=SessionResponse,
    summary="Load a skill into a session",
)
async def load_session_skill(
    session_id: str,
    request_body: LoadSkillRequest,
    session_manager: Annotated[SessionManager, Depends(get_session_manager)],
    skill_service: Annotated[SkillService, Depends(get_skill_service)],
) -> SessionResponse:
    """Switch a session to a skill.

    The history is cleared first, then the skill's system prompt replaces
    the current one.

    Raises:
        HTTPException: 404 if the session or skill is not found
        HTTPException: 400 if the skill cannot be loaded
    """
    session = _get_session_or_404(session_manager, session_id)
    skill = _load_skill_or_error(skill_service, request_body.skill_id)

    async with session.lock:
        session.load_skill(skill.skill_id, build_system_prompt(skill))
    logger.info(f"Loaded skill {skill.skill_id} into session {session_id}")
    return _session_response(session)


@router.put(
    "/{session_id}/system-prompt",
    response_model=SessionResponse,
    summary="Set or update session system prompt",
)
async def set_session_system_prompt(
    session_id: str,
    request_body: SetSystemPromptRequest,
    session_manager: Annotated[SessionManager, Depends(get_session_manager)],
) -> SessionResponse:
    """Set or replace the system prompt for a session.

    Note: This does NOT truncate the conversation history.

    Raises:
        HTTPException: 404 if session not found
    """
    session = _get_session_or_404(session_manager, session_id)
    async with session.lock:
        session.set_system_prompt(request_body.content)
    logger.info(f"Set system prompt for session {session_id}")
    return _session_response(session)
