"""Chat API endpoints.

This module provides endpoints for running chat turns on sessions, with a
single JSON response or as Server-Sent Events reporting each tool call as
it happens.
"""

import asyncio
import contextlib
import logging
from dataclasses import asdict
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request
from sse_starlette.sse import EventSourceResponse

from skillchat_server.dependencies import (
    create_orchestrator,
    get_ollama_client,
    get_session_manager,
    get_tool_manager,
)
from skillchat_server.models.chat import (
    ChatRequest,
    ChatResponse,
    DoneEvent,
    ErrorEvent,
    ToolCallEvent,
    ToolCallRecordResponse,
    TurnCompleteEvent,
)
from skillchat_server.ollama.client import OllamaClient
from skillchat_server.sessions import (
    ChatSession,
    SessionManager,
    SessionNotFoundError,
    ToolCallRecord,
    TurnResult,
)
from skillchat_server.tools import ToolServerManager

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/chat", tags=["chat"])


def _get_session(session_manager: SessionManager, session_id: str) -> ChatSession:
    try:
        return session_manager.get_session(session_id)
    except SessionNotFoundError:
        raise HTTPException(
            status_code=404,
            detail={
                "error": {
                    "code": "session_not_found",
                    "message": f"Session {session_id} not found",
                    "details": {"session_id": session_id},
                }
            },
        )


@router.post("/{session_id}", response_model=ChatResponse)
async def chat_non_streaming(
    session_id: str,
    request_body: ChatRequest,
    request: Request,
    ollama_client: Annotated[OllamaClient, Depends(get_ollama_client)],
    tool_manager: Annotated[ToolServerManager, Depends(get_tool_manager)],
    session_manager: Annotated[SessionManager, Depends(get_session_manager)],
) -> ChatResponse:
    """Send a message to a session and run the turn to completion.

    The model may call tools any number of times (up to the round limit)
    before answering. A turn that fails still returns 200 with success=false.

    Args:
        session_id: The session ID to chat with
        request_body: Chat request containing the message
        request: FastAPI request object
        ollama_client: Injected Ollama client
        tool_manager: Injected tool server manager
        session_manager: Injected session manager

    Returns:
        ChatResponse with the turn outcome

    Raises:
        HTTPException: 404 if session not found
    """
    settings = request.app.state.settings
    session = _get_session(session_manager, session_id)

    async with session.lock:
        orchestrator = create_orchestrator(session, settings, ollama_client, tool_manager)
        result = await orchestrator.send_message(
            request_body.message, max_tool_rounds=request_body.max_tool_rounds
        )
        session.touch()

    logger.info(
        f"Turn on session {session_id} finished: success={result.success}, "
        f"{len(result.tool_calls)} tool calls"
    )
    return _chat_response(session_id, result)


def _chat_response(session_id: str, result: TurnResult) -> ChatResponse:
    return ChatResponse(
        session_id=session_id,
        response=result.response,
        tool_calls=[ToolCallRecordResponse(**asdict(r)) for r in result.tool_calls],
        success=result.success,
        error=result.error,
        rounds=result.rounds,
    )


@router.post("/{session_id}/stream")
async def chat_streaming(
    session_id: str,
    request_body: ChatRequest,
    request: Request,
    ollama_client: Annotated[OllamaClient, Depends(get_ollama_client)],
    tool_manager: Annotated[ToolServerManager, Depends(get_tool_manager)],
    session_manager: Annotated[SessionManager, Depends(get_session_manager)],
) -> EventSourceResponse:
    """Run a chat turn and report its progress via Server-Sent Events (SSE).

    SSE Events:
        - tool_call: After each executed tool call (result is a preview)
        - turn_complete: The turn ended (successfully or not)
        - error: The turn raised unexpectedly
        - done: Stream is complete

    Raises:
        HTTPException: 404 if session not found
    """
    settings = request.app.state.settings
    session = _get_session(session_manager, session_id)

    async def event_generator():
        """Run the turn in a task and relay tool calls as they are recorded."""
        queue: asyncio.Queue[ToolCallRecord | None] = asyncio.Queue()

        async with session.lock:
            orchestrator = create_orchestrator(session, settings, ollama_client, tool_manager)

            async def run_turn() -> TurnResult:
                try:
                    return await orchestrator.send_message(
                        request_body.message,
                        max_tool_rounds=request_body.max_tool_rounds,
                        on_tool_call=queue.put,
                    )
                finally:
                    await queue.put(None)

            turn = asyncio.create_task(run_turn())
            try:
                while True:
                    record = await queue.get()
                    if record is None:
                        break
                    yield {
                        "event": "tool_call",
                        "data": ToolCallEvent(**asdict(record)).model_dump_json(),
                    }

                try:
                    result = await turn
                except Exception as e:
                    logger.error(f"Turn on session {session_id} failed: {e}", exc_info=True)
                    yield {
                        "event": "error",
                        "data": ErrorEvent(code="turn_failed", message=str(e)).model_dump_json(),
                    }
                else:
                    session.touch()
                    yield {
                        "event": "turn_complete",
                        "data": TurnCompleteEvent(
                            response=result.response,
                            success=result.success,
                            error=result.error,
                            rounds=result.rounds,
                            tool_call_count=len(result.tool_calls),
                        ).model_dump_json(),
                    }

                yield {
                    "event": "done",
                    "data": DoneEvent(session_id=session_id).model_dump_json(),
                }
            finally:
                if not turn.done():
                    logger.warning(f"Client left during turn on session {session_id}")
                    turn.cancel()
                    # Hold the lock until the turn has rolled back its messages
                    with contextlib.suppress(asyncio.CancelledError):
                        await turn

    return EventSourceResponse(event_generator())
