"""The bounded agentic loop that drives one chat turn.

A turn alternates between asking the completion backend for a response and
executing the tool calls that response asks for, until the model answers
with plain text or the round limit is hit.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable

from skillchat_server.completion.base import FINISH_STOP, CompletionClient
from skillchat_server.errors import CompletionError
from skillchat_server.sessions.conversation import Conversation
from skillchat_server.sessions.types import (
    AssistantMessage,
    ToolCallRecord,
    ToolMessage,
    TurnResult,
    UserMessage,
)
from skillchat_server.tools.manager import ToolServerManager

logger = logging.getLogger(__name__)

DEFAULT_MAX_TOOL_ROUNDS = 30
DEFAULT_RESULT_PREVIEW_LENGTH = 200

ROUND_LIMIT_EXCEEDED = "Maximum tool rounds exceeded"
ROUND_LIMIT_RESPONSE = "Maximum tool rounds reached."

ToolCallObserver = Callable[[ToolCallRecord], Awaitable[None]]


class ChatOrchestrator:
    """Runs user turns against one conversation.

    The orchestrator owns no resources: the conversation, the tool server
    manager and the completion client are all passed in by the caller.

    Attributes:
        conversation: History the turn reads from and appends to
        tool_manager: Executes the tool calls the model asks for
        completion_client: Produces model responses
        max_tool_rounds: Default upper bound on completion requests per turn
        result_preview_length: Characters of tool output kept in ToolCallRecord
    """

    def __init__(
        self,
        conversation: Conversation,
        tool_manager: ToolServerManager,
        completion_client: CompletionClient,
        max_tool_rounds: int = DEFAULT_MAX_TOOL_ROUNDS,
        result_preview_length: int = DEFAULT_RESULT_PREVIEW_LENGTH,
    ) -> None:
        if max_tool_rounds < 1:
            raise ValueError("max_tool_rounds must be at least 1")
        self.conversation = conversation
        self.tool_manager = tool_manager
        self.completion_client = completion_client
        self.max_tool_rounds = max_tool_rounds
        self.result_preview_length = result_preview_length

    def _preview(self, output: str) -> str:
        if len(output) > self.result_preview_length:
            return output[: self.result_preview_length] + "..."
        return output

    async def send_message(
        self,
        text: str,
        max_tool_rounds: int | None = None,
        on_tool_call: ToolCallObserver | None = None,
    ) -> TurnResult:
        """Run one user turn to completion.

        Tool calls within a round run sequentially, in the order the model
        listed them. Completion failures and the round limit end the turn
        with success=False; they are never raised.

        A cancelled turn leaves the conversation as it was before the turn
        started, so no assistant tool call is left without its result.

        Args:
            text: The user's message
            max_tool_rounds: Override for the round limit of this turn
            on_tool_call: Awaited after each executed tool call

        Returns:
            TurnResult describing the outcome

        Raises:
            ValueError: If max_tool_rounds is less than 1
            asyncio.CancelledError: If the turn is cancelled
        """
        limit = self.max_tool_rounds if max_tool_rounds is None else max_tool_rounds
        if limit < 1:
            raise ValueError("max_tool_rounds must be at least 1")

        start = len(self.conversation)
        try:
            return await self._run_turn(text, limit, on_tool_call)
        except asyncio.CancelledError:
            self.conversation.truncate(start)
            logger.warning(f"Turn cancelled, conversation rolled back to {start} messages")
            raise

    async def _run_turn(
        self, text: str, limit: int, on_tool_call: ToolCallObserver | None
    ) -> TurnResult:
        self.conversation.append(UserMessage(content=text))
        records: list[ToolCallRecord] = []
        rounds = 0

        while rounds < limit:
            rounds += 1

            try:
                result = await self.completion_client.complete(
                    self.conversation.messages, self.tool_manager.get_available_tools()
                )
            except CompletionError as e:
                logger.error(f"Completion failed in round {rounds}: {e.message}")
                return TurnResult(
                    response="",
                    tool_calls=records,
                    success=False,
                    error=f"Completion failed: {e.message}",
                    rounds=rounds,
                )

            if result.has_tool_calls:
                logger.info(f"Round {rounds}: model requested {len(result.tool_calls)} tool calls")
                self.conversation.append(
                    AssistantMessage(
                        content=result.text or None, tool_calls=list(result.tool_calls)
                    )
                )

                for call in result.tool_calls:
                    output = await self.tool_manager.execute_tool(
                        call.tool_name, call.arguments_json
                    )
                    record = ToolCallRecord(
                        call_id=call.call_id,
                        tool_name=call.tool_name,
                        arguments_json=call.arguments_json,
                        result=self._preview(output),
                    )
                    records.append(record)
                    self.conversation.append(
                        ToolMessage(call_id=call.call_id, tool_name=call.tool_name, content=output)
                    )
                    if on_tool_call is not None:
                        await on_tool_call(record)
                continue

            if result.finish_reason != FINISH_STOP:
                logger.warning(f"Turn ended with finish reason '{result.finish_reason}'")
                return TurnResult(
                    response=result.text,
                    tool_calls=records,
                    success=False,
                    error=f"Unexpected finish reason: {result.finish_reason}",
                    rounds=rounds,
                )

            self.conversation.append(AssistantMessage(content=result.text))
            logger.info(f"Turn completed after {rounds} rounds, {len(records)} tool calls")
            return TurnResult(
                response=result.text, tool_calls=records, success=True, rounds=rounds
            )

        logger.warning(f"Turn stopped at the limit of {limit} tool rounds")
        return TurnResult(
            response=ROUND_LIMIT_RESPONSE,
            tool_calls=records,
            success=False,
            error=ROUND_LIMIT_EXCEEDED,
            rounds=rounds,
        )
