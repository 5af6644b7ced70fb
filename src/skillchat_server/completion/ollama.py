"""Completion client backed by the Ollama chat API."""

import json
import logging
import uuid
from collections.abc import Sequence
from typing import Any

from skillchat_server.completion.base import (
    FINISH_STOP,
    FINISH_TOOL_CALLS,
    CompletionResult,
)
from skillchat_server.errors import CompletionError
from skillchat_server.ollama.client import OllamaClient
from skillchat_server.sessions.types import (
    AssistantMessage,
    Message,
    SystemMessage,
    ToolCallRequest,
    ToolMessage,
    UserMessage,
)

logger = logging.getLogger(__name__)


def _arguments_to_dict(arguments_json: str) -> dict[str, Any]:
    if not arguments_json:
        return {}
    try:
        arguments = json.loads(arguments_json)
    except json.JSONDecodeError:
        logger.debug(f"Sending unparseable tool arguments as empty: {arguments_json!r}")
        return {}
    return arguments if isinstance(arguments, dict) else {}


def convert_messages_to_ollama_format(messages: Sequence[Message]) -> list[dict[str, Any]]:
    """Convert conversation messages to Ollama API format.

    Args:
        messages: Conversation messages, oldest first

    Returns:
        List of message dicts in Ollama format: [{"role": "...", "content": "..."}, ...]

    Raises:
        TypeError: If a message is not one of the known variants
    """
    ollama_messages: list[dict[str, Any]] = []

    for msg in messages:
        if isinstance(msg, SystemMessage):
            ollama_messages.append({"role": "system", "content": msg.content})
        elif isinstance(msg, UserMessage):
            ollama_messages.append({"role": "user", "content": msg.content})
        elif isinstance(msg, AssistantMessage):
            ollama_msg: dict[str, Any] = {"role": "assistant", "content": msg.content or ""}
            if msg.tool_calls:
                ollama_msg["tool_calls"] = [
                    {
                        "function": {
                            "name": call.tool_name,
                            "arguments": _arguments_to_dict(call.arguments_json),
                        }
                    }
                    for call in msg.tool_calls
                ]
            ollama_messages.append(ollama_msg)
        elif isinstance(msg, ToolMessage):
            ollama_messages.append(
                {"role": "tool", "content": msg.content, "tool_name": msg.tool_name}
            )
        else:
            raise TypeError(f"Unknown message type: {type(msg).__name__}")

    return ollama_messages


def _parse_tool_call(call: dict[str, Any]) -> ToolCallRequest:
    """Build a ToolCallRequest from an Ollama tool call.

    Ollama does not assign call ids, so one is generated when missing.
    """
    function = call.get("function") or {}
    arguments = function.get("arguments")
    if arguments is None:
        arguments_json = ""
    elif isinstance(arguments, str):
        arguments_json = arguments
    else:
        arguments_json = json.dumps(arguments)

    return ToolCallRequest(
        call_id=call.get("id") or f"call_{uuid.uuid4().hex[:12]}",
        tool_name=function.get("name") or "",
        arguments_json=arguments_json,
    )


class OllamaCompletionClient:
    """CompletionClient that streams an Ollama chat and collects it into one result.

    Attributes:
        model: Ollama model name
        max_tokens: Upper bound on generated tokens (num_predict)
        temperature: Sampling temperature
    """

    def __init__(
        self,
        ollama_client: OllamaClient,
        model: str,
        max_tokens: int | None = None,
        temperature: float | None = None,
    ) -> None:
        self._client = ollama_client
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature

    def _options(self) -> dict[str, Any] | None:
        options: dict[str, Any] = {}
        if self.max_tokens is not None:
            options["num_predict"] = self.max_tokens
        if self.temperature is not None:
            options["temperature"] = self.temperature
        return options or None

    async def complete(
        self, messages: Sequence[Message], tools: list[dict[str, Any]]
    ) -> CompletionResult:
        """Request one completion from Ollama.

        Args:
            messages: Full conversation history
            tools: Function-tool schemas the model may call

        Returns:
            The collected text, tool calls and finish reason

        Raises:
            CompletionError: If the request fails or the stream ends early
        """
        ollama_messages = convert_messages_to_ollama_format(messages)

        content_parts: list[str] = []
        tool_calls: list[ToolCallRequest] = []
        final_chunk: dict[str, Any] | None = None

        try:
            async for chunk in self._client.chat_stream(
                model=self.model,
                messages=ollama_messages,
                tools=tools,
                options=self._options(),
            ):
                message = chunk.get("message") or {}
                content = message.get("content") or ""
                if content:
                    content_parts.append(content)

                for call in message.get("tool_calls") or []:
                    tool_calls.append(_parse_tool_call(call))

                if chunk.get("done"):
                    final_chunk = chunk
                    break
        except Exception as e:
            raise CompletionError(
                f"Failed to get response from Ollama: {e}",
                details={"model": self.model},
            ) from e

        if final_chunk is None:
            raise CompletionError(
                "Stream ended without completion marker", details={"model": self.model}
            )

        if tool_calls:
            finish_reason = FINISH_TOOL_CALLS
        else:
            finish_reason = final_chunk.get("done_reason") or FINISH_STOP

        logger.debug(
            f"Completion finished ({finish_reason}): "
            f"{sum(len(p) for p in content_parts)} chars, {len(tool_calls)} tool calls"
        )
        return CompletionResult(
            text="".join(content_parts),
            tool_calls=tool_calls,
            finish_reason=finish_reason,
        )
