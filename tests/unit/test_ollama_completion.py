"""Unit tests for the Ollama completion client and message conversion."""

import json
from unittest.mock import MagicMock

import pytest

from skillchat_server.completion import (
    OllamaCompletionClient,
    convert_messages_to_ollama_format,
)
from skillchat_server.errors import CompletionError
from skillchat_server.sessions import (
    AssistantMessage,
    SystemMessage,
    ToolCallRequest,
    ToolMessage,
    UserMessage,
)


def _client_streaming(*chunks, error: Exception | None = None):
    """An OllamaClient stand-in whose chat_stream yields the given chunks."""
    ollama_client = MagicMock()
    requests = []

    async def chat_stream(**kwargs):
        requests.append(kwargs)
        for chunk in chunks:
            yield chunk
        if error is not None:
            raise error

    ollama_client.chat_stream = chat_stream
    ollama_client.requests = requests
    return ollama_client


def test_convert_messages():
    """Test conversion of every message variant to Ollama format."""
    messages = [
        SystemMessage(content="You are helpful."),
        UserMessage(content="echo hi"),
        AssistantMessage(
            tool_calls=[
                ToolCallRequest(call_id="c1", tool_name="echo", arguments_json='{"text": "hi"}')
            ]
        ),
        ToolMessage(call_id="c1", tool_name="echo", content="hi"),
        AssistantMessage(content="done"),
    ]

    result = convert_messages_to_ollama_format(messages)

    assert result == [
        {"role": "system", "content": "You are helpful."},
        {"role": "user", "content": "echo hi"},
        {
            "role": "assistant",
            "content": "",
            "tool_calls": [{"function": {"name": "echo", "arguments": {"text": "hi"}}}],
        },
        {"role": "tool", "content": "hi", "tool_name": "echo"},
        {"role": "assistant", "content": "done"},
    ]


def test_convert_messages_with_unparseable_arguments():
    message = AssistantMessage(
        tool_calls=[ToolCallRequest(call_id="c1", tool_name="echo", arguments_json="{oops")]
    )

    result = convert_messages_to_ollama_format([message])

    assert result[0]["tool_calls"][0]["function"]["arguments"] == {}


def test_convert_unknown_message_type():
    with pytest.raises(TypeError):
        convert_messages_to_ollama_format([{"role": "user", "content": "hi"}])


@pytest.mark.asyncio
async def test_complete_collects_streamed_text():
    """Test that content chunks are joined into one result."""
    client = _client_streaming(
        {"message": {"role": "assistant", "content": "Hel"}, "done": False},
        {"message": {"role": "assistant", "content": "lo"}, "done": False},
        {"message": {"role": "assistant", "content": ""}, "done": True, "done_reason": "stop"},
    )
    completion = OllamaCompletionClient(client, model="llama3.2")

    result = await completion.complete([UserMessage(content="hi")], [])

    assert result.text == "Hello"
    assert result.finish_reason == "stop"
    assert result.has_tool_calls is False
    assert client.requests[0]["model"] == "llama3.2"
    assert client.requests[0]["messages"] == [{"role": "user", "content": "hi"}]


@pytest.mark.asyncio
async def test_complete_parses_tool_calls():
    """Test that tool calls get generated ids and JSON-encoded arguments."""
    client = _client_streaming(
        {
            "message": {
                "role": "assistant",
                "content": "",
                "tool_calls": [
                    {"function": {"name": "echo", "arguments": {"text": "hi"}}},
                    {"function": {"name": "ping", "arguments": None}},
                ],
            },
            "done": False,
        },
        {"message": {"content": ""}, "done": True, "done_reason": "stop"},
    )
    tools = [{"type": "function", "function": {"name": "echo"}}]
    completion = OllamaCompletionClient(client, model="m")

    result = await completion.complete([UserMessage(content="echo hi")], tools)

    assert result.finish_reason == "tool_calls"
    first, second = result.tool_calls
    assert first.tool_name == "echo"
    assert json.loads(first.arguments_json) == {"text": "hi"}
    assert first.call_id.startswith("call_")
    assert first.call_id != second.call_id
    assert second.arguments_json == ""
    assert client.requests[0]["tools"] == tools


@pytest.mark.asyncio
async def test_complete_keeps_backend_call_ids():
    client = _client_streaming(
        {
            "message": {"tool_calls": [{"id": "abc", "function": {"name": "echo"}}]},
            "done": True,
        }
    )
    completion = OllamaCompletionClient(client, model="m")

    result = await completion.complete([UserMessage(content="x")], [])

    assert result.tool_calls[0].call_id == "abc"


@pytest.mark.asyncio
async def test_complete_reports_length_finish():
    client = _client_streaming(
        {"message": {"content": "partial"}, "done": True, "done_reason": "length"}
    )
    completion = OllamaCompletionClient(client, model="m")

    result = await completion.complete([UserMessage(content="x")], [])

    assert result.finish_reason == "length"


@pytest.mark.asyncio
async def test_complete_sends_options():
    """Test that max_tokens and temperature become Ollama options."""
    client = _client_streaming({"message": {"content": "ok"}, "done": True})
    completion = OllamaCompletionClient(client, model="m", max_tokens=256, temperature=0.2)

    await completion.complete([UserMessage(content="x")], [])

    assert client.requests[0]["options"] == {"num_predict": 256, "temperature": 0.2}


@pytest.mark.asyncio
async def test_complete_without_options():
    client = _client_streaming({"message": {"content": "ok"}, "done": True})
    completion = OllamaCompletionClient(client, model="m")

    await completion.complete([UserMessage(content="x")], [])

    assert client.requests[0]["options"] is None


@pytest.mark.asyncio
async def test_complete_wraps_backend_errors():
    """Test that a failing stream becomes a CompletionError."""
    client = _client_streaming(
        {"message": {"content": "par"}, "done": False}, error=RuntimeError("connection lost")
    )
    completion = OllamaCompletionClient(client, model="m")

    with pytest.raises(CompletionError, match="connection lost") as exc_info:
        await completion.complete([UserMessage(content="x")], [])

    assert exc_info.value.error_code == "COMPLETION_ERROR"


@pytest.mark.asyncio
async def test_complete_without_done_marker():
    client = _client_streaming({"message": {"content": "cut"}, "done": False})
    completion = OllamaCompletionClient(client, model="m")

    with pytest.raises(CompletionError, match="without completion marker"):
        await completion.complete([UserMessage(content="x")], [])
