"""Unit tests for Conversation and the message types."""

import pytest

from skillchat_server.sessions import (
    AssistantMessage,
    Conversation,
    SystemMessage,
    ToolCallRequest,
    ToolMessage,
    UserMessage,
)


def test_empty_conversation():
    conversation = Conversation()

    assert len(conversation) == 0
    assert conversation.system_prompt is None
    assert conversation.messages == ()


def test_initial_system_prompt():
    """Test that a prompt passed at construction is the first message."""
    conversation = Conversation(system_prompt="You are helpful.")

    assert len(conversation) == 1
    assert conversation.messages[0].content == "You are helpful."


def test_load_system_prompt_twice_keeps_one():
    """Test that loading a prompt replaces the previous one."""
    conversation = Conversation()
    conversation.load_system_prompt("first")
    conversation.append(UserMessage(content="hi"))

    conversation.load_system_prompt("second", skill_id="writer")

    system_messages = [m for m in conversation if isinstance(m, SystemMessage)]
    assert len(system_messages) == 1
    assert conversation.messages[0].content == "second"
    assert conversation.messages[0].skill_id == "writer"
    assert isinstance(conversation.messages[1], UserMessage)


def test_load_system_prompt_after_history_goes_first():
    conversation = Conversation()
    conversation.append(UserMessage(content="hi"))
    conversation.append(AssistantMessage(content="hello"))

    conversation.load_system_prompt("be brief")

    assert [m.role for m in conversation] == ["system", "user", "assistant"]


def test_append_system_message_replaces_prompt():
    """Test that appending a SystemMessage still leaves it at index 0."""
    conversation = Conversation(system_prompt="old")
    conversation.append(UserMessage(content="hi"))

    conversation.append(SystemMessage(content="new"))

    assert len(conversation) == 2
    assert conversation.system_prompt.content == "new"
    assert conversation.messages[1].content == "hi"


def test_clear_keeps_system_prompt():
    """Test that clear() drops the history but not the system prompt."""
    conversation = Conversation(system_prompt="keep me")
    conversation.append(UserMessage(content="hi"))
    conversation.append(AssistantMessage(content="hello"))

    conversation.clear()

    assert len(conversation) == 1
    assert conversation.system_prompt.content == "keep me"


def test_clear_without_system_prompt():
    conversation = Conversation()
    conversation.append(UserMessage(content="hi"))

    conversation.clear()

    assert len(conversation) == 0


def test_remove_system_prompt():
    conversation = Conversation(system_prompt="x")

    assert conversation.remove_system_prompt() is True
    assert conversation.remove_system_prompt() is False
    assert conversation.system_prompt is None


def test_messages_is_a_snapshot():
    """Test that the exposed history cannot be mutated from outside."""
    conversation = Conversation()
    snapshot = conversation.messages

    conversation.append(UserMessage(content="hi"))

    assert snapshot == ()
    assert len(conversation.messages) == 1


def test_roles_are_fixed():
    """Test that each variant always carries its own role."""
    assert UserMessage(role="assistant", content="x").role == "user"
    assert SystemMessage(role="user", content="x").role == "system"
    assert AssistantMessage(role="user").role == "assistant"
    assert ToolMessage(role="user").role == "tool"


def test_tool_exchange_shape():
    """Test an assistant tool request followed by its correlated result."""
    conversation = Conversation()
    call = ToolCallRequest(call_id="call_1", tool_name="echo", arguments_json='{"text": "hi"}')
    conversation.append(AssistantMessage(tool_calls=[call]))
    conversation.append(ToolMessage(call_id="call_1", tool_name="echo", content="hi"))

    assistant, tool = conversation.messages
    assert assistant.content is None
    assert assistant.tool_calls[0].call_id == tool.call_id


def test_message_ids_and_timestamps():
    first = UserMessage(content="a")
    second = UserMessage(content="b")

    assert len(first.message_id) == 10
    assert first.message_id != second.message_id
    assert first.timestamp.endswith("Z")


def test_truncate_drops_later_messages():
    """Test that truncating keeps the system prompt and the earlier turns."""
    conversation = Conversation(system_prompt="x")
    conversation.append(UserMessage(content="one"))
    conversation.append(AssistantMessage(content="first"))
    conversation.append(UserMessage(content="two"))

    conversation.truncate(3)

    assert [m.role for m in conversation] == ["system", "user", "assistant"]
    conversation.truncate(10)
    assert len(conversation) == 3


def test_truncate_rejects_negative_length():
    conversation = Conversation()

    with pytest.raises(ValueError):
        conversation.truncate(-1)
