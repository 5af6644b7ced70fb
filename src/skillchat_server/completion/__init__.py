"""Completion backends the chat loop can talk to."""

from skillchat_server.completion.base import CompletionClient, CompletionResult
from skillchat_server.completion.ollama import (
    OllamaCompletionClient,
    convert_messages_to_ollama_format,
)

__all__ = [
    "CompletionClient",
    "CompletionResult",
    "OllamaCompletionClient",
    "convert_messages_to_ollama_format",
]
