"""Pytest configuration for integration tests.

This module provides integration-test-specific fixtures that mock the
Ollama backend for API endpoint tests and help read SSE responses.
"""

import json
from unittest.mock import AsyncMock, patch

import pytest


@pytest.fixture(autouse=True)
def mock_ollama_client():
    """Mock OllamaClient for all integration tests.

    This fixture patches the OllamaClient class before the app is created,
    ensuring the lifespan uses our mock instead of creating a real client.
    """
    with patch("skillchat_server.app.OllamaClient") as mock_client_class:
        mock_instance = AsyncMock()
        mock_instance.host = "http://localhost:11434"
        mock_instance.check_connection.return_value = True

        mock_client_class.return_value = mock_instance

        yield mock_instance


@pytest.fixture
def script_ollama(mock_ollama_client):
    """Make the mocked Ollama answer successive chat requests from a script.

    Each entry is the list of chunks streamed for one request. The last
    entry is repeated once the script runs out. Requests are recorded on
    mock_ollama_client.requests.
    """

    def install(*responses):
        mock_ollama_client.requests = []

        async def chat_stream(**kwargs):
            mock_ollama_client.requests.append(kwargs)
            index = min(len(mock_ollama_client.requests), len(responses)) - 1
            for chunk in responses[index]:
                yield chunk

        mock_ollama_client.chat_stream = chat_stream
        return mock_ollama_client

    return install


def _parse_sse(text: str) -> list[dict]:
    events = []
    # Normalize line endings and split by double newline
    normalized_text = text.replace("\r\n", "\n")
    for block in normalized_text.strip().split("\n\n"):
        if not block.strip():
            continue
        event_type = None
        event_data = None
        for part in block.split("\n"):
            if part.startswith("event:"):
                event_type = part.split(":", 1)[1].strip()
            elif part.startswith("data:"):
                event_data = part.split(":", 1)[1].strip()
        if event_type and event_data:
            events.append({"event": event_type, "data": json.loads(event_data)})
    return events


@pytest.fixture
def parse_sse():
    """Parse an SSE response body into [{"event": ..., "data": ...}, ...]."""
    return _parse_sse
