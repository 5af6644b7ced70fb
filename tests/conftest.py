"""Pytest configuration and shared fixtures for skillchat-server tests.

This module provides common fixtures used across all test modules,
including test app creation, async client setup, and in-memory stand-ins
for tool server transports and the completion backend.
"""

import inspect
import json
from typing import Any, Awaitable, Callable

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from skillchat_server import create_app
from skillchat_server.completion import CompletionResult
from skillchat_server.config import SkillChatSettings
from skillchat_server.tools import ServerSpec, ToolDescriptor, ToolServerManager


class FakeTransport:
    """In-memory transport exposing Python callables as tools.

    A tool may be a coroutine function, which lets a test hold a call open.
    """

    def __init__(
        self,
        spec: ServerSpec,
        tools: dict[str, Callable[[dict[str, Any]], str | Awaitable[str]]] | None = None,
        connect_error: Exception | None = None,
        list_error: Exception | None = None,
        close_error: Exception | None = None,
    ):
        self.spec = spec
        self.tools = tools or {}
        self.connect_error = connect_error
        self.list_error = list_error
        self.close_error = close_error
        self.connected = False
        self.closed = False
        self.close_calls = 0
        self.calls: list[tuple[str, str]] = []

    @property
    def name(self) -> str:
        return self.spec.name

    @property
    def is_connected(self) -> bool:
        return self.connected and not self.closed

    async def connect(self) -> None:
        if self.connect_error is not None:
            raise self.connect_error
        self.connected = True

    async def list_tools(self) -> list[ToolDescriptor]:
        if self.list_error is not None:
            raise self.list_error
        return [
            ToolDescriptor(
                name=name,
                description=f"{name} tool on {self.spec.name}",
                input_schema={"type": "object", "properties": {}},
                server_name=self.spec.name,
            )
            for name in self.tools
        ]

    async def call_tool(self, tool_name: str, arguments_json: str) -> str:
        self.calls.append((tool_name, arguments_json))
        arguments = json.loads(arguments_json) if arguments_json else {}
        result = self.tools[tool_name](arguments)
        if inspect.isawaitable(result):
            result = await result
        return result

    async def close(self) -> None:
        self.close_calls += 1
        self.closed = True
        if self.close_error is not None:
            raise self.close_error


def echo_tool(arguments: dict[str, Any]) -> str:
    return arguments.get("text", "")


def build_tool_manager(
    transports: dict[str, FakeTransport], specs: list[ServerSpec] | None = None
) -> ToolServerManager:
    """Create a ToolServerManager whose factory hands out the given fakes."""
    if specs is None:
        specs = [t.spec for t in transports.values()]
    return ToolServerManager(specs, transport_factory=lambda spec: transports[spec.name])


class ScriptedCompletionClient:
    """Completion client returning queued results and recording each request.

    When the script runs out, the last result is repeated.
    """

    def __init__(self, results: list[CompletionResult | Exception]):
        self.results = list(results)
        self.requests: list[dict[str, Any]] = []

    async def complete(self, messages, tools) -> CompletionResult:
        self.requests.append({"messages": list(messages), "tools": list(tools)})
        index = min(len(self.requests), len(self.results)) - 1
        result = self.results[index]
        if isinstance(result, Exception):
            raise result
        return result


@pytest.fixture
def fake_transport_cls():
    """The FakeTransport class, for tests that build transports themselves."""
    return FakeTransport


@pytest.fixture
def make_tool_manager():
    """Factory fixture: build a ToolServerManager over fake transports."""
    return build_tool_manager


@pytest.fixture
def scripted_completion():
    """Factory fixture: build a ScriptedCompletionClient."""
    return ScriptedCompletionClient


@pytest_asyncio.fixture
async def echo_tool_manager():
    """An initialized manager with one server exposing echo(text)."""
    spec = ServerSpec(name="echo-server", command="echo-server")
    manager = build_tool_manager({"echo-server": FakeTransport(spec, {"echo": echo_tool})})
    await manager.initialize()
    yield manager
    await manager.shutdown()


@pytest.fixture
def test_settings(tmp_path):
    """Create test settings with isolated temporary directories.

    Args:
        tmp_path: Pytest fixture providing a temporary directory.

    Returns:
        SkillChatSettings: Settings instance configured for testing.
    """
    return SkillChatSettings(
        host="127.0.0.1",
        port=8000,
        ollama_host="http://localhost:11434",
        model="llama3.2:latest",
        data_dir=str(tmp_path),
        skills_dir="skills",
        servers_config="mcp_servers.json",
        log_level="DEBUG",
        cors_origins=["*"],
    )


@pytest.fixture
def test_app(test_settings):
    """Create a FastAPI test application instance.

    Args:
        test_settings: Test settings fixture.

    Returns:
        FastAPI: Configured test application.
    """
    return create_app(settings=test_settings)


@pytest_asyncio.fixture
async def async_client(test_app):
    """Create an async HTTP client for testing FastAPI endpoints.

    Args:
        test_app: Test application fixture.

    Yields:
        AsyncClient: Async HTTP client for making test requests.
    """
    # Trigger the lifespan startup manually for tests
    async with test_app.router.lifespan_context(test_app):
        transport = ASGITransport(app=test_app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            yield client
