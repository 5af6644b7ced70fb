"""skillchat-server: Headless FastAPI server for skill-driven chats with MCP tools.

This package provides a REST API and SSE streaming interface for chat
sessions whose model can call tools exposed by MCP tool servers, with
skills supplying the system prompt.
"""

__version__ = "0.1.0"

from skillchat_server.app import create_app  # noqa: E402

__all__ = ["create_app", "__version__"]
