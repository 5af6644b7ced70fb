"""FastAPI routers for API endpoints.

This package contains all route handlers organized by resource type.
Each router module defines endpoints for a specific domain (health, tools, skills, sessions, chat).
"""

from skillchat_server.routers import chat, health, sessions, skills, tools

__all__ = [
    "chat",
    "health",
    "sessions",
    "skills",
    "tools",
]
