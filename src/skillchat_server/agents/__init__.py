"""Chat orchestration layer.

This package provides the bounded agentic loop that alternates between
completion requests and tool execution for one user turn.
"""

from skillchat_server.agents.orchestrator import (
    ROUND_LIMIT_EXCEEDED,
    ChatOrchestrator,
)

__all__ = ["ChatOrchestrator", "ROUND_LIMIT_EXCEEDED"]
