"""Ollama client wrapper and integration layer.

This package provides the async client wrapper for communicating with the
Ollama API. All Ollama interactions are async and use streaming.
"""

from skillchat_server.ollama.client import OllamaClient

__all__ = ["OllamaClient"]
