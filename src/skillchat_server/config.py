"""Configuration module for skillchat-server using pydantic-settings."""

import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from skillchat_server.tools.types import ServerSpec, load_server_specs


class SkillChatSettings(BaseSettings):
    """Main configuration settings for skillchat-server.

    All settings can be overridden via environment variables with the SKILLCHAT_ prefix.
    For example, SKILLCHAT_OLLAMA_HOST will override the ollama_host setting.
    Dict and list settings are given as JSON, e.g.
    SKILLCHAT_SERVER_SECRETS='{"GITHUB_TOKEN": "..."}'.
    """

    # Server
    host: str = "127.0.0.1"
    port: int = 8000

    # Ollama
    ollama_host: str = "http://localhost:11434"
    model: str = "llama3.2"
    max_tokens: int = Field(default=4096, ge=1)
    temperature: float = Field(default=0.7, ge=0.0)

    # Chat loop
    max_tool_rounds: int = Field(default=30, ge=1)
    tool_result_preview_length: int = Field(default=200, ge=0)

    # Tool servers
    server_connect_timeout: float = Field(default=30.0, gt=0)
    tool_call_timeout: float = Field(default=120.0, gt=0)
    server_secrets: dict[str, str] = Field(default_factory=dict)

    # Data directories (relative to data_dir)
    data_dir: str = "."
    skills_dir: str = "skills"
    servers_config: str = "mcp_servers.json"

    # CORS
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])

    # Logging
    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_prefix="SKILLCHAT_")

    # --- Resolved paths (computed from data_dir + relative paths) ---

    @property
    def resolved_data_dir(self) -> Path:
        """Get the absolute application base directory."""
        return Path(self.data_dir).resolve()

    @property
    def resolved_skills_dir(self) -> Path:
        """Get the full path to the skills directory."""
        return (self.resolved_data_dir / self.skills_dir).resolve()

    @property
    def resolved_servers_config(self) -> Path:
        """Get the full path to the tool servers configuration file."""
        return (self.resolved_data_dir / self.servers_config).resolve()

    def lookup_secret(self, name: str) -> str | None:
        """Resolve a secret for a tool server environment variable.

        Configured server_secrets take precedence over the process environment.
        """
        if name in self.server_secrets:
            return self.server_secrets[name]
        return os.environ.get(name)

    def load_server_specs(self) -> list[ServerSpec]:
        """Load the configured tool server specs (empty if the file is missing)."""
        return load_server_specs(self.resolved_servers_config)
