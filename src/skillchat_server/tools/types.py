"""Data types for tool servers and the tools they expose.

ServerSpec is the static, validated configuration of one MCP tool server.
ToolDescriptor is what a connected server reported for one of its tools.
"""

import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from skillchat_server.errors import ConfigurationError

logger = logging.getLogger(__name__)


class TransportKind(str, Enum):
    """How the client talks to a tool server."""

    STDIO = "stdio"
    HTTP = "http"


class ServerSpec(BaseModel):
    """Static configuration for a single tool server.

    Attributes:
        name: Unique server name, used as the registry owner key
        transport: Either "stdio" (spawn a subprocess) or "http" (remote endpoint)
        enabled: Disabled servers are never connected
        command: Executable to spawn (stdio only)
        args: Command-line arguments (stdio only)
        env: Environment overrides; an empty value is looked up in the
             host secrets store at connect time (stdio only)
        url: Endpoint URL (http only)
    """

    name: str = Field(..., min_length=1)
    transport: TransportKind = TransportKind.STDIO
    enabled: bool = True
    command: str = ""
    args: list[str] = Field(default_factory=list)
    env: dict[str, str] = Field(default_factory=dict)
    url: str = ""

    model_config = ConfigDict(frozen=True)


class ServersFile(BaseModel):
    """Shape of the servers configuration file."""

    servers: list[ServerSpec] = Field(default_factory=list)


def load_server_specs(path: Path) -> list[ServerSpec]:
    """Load the ordered list of server specs from a JSON file.

    A missing file means no tool servers are configured.

    Args:
        path: Path to a JSON document of the form {"servers": [...]}

    Returns:
        Server specs in file order

    Raises:
        ConfigurationError: If the file is not valid JSON, does not match the
            expected shape, or declares the same server name twice
    """
    if not path.exists():
        logger.info(f"No tool server configuration found at {path}")
        return []

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        specs = ServersFile.model_validate(data).servers
    except json.JSONDecodeError as e:
        raise ConfigurationError(
            f"Tool server configuration {path} is not valid JSON: {e}",
            details={"path": str(path)},
        ) from e
    except ValidationError as e:
        raise ConfigurationError(
            f"Tool server configuration {path} is invalid: {e}",
            details={"path": str(path)},
        ) from e

    seen: set[str] = set()
    for spec in specs:
        if spec.name in seen:
            raise ConfigurationError(
                f"Duplicate tool server name '{spec.name}' in {path}",
                details={"path": str(path), "server": spec.name},
            )
        seen.add(spec.name)

    logger.info(f"Loaded {len(specs)} tool server specs from {path}")
    return specs


@dataclass(frozen=True)
class ToolDescriptor:
    """A tool as listed by its owning server.

    Attributes:
        name: Tool name, unique within the registry
        description: Human/model readable description
        input_schema: JSON-Schema document describing the arguments
        server_name: Name of the server that exposed the tool (lookup only)
    """

    name: str
    description: str = ""
    input_schema: dict[str, Any] = field(default_factory=dict)
    server_name: str = ""

    def to_model_schema(self) -> dict[str, Any]:
        """Project the descriptor to the function-tool shape completion APIs expect."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.input_schema or {"type": "object", "properties": {}},
            },
        }
