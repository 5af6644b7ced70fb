"""MCP transports: one logical channel to one tool server.

A transport is either a spawned subprocess spoken to over stdin/stdout
(StdioTransport) or a remote streamable-HTTP endpoint (HttpTransport).
Both expose the same contract: connect, list_tools, call_tool, close.

The MCP client contexts (process/stream and ClientSession) are entered and
exited inside a single runner task owned by the transport. The SDK's anyio
cancel scopes must be exited by the task that entered them, so connect()
only waits for the runner to report readiness and close() signals it to
unwind. Release therefore happens on every exit path, including a connect()
that failed halfway.
"""

import asyncio
import json
import logging
import os
from abc import ABC, abstractmethod
from contextlib import AsyncExitStack
from datetime import timedelta
from pathlib import Path
from typing import Any, Callable

from mcp import ClientSession, StdioServerParameters, types
from mcp.client.stdio import stdio_client
from mcp.client.streamable_http import streamablehttp_client

from skillchat_server.errors import (
    ConfigurationError,
    ProtocolError,
    ServerConnectionError,
    ToolExecutionError,
)
from skillchat_server.tools.types import ServerSpec, ToolDescriptor, TransportKind

logger = logging.getLogger(__name__)

# Arguments ending in one of these are treated as file paths, not package names
PATH_LIKE_SUFFIXES = (".py", ".js", ".mjs", ".cjs", ".jar", ".dll", ".exe")

DEFAULT_CONNECT_TIMEOUT = 30.0
DEFAULT_REQUEST_TIMEOUT = 120.0
CLOSE_TIMEOUT = 5.0

SecretLookup = Callable[[str], str | None]


def describe_error(error: BaseException) -> str:
    """Render an exception for logs and tool output.

    anyio task groups wrap failures in exception groups; a group holding a
    single exception is unwrapped so the underlying reason is shown.
    """
    while isinstance(error, BaseExceptionGroup) and len(error.exceptions) == 1:
        error = error.exceptions[0]
    return str(error) or type(error).__name__


def resolve_argument_path(argument: str, base_dir: Path) -> str:
    """Rewrite a relative file-path argument to an absolute path under base_dir.

    Only arguments that look like paths are rewritten: they contain ".." or
    end with a known script/executable suffix. Package identifiers ("@scope/pkg")
    and flags ("-y", "--verbose") are returned unchanged, as are absolute paths.

    Args:
        argument: A single command-line argument
        base_dir: The application base directory

    Returns:
        The argument, possibly rewritten to an absolute path
    """
    if argument.startswith("@") or argument.startswith("-"):
        return argument

    looks_like_path = ".." in argument or argument.endswith(PATH_LIKE_SUFFIXES)
    if looks_like_path and not os.path.isabs(argument):
        return os.path.abspath(os.path.join(str(base_dir), argument))
    return argument


def resolve_environment(env: dict[str, str], secret_lookup: SecretLookup) -> dict[str, str]:
    """Resolve environment overrides for a stdio server.

    Entries with a literal value are used as is. Entries with an empty value
    are looked up by name in the host secrets store, so secrets never have
    to be written into the server configuration. Entries that cannot be
    resolved are left out.

    Args:
        env: Configured overrides (name -> value, value may be empty)
        secret_lookup: Callable returning the secret for a name, or None

    Returns:
        The resolved overrides
    """
    resolved: dict[str, str] = {}
    for key, value in env.items():
        if value:
            resolved[key] = value
            continue

        secret = secret_lookup(key)
        if secret is None:
            logger.warning(f"No value configured for environment variable {key}; omitting it")
            continue
        resolved[key] = secret
    return resolved


def parse_tool_arguments(arguments_json: str) -> dict[str, Any]:
    """Parse the raw JSON arguments of a tool call.

    Args:
        arguments_json: JSON object text; empty or blank means no arguments

    Returns:
        The arguments as a dict

    Raises:
        ToolExecutionError: If the text is not a JSON object
    """
    if not arguments_json or not arguments_json.strip():
        return {}

    try:
        arguments = json.loads(arguments_json)
    except json.JSONDecodeError as e:
        raise ToolExecutionError(f"Invalid tool arguments: {e}") from e

    if not isinstance(arguments, dict):
        raise ToolExecutionError("Invalid tool arguments: expected a JSON object")
    return arguments


class Transport(ABC):
    """Base class for a single MCP client channel.

    Subclasses provide _open_streams() and may override _validate().

    Attributes:
        spec: The server configuration this transport connects to
        connect_timeout: Seconds to wait for the MCP handshake
        request_timeout: Seconds to wait for any single MCP response
    """

    def __init__(
        self,
        spec: ServerSpec,
        connect_timeout: float = DEFAULT_CONNECT_TIMEOUT,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
    ) -> None:
        self.spec = spec
        self.connect_timeout = connect_timeout
        self.request_timeout = request_timeout
        self._session: ClientSession | None = None
        self._runner: asyncio.Task[None] | None = None
        self._ready = asyncio.Event()
        self._stop = asyncio.Event()
        self._startup_error: BaseException | None = None
        self._closed = False

    @property
    def name(self) -> str:
        """The name of the server this transport talks to."""
        return self.spec.name

    @property
    def is_connected(self) -> bool:
        """True while the MCP session is initialized and not closed."""
        return self._session is not None and not self._closed

    def _validate(self) -> None:
        """Check the server spec before anything is spawned or opened."""

    @abstractmethod
    async def _open_streams(self, stack: AsyncExitStack) -> tuple[Any, Any]:
        """Open the read/write message streams inside the given exit stack."""

    async def connect(self) -> None:
        """Open the channel and perform the MCP initialize handshake.

        Raises:
            ConfigurationError: If the server spec lacks what this transport needs
            ServerConnectionError: If spawning, connecting or the handshake fails
        """
        if self._closed:
            raise ServerConnectionError(f"Transport for '{self.name}' is closed")
        if self._runner is not None:
            return

        self._validate()

        self._runner = asyncio.create_task(
            self._run(), name=f"mcp-transport-{self.name}"
        )

        try:
            await asyncio.wait_for(self._ready.wait(), timeout=self.connect_timeout)
        except asyncio.TimeoutError as e:
            await self.close()
            raise ServerConnectionError(
                f"Timed out after {self.connect_timeout}s connecting to '{self.name}'",
                details={"server": self.name},
            ) from e

        if self._session is None:
            error = self._startup_error
            await self.close()
            reason = describe_error(error) if error else "session ended during startup"
            raise ServerConnectionError(
                f"Failed to connect to '{self.name}': {reason}",
                details={"server": self.name},
            ) from error

        logger.debug(f"Connected transport for '{self.name}'")

    async def _run(self) -> None:
        """Own the MCP contexts for the lifetime of the connection."""
        try:
            async with AsyncExitStack() as stack:
                read_stream, write_stream = await self._open_streams(stack)
                session = await stack.enter_async_context(
                    ClientSession(
                        read_stream,
                        write_stream,
                        read_timeout_seconds=timedelta(seconds=self.request_timeout),
                        client_info=types.Implementation(
                            name="skillchat-server", version="0.1.0"
                        ),
                    )
                )
                await session.initialize()
                self._session = session
                self._ready.set()

                await self._stop.wait()
        except Exception as e:
            if self._ready.is_set():
                logger.warning(
                    f"Connection to '{self.name}' ended with an error: {describe_error(e)}"
                )
            else:
                self._startup_error = e
        finally:
            self._session = None
            self._ready.set()

    async def list_tools(self) -> list[ToolDescriptor]:
        """Fetch the tools the server exposes.

        Returns:
            Tool descriptors in the order the server listed them

        Raises:
            ServerConnectionError: If the transport is not connected
            ProtocolError: If the listing fails or is malformed
        """
        session = self._session
        if session is None or self._closed:
            raise ServerConnectionError(f"Tool server '{self.name}' is not connected")

        try:
            result = await session.list_tools()
        except Exception as e:
            raise ProtocolError(
                f"Failed to list tools from '{self.name}': {describe_error(e)}",
                details={"server": self.name},
            ) from e

        tools = getattr(result, "tools", None)
        if tools is None:
            raise ProtocolError(
                f"Tool server '{self.name}' returned no tool list",
                details={"server": self.name},
            )

        descriptors: list[ToolDescriptor] = []
        for tool in tools:
            tool_name = getattr(tool, "name", None)
            if not tool_name:
                raise ProtocolError(
                    f"Tool server '{self.name}' listed a tool without a name",
                    details={"server": self.name},
                )

            schema = getattr(tool, "inputSchema", None) or {}
            if not isinstance(schema, dict):
                raise ProtocolError(
                    f"Tool '{tool_name}' on '{self.name}' has a non-object input schema",
                    details={"server": self.name, "tool": tool_name},
                )

            descriptors.append(
                ToolDescriptor(
                    name=tool_name,
                    description=getattr(tool, "description", None) or "",
                    input_schema=dict(schema),
                    server_name=self.name,
                )
            )

        return descriptors

    async def call_tool(self, tool_name: str, arguments_json: str) -> str:
        """Invoke a tool and return its text output.

        Only text content blocks are kept; they are joined with newlines.

        Args:
            tool_name: Name of the tool on this server
            arguments_json: JSON object text with the arguments (may be empty)

        Returns:
            The concatenated text output

        Raises:
            ToolExecutionError: If the transport is down, the arguments are
                invalid, the call fails, or the server flags the result as an error
        """
        session = self._session
        if session is None or self._closed:
            raise ToolExecutionError(
                f"Tool server '{self.name}' is not connected",
                details={"server": self.name, "tool": tool_name},
            )

        arguments = parse_tool_arguments(arguments_json)

        try:
            result = await session.call_tool(tool_name, arguments)
        except Exception as e:
            raise ToolExecutionError(
                describe_error(e), details={"server": self.name, "tool": tool_name}
            ) from e

        text = "\n".join(
            block.text for block in result.content if isinstance(block, types.TextContent)
        )

        if result.isError:
            raise ToolExecutionError(
                text or f"Tool '{tool_name}' reported an error",
                details={"server": self.name, "tool": tool_name},
            )

        return text

    async def close(self) -> None:
        """Release the subprocess or network stream. Safe to call repeatedly."""
        if self._closed:
            return
        self._closed = True
        self._stop.set()

        runner, self._runner = self._runner, None
        if runner is None:
            return

        try:
            await asyncio.wait_for(runner, timeout=CLOSE_TIMEOUT)
        except asyncio.TimeoutError:
            logger.warning(f"Timed out closing transport for '{self.name}'; cancelled it")

        logger.debug(f"Closed transport for '{self.name}'")


class StdioTransport(Transport):
    """Spawns the server as a subprocess and speaks MCP over its stdio."""

    def __init__(
        self,
        spec: ServerSpec,
        base_dir: Path,
        secret_lookup: SecretLookup | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(spec, **kwargs)
        self.base_dir = base_dir
        self.secret_lookup = secret_lookup or os.environ.get

    def _validate(self) -> None:
        if not self.spec.command:
            raise ConfigurationError(
                f"Stdio tool server '{self.name}' requires a command",
                details={"server": self.name},
            )

    def server_parameters(self) -> StdioServerParameters:
        """Build the spawn parameters: resolved arguments and merged environment."""
        args = [resolve_argument_path(arg, self.base_dir) for arg in self.spec.args]
        env = {**os.environ, **resolve_environment(self.spec.env, self.secret_lookup)}
        return StdioServerParameters(command=self.spec.command, args=args, env=env)

    async def _open_streams(self, stack: AsyncExitStack) -> tuple[Any, Any]:
        params = self.server_parameters()
        logger.debug(f"Spawning '{self.name}': {params.command} {' '.join(params.args)}")
        read_stream, write_stream = await stack.enter_async_context(stdio_client(params))
        return read_stream, write_stream


class HttpTransport(Transport):
    """Connects to a remote server over MCP streamable HTTP."""

    def _validate(self) -> None:
        if not self.spec.url:
            raise ConfigurationError(
                f"HTTP tool server '{self.name}' requires a url",
                details={"server": self.name},
            )

    async def _open_streams(self, stack: AsyncExitStack) -> tuple[Any, Any]:
        logger.debug(f"Opening HTTP stream to '{self.name}' at {self.spec.url}")
        read_stream, write_stream, _ = await stack.enter_async_context(
            streamablehttp_client(self.spec.url)
        )
        return read_stream, write_stream


def create_transport(
    spec: ServerSpec,
    base_dir: Path,
    secret_lookup: SecretLookup | None = None,
    connect_timeout: float = DEFAULT_CONNECT_TIMEOUT,
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
) -> Transport:
    """Create the transport matching a server spec."""
    if spec.transport == TransportKind.HTTP:
        return HttpTransport(
            spec, connect_timeout=connect_timeout, request_timeout=request_timeout
        )
    return StdioTransport(
        spec,
        base_dir=base_dir,
        secret_lookup=secret_lookup,
        connect_timeout=connect_timeout,
        request_timeout=request_timeout,
    )
