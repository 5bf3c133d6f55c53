"""Client/transport interface for remote tool servers.

The gateway only talks to ``ToolServerClient``. ``McpServerClient`` is the
production implementation: an MCP session over a subprocess's stdio.
Tests substitute an in-memory client.
"""

from __future__ import annotations

import logging
import os
from contextlib import AsyncExitStack
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol

from steward.gateway.config import resolve_env

if TYPE_CHECKING:
    from mcp import ClientSession

    from steward.gateway.config import ServerConfig

logger = logging.getLogger(__name__)

CLIENT_NAME = "steward"
CLIENT_VERSION = "0.1.0"


@dataclass(frozen=True)
class RemoteTool:
    """A tool discovered on a remote server."""

    name: str
    description: str = ""
    input_schema: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class CallOutcome:
    """Raw result of a remote call: typed content parts plus the error flag."""

    content: list[dict[str, Any]]
    is_error: bool = False


class ToolServerClient(Protocol):
    """A duplex request/response channel to one tool server."""

    async def connect(self) -> None:
        """Open the transport and perform the initialize handshake."""

    async def list_tools(self) -> list[RemoteTool]: ...

    async def call_tool(self, name: str, arguments: dict[str, Any]) -> CallOutcome: ...

    async def close(self) -> None: ...


class McpServerClient:
    """MCP client session over a subprocess's stdin/stdout.

    ``connect()`` and ``close()`` must run in the same task: the stdio
    transport holds an anyio task group for the subprocess pipes.
    """

    def __init__(self, name: str, config: ServerConfig) -> None:
        self.name = name
        self._config = config
        self._stack: AsyncExitStack | None = None
        self._session: ClientSession | None = None

    async def connect(self) -> None:
        from mcp import ClientSession, StdioServerParameters
        from mcp.client.stdio import stdio_client
        from mcp.types import Implementation

        logger.debug("Launching tool server %s: %s", self.name, self._config.command)
        params = StdioServerParameters(
            command=self._config.command,
            args=list(self._config.args),
            env={**os.environ, **resolve_env(self._config.env)},
        )
        stack = AsyncExitStack()
        try:
            read, write = await stack.enter_async_context(stdio_client(params))
            session = await stack.enter_async_context(
                ClientSession(
                    read,
                    write,
                    client_info=Implementation(name=CLIENT_NAME, version=CLIENT_VERSION),
                )
            )
            await session.initialize()
        except Exception:
            await stack.aclose()
            raise
        self._stack = stack
        self._session = session

    def _require_session(self) -> ClientSession:
        if self._session is None:
            msg = f"Tool server '{self.name}' is not connected"
            raise RuntimeError(msg)
        return self._session

    async def list_tools(self) -> list[RemoteTool]:
        result = await self._require_session().list_tools()
        return [
            RemoteTool(
                name=tool.name,
                description=tool.description or "",
                input_schema=dict(tool.inputSchema or {}),
            )
            for tool in result.tools
        ]

    async def call_tool(self, name: str, arguments: dict[str, Any]) -> CallOutcome:
        result = await self._require_session().call_tool(name, arguments)
        # Aliases keep protocol field names (mimeType) across SDK versions.
        content = [
            part.model_dump(mode="json", by_alias=True, exclude_none=True)
            for part in result.content
        ]
        return CallOutcome(content=content, is_error=bool(result.isError))

    async def close(self) -> None:
        stack, self._stack, self._session = self._stack, None, None
        if stack is not None:
            await stack.aclose()
