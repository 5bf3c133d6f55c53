"""Remote capability gateway.

Connects to the configured tool servers, advertises their allowlisted
tools, and proxies calls to them through the guardrails.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from steward.gateway.client import McpServerClient
from steward.llm.types import ToolDeclaration
from steward.tools.base import Artifact, ToolResult

if TYPE_CHECKING:
    from steward.gateway.client import CallOutcome, RemoteTool, ToolServerClient
    from steward.gateway.config import GatewayConfig, ServerConfig
    from steward.gateway.guardrails import Guardrails

logger = logging.getLogger(__name__)

ClientFactory = Callable[[str, "ServerConfig"], "ToolServerClient"]

LOG_PREVIEW_CHARS = 200

DEFAULT_MIME_TYPES = {"image": "image/png", "audio": "audio/wav"}
BINARY_PART_TYPES = frozenset(DEFAULT_MIME_TYPES)


@dataclass
class CapabilityServer:
    """A connected tool server and the tools it exposed at connect time."""

    name: str
    client: ToolServerClient
    tools: list[RemoteTool]
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)

    @property
    def tool_names(self) -> list[str]:
        return [t.name for t in self.tools]


class RemoteGateway:
    """The set of currently connected remote tool servers.

    Tool names map to exactly one server: when two servers expose the same
    name, the one listed first in the configuration owns it.
    """

    def __init__(
        self,
        config: GatewayConfig,
        guardrails: Guardrails,
        client_factory: ClientFactory = McpServerClient,
    ) -> None:
        self._config = config
        self._guardrails = guardrails
        self._client_factory = client_factory
        self._servers: list[CapabilityServer] = []
        self._owners: dict[str, CapabilityServer] = {}

    @property
    def servers(self) -> list[CapabilityServer]:
        return list(self._servers)

    # -- Lifecycle -----------------------------------------------------------

    async def connect_all(self) -> int:
        """Connect every configured server. Returns the number connected.

        A server that fails to launch, initialize, or list its tools is
        logged and left out; the rest still connect.
        """
        for name, server_config in self._config.servers.items():
            if any(s.name == name for s in self._servers):
                continue
            client = self._client_factory(name, server_config)
            try:
                await client.connect()
                tools = await client.list_tools()
            except Exception:
                logger.exception("Tool server '%s' failed to connect", name)
                await _close_quietly(name, client)
                continue

            server = CapabilityServer(name=name, client=client, tools=tools)
            self._servers.append(server)
            for tool in tools:
                owner = self._owners.get(tool.name)
                if owner is not None:
                    logger.warning(
                        "Tool '%s' from server '%s' shadowed by server '%s'",
                        tool.name,
                        name,
                        owner.name,
                    )
                    continue
                self._owners[tool.name] = server

            logger.info(
                "Tool server '%s' connected — %d tool(s): %s",
                name,
                len(tools),
                ", ".join(server.tool_names),
            )

        return len(self._servers)

    async def shutdown(self) -> None:
        """Disconnect every server. Individual failures are ignored."""
        for server in self._servers:
            await _close_quietly(server.name, server.client)
            logger.info("Tool server '%s' disconnected", server.name)
        self._servers.clear()
        self._owners.clear()

    # -- Discovery -----------------------------------------------------------

    def has_tool(self, name: str) -> bool:
        return name in self._owners

    def get_declarations(self) -> list[ToolDeclaration]:
        """Declarations for owned tools that pass the allowlist."""
        declarations: list[ToolDeclaration] = []
        for server in self._servers:
            for tool in server.tools:
                if self._owners.get(tool.name) is not server:
                    continue
                if not self._guardrails.is_tool_allowed(tool.name):
                    continue
                declarations.append(
                    ToolDeclaration(
                        name=tool.name,
                        description=tool.description or f"Tool from {server.name}",
                        parameters=_object_schema(tool.input_schema),
                    )
                )
        return declarations

    def server_info(self) -> list[dict[str, Any]]:
        """Connected server names and their tools."""
        return [{"name": s.name, "tools": s.tool_names} for s in self._servers]

    # -- Execution -----------------------------------------------------------

    async def execute(self, name: str, arguments: dict[str, Any]) -> ToolResult:
        """Call a remote tool through the guardrails.

        Never raises: every failure comes back as an error result.
        """
        if not self._guardrails.is_tool_allowed(name):
            logger.warning("Blocked call to tool '%s': not in the allowed tools list", name)
            return ToolResult(error=f"Tool '{name}' is not in the allowed tools list")

        leak = self._guardrails.scan_for_secret_leak(arguments)
        if leak is not None:
            logger.error("BLOCKED: secret detected in field '%s' for tool '%s'", leak, name)
            return ToolResult(error="Request blocked: contains sensitive data")

        server = self._owners.get(name)
        if server is None:
            return ToolResult(error=f"No tool server has tool '{name}'")

        try:
            logger.info("Remote call: %s (%s)", name, server.name)
            async with server.lock:
                outcome = await server.client.call_tool(name, arguments)
        except Exception:
            logger.exception("Remote tool '%s' on '%s' failed", name, server.name)
            return ToolResult(error=f"Remote tool '{name}' failed. Check logs for details.")

        preview = json.dumps(self._guardrails.redact_for_log(outcome.content), default=str)
        logger.info("Remote result: %s", preview[:LOG_PREVIEW_CHARS])

        text, artifacts = split_content(outcome)
        if outcome.is_error:
            return ToolResult(error=text or f"Remote tool '{name}' reported an error")
        return ToolResult(text=text, artifacts=artifacts)


def split_content(outcome: CallOutcome) -> tuple[str, list[Artifact]]:
    """Separate binary parts from the text the model should read.

    Text parts are joined with newlines. Image and audio parts become
    artifacts. Anything else is serialized as JSON.
    """
    pieces: list[str] = []
    artifacts: list[Artifact] = []
    for part in outcome.content:
        kind = part.get("type")
        if kind == "text" and isinstance(part.get("text"), str):
            pieces.append(part["text"])
        elif kind in BINARY_PART_TYPES and isinstance(part.get("data"), str):
            mime_type = part.get("mimeType") or DEFAULT_MIME_TYPES[kind]
            artifacts.append(Artifact(data=part["data"], mime_type=mime_type))
        else:
            pieces.append(json.dumps(part, default=str))
    return "\n".join(pieces), artifacts


def _object_schema(schema: dict[str, Any]) -> dict[str, Any]:
    properties = schema.get("properties") if isinstance(schema, dict) else None
    return {
        "type": "object",
        "properties": properties if isinstance(properties, dict) else {},
        "required": list(schema.get("required") or []) if isinstance(schema, dict) else [],
    }


async def _close_quietly(name: str, client: ToolServerClient) -> None:
    try:
        await client.close()
    except Exception:
        logger.debug("Ignoring error while closing tool server '%s'", name, exc_info=True)
