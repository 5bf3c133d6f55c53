"""Process-owned runtime: tool providers, memory, and the declaration cache.

One ``AgentRuntime`` replaces what would otherwise be module-level
singletons (connected servers, cached declarations). Create it, ``start()``
it, hand it to an ``Agent``, and ``shutdown()`` it on exit. Several
runtimes can coexist, e.g. one per test.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from steward.gateway.client import McpServerClient
from steward.gateway.config import load_gateway_config, placeholder_values
from steward.gateway.gateway import RemoteGateway
from steward.gateway.guardrails import Guardrails
from steward.memory.service import MemoryService
from steward.tools.base import ToolContext, ToolResult

if TYPE_CHECKING:
    from types import TracebackType

    from steward.config import Settings
    from steward.gateway.gateway import ClientFactory
    from steward.llm.types import ToolDeclaration
    from steward.tools.registry import ToolRegistry

logger = logging.getLogger(__name__)


class AgentRuntime:
    """Merges the local registry with the remote gateway.

    Name clashes are resolved statically: a local tool always wins over a
    remote tool of the same name.
    """

    def __init__(
        self,
        registry: ToolRegistry,
        *,
        gateway: RemoteGateway | None = None,
        memory: MemoryService | None = None,
    ) -> None:
        self.registry = registry
        self.gateway = gateway
        self.memory = memory
        self._declarations: list[ToolDeclaration] | None = None

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        registry: ToolRegistry | None = None,
        client_factory: ClientFactory = McpServerClient,
    ) -> AgentRuntime:
        """Wire up the runtime described by ``settings``. Nothing connects yet."""
        if registry is None:
            from steward.tools import registry as default_registry

            registry = default_registry

        memory = MemoryService.from_settings(settings) if settings.memory_enabled else None

        gateway = None
        if settings.mcp_enabled:
            gateway_config = load_gateway_config(settings.mcp_config_path)
            guardrails = Guardrails.from_settings(
                settings, extra_secrets=placeholder_values(gateway_config)
            )
            gateway = RemoteGateway(gateway_config, guardrails, client_factory)

        return cls(registry, gateway=gateway, memory=memory)

    # -- Lifecycle -----------------------------------------------------------

    async def start(self) -> int:
        """Connect remote tool servers. Returns the number connected."""
        if self.gateway is None:
            return 0
        count = await self.gateway.connect_all()
        self.invalidate_tool_cache()
        return count

    async def shutdown(self) -> None:
        if self.gateway is not None:
            await self.gateway.shutdown()
        self.invalidate_tool_cache()

    async def reconnect_gateway(self) -> int:
        """Drop and re-establish every server connection, then refresh declarations."""
        if self.gateway is None:
            return 0
        await self.gateway.shutdown()
        count = await self.gateway.connect_all()
        self.invalidate_tool_cache()
        return count

    async def __aenter__(self) -> AgentRuntime:
        await self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.shutdown()

    # -- Declarations --------------------------------------------------------

    def get_declarations(self) -> list[ToolDeclaration]:
        """Local declarations followed by remote ones, built once and cached."""
        if self._declarations is None:
            declarations = self.registry.get_declarations()
            if self.gateway is not None:
                local = {d.name for d in declarations}
                for decl in self.gateway.get_declarations():
                    if decl.name in local:
                        logger.warning(
                            "Remote tool '%s' hidden by local tool of the same name", decl.name
                        )
                        continue
                    declarations.append(decl)
            self._declarations = declarations
            logger.info("Tool declarations cached: %d", len(declarations))
        return list(self._declarations)

    def invalidate_tool_cache(self) -> None:
        """Force the next ``get_declarations()`` to rebuild."""
        self._declarations = None

    # -- Execution -----------------------------------------------------------

    async def execute_tool(self, name: str, arguments: dict[str, Any]) -> ToolResult:
        """Route a call to the local registry first, then the gateway."""
        if self.registry.has(name):
            return await self.registry.execute(name, arguments, ToolContext(memory=self.memory))
        if self.gateway is not None and self.gateway.has_tool(name):
            return await self.gateway.execute(name, arguments)
        return ToolResult(error=f"Unknown tool: {name}")

    def status(self) -> dict[str, Any]:
        return {
            "local_tools": len(self.registry.tool_names),
            "local_categories": {
                category: [t.name for t in tools]
                for category, tools in self.registry.get_tools_by_category().items()
            },
            "remote_servers": self.gateway.server_info() if self.gateway else [],
            "memory_enabled": self.memory is not None,
            "memories": self.memory.count() if self.memory else 0,
        }
