"""Capability registry: the static catalog of in-process tools."""

from __future__ import annotations

import inspect
import logging
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from steward.llm.types import ToolDeclaration
from steward.tools.base import BaseTool, ToolContext, ToolParams, ToolResult

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    Handler = Callable[..., Awaitable[ToolResult]]

logger = logging.getLogger(__name__)

EMPTY_SCHEMA: dict[str, Any] = {"type": "object", "properties": {}}


@dataclass(frozen=True)
class RegisteredTool:
    """A tool's declaration bound to the coroutine that runs it."""

    declaration: ToolDeclaration
    category: str
    handler: Handler
    params_model: type[ToolParams] | None = None
    wants_ctx: bool = False

    @property
    def name(self) -> str:
        return self.declaration.name

    def bind(self, arguments: dict[str, Any], ctx: ToolContext | None) -> dict[str, Any]:
        """Validate model-supplied arguments into handler kwargs.

        Raises pydantic's ``ValidationError`` on bad arguments.
        """
        if self.params_model is not None:
            kwargs = self.params_model.model_validate(arguments).model_dump()
        else:
            kwargs = dict(arguments)
        if self.wants_ctx:
            kwargs["ctx"] = ctx or ToolContext()
        return kwargs


class ToolRegistry:
    """Name → (declaration, handler) map, fixed once modules are imported.

    Register with the decorator::

        @registry.tool(name="ping", description="Ping", category="utility")
        async def ping() -> ToolResult:
            return ToolResult(data={"pong": True})

    or, for tools that hold state, with a ``BaseTool`` instance::

        registry.register(MyTool())

    A handler that declares a ``ctx`` parameter receives the
    ``ToolContext`` of the current run.
    """

    def __init__(self) -> None:
        self._tools: dict[str, RegisteredTool] = {}

    def tool(
        self,
        *,
        name: str,
        description: str,
        category: str,
        params_model: type[ToolParams] | None = None,
    ) -> Callable[[Handler], Handler]:
        """Decorator registering an async function as a tool."""

        def decorator(fn: Handler) -> Handler:
            if not inspect.iscoroutinefunction(fn):
                msg = f"Tool handler '{name}' must be an async function"
                raise TypeError(msg)
            self._add(name, description, category, fn, params_model)
            return fn

        return decorator

    def register(self, tool_instance: BaseTool) -> None:
        """Register a class-based tool instance."""
        self._add(
            tool_instance.name,
            tool_instance.description,
            tool_instance.category,
            tool_instance.execute,
            tool_instance.params_model,
        )

    def _add(
        self,
        name: str,
        description: str,
        category: str,
        handler: Handler,
        params_model: type[ToolParams] | None,
    ) -> None:
        if name in self._tools:
            msg = f"Tool '{name}' is already registered"
            raise ValueError(msg)
        schema = params_model.model_json_schema() if params_model else dict(EMPTY_SCHEMA)
        self._tools[name] = RegisteredTool(
            declaration=ToolDeclaration(name=name, description=description, parameters=schema),
            category=category,
            handler=handler,
            params_model=params_model,
            wants_ctx="ctx" in inspect.signature(handler).parameters,
        )

    # -- Lookup ----------------------------------------------------------------

    def get(self, name: str) -> RegisteredTool | None:
        return self._tools.get(name)

    def has(self, name: str) -> bool:
        return name in self._tools

    @property
    def tool_names(self) -> list[str]:
        return list(self._tools)

    def get_declarations(self) -> list[ToolDeclaration]:
        """Declarations in registration order."""
        return [t.declaration for t in self._tools.values()]

    def get_tools_by_category(self) -> dict[str, list[RegisteredTool]]:
        groups: dict[str, list[RegisteredTool]] = {}
        for registered in self._tools.values():
            groups.setdefault(registered.category, []).append(registered)
        return groups

    # -- Execution -------------------------------------------------------------

    async def execute(
        self,
        name: str,
        arguments: dict[str, Any],
        ctx: ToolContext | None = None,
    ) -> ToolResult:
        """Run a tool. Never raises: failures come back as error results.

        The error text never includes exception details; those are logged.
        """
        registered = self._tools.get(name)
        if registered is None:
            return ToolResult(error=f"Unknown tool: {name}")

        logger.info("Tool '%s' called with %s", name, sorted(arguments))
        started = time.monotonic()
        try:
            result = await registered.handler(**registered.bind(arguments, ctx))
        except Exception:
            logger.exception("Tool '%s' failed after %.2fs", name, time.monotonic() - started)
            return ToolResult(error=f"Tool '{name}' failed. Check logs for details.")

        elapsed = time.monotonic() - started
        if result.success:
            logger.info("Tool '%s' succeeded in %.2fs", name, elapsed)
        else:
            logger.warning("Tool '%s' returned error in %.2fs: %s", name, elapsed, result.error)
        return result


# Built-in tool modules register themselves here on import.
registry = ToolRegistry()
