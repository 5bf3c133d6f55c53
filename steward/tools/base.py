"""Base types for the tool-calling framework."""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel

if TYPE_CHECKING:
    from steward.memory.service import MemoryService


@dataclass(frozen=True)
class Artifact:
    """A binary payload (e.g. a generated image) returned out of band."""

    data: str  # base64
    mime_type: str = "image/png"
    caption: str | None = None

    def summary(self) -> dict[str, str]:
        """What the model sees in place of the payload."""
        info = {"mime_type": self.mime_type}
        if self.caption:
            info["caption"] = self.caption
        return info


@dataclass
class ToolResult:
    """Result of a tool execution.

    Every tool returns one of these. The variant is chosen by the tool:

    - ``data``: structured success, serialized as JSON,
    - ``text``: raw text success (remote servers answer in text),
    - ``error``: failure, serialized as ``{"error": ...}``,
    - ``data`` or ``text`` + ``artifacts``: success with binary payloads
      that the agent loop moves to the side channel.
    """

    data: dict[str, Any] | None = None
    error: str | None = None
    text: str | None = None
    artifacts: list[Artifact] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.error is None

    def to_content(self) -> str:
        """Serialize as the string payload returned to the model."""
        if self.error:
            return json.dumps({"error": self.error})
        if self.text is not None:
            return self.text
        return json.dumps(self.data or {}, default=str)

    def summary_for_model(self) -> str:
        """Payload for the model's context, with artifacts replaced by a summary."""
        if self.error or not self.artifacts:
            return self.to_content()
        summary: dict[str, Any] = {**(self.data or {}), "success": True}
        if self.text:
            summary["text"] = self.text
        summary["artifacts"] = [a.summary() for a in self.artifacts]
        return json.dumps(summary, default=str)


@dataclass
class ToolContext:
    """Runtime services a tool handler may ask for via a ``ctx`` parameter."""

    memory: MemoryService | None = None


class ToolParams(BaseModel):
    """Base class for tool parameter models.

    Subclass with Field() definitions. The JSON schema is auto-generated
    via model_json_schema() for the tool declarations.
    """


class BaseTool(ABC):
    """Abstract base for class-based tool implementations.

    Use this when a tool needs initialization state (API clients, etc.).
    For simple stateless tools, prefer the @registry.tool() decorator.

    Example::

        class MyTool(BaseTool):
            name = "my_tool"
            description = "Does a thing"
            category = "custom"
            params_model = MyToolParams

            async def execute(self, **kwargs) -> ToolResult:
                return ToolResult(data={"ok": True})
    """

    name: str = ""
    description: str = ""
    category: str = ""
    params_model: type[ToolParams] | None = None

    @abstractmethod
    async def execute(self, **kwargs: Any) -> ToolResult:
        """Execute the tool with validated parameters."""
        ...
