"""Provider-neutral conversation types shared by the agent loop and model adapter."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

Role = Literal["user", "assistant"]


@dataclass(frozen=True)
class ToolDeclaration:
    """A tool advertised to the model."""

    name: str
    description: str
    parameters: dict[str, Any] = field(
        default_factory=lambda: {"type": "object", "properties": {}}
    )


@dataclass(frozen=True)
class ToolCallRequest:
    """A model-issued request to invoke a named tool."""

    id: str
    name: str
    arguments: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class TextPart:
    text: str


@dataclass(frozen=True)
class ToolCallPart:
    call: ToolCallRequest


@dataclass(frozen=True)
class ToolResultPart:
    tool_call_id: str
    name: str
    content: str
    is_error: bool = False


Part = TextPart | ToolCallPart | ToolResultPart


@dataclass(frozen=True)
class ConversationTurn:
    """One turn of conversation history. Immutable once created."""

    role: Role
    parts: tuple[Part, ...]

    @classmethod
    def user(cls, text: str) -> ConversationTurn:
        return cls(role="user", parts=(TextPart(text),))

    @classmethod
    def assistant(cls, text: str) -> ConversationTurn:
        return cls(role="assistant", parts=(TextPart(text),))


@dataclass(frozen=True)
class ModelReply:
    """What the model returned for one call."""

    text: str = ""
    tool_calls: tuple[ToolCallRequest, ...] = ()

    def to_turn(self) -> ConversationTurn:
        parts: list[Part] = []
        if self.text:
            parts.append(TextPart(self.text))
        parts.extend(ToolCallPart(call) for call in self.tool_calls)
        return ConversationTurn(role="assistant", parts=tuple(parts))
