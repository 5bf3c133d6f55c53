"""Async Claude API adapter for the agent loop."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Protocol

import anthropic

from steward.llm.types import (
    ModelReply,
    TextPart,
    ToolCallPart,
    ToolCallRequest,
    ToolResultPart,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from steward.config import Settings
    from steward.llm.types import ConversationTurn, ToolDeclaration

logger = logging.getLogger(__name__)


class ChatModel(Protocol):
    """A function-calling chat model."""

    async def generate(
        self,
        system: str,
        history: Sequence[ConversationTurn],
        tools: Sequence[ToolDeclaration],
    ) -> ModelReply: ...


def to_api_messages(history: Sequence[ConversationTurn]) -> list[dict[str, Any]]:
    """Convert conversation turns to Claude API message dicts."""
    messages: list[dict[str, Any]] = []
    for turn in history:
        content: list[dict[str, Any]] = []
        for part in turn.parts:
            if isinstance(part, TextPart):
                content.append({"type": "text", "text": part.text})
            elif isinstance(part, ToolCallPart):
                content.append({
                    "type": "tool_use",
                    "id": part.call.id,
                    "name": part.call.name,
                    "input": part.call.arguments,
                })
            elif isinstance(part, ToolResultPart):
                content.append({
                    "type": "tool_result",
                    "tool_use_id": part.tool_call_id,
                    "content": part.content,
                    "is_error": part.is_error,
                })
        messages.append({"role": turn.role, "content": content})
    return messages


def to_api_tools(tools: Sequence[ToolDeclaration]) -> list[dict[str, Any]]:
    return [
        {"name": t.name, "description": t.description, "input_schema": t.parameters}
        for t in tools
    ]


def parse_reply(content: Sequence[Any]) -> ModelReply:
    """Split SDK content blocks into text and tool calls."""
    texts: list[str] = []
    calls: list[ToolCallRequest] = []
    for block in content:
        if block.type == "text":
            texts.append(block.text)
        elif block.type == "tool_use":
            calls.append(
                ToolCallRequest(id=block.id, name=block.name, arguments=dict(block.input or {}))
            )
    return ModelReply(text="".join(texts), tool_calls=tuple(calls))


class ClaudeModel:
    """ChatModel backed by the Anthropic Messages API."""

    def __init__(
        self,
        api_key: str,
        model: str,
        max_tokens: int = 4096,
    ) -> None:
        self._api_key = api_key
        self._model = model
        self._max_tokens = max_tokens
        self._client: anthropic.AsyncAnthropic | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> ClaudeModel:
        return cls(
            api_key=settings.anthropic_api_key,
            model=settings.claude_model,
            max_tokens=settings.max_tokens,
        )

    def _get_client(self) -> anthropic.AsyncAnthropic:
        """Lazily initialize the Anthropic client."""
        if self._client is None:
            self._client = anthropic.AsyncAnthropic(api_key=self._api_key, max_retries=0)
        return self._client

    async def generate(
        self,
        system: str,
        history: Sequence[ConversationTurn],
        tools: Sequence[ToolDeclaration],
    ) -> ModelReply:
        kwargs: dict[str, Any] = {
            "model": self._model,
            "max_tokens": self._max_tokens,
            "system": system,
            "messages": to_api_messages(history),
        }
        if tools:
            kwargs["tools"] = to_api_tools(tools)

        response = await self._get_client().messages.create(**kwargs)
        reply = parse_reply(response.content)
        logger.debug(
            "Model replied: %d chars, %d tool call(s), stop_reason=%s",
            len(reply.text),
            len(reply.tool_calls),
            response.stop_reason,
        )
        return reply
