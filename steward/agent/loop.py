"""The agent loop: model call → tool calls → results → model call."""

from __future__ import annotations

import asyncio
import functools
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from steward.llm.client import ClaudeModel
from steward.llm.prompt import DEFAULT_PERSONA, build_system_instruction, load_persona
from steward.llm.retry import with_retry
from steward.llm.types import ConversationTurn, ToolResultPart

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Sequence

    from steward.agent.runtime import AgentRuntime
    from steward.config import Settings
    from steward.llm.client import ChatModel
    from steward.llm.types import ModelReply, ToolCallRequest
    from steward.tools.base import Artifact

logger = logging.getLogger(__name__)

MAX_ITERATIONS = 10
MAX_ATTEMPTS = 3
RETRY_BASE_DELAY = 2.0

FALLBACK_TEXT = "I couldn't generate a response."


@dataclass
class AgentResult:
    """Final answer of one run."""

    text: str
    tool_calls: int = 0
    artifacts: list[Artifact] = field(default_factory=list)


class Agent:
    """Runs one user message to completion against a runtime.

    Holds no per-request state, so one Agent can serve concurrent requests.
    """

    def __init__(
        self,
        runtime: AgentRuntime,
        model: ChatModel,
        *,
        persona: str = DEFAULT_PERSONA,
        max_iterations: int = MAX_ITERATIONS,
        max_attempts: int = MAX_ATTEMPTS,
        retry_base_delay: float = RETRY_BASE_DELAY,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._runtime = runtime
        self._model = model
        self._persona = persona
        self._max_iterations = max_iterations
        self._max_attempts = max_attempts
        self._retry_base_delay = retry_base_delay
        self._sleep = sleep

    @classmethod
    def from_settings(
        cls,
        runtime: AgentRuntime,
        settings: Settings,
        model: ChatModel | None = None,
    ) -> Agent:
        return cls(
            runtime,
            model or ClaudeModel.from_settings(settings),
            persona=load_persona(settings.config_dir),
            max_iterations=settings.max_tool_rounds,
            max_attempts=settings.model_max_attempts,
            retry_base_delay=settings.retry_base_delay,
        )

    async def run(
        self,
        user_message: str,
        history: Sequence[ConversationTurn] = (),
    ) -> AgentResult:
        """Generate a response with the full tool-calling loop.

        Stops when the model answers without tool calls, or after
        ``max_iterations`` model calls. In the latter case the most recent
        text the model produced is returned.

        Raises:
            Exception: Whatever the model call raised once retries were
                exhausted or the error was not retryable.
        """
        system = await self._system_instruction(user_message)
        declarations = self._runtime.get_declarations()

        conversation: list[ConversationTurn] = [*history, ConversationTurn.user(user_message)]
        artifacts: list[Artifact] = []
        total_tool_calls = 0
        latest_text = ""

        for round_num in range(self._max_iterations):
            reply: ModelReply = await with_retry(
                functools.partial(self._model.generate, system, tuple(conversation), declarations),
                f"Model call (round {round_num + 1})",
                max_attempts=self._max_attempts,
                base_delay=self._retry_base_delay,
                sleep=self._sleep,
            )
            if reply.text:
                latest_text = reply.text

            if not reply.tool_calls:
                break

            if round_num + 1 >= self._max_iterations:
                logger.warning(
                    "Hit max iterations (%d) with %d tool call(s) pending",
                    self._max_iterations,
                    len(reply.tool_calls),
                )
                break

            logger.info(
                "Round %d: %d tool call(s): %s",
                round_num + 1,
                len(reply.tool_calls),
                ", ".join(c.name for c in reply.tool_calls),
            )
            result_parts = await self._execute_calls(reply.tool_calls, artifacts)
            total_tool_calls += len(result_parts)

            conversation.append(reply.to_turn())
            conversation.append(ConversationTurn(role="user", parts=tuple(result_parts)))

        return AgentResult(
            text=latest_text or FALLBACK_TEXT,
            tool_calls=total_tool_calls,
            artifacts=artifacts,
        )

    async def _system_instruction(self, user_message: str) -> str:
        memory_context = ""
        if self._runtime.memory is not None:
            try:
                memory_context = await self._runtime.memory.get_memory_context(user_message)
            except Exception:
                logger.exception("Memory recall failed — continuing without memory context")
        return build_system_instruction(self._persona, memory_context)

    async def _execute_calls(
        self,
        calls: Sequence[ToolCallRequest],
        artifacts: list[Artifact],
    ) -> list[ToolResultPart]:
        """Run one turn's tool calls concurrently and pair each result with its call."""
        results = await asyncio.gather(
            *(self._runtime.execute_tool(call.name, call.arguments) for call in calls)
        )

        parts: list[ToolResultPart] = []
        for call, result in zip(calls, results, strict=True):
            artifacts.extend(result.artifacts)
            parts.append(
                ToolResultPart(
                    tool_call_id=call.id,
                    name=call.name,
                    content=result.summary_for_model(),
                    is_error=not result.success,
                )
            )
        return parts
