"""Agent loop and the runtime it runs against."""

from steward.agent.loop import Agent, AgentResult
from steward.agent.runtime import AgentRuntime

__all__ = ["Agent", "AgentResult", "AgentRuntime"]
