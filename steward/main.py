"""Steward entry point: an interactive console around the agent loop."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import TYPE_CHECKING

from steward.agent.loop import Agent
from steward.agent.runtime import AgentRuntime
from steward.config import settings
from steward.scratch import ScratchSpace
from steward.session import Session

if TYPE_CHECKING:
    from steward.agent.loop import AgentResult

logger = logging.getLogger(__name__)

ERROR_REPLY = "Something went wrong. Please try again."
REMEMBER_ERROR_REPLY = "Failed to store memory. Please try again."
RECALL_ERROR_REPLY = "Failed to recall memories. Please try again."
MEMORY_DISABLED_REPLY = "Memory is disabled."

HELP_TEXT = """\
Commands:
  /remember <text>   store a memory
  /recall <query>    search memories
  /status            show runtime status
  /clear             forget this conversation
  /reconnect         reconnect remote tool servers
  /quit              exit"""


class Console:
    """Turns console lines into agent runs and command replies.

    Replies never include exception details; those go to the log.
    """

    def __init__(
        self,
        agent: Agent,
        runtime: AgentRuntime,
        session: Session,
        scratch: ScratchSpace,
    ) -> None:
        self._agent = agent
        self._runtime = runtime
        self._session = session
        self._scratch = scratch

    async def handle(self, line: str) -> str | None:
        """Reply to one line of input. Returns None when the user quits."""
        text = line.strip()
        if not text:
            return ""
        if text.startswith("/"):
            command, _, arg = text.partition(" ")
            return await self._command(command.lower(), arg.strip())
        return await self._chat(text)

    async def _chat(self, text: str) -> str:
        try:
            result = await self._agent.run(text, self._session.history())
        except Exception:
            logger.exception("Agent run failed")
            return ERROR_REPLY

        self._session.add_exchange(text, result.text)
        return self._render(result)

    def _render(self, result: AgentResult) -> str:
        lines = [result.text]
        for artifact in result.artifacts:
            try:
                path = self._scratch.save_artifact(artifact)
            except (OSError, ValueError):
                logger.exception("Failed to save artifact")
                lines.append("[could not save generated file]")
                continue
            caption = f" — {artifact.caption}" if artifact.caption else ""
            lines.append(f"[{artifact.mime_type} saved to {path}]{caption}")
        return "\n".join(lines)

    async def _command(self, command: str, arg: str) -> str | None:
        if command in ("/quit", "/exit"):
            return None
        if command == "/help":
            return HELP_TEXT
        if command == "/clear":
            count = self._session.clear()
            return f"Cleared {count} turns. Starting fresh."
        if command == "/status":
            return self._status()
        if command == "/reconnect":
            try:
                count = await self._runtime.reconnect_gateway()
            except Exception:
                logger.exception("Reconnect failed")
                return ERROR_REPLY
            return f"Reconnected {count} tool server(s)."
        if command == "/remember":
            return await self._remember(arg)
        if command == "/recall":
            return await self._recall(arg)
        return f"Unknown command {command}. Try /help."

    async def _remember(self, text: str) -> str:
        if not text:
            return "Usage: /remember Your fact or note here"
        memory = self._runtime.memory
        if memory is None:
            return MEMORY_DISABLED_REPLY
        try:
            await memory.store_memory(text, source="user")
            count = memory.count()
        except Exception:
            logger.exception("Remember failed")
            return REMEMBER_ERROR_REPLY
        return f"Remembered! ({count} total memories)"

    async def _recall(self, query: str) -> str:
        if not query:
            return "Usage: /recall your search query"
        memory = self._runtime.memory
        if memory is None:
            return MEMORY_DISABLED_REPLY
        try:
            memories = await memory.recall_memories(query)
        except Exception:
            logger.exception("Recall failed")
            return RECALL_ERROR_REPLY
        if not memories:
            return "No relevant memories found."
        lines = [f"{i}. ({m.score * 100:.0f}%) {m.text}" for i, m in enumerate(memories, start=1)]
        return f"Recalled {len(memories)} memory(s):\n" + "\n".join(lines)

    def _status(self) -> str:
        status = self._runtime.status()
        servers = status["remote_servers"]
        lines = [
            "Steward Status",
            f"Model: {settings.claude_model}",
            f"Local tools: {status['local_tools']}",
        ]
        lines.extend(
            f"  - {category}: {', '.join(names)}"
            for category, names in sorted(status["local_categories"].items())
        )
        lines.append(f"Tool servers: {len(servers)}")
        lines.extend(f"  - {s['name']}: {', '.join(s['tools']) or '(no tools)'}" for s in servers)
        if status["memory_enabled"]:
            lines.append(f"Memories: {status['memories']}")
        else:
            lines.append("Memory: disabled")
        lines.append(f"Turns in context: {len(self._session.turns)}/{self._session.window_size}")
        return "\n".join(lines)


async def _run(message: str | None) -> int:
    runtime = AgentRuntime.from_settings(settings)
    connected = await runtime.start()
    logger.info("Steward started — %d tool server(s) connected", connected)
    try:
        console = Console(
            Agent.from_settings(runtime, settings),
            runtime,
            Session(),
            ScratchSpace(settings.scratch_dir),
        )
        if message is not None:
            reply = await console.handle(message)
            print(reply or "")
            return 0

        print("Steward is ready. Type /help for commands.")
        while True:
            try:
                line = await asyncio.to_thread(input, "> ")
            except EOFError:
                break
            reply = await console.handle(line)
            if reply is None:
                break
            if reply:
                print(reply)
    finally:
        await runtime.shutdown()
    return 0


def main() -> None:
    """Start the console, or answer a single message with ``-m``."""
    parser = argparse.ArgumentParser(description="Steward personal assistant")
    parser.add_argument("-m", "--message", help="Send one message and exit")
    args = parser.parse_args()

    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
    )
    if not settings.anthropic_api_key:
        logger.warning("ANTHROPIC_API_KEY is empty — model calls will fail")

    try:
        sys.exit(asyncio.run(_run(args.message)))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
