"""Tests for AgentRuntime: local/remote merging, routing, and lifecycle."""

import json

import pytest

from steward.agent.runtime import AgentRuntime
from steward.config import Settings
from steward.gateway.client import CallOutcome, RemoteTool
from steward.gateway.config import GatewayConfig, ServerConfig
from steward.gateway.gateway import RemoteGateway
from steward.gateway.guardrails import Guardrails
from steward.tools.base import ToolContext, ToolResult
from steward.tools.registry import ToolRegistry

from fakes import FakeServerClient


@pytest.fixture
def reg() -> ToolRegistry:
    reg = ToolRegistry()

    @reg.tool(name="search", description="Local search", category="test")
    async def search() -> ToolResult:
        return ToolResult(data={"from": "local"})

    @reg.tool(name="whoami", description="Report context", category="test")
    async def whoami(ctx: ToolContext) -> ToolResult:
        return ToolResult(data={"has_memory": ctx.memory is not None})

    return reg


def _runtime(reg: ToolRegistry, clients: dict[str, FakeServerClient], **kwargs) -> AgentRuntime:
    config = GatewayConfig(servers={n: ServerConfig(command=n) for n in clients})
    gateway = RemoteGateway(config, Guardrails.create(), lambda name, _cfg: clients[name])
    return AgentRuntime(reg, gateway=gateway, **kwargs)


async def test_local_tool_wins_name_clash(reg) -> None:
    remote = FakeServerClient([RemoteTool(name="search"), RemoteTool(name="weather")])
    runtime = _runtime(reg, {"web": remote})
    await runtime.start()

    names = [d.name for d in runtime.get_declarations()]
    result = await runtime.execute_tool("search", {})

    assert names == ["search", "whoami", "weather"]
    assert result.data == {"from": "local"}
    assert remote.calls == []


async def test_remote_tool_is_routed_to_gateway(reg) -> None:
    remote = FakeServerClient(
        [RemoteTool(name="weather")],
        responses={"weather": CallOutcome(content=[{"type": "text", "text": "Sunny"}])},
    )
    runtime = _runtime(reg, {"web": remote})
    await runtime.start()

    result = await runtime.execute_tool("weather", {"city": "Porto"})

    assert result.to_content() == "Sunny"
    assert remote.calls == [("weather", {"city": "Porto"})]


async def test_unknown_tool(reg) -> None:
    runtime = AgentRuntime(reg)

    result = await runtime.execute_tool("nope", {})

    assert json.loads(result.to_content()) == {"error": "Unknown tool: nope"}


async def test_local_tools_receive_memory(reg, memory) -> None:
    runtime = AgentRuntime(reg, memory=memory)

    result = await runtime.execute_tool("whoami", {})

    assert result.data == {"has_memory": True}


async def test_declarations_are_cached_until_reconnect(reg) -> None:
    remote = FakeServerClient([RemoteTool(name="weather")])
    runtime = _runtime(reg, {"web": remote})
    await runtime.start()

    first = runtime.get_declarations()
    remote.tools = [RemoteTool(name="weather"), RemoteTool(name="news")]
    assert runtime.get_declarations() == first

    assert await runtime.reconnect_gateway() == 1
    assert [d.name for d in runtime.get_declarations()] == ["search", "whoami", "weather", "news"]


async def test_context_manager_starts_and_stops(reg) -> None:
    remote = FakeServerClient([RemoteTool(name="weather")])

    async with _runtime(reg, {"web": remote}) as runtime:
        assert remote.connected
        assert runtime.status()["remote_servers"] == [{"name": "web", "tools": ["weather"]}]

    assert remote.closed
    assert [d.name for d in runtime.get_declarations()] == ["search", "whoami"]


async def test_runtime_without_gateway(reg) -> None:
    runtime = AgentRuntime(reg)

    assert await runtime.start() == 0
    assert await runtime.reconnect_gateway() == 0
    assert runtime.status() == {
        "local_tools": 2,
        "local_categories": {"test": ["search", "whoami"]},
        "remote_servers": [],
        "memory_enabled": False,
        "memories": 0,
    }
    await runtime.shutdown()


def test_from_settings_wires_components(reg, tmp_path) -> None:
    s = Settings(
        memory_dir=tmp_path / "mem",
        memory_mock=True,
        mcp_config_path=tmp_path / "missing.json",
    )

    runtime = AgentRuntime.from_settings(s, registry=reg)

    assert runtime.registry is reg
    assert runtime.memory is not None
    assert runtime.gateway is not None


def test_from_settings_can_disable_subsystems(reg) -> None:
    runtime = AgentRuntime.from_settings(
        Settings(memory_enabled=False, mcp_enabled=False), registry=reg
    )

    assert runtime.memory is None
    assert runtime.gateway is None
