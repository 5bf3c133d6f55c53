"""Tests for the built-in tools: time, memory, and image generation."""

import base64
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from pydantic import ValidationError

from steward.tools import registry
from steward.tools.base import ToolContext
from steward.tools.image_tools import GenerateImageParams, ImageGenerator
from steward.tools.memory_tools import RecallParams, recall, remember_this
from steward.tools.registry import ToolRegistry
from steward.tools.utility import get_current_time

# -- get_current_time ----------------------------------------------------------


async def test_get_current_time_utc() -> None:
    result = await get_current_time()
    assert result.success
    assert result.data["timezone"] == "UTC"
    for key in ("iso", "date", "time", "day_of_week"):
        assert key in result.data


async def test_get_current_time_named_zone() -> None:
    result = await get_current_time(timezone="Asia/Tokyo")
    assert result.success
    assert result.data["timezone"] == "Asia/Tokyo"
    assert result.data["iso"].endswith("+09:00")


async def test_get_current_time_invalid_zone() -> None:
    result = await get_current_time(timezone="Mars/Olympus")
    assert not result.success
    assert result.error == "Invalid timezone: Mars/Olympus"


def test_builtin_tools_are_registered() -> None:
    assert {"get_current_time", "remember_this", "recall"} <= set(registry.tool_names)


# -- remember_this / recall ------------------------------------------------------


async def test_remember_this_stores_memory(memory) -> None:
    result = await remember_this(content="My sister's birthday is May 3", ctx=ToolContext(memory))

    assert result.success
    assert result.data["remembered"] is True
    assert result.data["count"] == 1
    assert memory.store.all()[0].source == "user"


async def test_remember_this_without_memory() -> None:
    result = await remember_this(content="x", ctx=ToolContext())
    assert not result.success
    assert "not enabled" in result.error


async def test_recall_returns_formatted_results(memory) -> None:
    await memory.store_memory("Likes flat whites")

    result = await recall(query="Likes flat whites", ctx=ToolContext(memory))

    assert result.success
    assert result.data["count"] == 1
    (hit,) = result.data["results"]
    assert hit["text"] == "Likes flat whites"
    assert hit["score"] == pytest.approx(1.0)
    assert "timestamp" in hit


async def test_recall_through_registry(memory) -> None:
    await memory.store_memory("Drives a green bike")

    result = await registry.execute(
        "recall", {"query": "Drives a green bike", "limit": 1}, ToolContext(memory)
    )

    assert result.success
    assert result.data["results"][0]["text"] == "Drives a green bike"


def test_recall_limit_bounds() -> None:
    with pytest.raises(ValidationError):
        RecallParams(query="x", limit=0)
    assert RecallParams(query="x").limit == 3


# -- generate_image -------------------------------------------------------------

TINY_PNG_B64 = (
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAAC0lEQVQI12NgAAIABQAB"
    "Nl7BcQAAAABJRU5ErkJggg=="
)


def _mock_openai_client(b64_data: str | None = TINY_PNG_B64) -> MagicMock:
    """OpenAI client whose images.generate() returns one image."""
    client = MagicMock()
    client.images.generate = AsyncMock(
        return_value=SimpleNamespace(data=[SimpleNamespace(b64_json=b64_data)])
    )
    return client


@pytest.fixture
def image_reg() -> ToolRegistry:
    return ToolRegistry()


def test_image_params_defaults() -> None:
    p = GenerateImageParams(prompt="a red circle")
    assert p.size == "1024x1024"
    assert p.quality == "medium"


def test_image_params_reject_unknown_size() -> None:
    with pytest.raises(ValidationError):
        GenerateImageParams(prompt="x", size="512x512")


async def test_generate_image_returns_artifact() -> None:
    client = _mock_openai_client()
    tool = ImageGenerator("sk-test", client=client)

    result = await tool.execute(prompt="tall portrait", size="1024x1536", quality="high")

    assert result.success
    assert result.data == {"generated": True, "dimensions": "1024x1536", "quality": "high"}
    assert result.artifacts[0].data == TINY_PNG_B64
    assert result.artifacts[0].mime_type == "image/png"
    assert result.artifacts[0].caption == "tall portrait"
    assert base64.b64decode(result.artifacts[0].data).startswith(b"\x89PNG")
    client.images.generate.assert_awaited_once_with(
        model="gpt-image-1",
        prompt="tall portrait",
        size="1024x1536",
        quality="high",
        n=1,
    )


async def test_generate_image_through_registry(image_reg: ToolRegistry) -> None:
    image_reg.register(ImageGenerator("sk-test", client=_mock_openai_client()))

    result = await image_reg.execute("generate_image", {"prompt": "a fox"})

    assert result.success
    assert result.artifacts[0].caption == "a fox"
    assert "prompt" in image_reg.get_declarations()[0].parameters["required"]


async def test_invalid_size_through_registry(image_reg: ToolRegistry) -> None:
    client = _mock_openai_client()
    image_reg.register(ImageGenerator("sk-test", client=client))

    result = await image_reg.execute("generate_image", {"prompt": "x", "size": "512x512"})

    assert not result.success
    client.images.generate.assert_not_awaited()


async def test_caption_truncated_for_long_prompts() -> None:
    tool = ImageGenerator("sk-test", client=_mock_openai_client())

    result = await tool.execute(prompt="x" * 2000)

    assert len(result.artifacts[0].caption) == 1024


async def test_api_failure() -> None:
    client = _mock_openai_client()
    client.images.generate.side_effect = RuntimeError("API down")

    result = await ImageGenerator("sk-test", client=client).execute(prompt="test")

    assert not result.success
    assert "failed" in result.error.lower()
    assert "API down" not in result.error
    assert result.artifacts == []


async def test_empty_image_payload() -> None:
    tool = ImageGenerator("sk-test", client=_mock_openai_client(None))

    result = await tool.execute(prompt="test")

    assert not result.success
