"""Image generation with OpenAI gpt-image-1, returned as an artifact."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Literal

from pydantic import Field

from steward.tools.base import Artifact, BaseTool, ToolParams, ToolResult

if TYPE_CHECKING:
    from openai import AsyncOpenAI

logger = logging.getLogger(__name__)

IMAGE_MODEL = "gpt-image-1"
CAPTION_LIMIT = 1024

ImageSize = Literal["1024x1024", "1024x1536", "1536x1024"]
ImageQuality = Literal["low", "medium", "high"]


class GenerateImageParams(ToolParams):
    prompt: str = Field(
        description=(
            "Detailed description of the image to generate. Be specific about style, "
            "colors, composition, and subject."
        )
    )
    size: ImageSize = Field(
        default="1024x1024",
        description="Square, portrait (1024x1536), or landscape (1536x1024)",
    )
    quality: ImageQuality = Field(default="medium", description="Rendering quality")


class ImageGenerator(BaseTool):
    """``generate_image``: the picture travels out of band, the model sees a summary."""

    name = "generate_image"
    description = (
        "Generate an image from a text description. The image is delivered to the "
        "user alongside your reply. Use when the user asks to create, draw, "
        "generate, or visualize an image."
    )
    category = "creative"
    params_model = GenerateImageParams

    def __init__(self, api_key: str, client: AsyncOpenAI | None = None) -> None:
        self._api_key = api_key
        self._client = client

    def _get_client(self) -> AsyncOpenAI:
        if self._client is None:
            from openai import AsyncOpenAI

            self._client = AsyncOpenAI(api_key=self._api_key)
        return self._client

    async def execute(self, **kwargs: Any) -> ToolResult:
        params = GenerateImageParams.model_validate(kwargs)
        try:
            response = await self._get_client().images.generate(
                model=IMAGE_MODEL,
                prompt=params.prompt,
                size=params.size,
                quality=params.quality,
                n=1,
            )
        except Exception:
            logger.exception("Image generation failed")
            return ToolResult(error="Image generation failed. Please try again.")

        image_b64 = response.data[0].b64_json if response.data else None
        if not image_b64:
            return ToolResult(error="The image service returned no image.")

        logger.info("Image generated (%s, %s)", params.size, params.quality)
        return ToolResult(
            data={"generated": True, "dimensions": params.size, "quality": params.quality},
            artifacts=[
                Artifact(
                    data=image_b64,
                    mime_type="image/png",
                    caption=params.prompt[:CAPTION_LIMIT],
                )
            ],
        )
