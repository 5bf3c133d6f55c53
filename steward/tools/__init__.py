"""Built-in tools. Importing this package fills the global registry."""

# Decorated tool modules register on import; add new modules here.
from steward.config import settings
from steward.tools import memory_tools, utility  # noqa: F401
from steward.tools.image_tools import ImageGenerator
from steward.tools.registry import registry

# Image generation needs an OpenAI key.
if settings.openai_api_key:
    registry.register(ImageGenerator(settings.openai_api_key))

__all__ = ["registry"]
