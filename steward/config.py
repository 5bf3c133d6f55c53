"""Application settings loaded from environment variables."""

import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _env_file() -> str | None:
    if os.getenv("PYTEST_CURRENT_TEST"):
        return None
    return ".env"


def _split_csv(raw: str) -> list[str]:
    return [item.strip() for item in raw.split(",") if item.strip()]


class Settings(BaseSettings):
    """Steward configuration. All values come from environment variables."""

    # Anthropic
    anthropic_api_key: str = Field(default="")
    claude_model: str = Field(default="claude-sonnet-4-5-20250929")
    max_tokens: int = Field(default=4096)

    # OpenAI (embeddings, image generation)
    openai_api_key: str = Field(default="")
    embedding_model: str = Field(default="text-embedding-3-small")
    embedding_dims: int = Field(default=768)

    # Agent loop
    max_tool_rounds: int = Field(default=10)
    model_max_attempts: int = Field(default=3)
    retry_base_delay: float = Field(default=2.0)

    # Memory
    memory_enabled: bool = Field(default=True)
    memory_mock: bool = Field(default=False)
    memory_dir: Path = Field(default=Path("data/memory"))
    memory_top_k: int = Field(default=3)
    memory_min_score: float = Field(default=0.3)

    # Remote tool servers (MCP)
    mcp_enabled: bool = Field(default=True)
    mcp_config_path: Path = Field(default=Path("mcp.config.json"))
    mcp_allowed_tools: str = Field(default="")

    # Names of extra env vars whose values must never leave the process
    tracked_secret_env: str = Field(default="")

    # Persona / operational files (SOUL.md)
    config_dir: Path = Field(default=Path("config"))

    # Scratch space for artifacts written by the CLI
    scratch_dir: Path = Field(default=Path("data/scratch"))

    # Conversation
    conversation_window_size: int = Field(default=50)

    # Logging
    log_level: str = Field(default="INFO")

    model_config = SettingsConfigDict(env_file=_env_file(), env_file_encoding="utf-8")

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        if os.getenv("PYTEST_CURRENT_TEST"):
            return (init_settings,)
        return (init_settings, env_settings, dotenv_settings, file_secret_settings)

    def get_allowed_tools(self) -> list[str]:
        """Parse MCP_ALLOWED_TOOLS into a list of tool names."""
        return _split_csv(self.mcp_allowed_tools)

    def get_tracked_secret_env(self) -> list[str]:
        """Parse TRACKED_SECRET_ENV into a list of env var names."""
        return _split_csv(self.tracked_secret_env)

    def get_credential_values(self) -> list[str]:
        """All configured secret values (API keys plus tracked env vars)."""
        values = [self.anthropic_api_key, self.openai_api_key]
        values.extend(os.environ.get(name, "") for name in self.get_tracked_secret_env())
        return [v for v in values if v]


settings = Settings()
