"""Remote tool server definitions (``mcp.config.json``)."""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Mapping
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field, ValidationError

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

_PLACEHOLDER_RE = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}")


class ServerConfig(BaseModel):
    """How to launch one tool server."""

    command: str
    args: list[str] = Field(default_factory=list)
    env: dict[str, str] = Field(default_factory=dict)


class GatewayConfig(BaseModel):
    """All configured servers, in file order."""

    servers: dict[str, ServerConfig] = Field(default_factory=dict)


def load_gateway_config(path: Path) -> GatewayConfig:
    """Load server definitions. A missing or invalid file means no servers."""
    if not path.exists():
        return GatewayConfig()
    try:
        return GatewayConfig.model_validate_json(path.read_text(encoding="utf-8"))
    except (OSError, ValueError, ValidationError):
        logger.exception("Failed to parse %s — no remote tool servers will start", path)
        return GatewayConfig()


def resolve_env(
    env: Mapping[str, str],
    environ: Mapping[str, str] | None = None,
) -> dict[str, str]:
    """Replace ``${VAR}`` placeholders with values from the process environment.

    Unset variables resolve to an empty string.
    """
    source = os.environ if environ is None else environ

    def _sub(match: re.Match[str]) -> str:
        name = match.group(1)
        if name not in source:
            logger.warning("Env placeholder ${%s} is not set", name)
        return source.get(name, "")

    return {key: _PLACEHOLDER_RE.sub(_sub, value) for key, value in env.items()}


def placeholder_values(
    config: GatewayConfig,
    environ: Mapping[str, str] | None = None,
) -> list[str]:
    """Resolved values of every placeholder referenced by any server env.

    These are credentials handed to child processes, so the guardrails
    track them as secrets.
    """
    source = os.environ if environ is None else environ
    values: list[str] = []
    for server in config.servers.values():
        for value in server.env.values():
            for name in _PLACEHOLDER_RE.findall(value):
                resolved = source.get(name, "")
                if resolved:
                    values.append(resolved)
    return values
