"""Guardrails for outbound tool calls and log output.

Three checks, all pure:

- allowlist: which remote tools may be advertised and called,
- secret scan: refuse calls whose arguments carry a tracked credential,
- log redaction: a deep copy safe to write to logs.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from steward.config import Settings

REDACTED = "[REDACTED]"

SENSITIVE_FIELDS: frozenset[str] = frozenset({
    "access_token",
    "refresh_token",
    "authorization",
    "password",
    "secret",
    "client_secret",
    "api_key",
    "apikey",
    "token",
    "credential",
    "credentials",
    "private_key",
})


@dataclass(frozen=True)
class Guardrails:
    """Allowlist and tracked secrets, loaded once at startup."""

    allowed_tools: frozenset[str] = frozenset()
    secrets: frozenset[str] = frozenset()

    @classmethod
    def create(
        cls,
        allowed_tools: Iterable[str] = (),
        secrets: Iterable[str] = (),
    ) -> Guardrails:
        return cls(
            allowed_tools=frozenset(allowed_tools),
            secrets=frozenset(s for s in secrets if s),
        )

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        extra_secrets: Iterable[str] = (),
    ) -> Guardrails:
        """Build guardrails from settings plus any extra secret values.

        ``extra_secrets`` carries values resolved for remote server
        environments, so a key handed to one server can't be echoed to
        another through call arguments.
        """
        return cls.create(
            allowed_tools=settings.get_allowed_tools(),
            secrets=[*settings.get_credential_values(), *extra_secrets],
        )

    def is_tool_allowed(self, tool_name: str) -> bool:
        """An empty allowlist allows everything."""
        if not self.allowed_tools:
            return True
        return tool_name in self.allowed_tools

    def scan_for_secret_leak(self, args: Any) -> str | None:
        """Return the dotted path of the first value equal to a tracked secret.

        Returns None when the arguments are clean.
        """
        if not self.secrets:
            return None
        return self._scan(args, "")

    def _scan(self, value: Any, path: str) -> str | None:
        if isinstance(value, str):
            return path if value in self.secrets else None
        if isinstance(value, Mapping):
            items: Iterable[tuple[Any, Any]] = value.items()
        elif isinstance(value, (list, tuple)):
            items = enumerate(value)
        else:
            return None
        for key, child in items:
            child_path = f"{path}.{key}" if path else str(key)
            found = self._scan(child, child_path)
            if found is not None:
                return found
        return None

    def redact_for_log(self, obj: Any) -> Any:
        """Return a redacted deep copy of ``obj``. The input is not modified."""
        if isinstance(obj, str):
            return REDACTED if obj in self.secrets else obj
        if isinstance(obj, Mapping):
            result: dict[Any, Any] = {}
            for key, value in obj.items():
                if isinstance(key, str) and key.lower() in SENSITIVE_FIELDS:
                    result[key] = REDACTED
                else:
                    result[key] = self.redact_for_log(value)
            return result
        if isinstance(obj, (list, tuple)):
            return [self.redact_for_log(item) for item in obj]
        return obj
