"""Remote tool servers and the guardrails in front of them."""

from steward.gateway.gateway import CapabilityServer, RemoteGateway
from steward.gateway.guardrails import Guardrails

__all__ = ["CapabilityServer", "Guardrails", "RemoteGateway"]
