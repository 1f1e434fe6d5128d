"""API services: envelope, resource clients, auth client and their wiring."""

from fieldops.core.services.auth_client import AuthClient
from fieldops.core.services.envelope import ClientState, OperationEnvelope
from fieldops.core.services.resource_client import ResourceClient, build_query

__all__ = [
    "AuthClient",
    "ClientState",
    "OperationEnvelope",
    "ResourceClient",
    "build_query",
]
