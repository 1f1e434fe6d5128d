"""Wiring of the field-ops backend clients.

Builds one `ResourceClient` per known resource (paths from `AppSettings`)
plus the `AuthClient`, all sharing a transport, a token provider and a
logger. Entry points (CLI, scripts, tests) ask for a `FieldOpsClients`
instead of assembling collaborators themselves.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from fieldops.adapters.http_client import HttpxTransport
from fieldops.adapters.token_store import StaticTokenProvider
from fieldops.core.config import AppSettings
from fieldops.core.domain.models import Entity, Notification, Outlet, PlanVisit, User, Visit
from fieldops.core.interfaces.transport import Logger, TokenProvider, Transport
from fieldops.core.logger import AppLogger
from fieldops.core.services.auth_client import AuthClient
from fieldops.core.services.resource_client import ResourceClient

# name -> (entity model, settings attribute holding the path)
RESOURCES: dict[str, tuple[type[Entity], str]] = {
    "outlet": (Outlet, "outlets_path"),
    "user": (User, "users_path"),
    "visit": (Visit, "visits_path"),
    "planvisit": (PlanVisit, "plan_visits_path"),
    "notification": (Notification, "notifications_path"),
}


@dataclass
class FieldOpsClients:
    """Every client of one session, bound to the same collaborators."""

    auth: AuthClient
    resources: dict[str, ResourceClient[Any]] = field(default_factory=dict)

    def resource(self, name: str) -> ResourceClient[Any]:
        key = name.strip().lower().replace("-", "").replace("_", "")
        if key.endswith("s") and key[:-1] in self.resources:
            key = key[:-1]
        try:
            return self.resources[key]
        except KeyError:
            known = ", ".join(sorted(self.resources))
            raise KeyError(f"Unknown resource '{name}'. Known resources: {known}") from None

    @property
    def outlets(self) -> ResourceClient[Outlet]:
        return self.resources["outlet"]

    @property
    def users(self) -> ResourceClient[User]:
        return self.resources["user"]

    @property
    def visits(self) -> ResourceClient[Visit]:
        return self.resources["visit"]

    @property
    def plan_visits(self) -> ResourceClient[PlanVisit]:
        return self.resources["planvisit"]

    @property
    def notifications(self) -> ResourceClient[Notification]:
        return self.resources["notification"]


def build_clients(
    settings: AppSettings | None = None,
    *,
    transport: Transport | None = None,
    token_provider: TokenProvider | None = None,
    logger: Logger | None = None,
) -> FieldOpsClients:
    settings = settings or AppSettings()
    logger = logger or AppLogger()
    transport = transport or HttpxTransport(settings, logger=logger)
    token_provider = token_provider or StaticTokenProvider(settings.api_token)

    resources: dict[str, ResourceClient[Any]] = {}
    for name, (model, path_attr) in RESOURCES.items():
        resources[name] = ResourceClient(
            model,
            name=name,
            path=getattr(settings, path_attr),
            transport=transport,
            token_provider=token_provider,
            logger=logger,
            settings=settings,
        )

    auth = AuthClient(
        transport=transport,
        logger=logger,
        token_provider=token_provider,
        settings=settings,
    )
    return FieldOpsClients(auth=auth, resources=resources)
