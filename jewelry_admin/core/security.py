from __future__ import annotations

import hmac
from typing import Callable, Literal

from fastapi import Depends, Header, HTTPException
from pydantic import BaseModel

from jewelry_admin.core.config import get_settings


ActorRole = Literal["admin", "manager", "salesperson", "support"]

ORDERS_READ = "orders:read"
ORDERS_WRITE = "orders:write"
ORDERS_STATUS = "orders:status"

# Admin is not listed: it bypasses permission checks entirely.
ROLE_PERMISSIONS: dict[str, frozenset[str]] = {
    "manager": frozenset({ORDERS_READ, ORDERS_WRITE, ORDERS_STATUS}),
    "salesperson": frozenset({ORDERS_READ, ORDERS_WRITE}),
    "support": frozenset({ORDERS_READ, ORDERS_STATUS}),
}


class Actor(BaseModel):
    role: ActorRole
    id: str

    @property
    def permissions(self) -> frozenset[str]:
        return ROLE_PERMISSIONS.get(self.role, frozenset())


ROLES: tuple[ActorRole, ...] = ("admin", "manager", "salesperson", "support")


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(status_code=401, detail=detail, headers={"WWW-Authenticate": "Bearer"})


def _presented_key(authorization: str | None, x_api_key: str | None) -> str:
    """Return the API key sent with the request.

    ``Authorization: Bearer <key>`` wins over ``X-API-Key``; any other
    authorization scheme is rejected rather than silently ignored.
    """
    if authorization:
        scheme, _, credentials = authorization.partition(" ")
        if scheme.lower() == "bearer" and credentials.strip():
            return credentials.strip()
        raise _unauthorized("invalid authorization header")
    key = (x_api_key or "").strip()
    if not key:
        raise _unauthorized("missing api key")
    return key


def _match_actor(presented: str) -> Actor | None:
    settings = get_settings()
    for role in ROLES:
        configured = getattr(settings, f"{role}_api_key")
        if hmac.compare_digest(presented.encode("utf-8"), configured.encode("utf-8")):
            return Actor(role=role, id=getattr(settings, f"{role}_actor_id"))
    return None


def get_actor(
    authorization: str | None = Header(default=None),
    x_api_key: str | None = Header(default=None),
) -> Actor:
    settings = get_settings()
    if not settings.auth_enabled:
        return Actor(role="admin", id=settings.admin_actor_id)

    actor = _match_actor(_presented_key(authorization, x_api_key))
    if actor is None:
        raise _unauthorized("invalid api key")
    return actor


def require_permission(actor: Actor, *permissions: str) -> None:
    """Allow the actor if it is an admin or holds any of ``permissions``."""
    if actor.role == "admin":
        return
    if not any(permission in actor.permissions for permission in permissions):
        raise HTTPException(status_code=403, detail="insufficient permissions")


def permission_required(*permissions: str) -> Callable[..., Actor]:
    def dependency(actor: Actor = Depends(get_actor)) -> Actor:
        require_permission(actor, *permissions)
        return actor

    return dependency
