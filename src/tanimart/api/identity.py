"""Caller identity, as asserted by the upstream authentication gateway.

TaniMart does not authenticate anyone itself. The gateway in front of it
forwards the signed-in user's id, display name and role as headers, and
these dependencies turn them into an ``Actor``.
"""

from typing import Annotated

from fastapi import Depends, Header
from pydantic import BaseModel

from tanimart.shared.errors import AuthorizationError
from tanimart.shared.roles import Role


class Actor(BaseModel):
    id: str
    name: str | None = None
    role: str = Role.CUSTOMER.value

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN.value


def current_actor(
    x_user_id: Annotated[str, Header()],
    x_user_name: Annotated[str | None, Header()] = None,
    x_user_role: Annotated[str, Header()] = Role.CUSTOMER.value,
) -> Actor:
    role = x_user_role.strip().lower()
    if role not in {r.value for r in Role}:
        raise AuthorizationError(f"Unknown role: {x_user_role}")
    return Actor(id=x_user_id, name=x_user_name, role=role)


def optional_actor(
    x_user_id: Annotated[str | None, Header()] = None,
    x_user_name: Annotated[str | None, Header()] = None,
    x_user_role: Annotated[str, Header()] = Role.CUSTOMER.value,
) -> Actor | None:
    """Like ``current_actor`` but lets guests through as ``None``."""
    if not x_user_id:
        return None
    return current_actor(x_user_id, x_user_name, x_user_role)


CurrentActor = Annotated[Actor, Depends(current_actor)]
OptionalActor = Annotated[Actor | None, Depends(optional_actor)]
