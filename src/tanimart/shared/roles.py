"""User roles supplied by the authentication collaborator."""

from enum import Enum

from tanimart.shared.errors import AuthorizationError


class Role(Enum):
    ADMIN = "admin"
    SELLER = "seller"
    CUSTOMER = "customer"


def require_role(actor_role, *allowed):
    """Return the actor's ``Role`` or raise ``AuthorizationError`` if it is not allowed."""
    try:
        role = Role(actor_role)
    except ValueError:
        raise AuthorizationError(f"Unknown role: {actor_role}") from None

    if role not in allowed:
        raise AuthorizationError(f"Role {role.value} may not perform this action")
    return role
