"""Role-gating FastAPI dependencies.

Usage::

    from storefront.auth.roles import is_admin

    @router.get("/admin-all-users", dependencies=[Depends(is_admin("admin"))])
    async def list_users(...): ...

    # Or take the principal from the gate:
    @router.delete("/delete-user/{user_id}")
    async def delete_user(..., principal: Principal = Depends(is_admin("admin"))):
        ...

The gate runs after get_current_user, so a request with no credentials
still gets the guard's 401; the 403 is reserved for a known principal
whose role is not allowed.
"""

import enum
from typing import Iterable, Optional, Union

import structlog
from fastapi import Depends

from storefront.auth.dependencies import Principal, get_current_user
from storefront.auth.exceptions import Forbidden

logger = structlog.get_logger()


class Role(str, enum.Enum):
    USER = "user"
    ADMIN = "admin"
    SELLER = "Seller"


def _role_value(role: Union[Role, str]) -> str:
    return role.value if isinstance(role, Role) else role


class RoleGate:
    """Allow a request only if the principal's role is in a fixed set."""

    def __init__(self, roles: Iterable[Union[Role, str]]):
        self.allowed: frozenset[str] = frozenset(_role_value(r) for r in roles)

    def check(self, principal: Optional[Principal]) -> Principal:
        role = principal.role if principal is not None else None
        if principal is None or role not in self.allowed:
            logger.warning(
                "auth.role_denied",
                role=role if principal is not None else "No Role",
                allowed=sorted(self.allowed),
            )
            raise Forbidden(f"{role or 'User'} cannot access this resource!")
        return principal

    async def __call__(
        self, principal: Principal = Depends(get_current_user)
    ) -> Principal:
        return self.check(principal)

    def __repr__(self) -> str:
        return f"RoleGate({sorted(self.allowed)!r})"


def is_admin(*roles: Union[Role, str]) -> RoleGate:
    """Build a gate admitting only the given roles."""
    return RoleGate(roles)
