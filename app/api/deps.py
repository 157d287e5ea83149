"""API dependencies for authentication and common operations."""

from typing import Annotated
from uuid import UUID

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.core.exceptions import AuthenticationError, AuthorizationError
from app.core.permissions import Permission, Principal, UserRole
from app.core.security import verify_token
from app.database import get_db

__all__ = [
    "get_db",
    "get_current_principal",
    "CurrentPrincipal",
    "require_permission",
]

# Security scheme
security = HTTPBearer(auto_error=False)


async def get_current_principal(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> Principal:
    """Get the calling principal from the bearer token."""
    if not credentials:
        raise AuthenticationError("Not authenticated")

    payload = verify_token(credentials.credentials, token_type="access")
    try:
        principal_id = UUID(payload["sub"])
        role = UserRole(payload["role"])
    except (KeyError, ValueError, TypeError):
        raise AuthenticationError("Invalid token payload")

    return Principal(id=principal_id, role=role)


class PermissionChecker:
    """Check that the caller's role grants a permission."""

    def __init__(self, permission: Permission):
        self.permission = permission

    async def __call__(
        self,
        principal: Annotated[Principal, Depends(get_current_principal)],
    ) -> Principal:
        if not principal.can(self.permission):
            raise AuthorizationError(
                f"Role '{principal.role.value}' lacks permission '{self.permission.value}'"
            )
        return principal


def require_permission(permission: Permission) -> PermissionChecker:
    return PermissionChecker(permission)


# Convenience alias
CurrentPrincipal = Annotated[Principal, Depends(get_current_principal)]
