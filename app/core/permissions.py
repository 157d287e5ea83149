"""Role-based access control and permissions."""

from dataclasses import dataclass
from enum import Enum
from uuid import UUID


class UserRole(str, Enum):
    """Principal roles in the system."""

    RESIDENT = "resident"
    ADMIN = "admin"


class Permission(str, Enum):
    """System permissions."""

    # Room permissions
    VIEW_ROOMS = "view_rooms"
    MANAGE_ROOMS = "manage_rooms"

    # Assignment permissions
    REQUEST_ASSIGNMENT = "request_assignment"
    VIEW_OWN_ASSIGNMENTS = "view_own_assignments"
    VIEW_ALL_ASSIGNMENTS = "view_all_assignments"
    REVIEW_ASSIGNMENT = "review_assignment"  # approve / reject
    ACTIVATE_ASSIGNMENT = "activate_assignment"
    CANCEL_ASSIGNMENT = "cancel_assignment"
    COMPLETE_ASSIGNMENT = "complete_assignment"
    CHECKOUT_ASSIGNMENT = "checkout_assignment"
    DELETE_ASSIGNMENT = "delete_assignment"

    # Payment permissions
    SUBMIT_PAYMENT = "submit_payment"
    VIEW_ALL_PAYMENTS = "view_all_payments"
    VERIFY_PAYMENT = "verify_payment"

    # Admin permissions
    VIEW_AUDIT_LOGS = "view_audit_logs"
    VIEW_REPORTS = "view_reports"


ROLE_PERMISSIONS: dict[UserRole, set[Permission]] = {
    UserRole.RESIDENT: {
        Permission.VIEW_ROOMS,
        Permission.REQUEST_ASSIGNMENT,
        Permission.VIEW_OWN_ASSIGNMENTS,
        Permission.CANCEL_ASSIGNMENT,
        Permission.CHECKOUT_ASSIGNMENT,
        Permission.SUBMIT_PAYMENT,
    },
    UserRole.ADMIN: {
        # Admins have all permissions
        perm for perm in Permission
    },
}


def has_permission(role: UserRole, permission: Permission) -> bool:
    """Check if a role has a specific permission."""
    return permission in ROLE_PERMISSIONS.get(role, set())


@dataclass(frozen=True)
class Principal:
    """Authenticated caller as asserted by the session token."""

    id: UUID
    role: UserRole

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def can(self, permission: Permission) -> bool:
        return has_permission(self.role, permission)
