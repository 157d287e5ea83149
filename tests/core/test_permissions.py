"""
Role permission tests
"""
from uuid import uuid4

import pytest

from app.core.permissions import Permission, Principal, UserRole, has_permission

OVERSIGHT = [
    Permission.VIEW_ALL_ASSIGNMENTS,
    Permission.VIEW_ALL_PAYMENTS,
    Permission.VIEW_AUDIT_LOGS,
    Permission.VIEW_REPORTS,
]


class TestRolePermissions:

    @pytest.mark.parametrize("permission", OVERSIGHT)
    def test_oversight_is_admin_only(self, permission):
        assert has_permission(UserRole.ADMIN, permission)
        assert not has_permission(UserRole.RESIDENT, permission)

    def test_admin_has_everything(self):
        admin = Principal(id=uuid4(), role=UserRole.ADMIN)

        assert admin.is_admin
        assert all(admin.can(permission) for permission in Permission)

    def test_resident_self_service(self):
        resident = Principal(id=uuid4(), role=UserRole.RESIDENT)

        assert resident.can(Permission.REQUEST_ASSIGNMENT)
        assert resident.can(Permission.SUBMIT_PAYMENT)
        assert resident.can(Permission.CHECKOUT_ASSIGNMENT)
        assert not resident.can(Permission.VERIFY_PAYMENT)
        assert not resident.can(Permission.MANAGE_ROOMS)
