from __future__ import annotations

import pytest

from apps.users.permissions import ROLE_PERMISSIONS, Permission, role_has_permission


def test_admin_has_every_permission() -> None:
    others = set().union(*(perms for role, perms in ROLE_PERMISSIONS.items() if role != "admin"))
    assert others <= ROLE_PERMISSIONS["admin"]
    assert role_has_permission("admin", Permission.FINANCIAL_EDIT)


@pytest.mark.parametrize(
    ("role", "permission", "expected"),
    [
        ("manager", Permission.CONTACTS_EDIT, True),
        ("manager", Permission.FINANCIAL_VIEW, False),
        ("staff", Permission.PROPERTY_EDIT, True),
        ("staff", Permission.INTERNAL_VIEW, False),
        ("viewer", Permission.PROPERTY_VIEW, True),
        ("viewer", Permission.PROPERTY_EDIT, False),
        ("unknown", Permission.PROPERTY_VIEW, False),
    ],
)
def test_role_permission_map(role: str, permission: str, expected: bool) -> None:
    assert role_has_permission(role, permission) is expected
