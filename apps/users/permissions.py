"""Role based permissions for the back office.

Each role maps to a fixed set of permission codes. API views declare
which code they need for reading and which for writing, and
:func:`HasPermission` turns that pair into a DRF permission class.
"""

from __future__ import annotations

from rest_framework import permissions  # type: ignore


class Permission:
    PROPERTY_VIEW = "property:view"
    PROPERTY_EDIT = "property:edit"
    PROPERTY_DELETE = "property:delete"

    INTERNAL_VIEW = "internal:view"
    INTERNAL_EDIT = "internal:edit"

    FINANCIAL_VIEW = "financial:view"
    FINANCIAL_EDIT = "financial:edit"

    CONTACTS_VIEW = "contacts:view"
    CONTACTS_EDIT = "contacts:edit"

    OWNER_VIEW = "owner:view"
    OWNER_EDIT = "owner:edit"

    VENDOR_VIEW = "vendor:view"
    VENDOR_EDIT = "vendor:edit"


ROLE_PERMISSIONS: dict[str, frozenset[str]] = {
    "admin": frozenset(
        {
            Permission.PROPERTY_VIEW,
            Permission.PROPERTY_EDIT,
            Permission.PROPERTY_DELETE,
            Permission.INTERNAL_VIEW,
            Permission.INTERNAL_EDIT,
            Permission.FINANCIAL_VIEW,
            Permission.FINANCIAL_EDIT,
            Permission.CONTACTS_VIEW,
            Permission.CONTACTS_EDIT,
            Permission.OWNER_VIEW,
            Permission.OWNER_EDIT,
            Permission.VENDOR_VIEW,
            Permission.VENDOR_EDIT,
        }
    ),
    "manager": frozenset(
        {
            Permission.PROPERTY_VIEW,
            Permission.PROPERTY_EDIT,
            Permission.INTERNAL_VIEW,
            Permission.INTERNAL_EDIT,
            Permission.CONTACTS_VIEW,
            Permission.CONTACTS_EDIT,
            Permission.VENDOR_VIEW,
            Permission.VENDOR_EDIT,
        }
    ),
    "staff": frozenset({Permission.PROPERTY_VIEW, Permission.PROPERTY_EDIT}),
    "viewer": frozenset({Permission.PROPERTY_VIEW}),
}


def role_has_permission(role: str, permission: str) -> bool:
    return permission in ROLE_PERMISSIONS.get(role, frozenset())


def HasPermission(read: str, write: str | None = None, delete: str | None = None):
    """Build a permission class requiring ``read`` for safe methods.

    ``write`` is required for POST/PUT/PATCH and defaults to ``read``;
    ``delete`` is required for DELETE and defaults to ``write``.
    """

    write_permission = write or read
    delete_permission = delete or write_permission

    class _HasPermission(permissions.BasePermission):
        message = "You do not have permission to perform this action."

        def has_permission(self, request, view):  # type: ignore
            user = request.user
            if not user or not user.is_authenticated:
                return False
            if request.method in permissions.SAFE_METHODS:
                needed = read
            elif request.method == "DELETE":
                needed = delete_permission
            else:
                needed = write_permission
            return user.has_role_permission(needed)

    _HasPermission.__name__ = f"HasPermission[{read}]"
    return _HasPermission


class IsAdminRole(permissions.BasePermission):
    """Administrators only."""

    def has_permission(self, request, view):  # type: ignore
        user = request.user
        return bool(user and user.is_authenticated and user.is_admin())
