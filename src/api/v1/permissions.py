"""Role-based DRF permissions for the CRM API."""
from rest_framework.permissions import SAFE_METHODS, BasePermission

MANAGEMENT_ROLES = ("ADMIN", "MANAGER")


def _is_management(user):
    return bool(
        user
        and user.is_authenticated
        and (user.is_superuser or getattr(user, "role", None) in MANAGEMENT_ROLES)
    )


class IsAdmin(BasePermission):
    """Allow access only to users with the ADMIN role (or superusers)."""

    def has_permission(self, request, view):
        user = request.user
        return bool(
            user
            and user.is_authenticated
            and (user.is_superuser or getattr(user, "role", None) == "ADMIN")
        )


class IsManagerOrAdmin(BasePermission):
    """Allow access to users with the ADMIN or MANAGER role."""

    def has_permission(self, request, view):
        return _is_management(request.user)


class ReadOnlyOrManager(BasePermission):
    """Any authenticated user may read; only managers and admins may write."""

    def has_permission(self, request, view):
        if not (request.user and request.user.is_authenticated):
            return False
        if request.method in SAFE_METHODS:
            return True
        return _is_management(request.user)


class ReadOnlyOrAdmin(BasePermission):
    """Any authenticated user may read; only admins may write."""

    def has_permission(self, request, view):
        if not (request.user and request.user.is_authenticated):
            return False
        if request.method in SAFE_METHODS:
            return True
        return IsAdmin().has_permission(request, view)
