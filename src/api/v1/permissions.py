"""Role permissions for the marketplace API.

Failures raise ``RoleRequired`` (401) instead of returning ``False``, which
DRF would turn into a 403.
"""
from rest_framework.permissions import BasePermission

from accounts.roles import require_admin, require_vendor


class IsAdminRole(BasePermission):
    """Allow access to active users with the ADMIN role."""

    def has_permission(self, request, view):
        require_admin(request.user)
        return True


class IsVendorRole(BasePermission):
    """Allow access to active users with the VENDOR role."""

    def has_permission(self, request, view):
        require_vendor(request.user)
        return True
