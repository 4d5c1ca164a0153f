"""
Role-based permission classes for the POS API.
"""
from rest_framework import permissions


class IsAdminRole(permissions.BasePermission):
    """Only users with the admin role (or superusers)."""
    message = 'Admin access required.'

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and user.is_admin_role)


class IsManagerOrAdmin(permissions.BasePermission):
    """Managers and admins."""
    message = 'Manager or admin access required.'

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and user.is_manager_or_admin)


class IsManagerOrAdminForWrites(permissions.BasePermission):
    """
    Everyone authenticated may read; only managers and admins may write.
    Used for catalog and party masters that cashiers look up at the till.
    """
    message = 'Manager or admin access required.'

    def has_permission(self, request, view):
        user = request.user
        if not (user and user.is_authenticated):
            return False
        if request.method in permissions.SAFE_METHODS:
            return True
        return user.is_manager_or_admin
