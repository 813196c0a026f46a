from rest_framework.permissions import BasePermission, SAFE_METHODS

from account.choices import UserRoleChoices


class IsAdminOrReadOnly(BasePermission):
    def has_permission(self, request, view):
        # Allow read-only access (GET) to all users.
        if request.method in SAFE_METHODS:
            return True

        return bool(request.user and request.user.is_authenticated and request.user.is_platform_admin)


class IsSuperAdmin(BasePermission):
    """Allow access to only super admins"""

    def has_permission(self, request, view):
        return bool(
            request.user and request.user.is_authenticated
            and (request.user.is_superuser or request.user.role == UserRoleChoices.SUPERADMIN)
        )


class IsAdminUser(BasePermission):
    """Allow access to only users marked as admin"""

    def has_permission(self, request, view):
        return bool(request.user and request.user.is_authenticated and request.user.is_platform_admin)


def is_admin(user):
    return bool(user and getattr(user, "is_authenticated", False) and user.is_platform_admin)
