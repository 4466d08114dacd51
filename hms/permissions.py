"""
Role based permission classes.

Roles mostly drive menu visibility in the client; the API only gates
operations that change who can do what.
"""
from rest_framework.permissions import BasePermission

from .models import User


class IsAdminRole(BasePermission):
    """Allow access only to users with the ``admin`` role."""
    message = 'administrator role required'

    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        user = getattr(request, "user", None)
        return bool(user and user.is_authenticated and getattr(user, "role", None) == User.ROLE_ADMIN)
