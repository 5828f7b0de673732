"""
Role based permission classes.
"""
from rest_framework.permissions import BasePermission, SAFE_METHODS

from care.context import get_context


class IsEmployee(BasePermission):
    """Allow access only to callers holding the Employee role."""
    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        user = getattr(request, "user", None)
        return bool(user and user.is_authenticated and get_context(request).is_employee)


class ReadOnly(BasePermission):
    """Allow read-only access (GET, HEAD, OPTIONS)."""
    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        return request.method in SAFE_METHODS
