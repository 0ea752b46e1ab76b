"""
Role based permission classes.
"""
from rest_framework.permissions import BasePermission, SAFE_METHODS

STAFF_ROLES = {"admin", "doctor", "nurse", "technician", "pharmacist", "receptionist"}
CLINICAL_ROLES = {"admin", "doctor", "nurse"}


def _role(request):
    user = getattr(request, "user", None)
    if not (user and user.is_authenticated):
        return None
    return getattr(user, "role", None)


class IsAdminRole(BasePermission):
    """Allow access only to administrators."""
    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        return _role(request) == "admin"


class IsStaff(BasePermission):
    """Any hospital staff member (everyone except patients)."""
    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        return _role(request) in STAFF_ROLES


class IsClinicalStaff(BasePermission):
    """admin, doctor or nurse."""
    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        return _role(request) in CLINICAL_ROLES


class ReadOnly(BasePermission):
    """Allow read-only access (GET, HEAD, OPTIONS)."""
    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        return request.method in SAFE_METHODS


def HasRole(*roles: str):
    """Build a permission class admitting only the given roles."""
    allowed = set(roles)

    class _HasRole(BasePermission):
        def has_permission(self, request, view) -> bool:  # type: ignore[override]
            return _role(request) in allowed

    _HasRole.__name__ = f"HasRole({', '.join(sorted(allowed))})"
    return _HasRole
