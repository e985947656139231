"""
Custom permission classes for role based access control.

Administrators pass every role check; the other roles only reach the
screens of their own desk.
"""
from rest_framework.permissions import BasePermission, SAFE_METHODS

ADMIN = "admin"
RECEPTIONIST = "receptionist"
NURSE = "nurse"
DOCTOR = "doctor"

CLINICAL_STAFF = {RECEPTIONIST, NURSE, DOCTOR}


def has_role(user, *roles: str) -> bool:
    """True for active users holding one of ``roles`` (or admin)."""
    if not (user and user.is_authenticated and user.is_active):
        return False
    role = getattr(user, "role", None)
    return role == ADMIN or role in roles


class RolePermission(BasePermission):
    """Base class: subclasses list the roles allowed besides admin."""
    roles: tuple[str, ...] = ()

    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        return has_role(getattr(request, "user", None), *self.roles)


class IsAdminRole(RolePermission):
    """Only administrators."""
    roles = ()


class IsReceptionist(RolePermission):
    roles = (RECEPTIONIST,)


class IsNurse(RolePermission):
    roles = (NURSE,)


class IsDoctor(RolePermission):
    roles = (DOCTOR,)


class IsClinicalStaff(RolePermission):
    """Any front-desk or clinical role."""
    roles = tuple(sorted(CLINICAL_STAFF))


class PatientRecordsAccess(BasePermission):
    """Clinical staff may read patient records; only reception writes them."""
    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        user = getattr(request, "user", None)
        if request.method in SAFE_METHODS:
            return has_role(user, *CLINICAL_STAFF)
        return has_role(user, RECEPTIONIST)
