"""
Role based access control.

The whole role → capability matrix lives in :data:`ROLE_CAPABILITIES`;
views declare the capability they need with :func:`capability_required`
and services ask :func:`has_capability`.  Nothing else should compare
role names.
"""
from __future__ import annotations

from rest_framework.permissions import BasePermission


class Capability:
    SHIFT_OWN = 'shift:own'
    SHIFT_VIEW_ALL = 'shift:view_all'
    SHIFT_ADMINISTER = 'shift:administer'
    ARCHIVE_SEARCH = 'archive:search'
    ARCHIVE_ADMINISTER = 'archive:administer'
    ATTENDANCE_OWN = 'attendance:own'
    ATTENDANCE_VIEW_ALL = 'attendance:view_all'
    ATTENDANCE_APPROVE = 'attendance:approve'
    RECORDS_READ = 'records:read'
    RECORDS_READ_OWN = 'records:read_own'
    RECORDS_CREATE = 'records:create'
    RECORDS_DELETE = 'records:delete'
    PLATFORM_ADMINISTER = 'platform:administer'


_STAFF = frozenset({
    Capability.SHIFT_OWN,
    Capability.ARCHIVE_SEARCH,
    Capability.ATTENDANCE_OWN,
    Capability.RECORDS_READ,
    Capability.RECORDS_CREATE,
})

_SUPERVISOR = _STAFF | {
    Capability.SHIFT_VIEW_ALL,
    Capability.SHIFT_ADMINISTER,
    Capability.ARCHIVE_ADMINISTER,
    Capability.ATTENDANCE_VIEW_ALL,
    Capability.ATTENDANCE_APPROVE,
    Capability.RECORDS_DELETE,
}

ROLE_CAPABILITIES: dict[str, frozenset[str]] = {
    'super_admin': frozenset({Capability.PLATFORM_ADMINISTER}) | _SUPERVISOR,
    'tenant_admin': frozenset(_SUPERVISOR),
    'director': frozenset(_SUPERVISOR),
    'physician': _STAFF | {Capability.RECORDS_DELETE},
    'nurse': _STAFF,
    'pharmacist': _STAFF | {Capability.RECORDS_DELETE},
    'lab_technician': _STAFF,
    # receptionists create records but may not delete them
    'receptionist': _STAFF,
    'billing_staff': frozenset({
        Capability.SHIFT_OWN,
        Capability.ATTENDANCE_OWN,
        Capability.RECORDS_READ,
        Capability.RECORDS_CREATE,
    }),
    'insurance_manager': frozenset({
        Capability.SHIFT_OWN,
        Capability.ARCHIVE_SEARCH,
        Capability.ATTENDANCE_OWN,
        Capability.RECORDS_READ,
    }),
    'patient': frozenset({Capability.RECORDS_READ_OWN}),
}

# Roles that bypass tenant scoping entirely (platform administration).
CROSS_TENANT_ROLES = frozenset({'super_admin'})


def capabilities_for(role: str | None) -> frozenset[str]:
    return ROLE_CAPABILITIES.get(role or '', frozenset())


def has_capability(role: str | None, capability: str) -> bool:
    return capability in capabilities_for(role)


def capability_required(*capabilities: str) -> type[BasePermission]:
    """Build a permission class admitting roles holding every capability given."""
    required = frozenset(capabilities)

    class HasCapability(BasePermission):
        message = 'You do not have permission to perform this action.'

        def has_permission(self, request, view) -> bool:  # type: ignore[override]
            user = getattr(request, 'user', None)
            if not (user and user.is_authenticated):
                return False
            return required <= capabilities_for(getattr(user, 'role', None))

    HasCapability.__name__ = 'HasCapability[' + ','.join(sorted(required)) + ']'
    return HasCapability
