"""
Role checks for the hospital backend.

Roles are compared as ``UserRole`` members, never as substrings, and the
admin role is an explicit superuser that satisfies every check.
"""
from typing import Iterable, Union

from ..models.user import UserRole

# Common role groups used by the routers
CLINICAL_ROLES = frozenset({UserRole.DOCTOR, UserRole.STAFF})
ALL_ROLES = frozenset(UserRole)


def parse_role(role: Union[str, UserRole, None]):
    """Return the matching ``UserRole`` or None for anything unrecognised."""
    if isinstance(role, UserRole):
        return role
    try:
        return UserRole(role)
    except ValueError:
        return None


def role_allowed(role: Union[str, UserRole, None], allowed: Iterable[UserRole]) -> bool:
    """Check if a role passes a gate that admits ``allowed``."""
    parsed = parse_role(role)
    if parsed is None:
        return False
    if parsed is UserRole.ADMIN:
        return True
    return parsed in frozenset(allowed)
