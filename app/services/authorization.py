"""Owner-or-role authorization policy"""

from typing import Iterable, Optional, Union
from uuid import UUID

from app.exceptions import ForbiddenError
from app.models.user import UserRole


# Roles with authority over every reservation
AUTHORIZERS = (UserRole.ADMIN,)

# Front-of-house and kitchen roles
STAFF_ROLES = (UserRole.ADMIN, UserRole.STAFF)

# Roles allowed to settle payments
PAYMENT_OPERATORS = STAFF_ROLES


def is_authorized(
    requester_id: Union[UUID, str, None],
    requester_role: Union[UserRole, str, None],
    resource_owner_id: Union[UUID, str, None] = None,
    required_roles: Iterable[UserRole] = AUTHORIZERS,
) -> bool:
    roles = {UserRole(role) for role in required_roles}
    if requester_role is not None and UserRole(requester_role) in roles:
        return True
    if resource_owner_id is None or requester_id is None:
        return False
    return str(requester_id) == str(resource_owner_id)


def authorize(
    requester_id: Union[UUID, str, None],
    requester_role: Union[UserRole, str, None],
    resource_owner_id: Union[UUID, str, None] = None,
    required_roles: Iterable[UserRole] = AUTHORIZERS,
    detail: Optional[str] = None,
) -> None:
    """Raise ForbiddenError unless the requester holds a required role or owns the resource"""
    if not is_authorized(requester_id, requester_role, resource_owner_id, required_roles):
        raise ForbiddenError(detail=detail or "Insufficient permissions")
