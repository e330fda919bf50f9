"""
Authorization rules for the hiring workflow.

Two kinds of checks are applied:
1. Static role permissions (agents and admins run the workflow, the CEO
   signs off requisitions), enforced as route dependencies.
2. The contextual hiring-manager rule: whoever raised the request holds the
   decision rights at the manager gates. This is data driven and is checked
   inside the workflow services against the loaded request.
"""

import logging
from typing import Callable, Set
from enum import Enum

from fastapi import Depends

from core.exceptions import ForbiddenError
from core.middleware.authentication import CurrentUser, authenticate_request
from database.models.requests import Request as HelpdeskRequest, is_in_hiring_workflow
from database.models.users import RoleName

logger = logging.getLogger(__name__)


class Permission(str, Enum):
    """System-wide permissions."""

    # Hiring workflow
    HIRING_VIEW = "hiring:view"
    HIRING_MANAGE = "hiring:manage"
    HIRING_CEO_DECIDE = "hiring:ceo_decide"

    # Candidate documents
    RESUME_MANAGE = "resume:manage"
    LOA_MANAGE = "loa:manage"

    # Screening
    SCREENING_MANAGE = "screening:manage"

    # Requests
    REQUEST_VIEW_ALL = "request:view_all"


# Role to permission mapping
ROLE_PERMISSIONS: dict[RoleName, Set[Permission]] = {
    RoleName.ADMIN: set(Permission),
    RoleName.AGENT: {
        Permission.HIRING_VIEW,
        Permission.HIRING_MANAGE,
        Permission.RESUME_MANAGE,
        Permission.LOA_MANAGE,
        Permission.SCREENING_MANAGE,
        Permission.REQUEST_VIEW_ALL,
    },
    RoleName.CEO: {
        Permission.HIRING_VIEW,
        Permission.HIRING_CEO_DECIDE,
    },
    RoleName.USER: set(),
}

STAFF_ROLES = (RoleName.ADMIN, RoleName.AGENT)


class AuthorizationError(ForbiddenError):
    """Raised when user doesn't have required permissions."""


class InsufficientPermissions(AuthorizationError):
    """Raised when user lacks required permission."""


def get_user_permissions(user: CurrentUser) -> Set[Permission]:
    """
    Get all permissions granted by the user's roles.

    Args:
        user: Acting user

    Returns:
        Set of permissions
    """
    permissions: Set[Permission] = set()
    for role in user.roles:
        permissions |= ROLE_PERMISSIONS.get(role, set())
    return permissions


def check_permission(user: CurrentUser, required_permission: Permission) -> None:
    """
    Check that the user holds ``required_permission``.

    Raises:
        InsufficientPermissions: If none of the user's roles grants it
    """
    if required_permission in get_user_permissions(user):
        return

    logger.warning(
        f"User {user.id} with roles {sorted(r.value for r in user.roles)} lacks "
        f"permission {required_permission.value}"
    )
    raise InsufficientPermissions(
        f"User does not have permission: {required_permission.value}"
    )


def is_staff(user: CurrentUser) -> bool:
    """Admins and agents can see and operate every request."""
    return user.has_role(*STAFF_ROLES)


def is_hiring_manager(user: CurrentUser, request: HelpdeskRequest) -> bool:
    """The hiring manager of a request is the user who raised it."""
    return user.id == request.requester_id


def ensure_hiring_manager(
    user: CurrentUser, request: HelpdeskRequest, action: str
) -> None:
    """
    Require the acting user to be the request's hiring manager.

    Raises:
        ForbiddenError: If the user did not raise the request
    """
    if not is_hiring_manager(user, request):
        logger.warning(
            f"User {user.id} attempted to {action} on request {request.id} "
            f"owned by {request.requester_id}"
        )
        raise ForbiddenError(f"Only the hiring manager can {action}")


def can_view_request(user: CurrentUser, request: HelpdeskRequest) -> bool:
    """
    Visibility rule for request details and hiring views.

    Requesters see their own requests. ``REQUEST_VIEW_ALL`` opens every
    request; ``HIRING_VIEW`` only opens requests in the hiring workflow.
    """
    if request.requester_id == user.id:
        return True

    permissions = get_user_permissions(user)
    if Permission.REQUEST_VIEW_ALL in permissions:
        return True
    return Permission.HIRING_VIEW in permissions and is_in_hiring_workflow(request.status)


def ensure_can_view(user: CurrentUser, request: HelpdeskRequest) -> None:
    if not can_view_request(user, request):
        raise ForbiddenError("You do not have access to this request")


def require_permission(*required_permissions: Permission) -> Callable:
    """
    Dependency to require specific permissions.

    Args:
        required_permissions: Required permissions (all must be held)

    Returns:
        FastAPI dependency resolving to the acting user
    """
    async def dependency(
        user: CurrentUser = Depends(authenticate_request),
    ) -> CurrentUser:
        for permission in required_permissions:
            check_permission(user, permission)
        return user

    return dependency
