"""Activity log service functions."""

from typing import Any, Dict, List, Optional
import logging

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from core.middleware.authentication import CurrentUser
from database.models.activities import RequestActivity, ActivityType

logger = logging.getLogger(__name__)

# Roles shown next to the author name in the activity feed
ROLE_HR_AGENT = "HR Agent"
ROLE_CEO = "CEO"
ROLE_HIRING_MANAGER = "Hiring Manager"


async def log_activity(
    session: AsyncSession,
    request_id: int,
    actor: Optional[CurrentUser],
    activity_type: ActivityType,
    message: str,
    author_role: Optional[str] = None,
    system_generated: bool = False,
    internal: bool = False,
    details: Optional[Dict[str, Any]] = None,
) -> RequestActivity:
    """
    Append an entry to a request's activity log.

    The entry joins the caller's unit of work; it is committed (or rolled
    back) together with the transition it describes.
    """
    activity = RequestActivity(
        request_id=request_id,
        author_id=actor.id if actor else None,
        author_name=actor.full_name if actor else "System",
        author_role=author_role,
        activity_type=activity_type,
        message=message,
        is_system_generated=system_generated,
        is_internal=internal,
        details=details,
    )
    session.add(activity)
    await session.flush()
    return activity


async def list_activities(
    session: AsyncSession,
    request_id: int,
    include_internal: bool = True,
) -> List[RequestActivity]:
    """Activities for a request, oldest first."""
    query = select(RequestActivity).where(RequestActivity.request_id == request_id)
    if not include_internal:
        query = query.where(RequestActivity.is_internal.is_(False))
    query = query.order_by(RequestActivity.created_at, RequestActivity.id)

    result = await session.execute(query)
    return list(result.scalars().all())


async def count_activities(session: AsyncSession, request_id: int) -> int:
    result = await session.execute(
        select(func.count(RequestActivity.id)).where(
            RequestActivity.request_id == request_id
        )
    )
    return result.scalar() or 0
