"""Read views over a single help-desk request."""

from typing import Any, Dict, List
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from api.services.activity import list_activities
from api.services.serializers import (
    serialize_activity,
    serialize_approval,
    serialize_request,
)
from api.services.workflow import load_request
from core.middleware.authentication import CurrentUser
from core.middleware.authorization import ensure_can_view, is_staff
from database.models.approvals import RequestApproval

logger = logging.getLogger(__name__)


async def get_request(
    session: AsyncSession,
    request_id: int,
    actor: CurrentUser,
) -> Dict[str, Any]:
    """Request details with its approval history."""
    request = await load_request(session, request_id)
    ensure_can_view(actor, request)

    result = await session.execute(
        select(RequestApproval)
        .where(RequestApproval.request_id == request.id)
        .order_by(RequestApproval.requested_at, RequestApproval.id)
    )
    return {
        "request": serialize_request(request),
        "approvals": [serialize_approval(a) for a in result.scalars().all()],
    }


async def list_request_activities(
    session: AsyncSession,
    request_id: int,
    actor: CurrentUser,
) -> List[Dict[str, Any]]:
    """Activity feed, oldest first. Internal notes are only shown to staff."""
    request = await load_request(session, request_id)
    ensure_can_view(actor, request)

    activities = await list_activities(session, request.id, include_internal=is_staff(actor))
    return [serialize_activity(a) for a in activities]
