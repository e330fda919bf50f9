"""
Hiring workflow state machine primitives.

Every transition follows the same shape inside one transaction:

1. load the request and evaluate all guards (status, child records,
   hiring-manager identity) without writing anything;
2. move the status with a compare-and-swap UPDATE, so that of two racing
   callers only one sees its source status still in place;
3. write the child records and append one activity entry.

``TRANSITIONS`` is the single source of truth for which statuses each
operation accepts; both the guard and the compare-and-swap read it.
"""

from typing import Any, Optional
import logging

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import InvalidStateError, NotFoundError
from core.middleware.authentication import CurrentUser
from core.utils.datetime import now
from database.models.requests import Request, RequestStatus

logger = logging.getLogger(__name__)

S = RequestStatus

# Operation -> statuses it may start from
TRANSITIONS: dict[str, frozenset[RequestStatus]] = {
    "route_to_ceo": frozenset({S.SUBMITTED, S.IN_REVIEW}),
    "ceo_decision": frozenset({S.PENDING_CEO_APPROVAL}),
    "mark_job_posted": frozenset({S.CEO_APPROVED}),
    "upload_resume": frozenset({S.JOB_POSTED}),
    "delete_resume": frozenset({S.JOB_POSTED}),
    "route_to_manager": frozenset({S.JOB_POSTED}),
    "manager_decision": frozenset({S.PENDING_MANAGER_REVIEW}),
    "schedule_interview": frozenset({S.MANAGER_APPROVED}),
    "submit_interview_feedback": frozenset({S.INTERVIEW_SCHEDULED}),
    "start_hr_screening": frozenset({S.INTERVIEW_FEEDBACK_PENDING}),
    "upload_loa": frozenset({S.HR_SCREENING, S.LOA_PENDING_APPROVAL}),
    "route_loa_for_approval": frozenset({S.HR_SCREENING, S.LOA_PENDING_APPROVAL}),
    "manager_approve_loa": frozenset({S.LOA_PENDING_APPROVAL}),
    "mark_loa_issued": frozenset({S.LOA_APPROVED}),
    "upload_signed_loa": frozenset({S.LOA_ISSUED}),
    "mark_loa_accepted": frozenset({S.LOA_ISSUED}),
}


def _describe(statuses: frozenset[RequestStatus]) -> str:
    return " or ".join(sorted(s.value for s in statuses))


async def load_request(session: AsyncSession, request_id: int) -> Request:
    """
    Fetch a live (not soft-deleted) request.

    Raises:
        NotFoundError: If no such request exists
    """
    result = await session.execute(
        select(Request).where(Request.id == request_id, Request.deleted_at.is_(None))
    )
    request = result.scalar_one_or_none()
    if request is None:
        raise NotFoundError("Request not found")
    return request


def ensure_status(request: Request, operation: str) -> None:
    """
    Status guard for ``operation``.

    Raises:
        InvalidStateError: If the request is not in one of the source statuses
    """
    sources = TRANSITIONS[operation]
    if request.status not in sources:
        raise InvalidStateError(
            f"Request must be in {_describe(sources)} status "
            f"(current status: {request.status.value})",
            details={"operation": operation, "currentStatus": request.status.value},
        )


async def advance_status(
    session: AsyncSession,
    request: Request,
    operation: str,
    new_status: Optional[RequestStatus] = None,
    actor: Optional[CurrentUser] = None,
    **values: Any,
) -> Request:
    """
    Compare-and-swap the request status.

    The UPDATE only matches while the row is still in one of the operation's
    source statuses. ``new_status=None`` keeps the current status but still
    claims the row, which orders status-preserving operations (document
    uploads) against concurrent transitions.

    Raises:
        InvalidStateError: If another caller moved the request first
    """
    sources = TRANSITIONS[operation]
    previous = request.status
    target = new_status or previous

    result = await session.execute(
        update(Request)
        .where(Request.id == request.id, Request.status.in_(sources))
        .values(status=target, updated_at=now(), **values)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        logger.warning(
            f"Lost status race on request {request.id} during {operation}",
            extra={"hiring_request_id": request.id, "transition": operation},
        )
        raise InvalidStateError(
            "Request status changed while processing; reload the request and try again",
            details={"operation": operation},
        )

    await session.refresh(request)

    logger.info(
        f"Request {request.id}: {operation} {previous.value} -> {target.value}",
        extra={
            "hiring_request_id": request.id,
            "transition": operation,
            "user_id": actor.id if actor else None,
        },
    )
    return request
