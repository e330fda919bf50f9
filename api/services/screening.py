"""HR screening service functions (background and reference checks)."""

from typing import Any, Dict, List, Optional
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from api.services.activity import log_activity, ROLE_HR_AGENT
from api.services.interviews import get_feedback
from api.services.serializers import serialize_request, serialize_screening
from api.services.workflow import advance_status, ensure_status, load_request
from core.exceptions import InvalidInputError, NotFoundError, PreconditionFailedError
from core.middleware.authentication import CurrentUser
from core.middleware.authorization import ensure_can_view
from core.utils.formatting import with_suffix
from database.engine import transaction
from database.models.activities import ActivityType
from database.models.hiring import (
    CheckStatus,
    FeedbackDecision,
    HRScreening,
    ScreeningStatus,
)
from database.models.requests import RequestStatus

logger = logging.getLogger(__name__)


def _check_status(value: Optional[CheckStatus | str], field: str) -> Optional[CheckStatus]:
    if value is None:
        return None
    try:
        return CheckStatus(value)
    except ValueError:
        allowed = ", ".join(s.value for s in CheckStatus)
        raise InvalidInputError(f"{field} must be one of: {allowed}", details={field: value})


async def get_screening(session: AsyncSession, request_id: int) -> Optional[HRScreening]:
    result = await session.execute(
        select(HRScreening).where(HRScreening.request_id == request_id)
    )
    return result.scalar_one_or_none()


async def start_hr_screening(
    session: AsyncSession,
    request_id: int,
    actor: CurrentUser,
    notes: Optional[str] = None,
) -> Dict[str, Any]:
    """Open background and reference checks after a PROCEED interview verdict."""
    async with transaction(session):
        request = await load_request(session, request_id)
        ensure_status(request, "start_hr_screening")

        feedback = await get_feedback(session, request.id)
        if feedback is None:
            raise PreconditionFailedError("Interview feedback has not been submitted")
        if feedback.decision != FeedbackDecision.PROCEED:
            raise PreconditionFailedError("Candidate was not approved to proceed after interview")

        await advance_status(
            session, request, "start_hr_screening", RequestStatus.HR_SCREENING, actor
        )

        screening = HRScreening(
            request_id=request.id,
            background_check_status=CheckStatus.PENDING,
            references_check_status=CheckStatus.PENDING,
            references_contacted=[],
            overall_status=ScreeningStatus.IN_PROGRESS,
            notes=notes,
        )
        session.add(screening)
        await session.flush()

        await log_activity(
            session,
            request.id,
            actor,
            ActivityType.SYSTEM,
            with_suffix(
                "HR screening started - background and reference checks initiated", notes
            ),
            author_role=ROLE_HR_AGENT,
            system_generated=True,
            details={"hrScreeningId": screening.id},
        )

    return {"request": serialize_request(request), "hrScreening": serialize_screening(screening)}


async def update_screening_status(
    session: AsyncSession,
    request_id: int,
    actor: CurrentUser,
    background_check_status: Optional[CheckStatus | str] = None,
    background_check_notes: Optional[str] = None,
    references_check_status: Optional[CheckStatus | str] = None,
    references_check_notes: Optional[str] = None,
    references_contacted: Optional[List[str]] = None,
) -> Dict[str, Any]:
    """
    Update the individual checks and recompute the overall status.

    Works in any request status as long as screening was started; the
    request status itself is not changed.
    """
    background = _check_status(background_check_status, "backgroundCheckStatus")
    references = _check_status(references_check_status, "referencesCheckStatus")

    async with transaction(session):
        request = await load_request(session, request_id)

        screening = await get_screening(session, request.id)
        if screening is None:
            raise NotFoundError("HR screening not found for this request")

        if background is not None:
            screening.background_check_status = background
        if background_check_notes is not None:
            screening.background_check_notes = background_check_notes
        if references is not None:
            screening.references_check_status = references
        if references_check_notes is not None:
            screening.references_check_notes = references_check_notes
        if references_contacted is not None:
            screening.references_contacted = list(references_contacted)

        previous = screening.overall_status
        overall = screening.recompute_overall_status()
        if overall == ScreeningStatus.COMPLETED:
            screening.completed_by_id = actor.id
        await session.flush()

        await log_activity(
            session,
            request.id,
            actor,
            ActivityType.SYSTEM,
            "HR screening updated - "
            f"Background: {background.value if background else 'unchanged'}, "
            f"References: {references.value if references else 'unchanged'}",
            author_role=ROLE_HR_AGENT,
            system_generated=True,
            details={"hrScreeningId": screening.id, "overallStatus": overall.value},
        )

    if previous != overall:
        logger.info(
            f"Screening for request {request.id}: {previous.value} -> {overall.value}",
            extra={"hiring_request_id": request.id, "transition": "update_screening_status"},
        )
    return {"hrScreening": serialize_screening(screening)}


async def get_screening_details(
    session: AsyncSession,
    request_id: int,
    actor: CurrentUser,
) -> Dict[str, Any]:
    request = await load_request(session, request_id)
    ensure_can_view(actor, request)
    return {"hrScreening": serialize_screening(await get_screening(session, request.id))}
