"""
Interview scheduling and feedback endpoints.
"""

from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import require_active_user
from api.schemas.common import success
from api.schemas.hiring import InterviewFeedbackRequest, ScheduleInterviewRequest
from api.services import interviews as interview_service
from core.middleware.authentication import CurrentUser
from core.middleware.authorization import Permission, require_permission
from database.engine import get_db

router = APIRouter(prefix="/requests", tags=["interviews"])


@router.post(
    "/{request_id}/schedule-interview",
    summary="Schedule Interview",
    description="Schedule the interview for the approved candidate. Requires hiring:manage permission.",
    dependencies=[Depends(require_permission(Permission.HIRING_MANAGE))],
)
async def schedule_interview(
    body: ScheduleInterviewRequest,
    request_id: int = Path(..., description="Request ID"),
    current_user: CurrentUser = Depends(require_active_user),
    db: AsyncSession = Depends(get_db),
):
    result = await interview_service.schedule_interview(
        db,
        request_id,
        current_user,
        candidate_id=body.candidate_id,
        interview_date=body.interview_date,
        interview_time=body.interview_time,
        location=body.location,
        meeting_link=body.meeting_link,
        interviewers=body.interviewers,
        notes=body.notes,
    )
    return success(result)


@router.post(
    "/{request_id}/interview-feedback",
    summary="Submit Interview Feedback",
    description="Hiring manager verdict after the interview. Only the requester may submit.",
)
async def submit_interview_feedback(
    body: InterviewFeedbackRequest,
    request_id: int = Path(..., description="Request ID"),
    current_user: CurrentUser = Depends(require_active_user),
    db: AsyncSession = Depends(get_db),
):
    result = await interview_service.submit_interview_feedback(
        db,
        request_id,
        current_user,
        decision=body.decision,
        feedback=body.feedback,
        overall_rating=body.overall_rating,
        technical_skills=body.technical_skills,
        cultural_fit=body.cultural_fit,
        communication=body.communication,
        concerns=body.concerns,
    )
    return success(result)


@router.get(
    "/{request_id}/interview",
    summary="Get Interview Details",
    description="Interview schedule and feedback for a request.",
)
async def get_interview_details(
    request_id: int = Path(..., description="Request ID"),
    current_user: CurrentUser = Depends(require_active_user),
    db: AsyncSession = Depends(get_db),
):
    return success(await interview_service.get_interview_details(db, request_id, current_user))
