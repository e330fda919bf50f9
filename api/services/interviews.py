"""Interview scheduling and feedback service functions."""

from datetime import date
from typing import Any, Dict, List, Optional
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from api.services.activity import log_activity, ROLE_HIRING_MANAGER, ROLE_HR_AGENT
from api.services.serializers import (
    serialize_interview_feedback,
    serialize_interview_schedule,
    serialize_request,
)
from api.services.workflow import advance_status, ensure_status, load_request
from core.exceptions import InvalidInputError, InvalidStateError, NotFoundError
from core.middleware.authentication import CurrentUser
from core.middleware.authorization import ensure_can_view, ensure_hiring_manager
from database.engine import transaction
from database.models.activities import ActivityType
from database.models.hiring import (
    CandidateResume,
    FeedbackDecision,
    InterviewFeedback,
    InterviewSchedule,
)
from database.models.requests import RequestStatus

logger = logging.getLogger(__name__)


async def get_schedule(session: AsyncSession, request_id: int) -> Optional[InterviewSchedule]:
    result = await session.execute(
        select(InterviewSchedule).where(InterviewSchedule.request_id == request_id)
    )
    return result.scalar_one_or_none()


async def get_feedback(session: AsyncSession, request_id: int) -> Optional[InterviewFeedback]:
    result = await session.execute(
        select(InterviewFeedback).where(InterviewFeedback.request_id == request_id)
    )
    return result.scalar_one_or_none()


async def schedule_interview(
    session: AsyncSession,
    request_id: int,
    actor: CurrentUser,
    candidate_id: int,
    interview_date: date,
    interview_time: str,
    location: Optional[str] = None,
    meeting_link: Optional[str] = None,
    interviewers: Optional[List[str]] = None,
    notes: Optional[str] = None,
) -> Dict[str, Any]:
    """Schedule the interview for a candidate the hiring manager approved."""
    async with transaction(session):
        request = await load_request(session, request_id)
        ensure_status(request, "schedule_interview")

        resume = (
            await session.execute(
                select(CandidateResume).where(
                    CandidateResume.id == candidate_id,
                    CandidateResume.request_id == request.id,
                )
            )
        ).scalar_one_or_none()
        if resume is None:
            raise NotFoundError("Candidate resume not found")

        if await get_schedule(session, request.id):
            raise InvalidStateError("An interview is already scheduled for this request")

        await advance_status(
            session, request, "schedule_interview", RequestStatus.INTERVIEW_SCHEDULED, actor
        )

        schedule = InterviewSchedule(
            request_id=request.id,
            candidate_resume_id=resume.id,
            candidate_name=resume.candidate_name,
            interview_date=interview_date,
            interview_time=interview_time,
            location=location,
            meeting_link=meeting_link,
            interviewers=list(interviewers or []),
            notes=notes,
            scheduled_by_id=actor.id,
        )
        session.add(schedule)
        await session.flush()

        await log_activity(
            session,
            request.id,
            actor,
            ActivityType.SYSTEM,
            f"Interview scheduled with {resume.candidate_name or 'candidate'} "
            f"on {interview_date.isoformat()} at {interview_time}",
            author_role=ROLE_HR_AGENT,
            system_generated=True,
            details={"interviewScheduleId": schedule.id, "candidateResumeId": resume.id},
        )

    return {
        "request": serialize_request(request),
        "interviewSchedule": serialize_interview_schedule(schedule),
    }


async def submit_interview_feedback(
    session: AsyncSession,
    request_id: int,
    actor: CurrentUser,
    decision: str,
    feedback: str,
    overall_rating: Optional[int] = None,
    technical_skills: Optional[int] = None,
    cultural_fit: Optional[int] = None,
    communication: Optional[int] = None,
    concerns: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Record the hiring manager's interview verdict.

    PROCEED moves the request on to HR screening; REJECT ends the workflow
    in CANDIDATE_REJECTED_INTERVIEW.
    """
    try:
        verdict = FeedbackDecision(decision)
    except ValueError:
        raise InvalidInputError("Decision must be PROCEED or REJECT", details={"decision": decision})
    if not feedback or not feedback.strip():
        raise InvalidInputError("Feedback is required")

    async with transaction(session):
        request = await load_request(session, request_id)
        ensure_hiring_manager(actor, request, "submit interview feedback")
        ensure_status(request, "submit_interview_feedback")

        proceed = verdict == FeedbackDecision.PROCEED
        await advance_status(
            session,
            request,
            "submit_interview_feedback",
            RequestStatus.INTERVIEW_FEEDBACK_PENDING if proceed else RequestStatus.CANDIDATE_REJECTED_INTERVIEW,
            actor,
        )

        record = InterviewFeedback(
            request_id=request.id,
            decision=verdict,
            overall_rating=overall_rating,
            technical_skills=technical_skills,
            cultural_fit=cultural_fit,
            communication=communication,
            feedback=feedback,
            concerns=concerns,
            submitted_by_id=actor.id,
        )
        session.add(record)
        await session.flush()

        message = (
            "Hiring Manager approved candidate to proceed after interview"
            if proceed
            else "Hiring Manager rejected candidate after interview"
        )
        await log_activity(
            session,
            request.id,
            actor,
            ActivityType.APPROVAL if proceed else ActivityType.REJECTION,
            message,
            author_role=ROLE_HIRING_MANAGER,
            details={"interviewFeedbackId": record.id, "decision": verdict.value},
        )

    return {
        "request": serialize_request(request),
        "interviewFeedback": serialize_interview_feedback(record),
    }


async def get_interview_details(
    session: AsyncSession,
    request_id: int,
    actor: CurrentUser,
) -> Dict[str, Any]:
    request = await load_request(session, request_id)
    ensure_can_view(actor, request)

    return {
        "schedule": serialize_interview_schedule(await get_schedule(session, request.id)),
        "feedback": serialize_interview_feedback(await get_feedback(session, request.id)),
    }
