"""
Tests for interview scheduling and the hiring manager's interview feedback.
"""

from datetime import date

import pytest

from api.services import approvals as approval_service
from api.services import interviews as interview_service
from api.services.activity import count_activities
from core.exceptions import ForbiddenError, InvalidInputError, InvalidStateError, NotFoundError
from database.models import RequestStatus
from tests.helpers import add_resume, create_request, fetch_request


class TestScheduleInterview:
    """Test interview scheduling."""

    @pytest.mark.asyncio
    async def test_job_posted_to_interview_scheduled(self, session, actors):
        """Full candidate review path from a posted job to a scheduled interview."""
        request_id = await create_request(session, actors.requester, RequestStatus.JOB_POSTED)
        resume_id = await add_resume(session, request_id, actors.agent, "Jane Candidate")

        routed = await approval_service.route_to_manager(session, request_id, actors.agent)
        assert routed["request"]["status"] == "PENDING_MANAGER_REVIEW"
        assert routed["request"]["assignedToId"] == actors.requester.id

        decided = await approval_service.manager_decision(
            session, request_id, actors.requester, "APPROVED", selected_candidate_id=resume_id
        )
        assert decided["request"]["status"] == "MANAGER_APPROVED"
        assert decided["request"]["customFields"]["selectedCandidateId"] == resume_id

        result = await interview_service.schedule_interview(
            session,
            request_id,
            actors.agent,
            candidate_id=resume_id,
            interview_date=date(2024, 1, 10),
            interview_time="10:00",
            interviewers=["Maya Manager", "Hana Agent"],
        )

        assert result["request"]["status"] == "INTERVIEW_SCHEDULED"
        schedule = result["interviewSchedule"]
        assert schedule["candidateResumeId"] == resume_id
        assert schedule["interviewDate"] == "2024-01-10"
        assert schedule["interviewers"] == ["Maya Manager", "Hana Agent"]

        details = await interview_service.get_interview_details(session, request_id, actors.requester)
        assert details["schedule"]["id"] == schedule["id"]
        assert details["feedback"] is None
        assert await count_activities(session, request_id) == 3

    @pytest.mark.asyncio
    async def test_candidate_must_belong_to_request(self, session, actors):
        request_id = await create_request(session, actors.requester, RequestStatus.MANAGER_APPROVED)
        other_request_id = await create_request(session, actors.requester, RequestStatus.JOB_POSTED)
        foreign_resume_id = await add_resume(session, other_request_id, actors.agent)

        with pytest.raises(NotFoundError, match="Candidate resume not found"):
            await interview_service.schedule_interview(
                session,
                request_id,
                actors.agent,
                candidate_id=foreign_resume_id,
                interview_date=date(2024, 1, 10),
                interview_time="10:00",
            )

        assert (await fetch_request(session, request_id)).status == RequestStatus.MANAGER_APPROVED

    @pytest.mark.asyncio
    async def test_wrong_status(self, session, actors):
        request_id = await create_request(session, actors.requester, RequestStatus.JOB_POSTED)
        resume_id = await add_resume(session, request_id, actors.agent)

        with pytest.raises(InvalidStateError):
            await interview_service.schedule_interview(
                session,
                request_id,
                actors.agent,
                candidate_id=resume_id,
                interview_date=date(2024, 1, 10),
                interview_time="10:00",
            )


class TestInterviewFeedback:
    """Test interview feedback."""

    @pytest.mark.asyncio
    async def test_proceed(self, session, actors):
        request_id = await create_request(session, actors.requester, RequestStatus.INTERVIEW_SCHEDULED)

        result = await interview_service.submit_interview_feedback(
            session,
            request_id,
            actors.requester,
            decision="PROCEED",
            feedback="Strong system design answers",
            overall_rating=5,
            technical_skills=4,
        )

        assert result["request"]["status"] == "INTERVIEW_FEEDBACK_PENDING"
        assert result["interviewFeedback"]["decision"] == "PROCEED"
        assert result["interviewFeedback"]["overallRating"] == 5

    @pytest.mark.asyncio
    async def test_reject_ends_workflow(self, session, actors):
        request_id = await create_request(session, actors.requester, RequestStatus.INTERVIEW_SCHEDULED)

        result = await interview_service.submit_interview_feedback(
            session, request_id, actors.requester, decision="REJECT", feedback="Not a fit", concerns="Communication"
        )

        assert result["request"]["status"] == "CANDIDATE_REJECTED_INTERVIEW"

    @pytest.mark.asyncio
    async def test_only_requester_may_submit(self, session, actors):
        request_id = await create_request(session, actors.requester, RequestStatus.INTERVIEW_SCHEDULED)

        with pytest.raises(ForbiddenError):
            await interview_service.submit_interview_feedback(
                session, request_id, actors.admin, decision="PROCEED", feedback="Looks good"
            )

        assert (await fetch_request(session, request_id)).status == RequestStatus.INTERVIEW_SCHEDULED
        assert await count_activities(session, request_id) == 0

    @pytest.mark.asyncio
    async def test_feedback_text_required(self, session, actors):
        request_id = await create_request(session, actors.requester, RequestStatus.INTERVIEW_SCHEDULED)

        with pytest.raises(InvalidInputError, match="Feedback is required"):
            await interview_service.submit_interview_feedback(
                session, request_id, actors.requester, decision="PROCEED", feedback="   "
            )
