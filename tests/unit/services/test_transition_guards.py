"""
Every transition refuses to run from a status it does not start from, and
leaves the request exactly as it found it.
"""

from datetime import date

import pytest
from sqlalchemy import select

from api.services import approvals as approval_service
from api.services import interviews as interview_service
from api.services import loa as loa_service
from api.services import resumes as resume_service
from api.services import screening as screening_service
from api.services.activity import count_activities
from api.services.serializers import serialize_activity
from api.services.workflow import TRANSITIONS
from core.exceptions import InvalidStateError
from database.models import RequestActivity, RequestStatus
from tests.helpers import add_resume, create_request, fetch_approvals, fetch_request

LETTER = {"file_url": "/uploads/loa/offer.pdf", "file_name": "offer.pdf", "file_size": 1024}

# operation -> (call with valid arguments, a status just outside its sources)
CALLS = {
    "route_to_ceo": (
        lambda s, rid, a: approval_service.route_to_ceo(s, rid, a.agent),
        RequestStatus.PENDING_CEO_APPROVAL,
    ),
    "ceo_decision": (
        lambda s, rid, a: approval_service.ceo_decision(s, rid, a.ceo, "APPROVED"),
        RequestStatus.CEO_APPROVED,
    ),
    "mark_job_posted": (
        lambda s, rid, a: approval_service.mark_job_posted(
            s, rid, a.agent, job_posting_url="https://jobs.example.com/42"
        ),
        RequestStatus.JOB_POSTED,
    ),
    "upload_resume": (
        lambda s, rid, a: resume_service.upload_resume(
            s, rid, a.agent, file_name="jane.pdf", file_url="/uploads/resumes/jane.pdf",
            file_size=2048, mime_type="application/pdf",
        ),
        RequestStatus.CEO_APPROVED,
    ),
    "delete_resume": (
        lambda s, rid, a: resume_service.delete_resume(s, rid, 1, a.agent),
        RequestStatus.PENDING_MANAGER_REVIEW,
    ),
    "route_to_manager": (
        lambda s, rid, a: approval_service.route_to_manager(s, rid, a.agent),
        RequestStatus.PENDING_MANAGER_REVIEW,
    ),
    "manager_decision": (
        lambda s, rid, a: approval_service.manager_decision(s, rid, a.requester, "APPROVED"),
        RequestStatus.MANAGER_APPROVED,
    ),
    "schedule_interview": (
        lambda s, rid, a: interview_service.schedule_interview(
            s, rid, a.agent, candidate_id=1, interview_date=date(2024, 1, 10), interview_time="10:00"
        ),
        RequestStatus.INTERVIEW_SCHEDULED,
    ),
    "submit_interview_feedback": (
        lambda s, rid, a: interview_service.submit_interview_feedback(
            s, rid, a.requester, decision="PROCEED", feedback="Strong candidate"
        ),
        RequestStatus.INTERVIEW_FEEDBACK_PENDING,
    ),
    "start_hr_screening": (
        lambda s, rid, a: screening_service.start_hr_screening(s, rid, a.agent),
        RequestStatus.HR_SCREENING,
    ),
    "upload_loa": (
        lambda s, rid, a: loa_service.upload_loa(s, rid, a.agent, **LETTER),
        RequestStatus.LOA_APPROVED,
    ),
    "route_loa_for_approval": (
        lambda s, rid, a: loa_service.route_loa_for_approval(s, rid, a.agent),
        RequestStatus.LOA_APPROVED,
    ),
    "manager_approve_loa": (
        lambda s, rid, a: loa_service.manager_approve_loa(s, rid, a.requester, "APPROVE"),
        RequestStatus.LOA_APPROVED,
    ),
    "mark_loa_issued": (
        lambda s, rid, a: loa_service.mark_loa_issued(s, rid, a.agent),
        RequestStatus.LOA_ISSUED,
    ),
    "upload_signed_loa": (
        lambda s, rid, a: loa_service.upload_signed_loa(s, rid, a.agent, **LETTER),
        RequestStatus.LOA_APPROVED,
    ),
    "mark_loa_accepted": (
        lambda s, rid, a: loa_service.mark_loa_accepted(s, rid, a.agent),
        RequestStatus.LOA_APPROVED,
    ),
}

WRONG_STATUS_CASES = [
    (operation, status)
    for operation, (_, near_miss) in CALLS.items()
    for status in (near_miss, RequestStatus.SUBMITTED, RequestStatus.RESOLVED)
    if status not in TRANSITIONS[operation]
]


async def activity_rows(session, request_id):
    result = await session.execute(
        select(RequestActivity)
        .where(RequestActivity.request_id == request_id)
        .order_by(RequestActivity.id)
        .execution_options(populate_existing=True)
    )
    return [serialize_activity(activity) for activity in result.scalars().all()]


class TestGuardSweep:
    """Calling an operation from the wrong status changes nothing."""

    def test_sweep_covers_every_operation(self):
        assert set(CALLS) == set(TRANSITIONS)

    @pytest.mark.parametrize("operation,status", [
        (operation, near_miss) for operation, (_, near_miss) in CALLS.items()
    ])
    def test_near_miss_is_outside_sources(self, operation, status):
        assert status not in TRANSITIONS[operation]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("operation,status", WRONG_STATUS_CASES)
    async def test_wrong_status_is_rejected(self, session, actors, operation, status):
        request_id = await create_request(session, actors.requester, status)
        await add_resume(session, request_id, actors.agent)
        activities_before = await count_activities(session, request_id)
        approvals_before = len(await fetch_approvals(session, request_id))

        call, _ = CALLS[operation]
        with pytest.raises(InvalidStateError) as exc_info:
            await call(session, request_id, actors)

        assert exc_info.value.details["currentStatus"] == status.value
        assert (await fetch_request(session, request_id)).status == status
        assert await count_activities(session, request_id) == activities_before
        assert len(await fetch_approvals(session, request_id)) == approvals_before


class TestActivityHistory:
    """Earlier activity entries survive later transitions unchanged."""

    @pytest.mark.asyncio
    async def test_prior_rows_are_not_rewritten(self, session, actors):
        request_id = await create_request(session, actors.requester)
        await approval_service.route_to_ceo(session, request_id, actors.agent, comments="Budget approved")
        await approval_service.ceo_decision(session, request_id, actors.ceo, "APPROVED", comments="Go ahead")
        snapshot = await activity_rows(session, request_id)

        await approval_service.mark_job_posted(
            session, request_id, actors.agent, job_posting_url="https://jobs.example.com/42"
        )
        after = await activity_rows(session, request_id)

        assert len(after) == len(snapshot) + 1
        assert after[:len(snapshot)] == snapshot
        assert after[-1]["message"].startswith("Job posted")

    @pytest.mark.asyncio
    async def test_rejected_call_leaves_history_alone(self, session, actors):
        request_id = await create_request(session, actors.requester)
        await approval_service.route_to_ceo(session, request_id, actors.agent)
        snapshot = await activity_rows(session, request_id)

        with pytest.raises(InvalidStateError):
            await approval_service.mark_job_posted(session, request_id, actors.agent)

        assert await activity_rows(session, request_id) == snapshot
