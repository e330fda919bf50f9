"""
Tests for the approval gates: CEO sign-off, job posting and the hiring
manager's candidate review.
"""

import pytest

from api.services import approvals as approval_service
from api.services.activity import count_activities
from core.exceptions import (
    ForbiddenError,
    InvalidInputError,
    InvalidStateError,
    NotFoundError,
    PreconditionFailedError,
)
from database.models import ApprovalStatus, ApproverType, RequestStatus
from tests.helpers import add_resume, create_request, fetch_approvals, fetch_request


def pending(approvals, approver_type):
    return [
        a for a in approvals
        if a.approver_type == approver_type and a.status == ApprovalStatus.PENDING
    ]


class TestRouteToCEO:
    """Test opening the CEO approval."""

    @pytest.mark.asyncio
    async def test_creates_single_pending_approval(self, session, actors):
        request_id = await create_request(session, actors.requester)

        result = await approval_service.route_to_ceo(session, request_id, actors.agent, comments="Budgeted in Q3")

        assert result["request"]["status"] == "PENDING_CEO_APPROVAL"
        assert result["approval"]["approverType"] == "CEO"
        assert result["approval"]["approverId"] is None
        assert len(pending(await fetch_approvals(session, request_id), ApproverType.CEO)) == 1
        assert await count_activities(session, request_id) == 1

    @pytest.mark.asyncio
    async def test_accepts_in_review(self, session, actors):
        request_id = await create_request(session, actors.requester, RequestStatus.IN_REVIEW)

        result = await approval_service.route_to_ceo(session, request_id, actors.agent)

        assert result["request"]["status"] == "PENDING_CEO_APPROVAL"

    @pytest.mark.asyncio
    async def test_wrong_status_changes_nothing(self, session, actors):
        request_id = await create_request(session, actors.requester, RequestStatus.JOB_POSTED)

        with pytest.raises(InvalidStateError):
            await approval_service.route_to_ceo(session, request_id, actors.agent)

        assert (await fetch_request(session, request_id)).status == RequestStatus.JOB_POSTED
        assert await fetch_approvals(session, request_id) == []
        assert await count_activities(session, request_id) == 0

    @pytest.mark.asyncio
    async def test_missing_request(self, session, actors):
        with pytest.raises(NotFoundError):
            await approval_service.route_to_ceo(session, 999, actors.agent)


class TestCEODecision:
    """Test resolving the CEO approval."""

    @pytest.mark.asyncio
    async def test_approve_resolves_pending_approval(self, session, actors):
        request_id = await create_request(session, actors.requester)
        await approval_service.route_to_ceo(session, request_id, actors.agent)

        result = await approval_service.ceo_decision(session, request_id, actors.ceo, "APPROVED", "Go ahead")

        assert result["request"]["status"] == "CEO_APPROVED"
        assert result["approval"]["status"] == "APPROVED"
        assert result["approval"]["approverId"] == actors.ceo.id
        assert result["approval"]["respondedAt"] is not None
        assert pending(await fetch_approvals(session, request_id), ApproverType.CEO) == []
        assert await count_activities(session, request_id) == 2

    @pytest.mark.asyncio
    async def test_reject_is_terminal(self, session, actors):
        request_id = await create_request(session, actors.requester)
        await approval_service.route_to_ceo(session, request_id, actors.agent)

        result = await approval_service.ceo_decision(session, request_id, actors.ceo, "REJECTED")

        assert result["request"]["status"] == "CEO_REJECTED"
        with pytest.raises(InvalidStateError):
            await approval_service.route_to_ceo(session, request_id, actors.agent)

    @pytest.mark.asyncio
    async def test_second_decision_fails(self, session, actors):
        request_id = await create_request(session, actors.requester)
        await approval_service.route_to_ceo(session, request_id, actors.agent)
        await approval_service.ceo_decision(session, request_id, actors.ceo, "APPROVED")

        with pytest.raises(InvalidStateError):
            await approval_service.ceo_decision(session, request_id, actors.ceo, "REJECTED")

        approvals = await fetch_approvals(session, request_id)
        assert [a.status for a in approvals] == [ApprovalStatus.APPROVED]

    @pytest.mark.asyncio
    async def test_invalid_decision_checked_before_lookup(self, session, actors):
        """A bad decision is reported even for a request that does not exist."""
        with pytest.raises(InvalidInputError):
            await approval_service.ceo_decision(session, 999, actors.ceo, "MAYBE")

    @pytest.mark.asyncio
    async def test_pending_status_without_approval(self, session, actors):
        request_id = await create_request(session, actors.requester, RequestStatus.PENDING_CEO_APPROVAL)

        with pytest.raises(NotFoundError, match="No pending CEO approval"):
            await approval_service.ceo_decision(session, request_id, actors.ceo, "APPROVED")

        assert (await fetch_request(session, request_id)).status == RequestStatus.PENDING_CEO_APPROVAL


class TestMarkJobPosted:
    """Test recording the job posting."""

    @pytest.mark.asyncio
    async def test_merges_custom_fields(self, session, actors):
        request_id = await create_request(
            session,
            actors.requester,
            RequestStatus.CEO_APPROVED,
            custom_fields={"department": "Engineering"},
        )

        result = await approval_service.mark_job_posted(
            session, request_id, actors.agent, job_posting_url="https://jobs.example.com/42", notes="LinkedIn too"
        )

        fields = result["request"]["customFields"]
        assert result["request"]["status"] == "JOB_POSTED"
        assert fields["department"] == "Engineering"
        assert fields["jobPostingUrl"] == "https://jobs.example.com/42"
        assert fields["jobPostingNotes"] == "LinkedIn too"
        assert fields["jobPostedAt"]

    @pytest.mark.asyncio
    async def test_keeps_foreign_values_under_workflow_keys(self, session, actors):
        """Data another feature left in the column does not block the transition."""
        request_id = await create_request(
            session,
            actors.requester,
            RequestStatus.CEO_APPROVED,
            custom_fields={"selectedCandidateId": "n/a", "department": "IT"},
        )

        result = await approval_service.mark_job_posted(session, request_id, actors.agent)

        fields = result["request"]["customFields"]
        assert result["request"]["status"] == "JOB_POSTED"
        assert fields["selectedCandidateId"] == "n/a"
        assert fields["department"] == "IT"
        assert "jobPostingUrl" not in fields


class TestRouteToManager:
    """Test handing candidates to the hiring manager."""

    @pytest.mark.asyncio
    async def test_requires_a_resume(self, session, actors):
        request_id = await create_request(session, actors.requester, RequestStatus.JOB_POSTED)

        with pytest.raises(PreconditionFailedError, match="At least one candidate resume"):
            await approval_service.route_to_manager(session, request_id, actors.agent)

        request = await fetch_request(session, request_id)
        assert request.status == RequestStatus.JOB_POSTED
        assert request.assigned_to_id is None
        assert await fetch_approvals(session, request_id) == []

    @pytest.mark.asyncio
    async def test_assigns_requester_as_hiring_manager(self, session, actors):
        request_id = await create_request(session, actors.requester, RequestStatus.JOB_POSTED)
        await add_resume(session, request_id, actors.agent)
        await add_resume(session, request_id, actors.agent, "John Candidate")

        result = await approval_service.route_to_manager(session, request_id, actors.agent, comments="Two strong picks")

        assert result["request"]["status"] == "PENDING_MANAGER_REVIEW"
        assert result["request"]["assignedToId"] == actors.requester.id
        assert result["approval"]["approverType"] == "HIRING_MANAGER"
        assert result["approval"]["approverId"] == actors.requester.id


class TestManagerDecision:
    """Test the hiring manager's candidate review."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [
        RequestStatus.PENDING_MANAGER_REVIEW,
        RequestStatus.JOB_POSTED,
        RequestStatus.LOA_ISSUED,
    ])
    async def test_only_requester_may_decide(self, session, actors, status):
        request_id = await create_request(session, actors.requester, status)

        with pytest.raises(ForbiddenError, match="Only the hiring manager"):
            await approval_service.manager_decision(session, request_id, actors.agent, "APPROVED")

        assert (await fetch_request(session, request_id)).status == status

    @pytest.mark.asyncio
    async def test_approve_with_selected_candidate(self, session, actors):
        request_id = await create_request(session, actors.requester, RequestStatus.JOB_POSTED)
        resume_id = await add_resume(session, request_id, actors.agent, "Jane Candidate")
        await approval_service.route_to_manager(session, request_id, actors.agent)

        result = await approval_service.manager_decision(
            session, request_id, actors.requester, "APPROVED", selected_candidate_id=resume_id
        )

        fields = result["request"]["customFields"]
        assert result["request"]["status"] == "MANAGER_APPROVED"
        assert result["approval"]["status"] == "APPROVED"
        assert fields["selectedCandidateId"] == resume_id
        assert fields["selectedCandidateName"] == "Jane Candidate"

    @pytest.mark.asyncio
    async def test_selection_overwrites_foreign_candidate_value(self, session, actors):
        request_id = await create_request(
            session,
            actors.requester,
            RequestStatus.JOB_POSTED,
            custom_fields={"selectedCandidateId": "n/a", "department": "IT"},
        )
        resume_id = await add_resume(session, request_id, actors.agent, "Jane Candidate")
        await approval_service.route_to_manager(session, request_id, actors.agent)

        result = await approval_service.manager_decision(
            session, request_id, actors.requester, "APPROVED", selected_candidate_id=resume_id
        )

        fields = result["request"]["customFields"]
        assert result["request"]["status"] == "MANAGER_APPROVED"
        assert fields["selectedCandidateId"] == resume_id
        assert fields["department"] == "IT"

    @pytest.mark.asyncio
    async def test_reject_returns_to_review(self, session, actors):
        request_id = await create_request(session, actors.requester, RequestStatus.JOB_POSTED)
        await add_resume(session, request_id, actors.agent)
        await approval_service.route_to_manager(session, request_id, actors.agent)

        result = await approval_service.manager_decision(
            session, request_id, actors.requester, "REJECTED", comments="Need more senior profiles"
        )

        assert result["request"]["status"] == "IN_REVIEW"
        assert result["approval"]["status"] == "REJECTED"
        assert pending(await fetch_approvals(session, request_id), ApproverType.HIRING_MANAGER) == []

    @pytest.mark.asyncio
    async def test_unknown_candidate(self, session, actors):
        request_id = await create_request(session, actors.requester, RequestStatus.JOB_POSTED)
        await add_resume(session, request_id, actors.agent)
        await approval_service.route_to_manager(session, request_id, actors.agent)
        before = await count_activities(session, request_id)

        with pytest.raises(NotFoundError, match="Selected candidate not found"):
            await approval_service.manager_decision(
                session, request_id, actors.requester, "APPROVED", selected_candidate_id=9999
            )

        assert (await fetch_request(session, request_id)).status == RequestStatus.PENDING_MANAGER_REVIEW
        assert await count_activities(session, request_id) == before
