"""
Tests for HR screening and the derived overall status.
"""

import pytest

from api.services import interviews as interview_service
from api.services import screening as screening_service
from core.exceptions import InvalidInputError, NotFoundError, PreconditionFailedError
from database.models import CheckStatus, RequestStatus, ScreeningStatus, derive_screening_status
from tests.helpers import create_request, fetch_request


async def request_with_feedback(session, actors, decision="PROCEED"):
    request_id = await create_request(session, actors.requester, RequestStatus.INTERVIEW_SCHEDULED)
    await interview_service.submit_interview_feedback(
        session, request_id, actors.requester, decision=decision, feedback="Interview notes"
    )
    return request_id


class TestDerivedStatus:
    """Test the overall status derivation."""

    @pytest.mark.parametrize("background,references,expected", [
        (CheckStatus.COMPLETED, CheckStatus.COMPLETED, ScreeningStatus.COMPLETED),
        (CheckStatus.FAILED, CheckStatus.COMPLETED, ScreeningStatus.ISSUES_FOUND),
        (CheckStatus.PENDING, CheckStatus.FAILED, ScreeningStatus.ISSUES_FOUND),
        (CheckStatus.COMPLETED, CheckStatus.PENDING, ScreeningStatus.IN_PROGRESS),
        (CheckStatus.IN_PROGRESS, CheckStatus.COMPLETED, ScreeningStatus.IN_PROGRESS),
        (CheckStatus.PENDING, CheckStatus.PENDING, ScreeningStatus.IN_PROGRESS),
    ])
    def test_derive(self, background, references, expected):
        assert derive_screening_status(background, references) == expected


class TestStartScreening:
    """Test starting HR screening."""

    @pytest.mark.asyncio
    async def test_start_after_proceed(self, session, actors):
        request_id = await request_with_feedback(session, actors)

        result = await screening_service.start_hr_screening(session, request_id, actors.agent, notes="Vendor engaged")

        screening = result["hrScreening"]
        assert result["request"]["status"] == "HR_SCREENING"
        assert screening["backgroundCheckStatus"] == "PENDING"
        assert screening["referencesCheckStatus"] == "PENDING"
        assert screening["overallStatus"] == "IN_PROGRESS"

    @pytest.mark.asyncio
    async def test_requires_feedback(self, session, actors):
        request_id = await create_request(session, actors.requester, RequestStatus.INTERVIEW_FEEDBACK_PENDING)

        with pytest.raises(PreconditionFailedError):
            await screening_service.start_hr_screening(session, request_id, actors.agent)

        assert (await fetch_request(session, request_id)).status == RequestStatus.INTERVIEW_FEEDBACK_PENDING


class TestUpdateScreening:
    """Test updating the individual checks."""

    @pytest.mark.asyncio
    async def test_overall_status_follows_checks(self, session, actors):
        request_id = await request_with_feedback(session, actors)
        await screening_service.start_hr_screening(session, request_id, actors.agent)

        partial = await screening_service.update_screening_status(
            session, request_id, actors.agent, background_check_status="COMPLETED"
        )
        assert partial["hrScreening"]["overallStatus"] == "IN_PROGRESS"

        done = await screening_service.update_screening_status(
            session,
            request_id,
            actors.agent,
            references_check_status=CheckStatus.COMPLETED,
            references_contacted=["Former manager", "Peer"],
        )
        assert done["hrScreening"]["overallStatus"] == "COMPLETED"
        assert done["hrScreening"]["referencesContacted"] == ["Former manager", "Peer"]
        assert done["hrScreening"]["completedById"] == actors.agent.id

        failed = await screening_service.update_screening_status(
            session, request_id, actors.agent, background_check_status="FAILED"
        )
        assert failed["hrScreening"]["overallStatus"] == "ISSUES_FOUND"

        # Request status is untouched by screening updates
        assert (await fetch_request(session, request_id)).status == RequestStatus.HR_SCREENING

    @pytest.mark.asyncio
    async def test_requires_screening_record(self, session, actors):
        request_id = await create_request(session, actors.requester, RequestStatus.HR_SCREENING)

        with pytest.raises(NotFoundError):
            await screening_service.update_screening_status(
                session, request_id, actors.agent, background_check_status="COMPLETED"
            )

    @pytest.mark.asyncio
    async def test_unknown_check_status(self, session, actors):
        with pytest.raises(InvalidInputError):
            await screening_service.update_screening_status(
                session, 1, actors.agent, background_check_status="DONE"
            )
