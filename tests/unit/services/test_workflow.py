"""
Tests for the state machine primitives: request lookup, the status guard
and the compare-and-swap status update.
"""

import pytest
from sqlalchemy import update

from api.services.workflow import TRANSITIONS, advance_status, ensure_status, load_request
from core.exceptions import InvalidStateError, NotFoundError
from core.utils.datetime import now
from database.models import Request, RequestStatus
from tests.helpers import create_request, fetch_request


class TestTransitionTable:
    """Test the operation -> source status table."""

    def test_every_operation_has_sources(self):
        """Each operation accepts at least one status."""
        for operation, sources in TRANSITIONS.items():
            assert sources, operation

    @pytest.mark.parametrize("operation,status", [
        ("route_to_ceo", RequestStatus.SUBMITTED),
        ("route_to_ceo", RequestStatus.IN_REVIEW),
        ("upload_loa", RequestStatus.LOA_PENDING_APPROVAL),
        ("route_loa_for_approval", RequestStatus.HR_SCREENING),
        ("mark_loa_accepted", RequestStatus.LOA_ISSUED),
    ])
    def test_documented_sources(self, operation, status):
        assert status in TRANSITIONS[operation]

    def test_terminal_statuses_start_nothing(self):
        """No operation starts from a terminal status."""
        for terminal in (
            RequestStatus.CEO_REJECTED,
            RequestStatus.CANDIDATE_REJECTED_INTERVIEW,
            RequestStatus.RESOLVED,
        ):
            assert all(terminal not in sources for sources in TRANSITIONS.values())


class TestLoadRequest:
    """Test request lookup."""

    @pytest.mark.asyncio
    async def test_missing_request(self, session):
        with pytest.raises(NotFoundError, match="Request not found"):
            await load_request(session, 4242)

    @pytest.mark.asyncio
    async def test_soft_deleted_request_is_hidden(self, session, actors):
        request_id = await create_request(session, actors.requester, deleted_at=now())

        with pytest.raises(NotFoundError):
            await load_request(session, request_id)


class TestStatusGuard:
    """Test the status guard and compare-and-swap."""

    @pytest.mark.asyncio
    async def test_guard_rejects_wrong_status(self, session, actors):
        request_id = await create_request(session, actors.requester, RequestStatus.JOB_POSTED)
        request = await load_request(session, request_id)

        with pytest.raises(InvalidStateError) as exc_info:
            ensure_status(request, "ceo_decision")

        assert "PENDING_CEO_APPROVAL" in exc_info.value.message
        assert exc_info.value.details["currentStatus"] == "JOB_POSTED"

    @pytest.mark.asyncio
    async def test_advance_status_moves_request(self, session, actors):
        request_id = await create_request(session, actors.requester)
        request = await load_request(session, request_id)

        await advance_status(session, request, "route_to_ceo", RequestStatus.PENDING_CEO_APPROVAL, actors.agent)
        await session.commit()

        assert request.status == RequestStatus.PENDING_CEO_APPROVAL
        assert (await fetch_request(session, request_id)).status == RequestStatus.PENDING_CEO_APPROVAL

    @pytest.mark.asyncio
    async def test_advance_status_loses_race(self, session, actors):
        """A request moved by someone else after it was loaded is not moved again."""
        request_id = await create_request(session, actors.requester, RequestStatus.JOB_POSTED)
        request = await load_request(session, request_id)

        # Another caller wins the transition; our loaded copy is now stale
        await session.execute(
            update(Request)
            .where(Request.id == request_id)
            .values(status=RequestStatus.PENDING_MANAGER_REVIEW)
            .execution_options(synchronize_session=False)
        )
        await session.commit()
        assert request.status == RequestStatus.JOB_POSTED

        with pytest.raises(InvalidStateError, match="changed while processing"):
            await advance_status(session, request, "route_to_manager", RequestStatus.PENDING_MANAGER_REVIEW)
        await session.rollback()

        assert (await fetch_request(session, request_id)).status == RequestStatus.PENDING_MANAGER_REVIEW

    @pytest.mark.asyncio
    async def test_status_preserving_claim(self, session, actors):
        """Passing no new status keeps the status but still checks the source."""
        request_id = await create_request(session, actors.requester, RequestStatus.LOA_ISSUED)
        request = await load_request(session, request_id)

        await advance_status(session, request, "upload_signed_loa")
        await session.commit()

        assert request.status == RequestStatus.LOA_ISSUED
