"""Approval gate service functions (CEO sign-off, job posting, manager review)."""

from typing import Any, Dict, Optional
import logging

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from api.schemas.hiring import HiringCustomFields
from api.services.activity import (
    log_activity,
    ROLE_CEO,
    ROLE_HIRING_MANAGER,
    ROLE_HR_AGENT,
)
from api.services.serializers import serialize_approval, serialize_request
from api.services.workflow import advance_status, ensure_status, load_request
from core.exceptions import (
    InvalidInputError,
    InvalidStateError,
    NotFoundError,
    PreconditionFailedError,
)
from core.middleware.authentication import CurrentUser
from core.middleware.authorization import ensure_hiring_manager
from core.utils.datetime import now, to_iso
from core.utils.formatting import with_suffix
from database.engine import transaction
from database.models.activities import ActivityType
from database.models.approvals import ApprovalStatus, ApproverType, RequestApproval
from database.models.hiring import CandidateResume
from database.models.requests import RequestStatus
from database.models.users import User

logger = logging.getLogger(__name__)

DECISIONS = ("APPROVED", "REJECTED")


def _validate_decision(decision: str) -> ApprovalStatus:
    if decision not in DECISIONS:
        raise InvalidInputError(
            "Decision must be APPROVED or REJECTED",
            details={"decision": decision},
        )
    return ApprovalStatus(decision)


async def get_pending_approval(
    session: AsyncSession, request_id: int, approver_type: ApproverType
) -> Optional[RequestApproval]:
    result = await session.execute(
        select(RequestApproval).where(
            RequestApproval.request_id == request_id,
            RequestApproval.approver_type == approver_type,
            RequestApproval.status == ApprovalStatus.PENDING,
        )
    )
    return result.scalar_one_or_none()


def _resolve(approval: RequestApproval, status: ApprovalStatus, actor: CurrentUser, comments: Optional[str]) -> None:
    approval.status = status
    approval.approver_id = actor.id
    approval.responded_at = now()
    if comments:
        approval.comments = comments


async def _hiring_manager_name(session: AsyncSession, user_id: int) -> str:
    manager = await session.get(User, user_id)
    return manager.full_name if manager else "the hiring manager"


async def route_to_ceo(
    session: AsyncSession,
    request_id: int,
    actor: CurrentUser,
    comments: Optional[str] = None,
) -> Dict[str, Any]:
    """Open the CEO approval gate for a hiring requisition."""
    async with transaction(session):
        request = await load_request(session, request_id)
        ensure_status(request, "route_to_ceo")

        if await get_pending_approval(session, request.id, ApproverType.CEO):
            raise InvalidStateError("A CEO approval is already pending for this request")

        await advance_status(
            session, request, "route_to_ceo", RequestStatus.PENDING_CEO_APPROVAL, actor
        )

        approval = RequestApproval(
            request_id=request.id,
            approver_type=ApproverType.CEO,
            status=ApprovalStatus.PENDING,
            comments=comments,
        )
        session.add(approval)
        await session.flush()

        await log_activity(
            session,
            request.id,
            actor,
            ActivityType.SYSTEM,
            with_suffix("Request routed to CEO for approval", comments),
            author_role=ROLE_HR_AGENT,
            system_generated=True,
            details={"approvalId": approval.id},
        )

    return {"request": serialize_request(request), "approval": serialize_approval(approval)}


async def ceo_decision(
    session: AsyncSession,
    request_id: int,
    actor: CurrentUser,
    decision: str,
    comments: Optional[str] = None,
) -> Dict[str, Any]:
    """Resolve the pending CEO approval."""
    approval_status = _validate_decision(decision)

    async with transaction(session):
        request = await load_request(session, request_id)
        ensure_status(request, "ceo_decision")

        approval = await get_pending_approval(session, request.id, ApproverType.CEO)
        if approval is None:
            raise NotFoundError("No pending CEO approval found for this request")

        approved = approval_status == ApprovalStatus.APPROVED
        await advance_status(
            session,
            request,
            "ceo_decision",
            RequestStatus.CEO_APPROVED if approved else RequestStatus.CEO_REJECTED,
            actor,
        )
        _resolve(approval, approval_status, actor, comments)

        verb = "approved" if approved else "rejected"
        await log_activity(
            session,
            request.id,
            actor,
            ActivityType.APPROVAL if approved else ActivityType.REJECTION,
            with_suffix(f"CEO {verb} this request", comments),
            author_role=ROLE_CEO,
            details={"approvalId": approval.id, "decision": decision},
        )

    return {"request": serialize_request(request), "approval": serialize_approval(approval)}


async def mark_job_posted(
    session: AsyncSession,
    request_id: int,
    actor: CurrentUser,
    job_posting_url: Optional[str] = None,
    notes: Optional[str] = None,
) -> Dict[str, Any]:
    """Record that the approved position has been advertised."""
    async with transaction(session):
        request = await load_request(session, request_id)
        ensure_status(request, "mark_job_posted")

        custom_fields = HiringCustomFields.merge(
            request.custom_fields,
            job_posting_url=job_posting_url,
            job_posting_notes=notes,
            job_posted_at=to_iso(now()),
        )
        await advance_status(
            session,
            request,
            "mark_job_posted",
            RequestStatus.JOB_POSTED,
            actor,
            custom_fields=custom_fields,
        )

        await log_activity(
            session,
            request.id,
            actor,
            ActivityType.SYSTEM,
            with_suffix("Job posted", job_posting_url),
            author_role=ROLE_HR_AGENT,
            system_generated=True,
        )

    return {"request": serialize_request(request)}


async def route_to_manager(
    session: AsyncSession,
    request_id: int,
    actor: CurrentUser,
    comments: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Hand the submitted candidates to the hiring manager for review.

    The hiring manager is the requester; the request is reassigned to them
    and a pending HIRING_MANAGER approval is opened in their name.
    """
    async with transaction(session):
        request = await load_request(session, request_id)
        ensure_status(request, "route_to_manager")

        resume_count = (
            await session.execute(
                select(func.count(CandidateResume.id)).where(
                    CandidateResume.request_id == request.id
                )
            )
        ).scalar() or 0
        if resume_count == 0:
            raise PreconditionFailedError(
                "At least one candidate resume must be uploaded before routing to manager"
            )

        if await get_pending_approval(session, request.id, ApproverType.HIRING_MANAGER):
            raise InvalidStateError("A hiring manager review is already pending for this request")

        await advance_status(
            session,
            request,
            "route_to_manager",
            RequestStatus.PENDING_MANAGER_REVIEW,
            actor,
            assigned_to_id=request.requester_id,
        )

        approval = RequestApproval(
            request_id=request.id,
            approver_type=ApproverType.HIRING_MANAGER,
            approver_id=request.requester_id,
            status=ApprovalStatus.PENDING,
            comments=comments,
        )
        session.add(approval)
        await session.flush()

        manager_name = await _hiring_manager_name(session, request.requester_id)
        message = with_suffix(
            f"Request routed to {manager_name} (Hiring Manager) for candidate review. "
            f"{resume_count} candidate(s) submitted.",
            comments,
            separator=" ",
        )
        await log_activity(
            session,
            request.id,
            actor,
            ActivityType.ASSIGNMENT,
            message,
            author_role=ROLE_HR_AGENT,
            details={"approvalId": approval.id, "candidateCount": resume_count},
        )

    return {"request": serialize_request(request), "approval": serialize_approval(approval)}


async def manager_decision(
    session: AsyncSession,
    request_id: int,
    actor: CurrentUser,
    decision: str,
    selected_candidate_id: Optional[int] = None,
    comments: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Resolve the hiring manager's candidate review.

    Approval with a selected candidate records the candidate on the request;
    rejection sends the request back to IN_REVIEW for another round.
    """
    approval_status = _validate_decision(decision)

    async with transaction(session):
        request = await load_request(session, request_id)
        ensure_hiring_manager(actor, request, "make this decision")
        ensure_status(request, "manager_decision")

        approval = await get_pending_approval(session, request.id, ApproverType.HIRING_MANAGER)
        if approval is None:
            raise NotFoundError("No pending hiring manager approval found for this request")

        approved = approval_status == ApprovalStatus.APPROVED
        values: Dict[str, Any] = {}
        if approved and selected_candidate_id is not None:
            resume = (
                await session.execute(
                    select(CandidateResume).where(
                        CandidateResume.id == selected_candidate_id,
                        CandidateResume.request_id == request.id,
                    )
                )
            ).scalar_one_or_none()
            if resume is None:
                raise NotFoundError("Selected candidate not found")

            values["custom_fields"] = HiringCustomFields.merge(
                request.custom_fields,
                selected_candidate_id=resume.id,
                selected_candidate_name=resume.candidate_name or resume.file_name,
            )

        await advance_status(
            session,
            request,
            "manager_decision",
            RequestStatus.MANAGER_APPROVED if approved else RequestStatus.IN_REVIEW,
            actor,
            **values,
        )
        _resolve(approval, approval_status, actor, comments)

        message = (
            "Hiring Manager approved candidate selection"
            if approved
            else "Hiring Manager requested changes"
        )
        await log_activity(
            session,
            request.id,
            actor,
            ActivityType.APPROVAL if approved else ActivityType.REJECTION,
            with_suffix(message, comments),
            author_role=ROLE_HIRING_MANAGER,
            details={"approvalId": approval.id, "selectedCandidateId": selected_candidate_id},
        )

    return {"request": serialize_request(request), "approval": serialize_approval(approval)}
