"""
Letter of acceptance service functions.

The letter moves through upload -> manager approval -> issuance -> signed
upload -> acceptance. Acceptance resolves the hiring request.
"""

from typing import Any, Dict, Optional
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from api.services.activity import log_activity, ROLE_HIRING_MANAGER, ROLE_HR_AGENT
from api.services.screening import get_screening
from api.services.serializers import serialize_loa, serialize_request
from api.services.workflow import advance_status, ensure_status, load_request
from api.uploads import StoredDocument
from core.exceptions import InvalidInputError, NotFoundError, PreconditionFailedError
from core.middleware.authentication import CurrentUser
from core.middleware.authorization import ensure_can_view, ensure_hiring_manager
from core.storage.local import LocalStorage
from core.utils.datetime import now
from core.utils.formatting import with_suffix
from database.engine import transaction
from database.models.activities import ActivityType
from database.models.hiring import LetterOfAcceptance, ScreeningStatus
from database.models.requests import RequestStatus
from database.models.users import User

logger = logging.getLogger(__name__)

LOA_DECISIONS = ("APPROVE", "REJECT")


async def get_loa(session: AsyncSession, request_id: int) -> Optional[LetterOfAcceptance]:
    result = await session.execute(
        select(LetterOfAcceptance).where(LetterOfAcceptance.request_id == request_id)
    )
    return result.scalar_one_or_none()


async def upload_loa(
    session: AsyncSession,
    request_id: int,
    actor: CurrentUser,
    file_url: str,
    file_name: str,
    file_size: int,
    storage: Optional[LocalStorage] = None,
) -> Dict[str, Any]:
    """
    Attach the unsigned letter once screening has completed.

    Uploading again replaces the unsigned document and clears any earlier
    manager approval, since the approval covered the previous document.
    """
    replaced_url = None

    async with transaction(session):
        request = await load_request(session, request_id)
        ensure_status(request, "upload_loa")

        screening = await get_screening(session, request.id)
        if screening is None or screening.overall_status != ScreeningStatus.COMPLETED:
            raise PreconditionFailedError(
                "HR screening must be completed before uploading the Letter of Acceptance"
            )

        await advance_status(session, request, "upload_loa", actor=actor)

        loa = await get_loa(session, request.id)
        if loa is None:
            loa = LetterOfAcceptance(request_id=request.id)
            session.add(loa)
        else:
            replaced_url = loa.loa_file_url
            loa.approved_by_id = None
            loa.approval_date = None
            loa.approval_comments = None

        loa.loa_file_url = file_url
        loa.loa_file_name = file_name
        loa.loa_file_size = file_size
        loa.uploaded_by_id = actor.id
        await session.flush()

        await log_activity(
            session,
            request.id,
            actor,
            ActivityType.ATTACHMENT,
            f"Letter of Acceptance uploaded: {file_name}",
            author_role=ROLE_HR_AGENT,
            details={"loaId": loa.id, "replaced": replaced_url is not None},
        )

    if storage is not None and replaced_url and replaced_url != file_url:
        storage.delete_by_url(replaced_url)

    return serialize_loa(loa)


async def route_loa_for_approval(
    session: AsyncSession,
    request_id: int,
    actor: CurrentUser,
    comments: Optional[str] = None,
) -> Dict[str, Any]:
    """Send the uploaded letter to the hiring manager for approval."""
    async with transaction(session):
        request = await load_request(session, request_id)
        ensure_status(request, "route_loa_for_approval")

        loa = await get_loa(session, request.id)
        if loa is None:
            raise PreconditionFailedError("Letter of Acceptance must be uploaded first")

        await advance_status(
            session,
            request,
            "route_loa_for_approval",
            RequestStatus.LOA_PENDING_APPROVAL,
            actor,
        )

        manager = await session.get(User, request.requester_id)
        manager_name = manager.full_name if manager else "the hiring manager"
        await log_activity(
            session,
            request.id,
            actor,
            ActivityType.ASSIGNMENT,
            with_suffix(f"LOA routed to {manager_name} (Hiring Manager) for approval", comments),
            author_role=ROLE_HR_AGENT,
            details={"loaId": loa.id},
        )

    return {"request": serialize_request(request), "letterOfAcceptance": serialize_loa(loa)}


async def manager_approve_loa(
    session: AsyncSession,
    request_id: int,
    actor: CurrentUser,
    decision: str,
    comments: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Hiring manager verdict on the letter.

    APPROVE records the approver and moves to LOA_APPROVED. REJECT returns
    the request to HR_SCREENING so a corrected letter can be uploaded.
    """
    if decision not in LOA_DECISIONS:
        raise InvalidInputError("Decision must be APPROVE or REJECT", details={"decision": decision})

    async with transaction(session):
        request = await load_request(session, request_id)
        ensure_hiring_manager(actor, request, "approve the Letter of Acceptance")
        ensure_status(request, "manager_approve_loa")

        loa = await get_loa(session, request.id)
        if loa is None:
            raise NotFoundError("Letter of Acceptance not found")

        approved = decision == "APPROVE"
        await advance_status(
            session,
            request,
            "manager_approve_loa",
            RequestStatus.LOA_APPROVED if approved else RequestStatus.HR_SCREENING,
            actor,
        )

        loa.approval_comments = comments
        if approved:
            loa.approved_by_id = actor.id
            loa.approval_date = now()
        else:
            loa.approved_by_id = None
            loa.approval_date = None
        await session.flush()

        await log_activity(
            session,
            request.id,
            actor,
            ActivityType.APPROVAL if approved else ActivityType.REJECTION,
            with_suffix(
                "Hiring Manager approved LOA" if approved else "Hiring Manager rejected LOA",
                comments,
            ),
            author_role=ROLE_HIRING_MANAGER,
            details={"loaId": loa.id, "decision": decision},
        )

    return {"request": serialize_request(request), "letterOfAcceptance": serialize_loa(loa)}


async def mark_loa_issued(
    session: AsyncSession,
    request_id: int,
    actor: CurrentUser,
    notes: Optional[str] = None,
) -> Dict[str, Any]:
    """Record that the approved letter was sent to the candidate."""
    async with transaction(session):
        request = await load_request(session, request_id)
        ensure_status(request, "mark_loa_issued")

        loa = await get_loa(session, request.id)
        if loa is None or loa.approved_by_id is None:
            raise PreconditionFailedError(
                "Letter of Acceptance must be approved by the hiring manager before it is issued"
            )

        await advance_status(session, request, "mark_loa_issued", RequestStatus.LOA_ISSUED, actor)

        loa.issued_date = now()
        await session.flush()

        await log_activity(
            session,
            request.id,
            actor,
            ActivityType.SYSTEM,
            with_suffix("LOA issued to candidate", notes),
            author_role=ROLE_HR_AGENT,
            system_generated=True,
            details={"loaId": loa.id},
        )

    return {"request": serialize_request(request), "letterOfAcceptance": serialize_loa(loa)}


async def upload_signed_loa(
    session: AsyncSession,
    request_id: int,
    actor: CurrentUser,
    file_url: str,
    file_name: str,
    file_size: int,
    storage: Optional[LocalStorage] = None,
) -> Dict[str, Any]:
    """Attach the letter as signed by the candidate."""
    async with transaction(session):
        request = await load_request(session, request_id)
        ensure_status(request, "upload_signed_loa")

        loa = await get_loa(session, request.id)
        if loa is None:
            raise NotFoundError("Letter of Acceptance not found")

        await advance_status(session, request, "upload_signed_loa", actor=actor)

        replaced_url = loa.signed_loa_file_url
        loa.signed_loa_file_url = file_url
        loa.signed_loa_file_name = file_name
        loa.signed_loa_file_size = file_size
        loa.signed_uploaded_by_id = actor.id
        await session.flush()

        await log_activity(
            session,
            request.id,
            actor,
            ActivityType.ATTACHMENT,
            f"Signed LOA uploaded: {file_name}",
            author_role=ROLE_HR_AGENT,
            details={"loaId": loa.id},
        )

    if storage is not None and replaced_url and replaced_url != file_url:
        storage.delete_by_url(replaced_url)

    return serialize_loa(loa)


async def mark_loa_accepted(
    session: AsyncSession,
    request_id: int,
    actor: CurrentUser,
    notes: Optional[str] = None,
) -> Dict[str, Any]:
    """Close the hiring request once the signed letter is on file."""
    async with transaction(session):
        request = await load_request(session, request_id)
        ensure_status(request, "mark_loa_accepted")

        loa = await get_loa(session, request.id)
        if loa is None or not loa.signed_loa_file_url:
            raise PreconditionFailedError("Signed LOA must be uploaded before marking as accepted")

        accepted_at = now()
        await advance_status(
            session,
            request,
            "mark_loa_accepted",
            RequestStatus.RESOLVED,
            actor,
            resolved_at=accepted_at,
        )

        loa.accepted_date = accepted_at
        await session.flush()

        await log_activity(
            session,
            request.id,
            actor,
            ActivityType.SYSTEM,
            with_suffix("LOA accepted - Hiring process complete!", notes, separator=" "),
            author_role=ROLE_HR_AGENT,
            system_generated=True,
            details={"loaId": loa.id},
        )

    return {"request": serialize_request(request), "letterOfAcceptance": serialize_loa(loa)}


async def get_loa_details(
    session: AsyncSession,
    request_id: int,
    actor: CurrentUser,
) -> Optional[Dict[str, Any]]:
    request = await load_request(session, request_id)
    ensure_can_view(actor, request)
    return serialize_loa(await get_loa(session, request.id))


async def get_loa_file(
    session: AsyncSession,
    request_id: int,
    actor: CurrentUser,
    signed: bool = False,
) -> StoredDocument:
    """
    Locate the unsigned letter, or with ``signed`` the countersigned copy.

    Raises:
        NotFoundError: If that letter has not been uploaded yet
    """
    request = await load_request(session, request_id)
    ensure_can_view(actor, request)

    loa = await get_loa(session, request.id)
    if signed:
        if loa is None or not loa.signed_loa_file_url:
            raise NotFoundError("Signed letter of acceptance not found")
        return StoredDocument(
            url=loa.signed_loa_file_url,
            file_name=loa.signed_loa_file_name,
            size=loa.signed_loa_file_size,
        )

    if loa is None:
        raise NotFoundError("Letter of acceptance not found")
    return StoredDocument(url=loa.loa_file_url, file_name=loa.loa_file_name, size=loa.loa_file_size)
