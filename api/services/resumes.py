"""Candidate resume service functions."""

from typing import Any, Dict, List, Optional
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from api.services.activity import log_activity, ROLE_HR_AGENT
from api.services.serializers import serialize_resume
from api.services.workflow import advance_status, ensure_status, load_request
from api.uploads import StoredDocument
from core.exceptions import InvalidInputError, NotFoundError
from core.middleware.authentication import CurrentUser
from core.middleware.authorization import ensure_can_view
from core.storage.local import LocalStorage
from database.engine import transaction
from database.models.activities import ActivityType
from database.models.hiring import CandidateResume

logger = logging.getLogger(__name__)


async def upload_resume(
    session: AsyncSession,
    request_id: int,
    actor: CurrentUser,
    file_name: str,
    file_url: str,
    file_size: int,
    mime_type: str,
    candidate_name: Optional[str] = None,
    notes: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Record an uploaded candidate resume.

    The file itself has already been stored; this only attaches its metadata
    while the job is posted.
    """
    async with transaction(session):
        request = await load_request(session, request_id)
        ensure_status(request, "upload_resume")

        await advance_status(session, request, "upload_resume", actor=actor)

        resume = CandidateResume(
            request_id=request.id,
            uploaded_by_id=actor.id,
            file_name=file_name,
            file_url=file_url,
            file_size=file_size,
            mime_type=mime_type,
            candidate_name=candidate_name,
            notes=notes,
        )
        session.add(resume)
        await session.flush()

        await log_activity(
            session,
            request.id,
            actor,
            ActivityType.ATTACHMENT,
            f"Uploaded candidate resume: {candidate_name or file_name}",
            author_role=ROLE_HR_AGENT,
            details={"resumeId": resume.id, "fileName": file_name},
        )

    return serialize_resume(resume)


async def list_resumes(
    session: AsyncSession,
    request_id: int,
    actor: CurrentUser,
) -> List[Dict[str, Any]]:
    """Resumes attached to a request, newest first."""
    request = await load_request(session, request_id)
    ensure_can_view(actor, request)

    result = await session.execute(
        select(CandidateResume)
        .where(CandidateResume.request_id == request.id)
        .order_by(CandidateResume.created_at.desc(), CandidateResume.id.desc())
    )
    return [serialize_resume(resume) for resume in result.scalars().all()]


async def get_resume_file(
    session: AsyncSession,
    request_id: int,
    resume_id: int,
    actor: CurrentUser,
) -> StoredDocument:
    """Locate the stored file of a resume the actor is allowed to see."""
    request = await load_request(session, request_id)
    ensure_can_view(actor, request)

    resume = await session.get(CandidateResume, resume_id)
    if resume is None or resume.request_id != request.id:
        raise NotFoundError("Resume not found")

    return StoredDocument(
        url=resume.file_url,
        file_name=resume.file_name,
        size=resume.file_size,
        mime_type=resume.mime_type,
    )

async def delete_resume(
    session: AsyncSession,
    request_id: int,
    resume_id: int,
    actor: CurrentUser,
    storage: Optional[LocalStorage] = None,
) -> Dict[str, Any]:
    """
    Remove a resume while the job is still posted.

    The stored file is deleted only after the database change is committed.
    """
    async with transaction(session):
        request = await load_request(session, request_id)
        ensure_status(request, "delete_resume")

        resume = await session.get(CandidateResume, resume_id)
        if resume is None:
            raise NotFoundError("Resume not found")
        if resume.request_id != request.id:
            raise InvalidInputError("Resume does not belong to this request")

        file_url = resume.file_url
        label = resume.candidate_name or resume.file_name

        await advance_status(session, request, "delete_resume", actor=actor)
        await session.delete(resume)

        await log_activity(
            session,
            request.id,
            actor,
            ActivityType.SYSTEM,
            f"Deleted candidate resume: {label}",
            author_role=ROLE_HR_AGENT,
            system_generated=True,
            details={"resumeId": resume_id},
        )

    if storage is not None:
        storage.delete_by_url(file_url)

    return {"id": resume_id, "deleted": True}
