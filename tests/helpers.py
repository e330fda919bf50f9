"""Factories and lookups shared by the test modules."""

import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from core.middleware.authentication import CurrentUser
from core.security import create_access_token
from database.models import (
    CandidateResume,
    Request,
    RequestApproval,
    RequestStatus,
    RoleName,
    User,
    UserRole,
)


async def create_user(session: AsyncSession, email: str, first: str, last: str, *roles: RoleName) -> CurrentUser:
    user = User(
        email=email,
        first_name=first,
        last_name=last,
        roles=[UserRole(role=role) for role in roles],
    )
    session.add(user)
    await session.commit()
    return CurrentUser.from_user(user)


async def create_request(
    session: AsyncSession,
    requester: CurrentUser,
    status: RequestStatus = RequestStatus.SUBMITTED,
    **fields,
) -> int:
    """Insert a request and return its id."""
    request = Request(
        request_number=f"REQ-{uuid.uuid4().hex[:8].upper()}",
        title=fields.pop("title", "Hire a backend engineer"),
        status=status,
        requester_id=requester.id,
        **fields,
    )
    session.add(request)
    await session.commit()
    return request.id


async def add_resume(
    session: AsyncSession,
    request_id: int,
    uploader: CurrentUser,
    candidate_name: str = "Jane Candidate",
) -> int:
    """Insert a resume row directly and return its id."""
    resume = CandidateResume(
        request_id=request_id,
        uploaded_by_id=uploader.id,
        file_name=f"{candidate_name.replace(' ', '_')}.pdf",
        file_url=f"/uploads/resumes/{uuid.uuid4().hex}.pdf",
        file_size=2048,
        mime_type="application/pdf",
        candidate_name=candidate_name,
    )
    session.add(resume)
    await session.commit()
    return resume.id


async def fetch_request(session: AsyncSession, request_id: int) -> Request:
    """Reload a request from the database, bypassing stale identity-map state."""
    result = await session.execute(
        select(Request).where(Request.id == request_id).execution_options(populate_existing=True)
    )
    return result.scalar_one()


async def fetch_approvals(session: AsyncSession, request_id: int) -> list[RequestApproval]:
    result = await session.execute(
        select(RequestApproval)
        .where(RequestApproval.request_id == request_id)
        .execution_options(populate_existing=True)
    )
    return list(result.scalars().all())


def auth_headers(user: CurrentUser) -> dict[str, str]:
    token = create_access_token(user.id, email=user.email)
    return {"Authorization": f"Bearer {token}"}
