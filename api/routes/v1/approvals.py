"""
Approval gate endpoints.

CEO sign-off of a hiring requisition, job posting and the hiring manager's
candidate review.
"""

from fastapi import APIRouter, Body, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import require_active_user
from api.schemas.common import success
from api.schemas.hiring import (
    CEODecisionRequest,
    CommentsRequest,
    ManagerDecisionRequest,
    MarkJobPostedRequest,
)
from api.services import approvals as approval_service
from core.middleware.authentication import CurrentUser
from core.middleware.authorization import Permission, require_permission
from database.engine import get_db

router = APIRouter(prefix="/requests", tags=["approvals"])


@router.post(
    "/{request_id}/route-to-ceo",
    summary="Route to CEO",
    description="Open the CEO approval for a hiring request. Requires hiring:manage permission.",
    dependencies=[Depends(require_permission(Permission.HIRING_MANAGE))],
)
async def route_to_ceo(
    body: CommentsRequest = Body(default_factory=CommentsRequest),
    request_id: int = Path(..., description="Request ID"),
    current_user: CurrentUser = Depends(require_active_user),
    db: AsyncSession = Depends(get_db),
):
    result = await approval_service.route_to_ceo(
        db, request_id, current_user, comments=body.comments
    )
    return success(result)


@router.post(
    "/{request_id}/ceo-decision",
    summary="CEO Decision",
    description="Approve or reject a hiring request pending CEO approval. Requires hiring:ceo_decide permission.",
    dependencies=[Depends(require_permission(Permission.HIRING_CEO_DECIDE))],
)
async def ceo_decision(
    body: CEODecisionRequest,
    request_id: int = Path(..., description="Request ID"),
    current_user: CurrentUser = Depends(require_active_user),
    db: AsyncSession = Depends(get_db),
):
    result = await approval_service.ceo_decision(
        db, request_id, current_user, decision=body.decision, comments=body.comments
    )
    return success(result)


@router.post(
    "/{request_id}/mark-job-posted",
    summary="Mark Job Posted",
    description="Record that the approved position has been advertised. Requires hiring:manage permission.",
    dependencies=[Depends(require_permission(Permission.HIRING_MANAGE))],
)
async def mark_job_posted(
    body: MarkJobPostedRequest = Body(default_factory=MarkJobPostedRequest),
    request_id: int = Path(..., description="Request ID"),
    current_user: CurrentUser = Depends(require_active_user),
    db: AsyncSession = Depends(get_db),
):
    result = await approval_service.mark_job_posted(
        db,
        request_id,
        current_user,
        job_posting_url=body.job_posting_url,
        notes=body.notes,
    )
    return success(result)


@router.post(
    "/{request_id}/route-to-manager",
    summary="Route to Hiring Manager",
    description="Send submitted candidates to the hiring manager. Requires hiring:manage permission.",
    dependencies=[Depends(require_permission(Permission.HIRING_MANAGE))],
)
async def route_to_manager(
    body: CommentsRequest = Body(default_factory=CommentsRequest),
    request_id: int = Path(..., description="Request ID"),
    current_user: CurrentUser = Depends(require_active_user),
    db: AsyncSession = Depends(get_db),
):
    result = await approval_service.route_to_manager(
        db, request_id, current_user, comments=body.comments
    )
    return success(result)


@router.post(
    "/{request_id}/manager-decision",
    summary="Hiring Manager Decision",
    description="Approve a candidate or send the request back. Only the requester may decide.",
)
async def manager_decision(
    body: ManagerDecisionRequest,
    request_id: int = Path(..., description="Request ID"),
    current_user: CurrentUser = Depends(require_active_user),
    db: AsyncSession = Depends(get_db),
):
    result = await approval_service.manager_decision(
        db,
        request_id,
        current_user,
        decision=body.decision,
        selected_candidate_id=body.selected_candidate_id,
        comments=body.comments,
    )
    return success(result)
