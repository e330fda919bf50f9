"""
Request read endpoints.
"""

from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import require_active_user
from api.schemas.common import success
from api.services import requests as request_service
from core.middleware.authentication import CurrentUser
from database.engine import get_db

router = APIRouter(prefix="/requests", tags=["requests"])


@router.get(
    "/{request_id}",
    summary="Get Request",
    description="Request details and approval history. Visible to the requester, staff, and the CEO during hiring.",
)
async def get_request(
    request_id: int = Path(..., description="Request ID"),
    current_user: CurrentUser = Depends(require_active_user),
    db: AsyncSession = Depends(get_db),
):
    return success(await request_service.get_request(db, request_id, current_user))


@router.get(
    "/{request_id}/activities",
    summary="List Request Activities",
    description="Activity log, oldest first. Internal entries are shown to staff only.",
)
async def list_activities(
    request_id: int = Path(..., description="Request ID"),
    current_user: CurrentUser = Depends(require_active_user),
    db: AsyncSession = Depends(get_db),
):
    return success(await request_service.list_request_activities(db, request_id, current_user))
