"""
HR screening endpoints (background and reference checks).
"""

from fastapi import APIRouter, Body, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import require_active_user
from api.schemas.common import success
from api.schemas.hiring import NotesRequest, UpdateScreeningRequest
from api.services import screening as screening_service
from core.middleware.authentication import CurrentUser
from core.middleware.authorization import Permission, require_permission
from database.engine import get_db

router = APIRouter(prefix="/requests", tags=["screening"])


@router.post(
    "/{request_id}/start-screening",
    summary="Start HR Screening",
    description="Start background and reference checks. Requires screening:manage permission.",
    dependencies=[Depends(require_permission(Permission.SCREENING_MANAGE))],
)
async def start_screening(
    body: NotesRequest = Body(default_factory=NotesRequest),
    request_id: int = Path(..., description="Request ID"),
    current_user: CurrentUser = Depends(require_active_user),
    db: AsyncSession = Depends(get_db),
):
    result = await screening_service.start_hr_screening(
        db, request_id, current_user, notes=body.notes
    )
    return success(result)


@router.put(
    "/{request_id}/screening",
    summary="Update HR Screening",
    description="Update check statuses; the overall status is recomputed. Requires screening:manage permission.",
    dependencies=[Depends(require_permission(Permission.SCREENING_MANAGE))],
)
async def update_screening(
    body: UpdateScreeningRequest,
    request_id: int = Path(..., description="Request ID"),
    current_user: CurrentUser = Depends(require_active_user),
    db: AsyncSession = Depends(get_db),
):
    result = await screening_service.update_screening_status(
        db,
        request_id,
        current_user,
        background_check_status=body.background_check_status,
        background_check_notes=body.background_check_notes,
        references_check_status=body.references_check_status,
        references_check_notes=body.references_check_notes,
        references_contacted=body.references_contacted,
    )
    return success(result)


@router.get(
    "/{request_id}/screening",
    summary="Get HR Screening",
    description="Screening record for a request (null before screening starts).",
)
async def get_screening(
    request_id: int = Path(..., description="Request ID"),
    current_user: CurrentUser = Depends(require_active_user),
    db: AsyncSession = Depends(get_db),
):
    return success(await screening_service.get_screening_details(db, request_id, current_user))
