"""
Letter of acceptance endpoints.

Upload -> route for approval -> manager approval -> issue -> signed upload
-> acceptance.
"""

from fastapi import APIRouter, Body, Depends, File, Path, Query, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_storage, require_active_user
from api.schemas.common import success
from api.schemas.hiring import CommentsRequest, ManagerApproveLOARequest, NotesRequest
from api.services import loa as loa_service
from api.uploads import discard_document, document_response, store_document
from core.middleware.authentication import CurrentUser
from core.middleware.authorization import Permission, require_permission
from core.storage.local import LocalStorage, LOA, SIGNED_LOA
from database.engine import get_db

router = APIRouter(prefix="/requests", tags=["letter-of-acceptance"])


@router.post(
    "/{request_id}/loa/upload",
    summary="Upload Letter of Acceptance",
    description="Upload the unsigned letter once screening is completed. Requires loa:manage permission.",
    dependencies=[Depends(require_permission(Permission.LOA_MANAGE))],
)
async def upload_loa(
    request_id: int = Path(..., description="Request ID"),
    file: UploadFile = File(..., description="Letter of acceptance"),
    current_user: CurrentUser = Depends(require_active_user),
    db: AsyncSession = Depends(get_db),
    storage: LocalStorage = Depends(get_storage),
):
    document = await store_document(file, storage, LOA)
    try:
        result = await loa_service.upload_loa(
            db,
            request_id,
            current_user,
            file_url=document.url,
            file_name=document.file_name,
            file_size=document.size,
            storage=storage,
        )
    except Exception:
        discard_document(storage, document)
        raise
    return success(result)


@router.post(
    "/{request_id}/loa/route-for-approval",
    summary="Route LOA for Approval",
    description="Send the letter to the hiring manager. Requires loa:manage permission.",
    dependencies=[Depends(require_permission(Permission.LOA_MANAGE))],
)
async def route_loa_for_approval(
    body: CommentsRequest = Body(default_factory=CommentsRequest),
    request_id: int = Path(..., description="Request ID"),
    current_user: CurrentUser = Depends(require_active_user),
    db: AsyncSession = Depends(get_db),
):
    result = await loa_service.route_loa_for_approval(
        db, request_id, current_user, comments=body.comments
    )
    return success(result)


@router.post(
    "/{request_id}/loa/manager-approve",
    summary="Hiring Manager LOA Decision",
    description="Approve or reject the letter. Only the requester may decide.",
)
async def manager_approve_loa(
    body: ManagerApproveLOARequest,
    request_id: int = Path(..., description="Request ID"),
    current_user: CurrentUser = Depends(require_active_user),
    db: AsyncSession = Depends(get_db),
):
    result = await loa_service.manager_approve_loa(
        db, request_id, current_user, decision=body.decision, comments=body.comments
    )
    return success(result)


@router.post(
    "/{request_id}/loa/mark-issued",
    summary="Mark LOA Issued",
    description="Record that the approved letter was sent. Requires loa:manage permission.",
    dependencies=[Depends(require_permission(Permission.LOA_MANAGE))],
)
async def mark_loa_issued(
    body: NotesRequest = Body(default_factory=NotesRequest),
    request_id: int = Path(..., description="Request ID"),
    current_user: CurrentUser = Depends(require_active_user),
    db: AsyncSession = Depends(get_db),
):
    result = await loa_service.mark_loa_issued(db, request_id, current_user, notes=body.notes)
    return success(result)


@router.post(
    "/{request_id}/loa/upload-signed",
    summary="Upload Signed LOA",
    description="Upload the letter signed by the candidate. Requires loa:manage permission.",
    dependencies=[Depends(require_permission(Permission.LOA_MANAGE))],
)
async def upload_signed_loa(
    request_id: int = Path(..., description="Request ID"),
    file: UploadFile = File(..., description="Signed letter of acceptance"),
    current_user: CurrentUser = Depends(require_active_user),
    db: AsyncSession = Depends(get_db),
    storage: LocalStorage = Depends(get_storage),
):
    document = await store_document(file, storage, SIGNED_LOA)
    try:
        result = await loa_service.upload_signed_loa(
            db,
            request_id,
            current_user,
            file_url=document.url,
            file_name=document.file_name,
            file_size=document.size,
            storage=storage,
        )
    except Exception:
        discard_document(storage, document)
        raise
    return success(result)


@router.post(
    "/{request_id}/loa/mark-accepted",
    summary="Mark LOA Accepted",
    description="Close the hiring request once the signed letter is on file. Requires loa:manage permission.",
    dependencies=[Depends(require_permission(Permission.LOA_MANAGE))],
)
async def mark_loa_accepted(
    body: NotesRequest = Body(default_factory=NotesRequest),
    request_id: int = Path(..., description="Request ID"),
    current_user: CurrentUser = Depends(require_active_user),
    db: AsyncSession = Depends(get_db),
):
    result = await loa_service.mark_loa_accepted(db, request_id, current_user, notes=body.notes)
    return success(result)


@router.get(
    "/{request_id}/loa",
    summary="Get Letter of Acceptance",
    description="Letter of acceptance for a request (null before upload).",
)
async def get_loa(
    request_id: int = Path(..., description="Request ID"),
    current_user: CurrentUser = Depends(require_active_user),
    db: AsyncSession = Depends(get_db),
):
    return success(await loa_service.get_loa_details(db, request_id, current_user))


@router.get(
    "/{request_id}/loa/file",
    summary="Download Letter of Acceptance",
    description="Download the unsigned letter, or the signed copy with signed=true.",
)
async def download_loa(
    request_id: int = Path(..., description="Request ID"),
    signed: bool = Query(False, description="Download the signed copy"),
    current_user: CurrentUser = Depends(require_active_user),
    db: AsyncSession = Depends(get_db),
    storage: LocalStorage = Depends(get_storage),
):
    document = await loa_service.get_loa_file(db, request_id, current_user, signed=signed)
    return document_response(storage, document)
