"""
Candidate resume endpoints.

Resumes can be added and removed only while the job is posted.
"""

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Path, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_storage, require_active_user
from api.schemas.common import success
from api.services import resumes as resume_service
from api.uploads import discard_document, document_response, store_document
from core.middleware.authentication import CurrentUser
from core.middleware.authorization import Permission, require_permission
from core.storage.local import LocalStorage, RESUMES
from database.engine import get_db

router = APIRouter(prefix="/requests", tags=["resumes"])


@router.post(
    "/{request_id}/upload-resume",
    summary="Upload Candidate Resume",
    description="Attach a candidate resume (PDF, DOC, DOCX). Requires resume:manage permission.",
    dependencies=[Depends(require_permission(Permission.RESUME_MANAGE))],
)
async def upload_resume(
    request_id: int = Path(..., description="Request ID"),
    file: UploadFile = File(..., description="Resume document"),
    candidate_name: Optional[str] = Form(None, alias="candidateName"),
    notes: Optional[str] = Form(None),
    current_user: CurrentUser = Depends(require_active_user),
    db: AsyncSession = Depends(get_db),
    storage: LocalStorage = Depends(get_storage),
):
    document = await store_document(file, storage, RESUMES)
    try:
        result = await resume_service.upload_resume(
            db,
            request_id,
            current_user,
            file_name=document.file_name,
            file_url=document.url,
            file_size=document.size,
            mime_type=document.mime_type,
            candidate_name=candidate_name or None,
            notes=notes or None,
        )
    except Exception:
        discard_document(storage, document)
        raise
    return success(result)


@router.get(
    "/{request_id}/resumes",
    summary="List Candidate Resumes",
    description="Resumes submitted for a request, newest first.",
)
async def list_resumes(
    request_id: int = Path(..., description="Request ID"),
    current_user: CurrentUser = Depends(require_active_user),
    db: AsyncSession = Depends(get_db),
):
    return success(await resume_service.list_resumes(db, request_id, current_user))


@router.get(
    "/{request_id}/resumes/{resume_id}/file",
    summary="Download Candidate Resume",
    description="Download the stored resume document.",
)
async def download_resume(
    request_id: int = Path(..., description="Request ID"),
    resume_id: int = Path(..., description="Resume ID"),
    current_user: CurrentUser = Depends(require_active_user),
    db: AsyncSession = Depends(get_db),
    storage: LocalStorage = Depends(get_storage),
):
    document = await resume_service.get_resume_file(db, request_id, resume_id, current_user)
    return document_response(storage, document)

@router.delete(
    "/{request_id}/resumes/{resume_id}",
    summary="Delete Candidate Resume",
    description="Remove a resume while the job is posted. Requires resume:manage permission.",
    dependencies=[Depends(require_permission(Permission.RESUME_MANAGE))],
)
async def delete_resume(
    request_id: int = Path(..., description="Request ID"),
    resume_id: int = Path(..., description="Resume ID"),
    current_user: CurrentUser = Depends(require_active_user),
    db: AsyncSession = Depends(get_db),
    storage: LocalStorage = Depends(get_storage),
):
    result = await resume_service.delete_resume(
        db, request_id, resume_id, current_user, storage=storage
    )
    return success(result)
