"""
JSON shapes for hiring workflow records.

Keys are camelCase. File sizes are rendered as strings because 64-bit byte
counts do not survive JSON number precision in every client.
"""

from typing import Any, Dict, Optional

from core.utils.datetime import to_iso
from database.models.activities import RequestActivity
from database.models.approvals import RequestApproval
from database.models.hiring import (
    CandidateResume,
    HRScreening,
    InterviewFeedback,
    InterviewSchedule,
    LetterOfAcceptance,
)
from database.models.requests import Request


def _size(value: Optional[int]) -> Optional[str]:
    return str(value) if value is not None else None


def serialize_request(request: Request) -> Dict[str, Any]:
    return {
        "id": request.id,
        "requestNumber": request.request_number,
        "title": request.title,
        "description": request.description,
        "status": request.status.value,
        "requesterId": request.requester_id,
        "assignedToId": request.assigned_to_id,
        "customFields": request.custom_fields or {},
        "resolvedAt": to_iso(request.resolved_at),
        "createdAt": to_iso(request.created_at),
        "updatedAt": to_iso(request.updated_at),
    }


def serialize_approval(approval: RequestApproval) -> Dict[str, Any]:
    return {
        "id": approval.id,
        "requestId": approval.request_id,
        "approverType": approval.approver_type.value,
        "approverId": approval.approver_id,
        "status": approval.status.value,
        "comments": approval.comments,
        "requestedAt": to_iso(approval.requested_at),
        "respondedAt": to_iso(approval.responded_at),
    }


def serialize_resume(resume: CandidateResume) -> Dict[str, Any]:
    return {
        "id": resume.id,
        "requestId": resume.request_id,
        "fileName": resume.file_name,
        "fileUrl": resume.file_url,
        "fileSize": _size(resume.file_size),
        "mimeType": resume.mime_type,
        "candidateName": resume.candidate_name,
        "notes": resume.notes,
        "uploadedById": resume.uploaded_by_id,
        "createdAt": to_iso(resume.created_at),
    }


def serialize_interview_schedule(schedule: Optional[InterviewSchedule]) -> Optional[Dict[str, Any]]:
    if schedule is None:
        return None
    return {
        "id": schedule.id,
        "requestId": schedule.request_id,
        "candidateResumeId": schedule.candidate_resume_id,
        "candidateName": schedule.candidate_name,
        "interviewDate": to_iso(schedule.interview_date),
        "interviewTime": schedule.interview_time,
        "location": schedule.location,
        "meetingLink": schedule.meeting_link,
        "interviewers": list(schedule.interviewers or []),
        "notes": schedule.notes,
        "scheduledById": schedule.scheduled_by_id,
        "createdAt": to_iso(schedule.created_at),
    }


def serialize_interview_feedback(feedback: Optional[InterviewFeedback]) -> Optional[Dict[str, Any]]:
    if feedback is None:
        return None
    return {
        "id": feedback.id,
        "requestId": feedback.request_id,
        "decision": feedback.decision.value,
        "overallRating": feedback.overall_rating,
        "technicalSkills": feedback.technical_skills,
        "culturalFit": feedback.cultural_fit,
        "communication": feedback.communication,
        "feedback": feedback.feedback,
        "concerns": feedback.concerns,
        "submittedById": feedback.submitted_by_id,
        "createdAt": to_iso(feedback.created_at),
    }


def serialize_screening(screening: Optional[HRScreening]) -> Optional[Dict[str, Any]]:
    if screening is None:
        return None
    return {
        "id": screening.id,
        "requestId": screening.request_id,
        "backgroundCheckStatus": screening.background_check_status.value,
        "backgroundCheckNotes": screening.background_check_notes,
        "referencesCheckStatus": screening.references_check_status.value,
        "referencesCheckNotes": screening.references_check_notes,
        "referencesContacted": list(screening.references_contacted or []),
        "overallStatus": screening.overall_status.value,
        "notes": screening.notes,
        "completedById": screening.completed_by_id,
        "createdAt": to_iso(screening.created_at),
        "updatedAt": to_iso(screening.updated_at),
    }


def serialize_loa(loa: Optional[LetterOfAcceptance]) -> Optional[Dict[str, Any]]:
    if loa is None:
        return None
    return {
        "id": loa.id,
        "requestId": loa.request_id,
        "loaFileUrl": loa.loa_file_url,
        "loaFileName": loa.loa_file_name,
        "loaFileSize": _size(loa.loa_file_size),
        "uploadedById": loa.uploaded_by_id,
        "approvedById": loa.approved_by_id,
        "approvalDate": to_iso(loa.approval_date),
        "approvalComments": loa.approval_comments,
        "issuedDate": to_iso(loa.issued_date),
        "signedLoaFileUrl": loa.signed_loa_file_url,
        "signedLoaFileName": loa.signed_loa_file_name,
        "signedLoaFileSize": _size(loa.signed_loa_file_size),
        "signedUploadedById": loa.signed_uploaded_by_id,
        "acceptedDate": to_iso(loa.accepted_date),
        "createdAt": to_iso(loa.created_at),
        "updatedAt": to_iso(loa.updated_at),
    }


def serialize_activity(activity: RequestActivity) -> Dict[str, Any]:
    return {
        "id": activity.id,
        "requestId": activity.request_id,
        "authorId": activity.author_id,
        "authorName": activity.author_name,
        "authorRole": activity.author_role,
        "activityType": activity.activity_type.value,
        "message": activity.message,
        "isSystemGenerated": activity.is_system_generated,
        "isInternal": activity.is_internal,
        "metadata": activity.details,
        "createdAt": to_iso(activity.created_at),
    }
