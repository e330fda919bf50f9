"""
API Services Layer.

Hiring workflow operations. Each function takes the request-scoped
``AsyncSession`` and the acting ``CurrentUser``, raises ``core.exceptions``
errors on guard failures and returns camelCase dictionaries.
"""

from api.services.approvals import (
    route_to_ceo,
    ceo_decision,
    mark_job_posted,
    route_to_manager,
    manager_decision,
)

from api.services.resumes import (
    upload_resume,
    list_resumes,
    delete_resume,
)

from api.services.interviews import (
    schedule_interview,
    submit_interview_feedback,
    get_interview_details,
)

from api.services.screening import (
    start_hr_screening,
    update_screening_status,
    get_screening_details,
)

from api.services.loa import (
    upload_loa,
    route_loa_for_approval,
    manager_approve_loa,
    mark_loa_issued,
    upload_signed_loa,
    mark_loa_accepted,
    get_loa_details,
)

from api.services.requests import (
    get_request,
    list_request_activities,
)

__all__ = [
    # Approvals
    "route_to_ceo",
    "ceo_decision",
    "mark_job_posted",
    "route_to_manager",
    "manager_decision",
    # Resumes
    "upload_resume",
    "list_resumes",
    "delete_resume",
    # Interviews
    "schedule_interview",
    "submit_interview_feedback",
    "get_interview_details",
    # Screening
    "start_hr_screening",
    "update_screening_status",
    "get_screening_details",
    # Letter of acceptance
    "upload_loa",
    "route_loa_for_approval",
    "manager_approve_loa",
    "mark_loa_issued",
    "upload_signed_loa",
    "mark_loa_accepted",
    "get_loa_details",
    # Requests
    "get_request",
    "list_request_activities",
]
