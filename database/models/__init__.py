"""ORM models. Importing the package registers every mapper on ``Base.metadata``."""

from database.models.users import User, UserRole, RoleName
from database.models.requests import (
    Request,
    RequestStatus,
    HIRING_WORKFLOW_STATUSES,
    TERMINAL_HIRING_STATUSES,
    is_in_hiring_workflow,
)
from database.models.approvals import RequestApproval, ApproverType, ApprovalStatus
from database.models.activities import RequestActivity, ActivityType
from database.models.hiring import (
    CandidateResume,
    InterviewSchedule,
    InterviewFeedback,
    HRScreening,
    LetterOfAcceptance,
    FeedbackDecision,
    CheckStatus,
    ScreeningStatus,
    derive_screening_status,
)

__all__ = [
    "User",
    "UserRole",
    "RoleName",
    "Request",
    "RequestStatus",
    "HIRING_WORKFLOW_STATUSES",
    "TERMINAL_HIRING_STATUSES",
    "is_in_hiring_workflow",
    "RequestApproval",
    "ApproverType",
    "ApprovalStatus",
    "RequestActivity",
    "ActivityType",
    "CandidateResume",
    "InterviewSchedule",
    "InterviewFeedback",
    "HRScreening",
    "LetterOfAcceptance",
    "FeedbackDecision",
    "CheckStatus",
    "ScreeningStatus",
    "derive_screening_status",
]
