"""
Requests Module

Help-desk requests. A hiring requisition is an ordinary request whose status
walks through the hiring statuses below.
"""

from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import (
    String,
    ForeignKey,
    DateTime,
    func,
    Text,
    JSON,
    Enum as SQLEnum,
    Index,
)
from database.engine import Base, BigIntPK
from core.utils.datetime import now
from datetime import datetime
from enum import Enum as PyEnum
from typing import Any


# ==================== Enums ===================== #
class RequestStatus(str, PyEnum):
    """Status of a help-desk request."""

    # General ticket statuses
    SUBMITTED = "SUBMITTED"
    IN_REVIEW = "IN_REVIEW"
    ACTION_REQUIRED = "ACTION_REQUIRED"
    IN_PROGRESS = "IN_PROGRESS"
    WAITING = "WAITING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    RESOLVED = "RESOLVED"

    # Hiring workflow
    PENDING_CEO_APPROVAL = "PENDING_CEO_APPROVAL"
    CEO_APPROVED = "CEO_APPROVED"
    CEO_REJECTED = "CEO_REJECTED"
    JOB_POSTED = "JOB_POSTED"
    PENDING_MANAGER_REVIEW = "PENDING_MANAGER_REVIEW"
    MANAGER_APPROVED = "MANAGER_APPROVED"
    INTERVIEW_SCHEDULED = "INTERVIEW_SCHEDULED"
    INTERVIEW_FEEDBACK_PENDING = "INTERVIEW_FEEDBACK_PENDING"
    CANDIDATE_REJECTED_INTERVIEW = "CANDIDATE_REJECTED_INTERVIEW"
    HR_SCREENING = "HR_SCREENING"
    LOA_PENDING_APPROVAL = "LOA_PENDING_APPROVAL"
    LOA_APPROVED = "LOA_APPROVED"
    LOA_ISSUED = "LOA_ISSUED"


HIRING_WORKFLOW_STATUSES: frozenset[RequestStatus] = frozenset({
    RequestStatus.PENDING_CEO_APPROVAL,
    RequestStatus.CEO_APPROVED,
    RequestStatus.CEO_REJECTED,
    RequestStatus.JOB_POSTED,
    RequestStatus.PENDING_MANAGER_REVIEW,
    RequestStatus.MANAGER_APPROVED,
    RequestStatus.INTERVIEW_SCHEDULED,
    RequestStatus.INTERVIEW_FEEDBACK_PENDING,
    RequestStatus.CANDIDATE_REJECTED_INTERVIEW,
    RequestStatus.HR_SCREENING,
    RequestStatus.LOA_PENDING_APPROVAL,
    RequestStatus.LOA_APPROVED,
    RequestStatus.LOA_ISSUED,
})

TERMINAL_HIRING_STATUSES: frozenset[RequestStatus] = frozenset({
    RequestStatus.CEO_REJECTED,
    RequestStatus.CANDIDATE_REJECTED_INTERVIEW,
    RequestStatus.RESOLVED,
})


def is_in_hiring_workflow(status: RequestStatus | str) -> bool:
    """True when ``status`` is one of the hiring-specific statuses."""
    try:
        return RequestStatus(status) in HIRING_WORKFLOW_STATUSES
    except ValueError:
        return False


# ==================== Request Model ===================== #
class Request(Base):
    """
    Help-desk request (ticket).
    """

    __tablename__ = "requests"

    id: Mapped[int] = mapped_column(
        BigIntPK, primary_key=True, nullable=False, autoincrement=True
    )
    request_number: Mapped[str] = mapped_column(
        String(50), unique=True, nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)

    status: Mapped[RequestStatus] = mapped_column(
        SQLEnum(RequestStatus, native_enum=False, length=50),
        nullable=False,
        default=RequestStatus.SUBMITTED,
        index=True,
    )

    requester_id: Mapped[int] = mapped_column(
        BigIntPK,
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )
    assigned_to_id: Mapped[int | None] = mapped_column(
        BigIntPK,
        ForeignKey("users.id"),
        nullable=True,
        index=True,
    )

    # Workflow side data (job posting, selected candidate); see HiringCustomFields
    custom_fields: Mapped[dict[str, Any] | None] = mapped_column(JSON)

    resolved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=now, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=now,
        server_default=func.now(),
        onupdate=now,
    )

    # Relationships
    approvals: Mapped[list["RequestApproval"]] = relationship(
        "RequestApproval", back_populates="request", cascade="all, delete-orphan"
    )
    resumes: Mapped[list["CandidateResume"]] = relationship(
        "CandidateResume", back_populates="request", cascade="all, delete-orphan"
    )
    activities: Mapped[list["RequestActivity"]] = relationship(
        "RequestActivity", back_populates="request", cascade="all, delete-orphan"
    )

    __table_args__ = (
        Index("idx_request_requester_status", "requester_id", "status"),
    )

    @property
    def is_hiring_request(self) -> bool:
        return is_in_hiring_workflow(self.status)
