"""
Hiring Module

Child records produced by the hiring workflow: candidate resumes, the
interview schedule and feedback, HR screening and the letter of acceptance.
Apart from resumes, each record exists at most once per request.
"""

from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import (
    String,
    ForeignKey,
    BigInteger,
    Integer,
    Date,
    DateTime,
    func,
    Text,
    JSON,
    Enum as SQLEnum,
    Index,
)
from database.engine import Base, BigIntPK
from core.utils.datetime import now
from datetime import date, datetime
from enum import Enum as PyEnum


# ==================== Enums ===================== #
class FeedbackDecision(str, PyEnum):
    """Hiring manager verdict after the interview."""

    PROCEED = "PROCEED"
    REJECT = "REJECT"


class CheckStatus(str, PyEnum):
    """Status of an individual screening check."""

    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class ScreeningStatus(str, PyEnum):
    """Overall screening status, derived from the individual checks."""

    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    ISSUES_FOUND = "ISSUES_FOUND"


def derive_screening_status(
    background: CheckStatus | str, references: CheckStatus | str
) -> ScreeningStatus:
    """Both checks completed -> COMPLETED; any failed -> ISSUES_FOUND."""
    background = CheckStatus(background)
    references = CheckStatus(references)
    if CheckStatus.FAILED in (background, references):
        return ScreeningStatus.ISSUES_FOUND
    if background == references == CheckStatus.COMPLETED:
        return ScreeningStatus.COMPLETED
    return ScreeningStatus.IN_PROGRESS


# ==================== CandidateResume Model ===================== #
class CandidateResume(Base):
    """
    Candidate resume attached to a hiring request while the job is posted.
    """

    __tablename__ = "candidate_resumes"

    id: Mapped[int] = mapped_column(
        BigIntPK, primary_key=True, nullable=False, autoincrement=True
    )
    request_id: Mapped[int] = mapped_column(
        BigIntPK,
        ForeignKey("requests.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    uploaded_by_id: Mapped[int] = mapped_column(
        BigIntPK, ForeignKey("users.id"), nullable=False
    )

    file_name: Mapped[str] = mapped_column(String(500), nullable=False)
    file_url: Mapped[str] = mapped_column(String(1000), nullable=False)
    file_size: Mapped[int] = mapped_column(BigInteger, nullable=False)
    mime_type: Mapped[str] = mapped_column(String(255), nullable=False)
    candidate_name: Mapped[str | None] = mapped_column(String(255))
    notes: Mapped[str | None] = mapped_column(Text)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=now, server_default=func.now()
    )

    request: Mapped["Request"] = relationship("Request", back_populates="resumes")

    __table_args__ = (
        Index("idx_candidate_resume_request_created", "request_id", "created_at"),
    )


# ==================== InterviewSchedule Model ===================== #
class InterviewSchedule(Base):
    """
    Interview arranged for the selected candidate.
    """

    __tablename__ = "interview_schedules"

    id: Mapped[int] = mapped_column(
        BigIntPK, primary_key=True, nullable=False, autoincrement=True
    )
    request_id: Mapped[int] = mapped_column(
        BigIntPK,
        ForeignKey("requests.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    candidate_resume_id: Mapped[int] = mapped_column(
        BigIntPK, ForeignKey("candidate_resumes.id"), nullable=False
    )
    candidate_name: Mapped[str | None] = mapped_column(String(255))

    interview_date: Mapped[date] = mapped_column(Date, nullable=False)
    interview_time: Mapped[str] = mapped_column(String(20), nullable=False)
    location: Mapped[str | None] = mapped_column(String(500))
    meeting_link: Mapped[str | None] = mapped_column(String(1000))
    interviewers: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    notes: Mapped[str | None] = mapped_column(Text)

    scheduled_by_id: Mapped[int] = mapped_column(
        BigIntPK, ForeignKey("users.id"), nullable=False
    )
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


# ==================== InterviewFeedback Model ===================== #
class InterviewFeedback(Base):
    """
    Hiring manager feedback on the interview.
    """

    __tablename__ = "interview_feedback"

    id: Mapped[int] = mapped_column(
        BigIntPK, primary_key=True, nullable=False, autoincrement=True
    )
    request_id: Mapped[int] = mapped_column(
        BigIntPK,
        ForeignKey("requests.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    decision: Mapped[FeedbackDecision] = mapped_column(
        SQLEnum(FeedbackDecision, native_enum=False, length=50),
        nullable=False,
    )

    # Ratings, 1-5
    overall_rating: Mapped[int | None] = mapped_column(Integer)
    technical_skills: Mapped[int | None] = mapped_column(Integer)
    cultural_fit: Mapped[int | None] = mapped_column(Integer)
    communication: Mapped[int | None] = mapped_column(Integer)

    feedback: Mapped[str] = mapped_column(Text, nullable=False)
    concerns: Mapped[str | None] = mapped_column(Text)

    submitted_by_id: Mapped[int] = mapped_column(
        BigIntPK, ForeignKey("users.id"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=now, server_default=func.now()
    )


# ==================== HRScreening Model ===================== #
class HRScreening(Base):
    """
    Background and reference checks for the selected candidate.
    """

    __tablename__ = "hr_screenings"

    id: Mapped[int] = mapped_column(
        BigIntPK, primary_key=True, nullable=False, autoincrement=True
    )
    request_id: Mapped[int] = mapped_column(
        BigIntPK,
        ForeignKey("requests.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )

    background_check_status: Mapped[CheckStatus] = mapped_column(
        SQLEnum(CheckStatus, native_enum=False, length=50),
        nullable=False,
        default=CheckStatus.PENDING,
    )
    background_check_notes: Mapped[str | None] = mapped_column(Text)
    references_check_status: Mapped[CheckStatus] = mapped_column(
        SQLEnum(CheckStatus, native_enum=False, length=50),
        nullable=False,
        default=CheckStatus.PENDING,
    )
    references_check_notes: Mapped[str | None] = mapped_column(Text)
    references_contacted: Mapped[list[str]] = mapped_column(
        JSON, nullable=False, default=list
    )
    overall_status: Mapped[ScreeningStatus] = mapped_column(
        SQLEnum(ScreeningStatus, native_enum=False, length=50),
        nullable=False,
        default=ScreeningStatus.IN_PROGRESS,
    )
    notes: Mapped[str | None] = mapped_column(Text)

    completed_by_id: Mapped[int | None] = mapped_column(
        BigIntPK, ForeignKey("users.id"), nullable=True
    )
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

    def recompute_overall_status(self) -> ScreeningStatus:
        self.overall_status = derive_screening_status(
            self.background_check_status, self.references_check_status
        )
        return self.overall_status


# ==================== LetterOfAcceptance Model ===================== #
class LetterOfAcceptance(Base):
    """
    Letter of acceptance: unsigned upload, manager approval, issuance,
    signed copy and acceptance.
    """

    __tablename__ = "letters_of_acceptance"

    id: Mapped[int] = mapped_column(
        BigIntPK, primary_key=True, nullable=False, autoincrement=True
    )
    request_id: Mapped[int] = mapped_column(
        BigIntPK,
        ForeignKey("requests.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )

    # Unsigned letter
    loa_file_url: Mapped[str] = mapped_column(String(1000), nullable=False)
    loa_file_name: Mapped[str] = mapped_column(String(500), nullable=False)
    loa_file_size: Mapped[int] = mapped_column(BigInteger, nullable=False)
    uploaded_by_id: Mapped[int] = mapped_column(
        BigIntPK, ForeignKey("users.id"), nullable=False
    )

    # Manager approval
    approved_by_id: Mapped[int | None] = mapped_column(
        BigIntPK, ForeignKey("users.id"), nullable=True
    )
    approval_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    approval_comments: Mapped[str | None] = mapped_column(Text)

    # Issuance
    issued_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    # Signed letter
    signed_loa_file_url: Mapped[str | None] = mapped_column(String(1000))
    signed_loa_file_name: Mapped[str | None] = mapped_column(String(500))
    signed_loa_file_size: Mapped[int | None] = mapped_column(BigInteger)
    signed_uploaded_by_id: Mapped[int | None] = mapped_column(
        BigIntPK, ForeignKey("users.id"), nullable=True
    )
    accepted_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

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
