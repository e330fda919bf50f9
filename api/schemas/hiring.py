"""Request bodies and typed custom fields for the hiring workflow."""

from datetime import date
from typing import Annotated, Any, Literal, Optional

from pydantic import BeforeValidator, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from api.schemas.common import CamelModel
from core.utils.datetime import parse_date
from database.models.hiring import CheckStatus


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


# Blank strings from form fields are treated as absent
OptionalText = Annotated[Optional[str], BeforeValidator(_blank_to_none)]


# ==================== Custom fields ===================== #
class HiringCustomFields(CamelModel):
    """
    Typed view over ``Request.custom_fields``.

    Keys the hiring workflow does not own are kept as-is so other help-desk
    features can share the same JSON column.
    """

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="allow"
    )

    job_posting_url: Optional[str] = None
    job_posting_notes: Optional[str] = None
    job_posted_at: Optional[str] = None
    selected_candidate_id: Optional[int] = None
    selected_candidate_name: Optional[str] = None

    @classmethod
    def merge(cls, raw: Optional[dict[str, Any]], **updates: Any) -> dict[str, Any]:
        """
        Return the JSON to store after applying ``updates`` to ``raw``.

        Only the updated keys are validated. Everything else already in the
        column is copied over untouched, even when a foreign value sits under
        one of the typed keys. A ``None`` update removes the key.
        """
        fields = cls.model_validate(updates).model_dump(by_alias=True, include=set(updates))

        merged = dict(raw or {})
        for key, value in fields.items():
            if value is None:
                merged.pop(key, None)
            else:
                merged[key] = value
        return merged


# ==================== Approvals ===================== #
class CommentsRequest(CamelModel):
    """Body carrying optional comments (route to CEO / manager / LOA approval)."""

    comments: OptionalText = Field(None, description="Comments added to the activity log")


class CEODecisionRequest(CamelModel):
    decision: Literal["APPROVED", "REJECTED"] = Field(..., description="CEO decision")
    comments: OptionalText = Field(None, description="Decision comments")


class MarkJobPostedRequest(CamelModel):
    job_posting_url: OptionalText = Field(None, description="Public job posting URL")
    notes: OptionalText = Field(None, description="Posting notes")


class ManagerDecisionRequest(CamelModel):
    decision: Literal["APPROVED", "REJECTED"] = Field(..., description="Hiring manager decision")
    selected_candidate_id: Optional[int] = Field(
        None, description="Resume of the candidate chosen for interview"
    )
    comments: OptionalText = Field(None, description="Decision comments")


# ==================== Interviews ===================== #
class ScheduleInterviewRequest(CamelModel):
    candidate_id: int = Field(..., description="Resume id of the candidate to interview")
    interview_date: date = Field(..., description="Interview date (YYYY-MM-DD)")
    interview_time: str = Field(..., min_length=1, max_length=20, description="Interview time")
    location: Optional[str] = Field(None, description="Interview location")
    meeting_link: Optional[str] = Field(None, description="Video call link")
    interviewers: list[str] = Field(default_factory=list, description="Interviewer names")
    notes: OptionalText = Field(None, description="Notes for the interviewers")

    @field_validator("interview_date", mode="before")
    @classmethod
    def parse_interview_date(cls, v: Any) -> Any:
        if isinstance(v, str):
            parsed = parse_date(v)
            if parsed is None:
                raise ValueError("Interview date must be a valid date")
            return parsed
        return v

    @field_validator("interviewers", mode="before")
    @classmethod
    def split_interviewers(cls, v: Any) -> Any:
        """Accept a single comma separated string as well as a list."""
        if v is None:
            return []
        if isinstance(v, str):
            return [name.strip() for name in v.split(",") if name.strip()]
        return v


class InterviewFeedbackRequest(CamelModel):
    decision: Literal["PROCEED", "REJECT"] = Field(..., description="Proceed with or reject the candidate")
    overall_rating: Optional[int] = Field(None, ge=1, le=5)
    technical_skills: Optional[int] = Field(None, ge=1, le=5)
    cultural_fit: Optional[int] = Field(None, ge=1, le=5)
    communication: Optional[int] = Field(None, ge=1, le=5)
    feedback: str = Field(..., min_length=1, description="Interview feedback")
    concerns: Optional[str] = Field(None, description="Concerns about the candidate")

    @field_validator("feedback")
    @classmethod
    def feedback_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Feedback is required")
        return v


# ==================== Screening ===================== #
class NotesRequest(CamelModel):
    """Body carrying optional notes (start screening, mark issued / accepted)."""

    notes: OptionalText = Field(None, description="Notes added to the activity log")


class UpdateScreeningRequest(CamelModel):
    background_check_status: Optional[CheckStatus] = None
    background_check_notes: Optional[str] = None
    references_check_status: Optional[CheckStatus] = None
    references_check_notes: Optional[str] = None
    references_contacted: Optional[list[str]] = None

    @field_validator("references_contacted", mode="before")
    @classmethod
    def split_references(cls, v: Any) -> Any:
        if isinstance(v, str):
            return [ref.strip() for ref in v.split(",") if ref.strip()]
        return v


# ==================== Letter of acceptance ===================== #
class ManagerApproveLOARequest(CamelModel):
    decision: Literal["APPROVE", "REJECT"] = Field(..., description="Approve or reject the letter")
    comments: OptionalText = Field(None, description="Approval comments")

