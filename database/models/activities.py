"""
Activities Module

Append-only audit trail of everything that happens to a request.
"""

from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import (
    String,
    Boolean,
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
class ActivityType(str, PyEnum):
    """Kind of activity entry."""

    SYSTEM = "SYSTEM"
    COMMENT = "COMMENT"
    APPROVAL = "APPROVAL"
    REJECTION = "REJECTION"
    ASSIGNMENT = "ASSIGNMENT"
    ATTACHMENT = "ATTACHMENT"
    STATUS_CHANGE = "STATUS_CHANGE"


# ==================== RequestActivity Model ===================== #
class RequestActivity(Base):
    """
    Activity log entry. Rows are inserted, never updated or deleted.
    """

    __tablename__ = "request_activities"

    id: Mapped[int] = mapped_column(
        BigIntPK, primary_key=True, nullable=False, autoincrement=True
    )
    request_id: Mapped[int] = mapped_column(
        BigIntPK,
        ForeignKey("requests.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    author_id: Mapped[int | None] = mapped_column(
        BigIntPK, ForeignKey("users.id"), nullable=True
    )
    author_name: Mapped[str] = mapped_column(String(255), nullable=False)
    author_role: Mapped[str | None] = mapped_column(String(100))

    activity_type: Mapped[ActivityType] = mapped_column(
        SQLEnum(ActivityType, native_enum=False, length=50),
        nullable=False,
    )
    message: Mapped[str] = mapped_column(Text, nullable=False)
    is_system_generated: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    is_internal: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    # "metadata" is reserved on declarative classes
    details: Mapped[dict[str, Any] | None] = mapped_column("metadata", JSON)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=now, server_default=func.now()
    )

    request: Mapped["Request"] = relationship("Request", back_populates="activities")

    __table_args__ = (
        Index("idx_request_activity_request_created", "request_id", "created_at"),
    )
