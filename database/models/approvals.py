"""
Approvals Module

Approval gates on a request (CEO sign-off, hiring-manager candidate review).
"""

from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import (
    ForeignKey,
    DateTime,
    func,
    Text,
    Enum as SQLEnum,
    Index,
    text,
)
from database.engine import Base, BigIntPK
from core.utils.datetime import now
from datetime import datetime
from enum import Enum as PyEnum


# ==================== Enums ===================== #
class ApproverType(str, PyEnum):
    """Who must resolve the approval."""

    CEO = "CEO"
    HIRING_MANAGER = "HIRING_MANAGER"


class ApprovalStatus(str, PyEnum):
    """Status of an approval gate."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


# ==================== RequestApproval Model ===================== #
class RequestApproval(Base):
    """
    One approval gate. Resolved exactly once, never deleted.
    """

    __tablename__ = "request_approvals"

    id: Mapped[int] = mapped_column(
        BigIntPK, primary_key=True, nullable=False, autoincrement=True
    )
    request_id: Mapped[int] = mapped_column(
        BigIntPK,
        ForeignKey("requests.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    approver_type: Mapped[ApproverType] = mapped_column(
        SQLEnum(ApproverType, native_enum=False, length=50),
        nullable=False,
    )
    # Unknown for CEO approvals until someone resolves them
    approver_id: Mapped[int | None] = mapped_column(
        BigIntPK, ForeignKey("users.id"), nullable=True
    )
    status: Mapped[ApprovalStatus] = mapped_column(
        SQLEnum(ApprovalStatus, native_enum=False, length=50),
        nullable=False,
        default=ApprovalStatus.PENDING,
    )
    comments: Mapped[str | None] = mapped_column(Text)

    requested_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=now, server_default=func.now()
    )
    responded_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    request: Mapped["Request"] = relationship("Request", back_populates="approvals")

    __table_args__ = (
        # At most one pending approval per approver type on a request
        Index(
            "uq_request_approval_pending",
            "request_id",
            "approver_type",
            unique=True,
            postgresql_where=text("status = 'PENDING'"),
            sqlite_where=text("status = 'PENDING'"),
        ),
    )
