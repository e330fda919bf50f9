"""
Users Module

Help-desk principals and their roles. Users are provisioned by the identity
service; this service only reads them to resolve the acting principal.
"""

from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import (
    String,
    Boolean,
    ForeignKey,
    DateTime,
    func,
    Enum as SQLEnum,
    UniqueConstraint,
)
from database.engine import Base, BigIntPK
from core.utils.datetime import now
from core.utils.formatting import format_name
from datetime import datetime
from enum import Enum as PyEnum


# ==================== Role Names ===================== #
class RoleName(str, PyEnum):
    ADMIN = "ADMIN"  # help-desk administrator, full access
    AGENT = "AGENT"  # HR / service-desk agent
    CEO = "CEO"  # approves requisitions
    USER = "USER"  # regular employee; may act as hiring manager on own requests


# ==================== User Model ===================== #
class User(Base):
    """
    Help-desk user account.
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(
        BigIntPK, primary_key=True, nullable=False, autoincrement=True
    )
    email: Mapped[str] = mapped_column(
        String(255), unique=True, nullable=False, index=True
    )
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    department: Mapped[str | None] = mapped_column(String(255))
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

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

    # Roles are needed on every authenticated call, load them eagerly
    roles: Mapped[list["UserRole"]] = relationship(
        "UserRole",
        back_populates="user",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    @property
    def full_name(self) -> str:
        return format_name(self.first_name, self.last_name)

    @property
    def role_names(self) -> set[RoleName]:
        return {role.role for role in self.roles}


class UserRole(Base):
    """
    Role assignment for a user.
    """

    __tablename__ = "user_roles"

    id: Mapped[int] = mapped_column(
        BigIntPK, primary_key=True, nullable=False, autoincrement=True
    )
    user_id: Mapped[int] = mapped_column(
        BigIntPK,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    role: Mapped[RoleName] = mapped_column(
        SQLEnum(RoleName, native_enum=False, length=50),
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=now, server_default=func.now()
    )

    user: Mapped["User"] = relationship("User", back_populates="roles")

    __table_args__ = (
        UniqueConstraint("user_id", "role", name="uq_user_role"),
    )
