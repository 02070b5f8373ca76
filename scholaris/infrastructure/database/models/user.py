# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""User, profile and department models."""

from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, ForeignKey, Numeric, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from scholaris.infrastructure.database.models.base import (
    Base,
    SoftDeleteMixin,
    TimestampMixin,
    uuid_pk,
)
from scholaris.models.common import UserRole

if TYPE_CHECKING:
    from scholaris.infrastructure.database.models.session import Session


class Department(Base, TimestampMixin):
    """Academic department owning courses."""

    __tablename__ = "departments"

    id: Mapped[str] = uuid_pk()
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    code: Mapped[str | None] = mapped_column(String(20), nullable=True)


class User(Base, TimestampMixin, SoftDeleteMixin):
    """Platform user (admin, supervisor teacher, teacher or student)."""

    __tablename__ = "users"

    id: Mapped[str] = uuid_pk()
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    role: Mapped[str] = mapped_column(String(30), nullable=False, index=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    profile: Mapped["UserProfile | None"] = relationship(
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
    )
    sessions: Mapped[list["Session"]] = relationship(
        back_populates="user",
        cascade="all, delete-orphan",
    )

    @property
    def is_student(self) -> bool:
        return self.role == UserRole.STUDENT.value

    @property
    def can_teach(self) -> bool:
        """Teachers and supervisor teachers may instruct courses."""
        return self.role in (UserRole.TEACHER.value, UserRole.SUPERVISOR_TEACHER.value)

    @property
    def full_name(self) -> str:
        if self.profile is None:
            return self.email
        return f"{self.profile.first_name} {self.profile.last_name}".strip()


class UserProfile(Base, TimestampMixin):
    """One-to-one personal and academic details for a user."""

    __tablename__ = "user_profiles"

    id: Mapped[str] = uuid_pk()
    user_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    student_number: Mapped[str | None] = mapped_column(String(30), unique=True, nullable=True)
    major: Mapped[str | None] = mapped_column(String(100), nullable=True)
    minor: Mapped[str | None] = mapped_column(String(100), nullable=True)
    gpa: Mapped[Decimal | None] = mapped_column(Numeric(3, 2), nullable=True)

    user: Mapped[User] = relationship(back_populates="profile")
