# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Grade model."""

from decimal import Decimal

from sqlalchemy import Boolean, ForeignKey, Numeric, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from scholaris.infrastructure.database.models.base import Base, TimestampMixin, uuid_pk
from scholaris.infrastructure.database.models.course import Course
from scholaris.infrastructure.database.models.user import User


class Grade(Base, TimestampMixin):
    """A graded result for a student in a course.

    Linked to at most one of an assignment, a submission or a quiz attempt.
    Extra-credit grades are excluded from GPA.
    """

    __tablename__ = "grades"

    id: Mapped[str] = uuid_pk()
    student_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    course_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("courses.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    assignment_id: Mapped[str | None] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("assignments.id", ondelete="SET NULL"),
        nullable=True,
    )
    submission_id: Mapped[str | None] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("assignment_submissions.id", ondelete="SET NULL"),
        nullable=True,
    )
    quiz_attempt_id: Mapped[str | None] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("quiz_attempts.id", ondelete="SET NULL"),
        nullable=True,
        unique=True,
    )
    letter_grade: Mapped[str] = mapped_column(String(3), nullable=False)
    score: Mapped[Decimal] = mapped_column(Numeric(7, 2), nullable=False)
    max_points: Mapped[Decimal] = mapped_column(Numeric(7, 2), nullable=False)
    percentage: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False)
    weight: Mapped[Decimal] = mapped_column(Numeric(4, 2), nullable=False, default=Decimal("1.0"))
    is_extra_credit: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    feedback: Mapped[str | None] = mapped_column(Text, nullable=True)
    graded_by_id: Mapped[str | None] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )

    course: Mapped[Course] = relationship()
    student: Mapped[User] = relationship(foreign_keys=[student_id])
