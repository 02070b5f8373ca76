# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Initial database schema.

Revision ID: 001_initial
Revises: None
Create Date: 2025-01-06
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _uuid_pk() -> sa.Column:
    return sa.Column(
        "id",
        postgresql.UUID(as_uuid=False),
        server_default=sa.text("gen_random_uuid()"),
        primary_key=True,
    )


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
    ]


def _fk(
    name: str,
    target: str,
    nullable: bool = False,
    ondelete: str = "CASCADE",
    **kwargs,
) -> sa.Column:
    return sa.Column(
        name,
        postgresql.UUID(as_uuid=False),
        sa.ForeignKey(target, ondelete=ondelete),
        nullable=nullable,
        **kwargs,
    )


def upgrade() -> None:
    """Create all tables."""
    # =========================================================================
    # USERS AND ORGANIZATION
    # =========================================================================

    op.create_table(
        "departments",
        _uuid_pk(),
        sa.Column("name", sa.String(100), unique=True, nullable=False),
        sa.Column("code", sa.String(20), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "users",
        _uuid_pk(),
        sa.Column("email", sa.String(255), unique=True, nullable=False),
        sa.Column("role", sa.String(30), nullable=False),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default="true"),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_users_email", "users", ["email"])
    op.create_index("ix_users_role", "users", ["role"])

    op.create_table(
        "user_profiles",
        _uuid_pk(),
        _fk("user_id", "users.id", unique=True),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("student_number", sa.String(30), unique=True, nullable=True),
        sa.Column("major", sa.String(100), nullable=True),
        sa.Column("minor", sa.String(100), nullable=True),
        sa.Column("gpa", sa.Numeric(3, 2), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "sessions",
        _uuid_pk(),
        _fk("user_id", "users.id"),
        sa.Column("token", sa.String(512), unique=True, nullable=False),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default="true"),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_sessions_user_id", "sessions", ["user_id"])
    op.create_index("ix_sessions_expires_at", "sessions", ["expires_at"])

    # =========================================================================
    # COURSES
    # =========================================================================

    op.create_table(
        "courses",
        _uuid_pk(),
        sa.Column("code", sa.String(20), unique=True, nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("level", sa.String(30), nullable=False, server_default="undergraduate"),
        sa.Column("credits", sa.Integer, nullable=False, server_default="3"),
        sa.Column("semester", sa.String(20), nullable=False),
        sa.Column("year", sa.Integer, nullable=False),
        sa.Column("capacity", sa.Integer, nullable=True),
        sa.Column(
            "department_id",
            postgresql.UUID(as_uuid=False),
            sa.ForeignKey("departments.id"),
            nullable=False,
        ),
        _fk("instructor_id", "users.id", nullable=True, ondelete="SET NULL"),
        _fk("created_by_id", "users.id", nullable=True, ondelete="SET NULL"),
        sa.Column("start_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("enrollment_deadline", sa.DateTime(timezone=True), nullable=True),
        sa.Column("study_plan", postgresql.JSONB, nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_courses_department_id", "courses", ["department_id"])
    op.create_index("ix_courses_instructor_id", "courses", ["instructor_id"])

    op.create_table(
        "course_prerequisites",
        _fk("course_id", "courses.id", primary_key=True),
        _fk("prerequisite_id", "courses.id", primary_key=True),
    )

    op.create_table(
        "enrollments",
        _uuid_pk(),
        _fk("course_id", "courses.id"),
        _fk("student_id", "users.id"),
        sa.Column("status", sa.String(20), nullable=False, server_default="active"),
        _fk("enrolled_by_id", "users.id", nullable=True, ondelete="SET NULL"),
        sa.Column(
            "enrolled_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.Column("final_grade", sa.String(3), nullable=True),
        sa.Column("final_points", sa.Numeric(5, 2), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("course_id", "student_id", name="uq_enrollments_course_student"),
    )
    op.create_index("ix_enrollments_course_id", "enrollments", ["course_id"])
    op.create_index("ix_enrollments_student_id", "enrollments", ["student_id"])

    # =========================================================================
    # COURSEWORK
    # =========================================================================

    op.create_table(
        "assignments",
        _uuid_pk(),
        _fk("course_id", "courses.id"),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("due_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("max_points", sa.Integer, nullable=False, server_default="100"),
        sa.Column("status", sa.String(20), nullable=False, server_default="assigned"),
        _fk("created_by_id", "users.id", nullable=True, ondelete="SET NULL"),
        *_timestamps(),
    )
    op.create_index("ix_assignments_course_id", "assignments", ["course_id"])

    op.create_table(
        "assignment_submissions",
        _uuid_pk(),
        _fk("assignment_id", "assignments.id"),
        _fk("student_id", "users.id"),
        sa.Column("text_content", sa.Text, nullable=True),
        sa.Column(
            "submitted_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        *_timestamps(),
        sa.UniqueConstraint(
            "assignment_id",
            "student_id",
            name="uq_assignment_submissions_assignment_student",
        ),
    )
    op.create_index(
        "ix_assignment_submissions_assignment_id",
        "assignment_submissions",
        ["assignment_id"],
    )
    op.create_index(
        "ix_assignment_submissions_student_id",
        "assignment_submissions",
        ["student_id"],
    )

    op.create_table(
        "quizzes",
        _uuid_pk(),
        _fk("course_id", "courses.id"),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("duration", sa.String(50), nullable=True),
        sa.Column("is_timed", sa.Boolean, nullable=False, server_default="false"),
        sa.Column("attempts_allowed", sa.Integer, nullable=False, server_default="1"),
        sa.Column("due_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("total_questions", sa.Integer, nullable=False, server_default="0"),
        sa.Column("max_points", sa.Integer, nullable=False, server_default="100"),
        sa.Column(
            "questions_data",
            postgresql.JSONB,
            nullable=False,
            server_default=sa.text("'[]'::jsonb"),
        ),
        _fk("created_by_id", "users.id", nullable=True, ondelete="SET NULL"),
        *_timestamps(),
    )
    op.create_index("ix_quizzes_course_id", "quizzes", ["course_id"])

    op.create_table(
        "quiz_attempts",
        _uuid_pk(),
        _fk("quiz_id", "quizzes.id"),
        _fk("student_id", "users.id"),
        sa.Column(
            "started_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.Column("submitted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("answers", postgresql.JSONB, nullable=True),
        sa.Column("score", sa.Integer, nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_quiz_attempts_quiz_id", "quiz_attempts", ["quiz_id"])
    op.create_index("ix_quiz_attempts_student_id", "quiz_attempts", ["student_id"])

    # =========================================================================
    # GRADES
    # =========================================================================

    op.create_table(
        "grades",
        _uuid_pk(),
        _fk("student_id", "users.id"),
        _fk("course_id", "courses.id"),
        _fk("assignment_id", "assignments.id", nullable=True, ondelete="SET NULL"),
        _fk("submission_id", "assignment_submissions.id", nullable=True, ondelete="SET NULL"),
        _fk(
            "quiz_attempt_id",
            "quiz_attempts.id",
            nullable=True,
            ondelete="SET NULL",
            unique=True,
        ),
        sa.Column("letter_grade", sa.String(3), nullable=False),
        sa.Column("score", sa.Numeric(7, 2), nullable=False),
        sa.Column("max_points", sa.Numeric(7, 2), nullable=False),
        sa.Column("percentage", sa.Numeric(5, 2), nullable=False),
        sa.Column("weight", sa.Numeric(4, 2), nullable=False, server_default="1.0"),
        sa.Column("is_extra_credit", sa.Boolean, nullable=False, server_default="false"),
        sa.Column("feedback", sa.Text, nullable=True),
        _fk("graded_by_id", "users.id", nullable=True, ondelete="SET NULL"),
        *_timestamps(),
    )
    op.create_index("ix_grades_student_id", "grades", ["student_id"])
    op.create_index("ix_grades_course_id", "grades", ["course_id"])


def downgrade() -> None:
    """Drop all tables."""
    op.drop_table("grades")
    op.drop_table("quiz_attempts")
    op.drop_table("quizzes")
    op.drop_table("assignment_submissions")
    op.drop_table("assignments")
    op.drop_table("enrollments")
    op.drop_table("course_prerequisites")
    op.drop_table("courses")
    op.drop_table("sessions")
    op.drop_table("user_profiles")
    op.drop_table("users")
    op.drop_table("departments")
