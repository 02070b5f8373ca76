# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the grade calculation service."""

from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from scholaris.domains.activity.service import AuditAction
from scholaris.domains.grade.service import (
    AlreadyGradedError,
    CourseNotFoundError,
    GradeCalculationService,
    GradeNotFoundError,
    GradingAccessDeniedError,
    GradingService,
    InvalidGradeError,
    StudentNotFoundError,
    SubmissionNotFoundError,
)
from scholaris.infrastructure.database.models.activity import AuditLog, Notification
from scholaris.infrastructure.database.models.grade import Grade
from scholaris.models.grade import GradeSubmissionRequest, GradeUpdateRequest


@pytest.fixture
def grade_service(mock_db: AsyncMock) -> GradeCalculationService:
    """Create grade service with mock database."""
    return GradeCalculationService(db=mock_db)


def _rows(rows: list) -> MagicMock:
    result = MagicMock()
    result.all.return_value = rows
    return result


def _scalar(value: object) -> MagicMock:
    result = MagicMock()
    result.scalar_one_or_none.return_value = value
    return result


def _first(value: object) -> MagicMock:
    result = MagicMock()
    result.scalars.return_value.first.return_value = value
    return result


def _added(mock_db: AsyncMock, model: type) -> list:
    return [c.args[0] for c in mock_db.add.call_args_list if isinstance(c.args[0], model)]


class TestCalculateGPA:
    """Tests for GPA calculation."""

    @pytest.mark.asyncio
    async def test_weighted_by_credits(self, grade_service, mock_db) -> None:
        """Test grades are weighted by course credits."""
        mock_db.execute.return_value = _rows(
            [
                ("A", Decimal("1.0"), 3),
                ("C", Decimal("1.0"), 1),
            ]
        )

        gpa = await grade_service.calculate_gpa("student-1")

        assert gpa == 3.5

    @pytest.mark.asyncio
    async def test_no_grades(self, grade_service, mock_db) -> None:
        """Test a student without grades has GPA zero."""
        mock_db.execute.return_value = _rows([])

        assert await grade_service.calculate_gpa("student-1") == 0.0

    @pytest.mark.asyncio
    async def test_term_filter_is_applied(self, grade_service, mock_db) -> None:
        """Test semester and year narrow the query."""
        mock_db.execute.return_value = _rows([("B", Decimal("1.0"), 3)])

        response = await grade_service.get_gpa("student-1", semester="fall", year=2025)

        assert response.gpa == 3.0
        assert response.semester == "fall"
        query = str(mock_db.execute.call_args.args[0])
        assert "courses.semester" in query
        assert "courses.year" in query
        assert "grades.is_extra_credit" in query


class TestUpdateStudentGPA:
    """Tests for storing the GPA on the profile."""

    @pytest.mark.asyncio
    async def test_profile_updated(self, grade_service, mock_db) -> None:
        """Test the computed GPA is written to the profile."""
        profile = MagicMock()
        mock_db.execute.side_effect = [
            _rows([("A-", Decimal("1.0"), 3)]),
            _scalar(profile),
        ]

        gpa = await grade_service.update_student_gpa("student-1")

        assert gpa == 3.7
        assert profile.gpa == Decimal("3.7")
        mock_db.commit.assert_called_once()

    @pytest.mark.asyncio
    async def test_missing_profile(self, grade_service, mock_db) -> None:
        """Test a missing profile raises StudentNotFoundError."""
        mock_db.execute.side_effect = [_rows([]), _scalar(None)]

        with pytest.raises(StudentNotFoundError):
            await grade_service.update_student_gpa("student-1")

        mock_db.commit.assert_not_called()


class TestCourseGrades:
    """Tests for course grade statistics."""

    @pytest.mark.asyncio
    async def test_summary(self, grade_service, mock_db) -> None:
        """Test average and distribution are computed."""
        mock_db.get.return_value = MagicMock()
        mock_db.execute.return_value = _rows(
            [
                (Decimal("95.00"), "A"),
                (Decimal("85.50"), "B"),
                (Decimal("94.00"), "A"),
            ]
        )

        summary = await grade_service.calculate_course_grades("course-1")

        assert summary.average == 91.5
        assert summary.distribution == {"A": 2, "B": 1}
        assert summary.total == 3

    @pytest.mark.asyncio
    async def test_no_grades(self, grade_service, mock_db) -> None:
        """Test a course without grades has an empty summary."""
        mock_db.get.return_value = MagicMock()
        mock_db.execute.return_value = _rows([])

        summary = await grade_service.calculate_course_grades("course-1")

        assert summary.average == 0.0
        assert summary.distribution == {}
        assert summary.total == 0

    @pytest.mark.asyncio
    async def test_course_not_found(self, grade_service, mock_db) -> None:
        """Test a missing course raises CourseNotFoundError."""
        mock_db.get.return_value = None

        with pytest.raises(CourseNotFoundError):
            await grade_service.calculate_course_grades("missing")


class TestTranscript:
    """Tests for transcripts."""

    @pytest.mark.asyncio
    async def test_transcript(self, grade_service, mock_db) -> None:
        """Test transcript rows, GPA and completed credits."""
        student = MagicMock()
        student.id = str(uuid4())
        student.full_name = "Alan Turing"
        student.profile.student_number = "S-001"
        student.profile.major = "Mathematics"
        student.profile.minor = None

        completed = MagicMock()
        completed.course.id = "course-1"
        completed.course.code = "CS101"
        completed.course.name = "Intro"
        completed.course.credits = 3
        completed.course.semester = "fall"
        completed.course.year = 2024
        completed.final_grade = "A"
        completed.final_points = Decimal("4.00")
        completed.status = "completed"

        active = MagicMock()
        active.course.id = "course-2"
        active.course.code = "CS201"
        active.course.name = "Data Structures"
        active.course.credits = 4
        active.course.semester = "spring"
        active.course.year = 2025
        active.final_grade = None
        active.final_points = None
        active.status = "active"

        enrollments_result = MagicMock()
        enrollments_result.scalars.return_value.all.return_value = [completed, active]

        mock_db.execute.side_effect = [
            _scalar(student),
            enrollments_result,
            _rows([("course-1", Decimal("90")), ("course-1", Decimal("80"))]),
            _rows([("A", Decimal("1.0"), 3)]),
        ]

        transcript = await grade_service.get_student_transcript(student.id)

        assert transcript.student.name == "Alan Turing"
        assert transcript.student.student_number == "S-001"
        assert len(transcript.courses) == 2
        assert transcript.courses[0].average_percentage == 85.0
        assert transcript.courses[0].final_points == 4.0
        assert transcript.courses[1].average_percentage == 0.0
        assert transcript.overall_gpa == 4.0
        assert transcript.total_credits == 3

    @pytest.mark.asyncio
    async def test_student_not_found(self, grade_service, mock_db) -> None:
        """Test a missing student raises StudentNotFoundError."""
        mock_db.execute.return_value = _scalar(None)

        with pytest.raises(StudentNotFoundError):
            await grade_service.get_student_transcript("missing")


class TestApplyStudentGPA:
    """Tests for setting the GPA inside a larger transaction."""

    @pytest.mark.asyncio
    async def test_does_not_commit(self, grade_service, mock_db) -> None:
        """Test the profile is updated without committing."""
        profile = MagicMock()
        mock_db.execute.side_effect = [_rows([("B", Decimal("1.0"), 3)]), _scalar(profile)]

        assert await grade_service.apply_student_gpa("student-1") == 3.0
        assert profile.gpa == Decimal("3.0")
        mock_db.commit.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_profile(self, grade_service, mock_db) -> None:
        """Test None is returned when there is no profile."""
        mock_db.execute.side_effect = [_rows([]), _scalar(None)]

        assert await grade_service.apply_student_gpa("student-1") is None


@pytest.fixture
def grading_service(mock_db: AsyncMock) -> GradingService:
    """Create grading service with mock database."""
    return GradingService(db=mock_db)


@pytest.fixture
def submission(sample_student_id: str, sample_teacher_id: str) -> MagicMock:
    """Create a submission to a 50-point assignment."""
    item = MagicMock()
    item.id = str(uuid4())
    item.student_id = sample_student_id
    item.assignment.id = str(uuid4())
    item.assignment.course_id = str(uuid4())
    item.assignment.course.instructor_id = sample_teacher_id
    item.assignment.max_points = 50
    item.assignment.title = "Loops worksheet"
    item.assignment.status = "submitted"
    return item


@pytest.fixture
def recorded_grade(sample_student_id: str, sample_teacher_id: str) -> MagicMock:
    """Create a recorded B- grade of 40/50."""
    item = MagicMock()
    item.id = str(uuid4())
    item.student_id = sample_student_id
    item.course_id = str(uuid4())
    item.course.name = "Intro to Programming"
    item.course.instructor_id = str(uuid4())
    item.assignment_id = str(uuid4())
    item.submission_id = str(uuid4())
    item.quiz_attempt_id = None
    item.letter_grade = "B-"
    item.score = Decimal("40")
    item.max_points = Decimal("50")
    item.percentage = Decimal("80")
    item.weight = Decimal("1.0")
    item.is_extra_credit = False
    item.feedback = None
    item.graded_by_id = sample_teacher_id
    return item


class TestGradeSubmission:
    """Tests for grading assignment submissions."""

    @pytest.mark.asyncio
    async def test_instructor_grades_submission(
        self, grading_service, mock_db, submission, sample_teacher_id
    ) -> None:
        """Test the grade, assignment status, GPA and notification."""
        profile = MagicMock()
        mock_db.execute.side_effect = [
            _scalar(submission),
            _first(None),
            _rows([("A-", Decimal("1.0"), 3)]),
            _scalar(profile),
        ]

        result = await grading_service.grade_submission(
            submission.id,
            GradeSubmissionRequest(score=46, feedback="Well structured"),
            sample_teacher_id,
            "teacher",
        )

        [grade] = _added(mock_db, Grade)
        assert grade.submission_id == submission.id
        assert grade.max_points == Decimal("50")
        assert grade.percentage == Decimal("92.0")
        assert grade.letter_grade == "A-"
        assert grade.graded_by_id == sample_teacher_id
        assert submission.assignment.status == "graded"
        assert profile.gpa == Decimal("3.7")

        assert result.id == grade.id
        assert result.score == 46
        assert result.feedback == "Well structured"

        [notification] = _added(mock_db, Notification)
        assert notification.user_id == submission.student_id
        assert notification.notification_type == "grade_posted"
        assert notification.grade_id == grade.id
        [audit] = _added(mock_db, AuditLog)
        assert audit.action == AuditAction.SUBMISSION_GRADED.value
        assert audit.entity_id == grade.id
        mock_db.commit.assert_called_once()

    @pytest.mark.asyncio
    async def test_explicit_letter(
        self, grading_service, mock_db, submission, sample_teacher_id
    ) -> None:
        """Test a given letter overrides the percentage scale."""
        mock_db.execute.side_effect = [
            _scalar(submission),
            _first(None),
            _rows([]),
            _scalar(None),
        ]

        result = await grading_service.grade_submission(
            submission.id,
            GradeSubmissionRequest(score=30, max_points=40, letter_grade="b+"),
            sample_teacher_id,
            "teacher",
        )

        assert result.letter_grade == "B+"
        assert result.percentage == 75.0

    @pytest.mark.asyncio
    async def test_unknown_letter(
        self, grading_service, mock_db, submission, sample_teacher_id
    ) -> None:
        """Test letters outside the scale are rejected."""
        mock_db.execute.side_effect = [_scalar(submission), _first(None)]

        with pytest.raises(InvalidGradeError):
            await grading_service.grade_submission(
                submission.id,
                GradeSubmissionRequest(score=30, letter_grade="E"),
                sample_teacher_id,
                "teacher",
            )

        mock_db.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_already_graded(
        self, grading_service, mock_db, submission, sample_teacher_id
    ) -> None:
        """Test a submission is graded once."""
        mock_db.execute.side_effect = [_scalar(submission), _first(MagicMock())]

        with pytest.raises(AlreadyGradedError):
            await grading_service.grade_submission(
                submission.id, GradeSubmissionRequest(score=30), sample_teacher_id, "teacher"
            )

    @pytest.mark.asyncio
    async def test_other_teacher_denied(self, grading_service, mock_db, submission) -> None:
        """Test teachers outside the course cannot grade."""
        mock_db.execute.side_effect = [_scalar(submission), _first(None)]

        with pytest.raises(GradingAccessDeniedError):
            await grading_service.grade_submission(
                submission.id, GradeSubmissionRequest(score=30), str(uuid4()), "teacher"
            )

    @pytest.mark.asyncio
    async def test_submission_not_found(
        self, grading_service, mock_db, sample_teacher_id
    ) -> None:
        """Test a missing submission raises SubmissionNotFoundError."""
        mock_db.execute.return_value = _scalar(None)

        with pytest.raises(SubmissionNotFoundError):
            await grading_service.grade_submission(
                "missing", GradeSubmissionRequest(score=30), sample_teacher_id, "teacher"
            )


class TestUpdateGrade:
    """Tests for changing recorded grades."""

    @pytest.mark.asyncio
    async def test_new_score_recomputes_letter(
        self, grading_service, mock_db, recorded_grade, sample_teacher_id
    ) -> None:
        """Test a new score updates percentage, letter and GPA."""
        profile = MagicMock()
        mock_db.execute.side_effect = [
            _scalar(recorded_grade),
            _rows([("A-", Decimal("1.0"), 3)]),
            _scalar(profile),
        ]

        result = await grading_service.update_grade(
            recorded_grade.id,
            GradeUpdateRequest(score=45, feedback="Regraded"),
            sample_teacher_id,
            "teacher",
        )

        assert recorded_grade.score == Decimal("45")
        assert recorded_grade.percentage == Decimal("90.0")
        assert recorded_grade.letter_grade == "A-"
        assert recorded_grade.feedback == "Regraded"
        assert result.letter_grade == "A-"
        assert profile.gpa == Decimal("3.7")

        [audit] = _added(mock_db, AuditLog)
        assert audit.action == AuditAction.GRADE_UPDATED.value
        assert audit.details["changes"] == {"score": 45, "feedback": "Regraded"}
        [notification] = _added(mock_db, Notification)
        assert notification.notification_type == "grade_updated"
        assert notification.message == "Your grade in Intro to Programming is now A-"

    @pytest.mark.asyncio
    async def test_letter_only(
        self, grading_service, mock_db, recorded_grade
    ) -> None:
        """Test a supervisor can change just the letter."""
        mock_db.execute.side_effect = [_scalar(recorded_grade), _rows([]), _scalar(None)]

        await grading_service.update_grade(
            recorded_grade.id,
            GradeUpdateRequest(letter_grade="B"),
            str(uuid4()),
            "supervisor_teacher",
        )

        assert recorded_grade.letter_grade == "B"
        assert recorded_grade.score == Decimal("40")

    @pytest.mark.asyncio
    async def test_other_teacher_denied(
        self, grading_service, mock_db, recorded_grade
    ) -> None:
        """Test teachers who neither graded nor teach the course are denied."""
        mock_db.execute.return_value = _scalar(recorded_grade)

        with pytest.raises(GradingAccessDeniedError):
            await grading_service.update_grade(
                recorded_grade.id, GradeUpdateRequest(score=45), str(uuid4()), "teacher"
            )

        mock_db.commit.assert_not_called()

    @pytest.mark.asyncio
    async def test_grade_not_found(self, grading_service, mock_db, sample_teacher_id) -> None:
        """Test a missing grade raises GradeNotFoundError."""
        mock_db.execute.return_value = _scalar(None)

        with pytest.raises(GradeNotFoundError):
            await grading_service.update_grade(
                "missing", GradeUpdateRequest(score=1), sample_teacher_id, "teacher"
            )
