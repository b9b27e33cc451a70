"""Exam results service: persistence of exams and attempts plus computed views."""

import logging
import secrets
import string
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import ConflictError, InvalidTimeWindowError, NotFoundError, ValidationError
from app.models.exam import ExamAttempt, ExamInstance
from app.models.school_class import SchoolClass
from app.models.student import Student
from app.models.subject import Subject
from app.schemas.exam import (
    AttemptGrade,
    AttemptSubmit,
    ExamCreate,
    ExamGradingStats,
    ExamInstanceRecord,
    ExamLifecycle,
    ExamListItem,
    ExamPhase,
    GradingFilter,
)
from app.schemas.results import AttemptScore, ExamAnalytics, ResultsOverview, TopPerformer
from app.services import grading, lifecycle

logger = logging.getLogger(__name__)

EXAM_CODE_ALPHABET = string.ascii_uppercase + string.digits
EXAM_CODE_LENGTH = 6


class ResultsService:
    """Exam instance and attempt management with grading and lifecycle views."""

    def __init__(self, db: Session, strict: bool | None = None):
        self.db = db
        self.strict = settings.STRICT_RESULT_VALIDATION if strict is None else strict

    # ==========================================
    # Exams
    # ==========================================

    def create_exam(self, request: ExamCreate) -> ExamInstance:
        """Schedule a new exam instance."""
        if lifecycle.as_utc(request.start_time) >= lifecycle.as_utc(request.end_time):
            raise InvalidTimeWindowError(request.start_time, request.end_time)
        if request.passing_marks is not None and request.passing_marks > request.total_marks:
            raise ValidationError(
                "Passing marks cannot exceed total marks",
                details={"passing_marks": request.passing_marks, "total_marks": request.total_marks},
            )

        if not self.db.get(Subject, request.subject_id):
            raise NotFoundError("Subject", str(request.subject_id))
        if not self.db.get(SchoolClass, request.class_id):
            raise NotFoundError("Class", str(request.class_id))

        exam_code = request.exam_code or self._generate_exam_code()
        if self._exam_code_taken(exam_code):
            raise ConflictError("Exam code already in use", details={"exam_code": exam_code})

        exam = ExamInstance(
            title=request.title,
            exam_code=exam_code,
            subject_id=request.subject_id,
            class_id=request.class_id,
            description=request.description,
            start_time=lifecycle.as_utc(request.start_time),
            end_time=lifecycle.as_utc(request.end_time),
            total_marks=request.total_marks,
            passing_marks=request.passing_marks,
        )
        self.db.add(exam)
        self.db.flush()
        self.db.refresh(exam)
        logger.info(f"Exam {exam.exam_code} scheduled for class {exam.class_id}")
        return exam

    def _exam_code_taken(self, exam_code: str) -> bool:
        result = self.db.execute(select(ExamInstance.id).where(ExamInstance.exam_code == exam_code))
        return result.first() is not None

    def _generate_exam_code(self) -> str:
        """Random unused exam code."""
        while True:
            code = "".join(secrets.choice(EXAM_CODE_ALPHABET) for _ in range(EXAM_CODE_LENGTH))
            if not self._exam_code_taken(code):
                return code

    def get_exam(self, exam_id: int) -> ExamInstance:
        """Get exam instance by ID."""
        exam = self.db.get(ExamInstance, exam_id)
        if not exam:
            raise NotFoundError("Exam", str(exam_id))
        return exam

    def get_exam_by_code(self, exam_code: str) -> ExamInstance:
        """Get exam instance by its exam code, ignoring case."""
        exam_code = exam_code.strip().upper()
        result = self.db.execute(select(ExamInstance).where(ExamInstance.exam_code == exam_code))
        exam = result.scalar_one_or_none()
        if not exam:
            raise NotFoundError("Exam", exam_code)
        return exam

    def get_exam_record(self, exam_id: int) -> ExamInstanceRecord:
        """Exam with its attempts as a plain record."""
        return ExamInstanceRecord.model_validate(self.get_exam(exam_id))

    def list_exam_records(
        self,
        subject_id: int | None = None,
        class_id: int | None = None,
    ) -> list[ExamInstanceRecord]:
        """All exams, most recent start first."""
        query = select(ExamInstance)
        if subject_id:
            query = query.where(ExamInstance.subject_id == subject_id)
        if class_id:
            query = query.where(ExamInstance.class_id == class_id)
        query = query.order_by(ExamInstance.start_time.desc(), ExamInstance.id.desc())

        result = self.db.execute(query)
        return [ExamInstanceRecord.model_validate(exam) for exam in result.scalars().all()]

    def list_exams(
        self,
        now: datetime,
        grading_filter: GradingFilter | None = None,
        with_submissions_only: bool = False,
        subject_id: int | None = None,
        class_id: int | None = None,
        phase: ExamPhase | None = None,
    ) -> list[ExamListItem]:
        """Exams with lifecycle phase and grading badge at ``now``."""
        items = []
        for record in self.list_exam_records(subject_id=subject_id, class_id=class_id):
            exam_lifecycle = lifecycle.classify_exam(record, now, strict=self.strict)
            if phase and exam_lifecycle.phase != phase:
                continue
            if with_submissions_only and not grading.has_submissions(record):
                continue
            stats = grading.exam_stats(record, strict=self.strict)
            if not grading.matches_grading_filter(stats, grading_filter):
                continue
            items.append(
                ExamListItem(
                    id=record.id,
                    title=record.title,
                    exam_code=record.exam_code,
                    subject_id=record.subject_id,
                    class_id=record.class_id,
                    start_time=record.start_time,
                    end_time=record.end_time,
                    total_marks=record.total_marks,
                    lifecycle=exam_lifecycle,
                    stats=stats,
                    badge=grading.exam_status_badge(stats),
                )
            )
        return items

    def get_lifecycle(self, exam_id: int, now: datetime) -> ExamLifecycle:
        """Lifecycle phase of one exam at ``now``."""
        return lifecycle.classify_exam(self.get_exam_record(exam_id), now, strict=self.strict)

    def get_stats(self, exam_id: int) -> ExamGradingStats:
        """Grading counts for one exam."""
        return grading.exam_stats(self.get_exam_record(exam_id), strict=self.strict)

    def get_analytics(self, exam_id: int) -> ExamAnalytics:
        """Score analytics for one exam."""
        return grading.exam_analytics(self.get_exam_record(exam_id))

    def get_attempt_scores(self, exam_id: int) -> list[AttemptScore]:
        """Displayed scores of the completed attempts of one exam."""
        return grading.attempt_scores(self.get_exam_record(exam_id), strict=self.strict)

    # ==========================================
    # Attempts
    # ==========================================

    def record_attempt(
        self,
        exam_id: int,
        request: AttemptSubmit,
        now: datetime,
    ) -> ExamAttempt:
        """Record a student's attempt; one attempt per student per exam."""
        exam = self.get_exam(exam_id)
        student = self.db.get(Student, request.student_id)
        if not student:
            raise NotFoundError("Student", str(request.student_id))
        if any(attempt.student_id == student.id for attempt in exam.attempts):
            raise ConflictError(
                "Student has already attempted this exam",
                details={"exam_id": exam_id, "student_id": student.id},
            )
        if request.score > exam.total_marks:
            raise ValidationError(
                "Score cannot exceed total marks",
                details={"score": request.score, "total_marks": exam.total_marks},
            )

        submitted_at = None
        if request.is_completed:
            submitted_at = request.submitted_at or now

        attempt = ExamAttempt(
            is_completed=request.is_completed,
            score=request.score,
            percentage=request.percentage,
            submitted_at=submitted_at,
        )
        attempt.student = student
        exam.attempts.append(attempt)
        self.db.flush()
        self.db.refresh(attempt)
        logger.info(f"Attempt recorded for student {student.id} on exam {exam.exam_code}")
        return attempt

    def grade_attempt(
        self,
        exam_id: int,
        attempt_id: int,
        request: AttemptGrade,
        now: datetime,
    ) -> ExamAttempt:
        """Apply a grader's marks to a completed attempt."""
        exam = self.get_exam(exam_id)
        attempt = next((a for a in exam.attempts if a.id == attempt_id), None)
        if not attempt:
            raise NotFoundError("Attempt", str(attempt_id))
        if not attempt.is_completed:
            raise ValidationError(
                "Only completed attempts can be graded",
                details={"attempt_id": attempt_id},
            )
        if request.score > exam.total_marks:
            raise ValidationError(
                "Score cannot exceed total marks",
                details={"score": request.score, "total_marks": exam.total_marks},
            )

        percentage = request.percentage
        if percentage is None:
            percentage = round(request.score / exam.total_marks * 100, 2)

        attempt.actual_score = request.score
        attempt.actual_percentage = percentage
        attempt.grading_status = request.grading_status
        attempt.graded_at = now
        self.db.flush()
        self.db.refresh(attempt)
        logger.info(
            f"Attempt {attempt.id} on exam {exam.exam_code} graded "
            f"({attempt.grading_status.value})"
        )
        return attempt

    # ==========================================
    # Cross-exam results
    # ==========================================

    def get_overview(self, now: datetime) -> ResultsOverview:
        """Grading totals and phase counts across all exams."""
        records = self.list_exam_records()
        return ResultsOverview(
            grading=grading.aggregate(records, strict=self.strict),
            phases=lifecycle.count_by_phase(records, now),
        )

    def get_top_performers(
        self,
        limit: int | None = None,
        class_id: int | None = None,
    ) -> list[TopPerformer]:
        """Students ranked by average graded percentage."""
        records = self.list_exam_records(class_id=class_id)
        return grading.top_performers(records, limit or settings.TOP_PERFORMERS_LIMIT)
