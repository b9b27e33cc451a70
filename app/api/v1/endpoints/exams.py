"""Exam scheduling, attempt and grading endpoints."""

from fastapi import APIRouter, Query

from app.core.dependencies import Now, Results
from app.schemas.exam import (
    AttemptGrade,
    AttemptResponse,
    AttemptSubmit,
    ExamCreate,
    ExamGradingStats,
    ExamLifecycle,
    ExamListItem,
    ExamPhase,
    ExamResponse,
    GradingFilter,
)
from app.schemas.results import ExamAnalytics

router = APIRouter()


@router.get("", response_model=list[ExamListItem])
def list_exams(
    service: Results,
    now: Now,
    grading: GradingFilter | None = Query(None, description="graded, pending or no-submissions"),
    with_submissions: bool = Query(False, description="Only exams with at least one completed attempt"),
    subject_id: int | None = None,
    class_id: int | None = None,
    phase: ExamPhase | None = Query(None, description="Upcoming, Active or Ended at the current time"),
):
    """
    List exams with their lifecycle phase and grading badge.
    """
    return service.list_exams(
        now,
        grading_filter=grading,
        with_submissions_only=with_submissions,
        subject_id=subject_id,
        class_id=class_id,
        phase=phase,
    )


@router.get("/active", response_model=list[ExamListItem])
def list_active_exams(service: Results, now: Now, class_id: int | None = None):
    """Exams open for attempts right now, optionally for one class."""
    return service.list_exams(now, class_id=class_id, phase=ExamPhase.ACTIVE)


@router.get("/code/{exam_code}", response_model=ExamResponse)
def get_exam_by_code(exam_code: str, service: Results):
    """Look up an exam by the code students enter."""
    return service.get_exam_by_code(exam_code)


@router.post("", response_model=ExamResponse)
def create_exam(request: ExamCreate, service: Results):
    """
    Schedule an exam instance.
    The start time must be earlier than the end time and passing marks
    cannot exceed total marks.
    """
    return service.create_exam(request)


@router.get("/{exam_id}", response_model=ExamResponse)
def get_exam(exam_id: int, service: Results):
    """Get an exam instance."""
    return service.get_exam(exam_id)


@router.get("/{exam_id}/lifecycle", response_model=ExamLifecycle)
def get_exam_lifecycle(exam_id: int, service: Results, now: Now):
    """Phase of the exam right now and, while active, the time remaining."""
    return service.get_lifecycle(exam_id, now)


@router.get("/{exam_id}/stats", response_model=ExamGradingStats)
def get_exam_stats(exam_id: int, service: Results):
    """Submission and grading counts."""
    return service.get_stats(exam_id)


@router.get("/{exam_id}/analytics", response_model=ExamAnalytics)
def get_exam_analytics(exam_id: int, service: Results):
    """Average, highest and lowest percentage, pass rate and grade distribution."""
    return service.get_analytics(exam_id)


@router.get("/{exam_id}/attempts", response_model=list[AttemptResponse])
def list_attempts(exam_id: int, service: Results):
    """All attempts on an exam."""
    return service.get_exam(exam_id).attempts


@router.post("/{exam_id}/attempts", response_model=AttemptResponse)
def submit_attempt(exam_id: int, request: AttemptSubmit, service: Results, now: Now):
    """Record a student's attempt."""
    return service.record_attempt(exam_id, request, now)


@router.put("/{exam_id}/attempts/{attempt_id}/grade", response_model=AttemptResponse)
def grade_attempt(
    exam_id: int,
    attempt_id: int,
    request: AttemptGrade,
    service: Results,
    now: Now,
):
    """Grade a completed attempt."""
    return service.grade_attempt(exam_id, attempt_id, request, now)
