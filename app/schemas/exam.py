"""Exam schemas."""

import enum
from datetime import datetime

from pydantic import Field, field_validator, model_validator

from app.models.exam import GradingStatus
from app.schemas.common import BaseSchema, decimal_to_float


class ExamPhase(str, enum.Enum):
    """Time-window derived phase of an exam instance."""

    UPCOMING = "Upcoming"
    ACTIVE = "Active"
    ENDED = "Ended"


class GradingFilter(str, enum.Enum):
    """Results list filter on grading progress."""

    GRADED = "graded"
    PENDING = "pending"
    NO_SUBMISSIONS = "no-submissions"


# ==========================================
# Records consumed by the results aggregator
# ==========================================

class AttemptRecord(BaseSchema):
    """A student's attempt as seen by the aggregator."""

    id: int | None = None
    student_id: int
    student_name: str | None = None
    is_completed: bool = False
    grading_status: GradingStatus | None = GradingStatus.PENDING
    score: float | None = 0
    percentage: float | None = None
    actual_score: float | None = None
    actual_percentage: float | None = None
    submitted_at: datetime | None = None

    @field_validator("score", "percentage", "actual_score", "actual_percentage", mode="before")
    @classmethod
    def coerce_decimal(cls, v):
        return decimal_to_float(v)

    @model_validator(mode="after")
    def completed_attempt_has_grading_status(self) -> "AttemptRecord":
        if self.is_completed and self.grading_status is None:
            raise ValueError("A completed attempt must carry a grading status")
        return self

    @property
    def is_manually_graded(self) -> bool:
        return self.actual_score is not None

    @property
    def effective_score(self) -> float:
        """Manually graded score once graded (zero included), otherwise the recorded score."""
        if self.is_manually_graded:
            return self.actual_score
        return self.score or 0

    @property
    def effective_percentage(self) -> float | None:
        """Manually graded percentage once graded, otherwise the recorded one."""
        if self.is_manually_graded:
            return self.actual_percentage
        return self.percentage


class ExamInstanceRecord(BaseSchema):
    """An exam instance with its attempts, as seen by the aggregator."""

    id: int
    title: str = ""
    exam_code: str | None = None
    subject_id: int | None = None
    class_id: int | None = None
    start_time: datetime
    end_time: datetime
    total_marks: int
    passing_marks: int | None = None
    attempts: list[AttemptRecord] = []


# ==========================================
# Exam CRUD Schemas
# ==========================================

class ExamCreate(BaseSchema):
    """Exam instance creation schema."""

    title: str = Field(..., min_length=1, max_length=200)
    exam_code: str | None = Field(None, min_length=6, max_length=12)
    subject_id: int
    class_id: int
    description: str | None = Field(None, max_length=1000)
    start_time: datetime
    end_time: datetime
    total_marks: int = Field(..., ge=1)
    passing_marks: int | None = Field(None, ge=0)

    @field_validator("exam_code")
    @classmethod
    def upper_code(cls, v: str | None) -> str | None:
        return v.upper() if v else v


class ExamResponse(BaseSchema):
    """Exam instance response schema."""

    id: int
    title: str
    exam_code: str
    subject_id: int
    class_id: int
    description: str | None
    start_time: datetime
    end_time: datetime
    total_marks: int
    passing_marks: int | None
    created_at: datetime


# ==========================================
# Attempt Schemas
# ==========================================

class AttemptSubmit(BaseSchema):
    """A student's finished (or in-progress) attempt."""

    student_id: int
    is_completed: bool = True
    score: float = Field(0, ge=0)
    percentage: float | None = Field(None, ge=0, le=100)
    submitted_at: datetime | None = None


class AttemptGrade(BaseSchema):
    """Marks awarded by a grader."""

    score: float = Field(..., ge=0)
    percentage: float | None = Field(None, ge=0, le=100)
    grading_status: GradingStatus = GradingStatus.COMPLETED


class AttemptResponse(BaseSchema):
    """Attempt response schema."""

    id: int
    exam_id: int
    student_id: int
    student_name: str | None
    is_completed: bool
    grading_status: GradingStatus
    score: float
    percentage: float | None
    actual_score: float | None
    actual_percentage: float | None
    submitted_at: datetime | None
    graded_at: datetime | None

    @field_validator("score", "percentage", "actual_score", "actual_percentage", mode="before")
    @classmethod
    def coerce_decimal(cls, v):
        return decimal_to_float(v)


# ==========================================
# Lifecycle and Grading Progress
# ==========================================

class ExamLifecycle(BaseSchema):
    """Phase of an exam at a given instant."""

    phase: ExamPhase
    remaining_seconds: float = 0.0
    remaining_minutes: int = 0


class PhaseCounts(BaseSchema):
    """Number of exams in each phase."""

    upcoming: int = 0
    active: int = 0
    ended: int = 0


class ExamGradingStats(BaseSchema):
    """Submission and grading counts for one exam."""

    total_submissions: int = 0
    pending_grading: int = 0
    graded: int = 0


class ExamStatusBadge(BaseSchema):
    """Grading badge shown next to an exam."""

    label: str
    tone: str


class ExamListItem(BaseSchema):
    """Exam row with its lifecycle and grading progress."""

    id: int
    title: str
    exam_code: str | None
    subject_id: int | None
    class_id: int | None
    start_time: datetime
    end_time: datetime
    total_marks: int
    lifecycle: ExamLifecycle
    stats: ExamGradingStats
    badge: ExamStatusBadge
