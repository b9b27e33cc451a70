"""Results and analytics schemas."""

from pydantic import Field

from app.schemas.common import BaseSchema
from app.schemas.exam import GradingStatus, PhaseCounts


class GradeBand(BaseSchema):
    """One row of the percentage-to-grade table."""

    letter: str
    min_percentage: float
    max_percentage: float
    tone: str
    is_passing: bool


class GradeResponse(BaseSchema):
    """Grade for a percentage."""

    percentage: float
    letter: str
    tone: str
    is_passing: bool


class ScoreDisplay(BaseSchema):
    """Score text and percentage as displayed for an attempt."""

    score_text: str
    percentage: float


class AttemptScore(BaseSchema):
    """Displayed score of a single attempt."""

    attempt_id: int | None
    student_id: int
    student_name: str | None
    grading_status: GradingStatus | None
    score_text: str
    percentage: float
    grade: str


class GradingOverview(BaseSchema):
    """Grading totals across a set of exams."""

    total_exams: int = 0
    total_submissions: int = 0
    pending_grading: int = 0
    graded: int = 0
    grading_progress_pct: int = Field(
        default=0,
        description="Percentage of submissions graded (0-100)",
    )


class ResultsOverview(BaseSchema):
    """Dashboard overview of exams and grading."""

    grading: GradingOverview
    phases: PhaseCounts


class TopPerformer(BaseSchema):
    """Leaderboard entry ranked by average percentage."""

    rank: int
    student_id: int
    student_name: str | None = None
    average_percentage: float
    total_score: float
    exam_count: int
    grade: str


class ExamAnalytics(BaseSchema):
    """Score analytics for one exam."""

    exam_id: int
    total_attempts: int = 0
    completed_attempts: int = 0
    average_percentage: float = 0.0
    highest_percentage: float = 0.0
    lowest_percentage: float = 0.0
    pass_count: int = 0
    pass_rate: float = Field(
        default=0.0,
        description="Percentage of completed attempts that passed (0-100)",
    )
    grade_distribution: dict[str, int] = {}
