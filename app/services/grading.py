"""Grading progress and results analytics over exam instances.

All functions are pure: they take plain exam/attempt records and return
computed schemas. Malformed marks degrade to 0% (and grade F) unless
``strict`` is requested, in which case ``InvalidDataError`` is raised.
"""

import logging
import math
from collections import defaultdict
from collections.abc import Iterable

from app.core.exceptions import InvalidDataError
from app.models.exam import GradingStatus
from app.schemas.exam import (
    AttemptRecord,
    ExamGradingStats,
    ExamInstanceRecord,
    ExamStatusBadge,
    GradingFilter,
)
from app.schemas.results import (
    AttemptScore,
    ExamAnalytics,
    GradeBand,
    GradingOverview,
    ScoreDisplay,
    TopPerformer,
)

logger = logging.getLogger(__name__)


# Highest band first; a percentage falls in the first band whose minimum it reaches
GRADE_BANDS: tuple[GradeBand, ...] = (
    GradeBand(letter="A", min_percentage=80, max_percentage=100, tone="success", is_passing=True),
    GradeBand(letter="B", min_percentage=70, max_percentage=80, tone="info", is_passing=True),
    GradeBand(letter="C", min_percentage=60, max_percentage=70, tone="warning", is_passing=True),
    GradeBand(letter="D", min_percentage=50, max_percentage=60, tone="caution", is_passing=True),
    GradeBand(letter="F", min_percentage=0, max_percentage=50, tone="danger", is_passing=False),
)


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _is_missing(value: float | None) -> bool:
    return value is None or (isinstance(value, float) and math.isnan(value))


def _format_number(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return str(round(value, 2))


def _check_marks(score: float, total_marks: int, context: str) -> None:
    """Raise for marks that cannot produce a meaningful percentage."""
    if total_marks < 0 or score < 0:
        raise InvalidDataError(
            "Marks cannot be negative",
            details={"context": context, "score": score, "total_marks": total_marks},
        )
    if total_marks == 0 and score != 0:
        raise InvalidDataError(
            "Score recorded against an exam with zero total marks",
            details={"context": context, "score": score},
        )


# ==========================================
# Grades
# ==========================================

def normalize_percentage(percentage: float | None) -> float:
    """Clamp to [0, 100]; missing or NaN values count as 0."""
    if _is_missing(percentage):
        return 0.0
    return min(100.0, max(0.0, float(percentage)))


def grade_band_for(percentage: float | None) -> GradeBand:
    """Look up the grade band for a percentage."""
    value = normalize_percentage(percentage)
    for band in GRADE_BANDS:
        if value >= band.min_percentage:
            return band
    return GRADE_BANDS[-1]


def score_to_grade(percentage: float | None) -> str:
    """Letter grade for a percentage."""
    return grade_band_for(percentage).letter


# ==========================================
# Per-exam grading progress
# ==========================================

def exam_stats(exam: ExamInstanceRecord, strict: bool = False) -> ExamGradingStats:
    """Count completed submissions and how many of them are graded.

    Incomplete attempts are left out of every count, so
    ``pending_grading + graded == total_submissions``.
    """
    if strict and exam.total_marks <= 0:
        raise InvalidDataError(
            "Exam total marks must be positive",
            details={"exam_id": exam.id, "total_marks": exam.total_marks},
        )

    stats = ExamGradingStats()
    for attempt in exam.attempts:
        if not attempt.is_completed:
            continue
        stats.total_submissions += 1
        if attempt.grading_status == GradingStatus.COMPLETED:
            stats.graded += 1
        else:
            stats.pending_grading += 1
    return stats


def exam_status_badge(stats: ExamGradingStats) -> ExamStatusBadge:
    """Badge for an exam's grading progress; the first matching rule wins."""
    if stats.pending_grading == 0 and stats.graded > 0:
        return ExamStatusBadge(label="All Graded", tone="success")
    if stats.pending_grading > 0:
        return ExamStatusBadge(label=f"{stats.pending_grading} Pending", tone="warning")
    return ExamStatusBadge(label="No Submissions", tone="neutral")


def has_submissions(exam: ExamInstanceRecord) -> bool:
    """Whether any attempt on the exam has been completed."""
    return any(attempt.is_completed for attempt in exam.attempts)


def matches_grading_filter(stats: ExamGradingStats, grading_filter: GradingFilter | None) -> bool:
    """Apply the results-list grading filter to an exam's stats."""
    if grading_filter is None:
        return True
    if grading_filter == GradingFilter.GRADED:
        return stats.pending_grading == 0 and stats.graded > 0
    if grading_filter == GradingFilter.PENDING:
        return stats.pending_grading > 0
    return stats.total_submissions == 0


def aggregate(exams: Iterable[ExamInstanceRecord], strict: bool = False) -> GradingOverview:
    """Sum grading stats across exams.

    Progress divides by at least one submission, so an empty set reports 0%.
    """
    overview = GradingOverview()
    for exam in exams:
        stats = exam_stats(exam, strict=strict)
        overview.total_exams += 1
        overview.total_submissions += stats.total_submissions
        overview.pending_grading += stats.pending_grading
        overview.graded += stats.graded

    overview.grading_progress_pct = _round_half_up(
        overview.graded / max(overview.total_submissions, 1) * 100
    )
    return overview


# ==========================================
# Score display
# ==========================================

def _attempt_percentage(attempt: AttemptRecord, total_marks: int, strict: bool = False) -> float:
    """Unrounded percentage of an attempt, following the display fallback order."""
    score = attempt.effective_score
    if strict:
        _check_marks(score, total_marks, context=f"attempt {attempt.id}")

    stored = attempt.effective_percentage
    if not _is_missing(stored) and stored != 0:
        return float(stored)
    if total_marks > 0:
        return max(0.0, score / total_marks * 100)
    if score:
        logger.debug("Attempt %s scored %s on an exam with no total marks", attempt.id, score)
    return 0.0


def display_score(
    attempt: AttemptRecord,
    total_marks: int,
    strict: bool = False,
) -> ScoreDisplay:
    """
    Score text and percentage for an attempt.

    A stored percentage is used only when it is present and non-zero;
    otherwise the percentage is derived from the score, or 0 when the exam
    has no positive total marks.
    """
    percentage = _attempt_percentage(attempt, total_marks, strict=strict)
    score = attempt.effective_score

    if total_marks > 0:
        score_text = f"{_format_number(score)}/{total_marks}"
    else:
        score_text = _format_number(score)

    return ScoreDisplay(score_text=score_text, percentage=round(percentage, 2))


def attempt_scores(exam: ExamInstanceRecord, strict: bool = False) -> list[AttemptScore]:
    """Displayed scores for the completed attempts of an exam."""
    scores = []
    for attempt in exam.attempts:
        if not attempt.is_completed:
            continue
        shown = display_score(attempt, exam.total_marks, strict=strict)
        scores.append(
            AttemptScore(
                attempt_id=attempt.id,
                student_id=attempt.student_id,
                student_name=attempt.student_name,
                grading_status=attempt.grading_status,
                score_text=shown.score_text,
                percentage=shown.percentage,
                grade=score_to_grade(shown.percentage),
            )
        )
    return scores


# ==========================================
# Rankings and analytics
# ==========================================

def top_performers(exams: Iterable[ExamInstanceRecord], n: int) -> list[TopPerformer]:
    """
    Rank students by their average percentage over graded attempts.

    Only completed attempts whose grading is Completed count; students with
    none are left out. Ties are broken by ascending student id.
    """
    if n <= 0:
        return []

    percentages: dict[int, list[float]] = defaultdict(list)
    total_scores: dict[int, float] = defaultdict(float)
    names: dict[int, str | None] = {}

    for exam in exams:
        for attempt in exam.attempts:
            if not attempt.is_completed or attempt.grading_status != GradingStatus.COMPLETED:
                continue
            percentages[attempt.student_id].append(_attempt_percentage(attempt, exam.total_marks))
            total_scores[attempt.student_id] += attempt.effective_score
            if names.get(attempt.student_id) is None:
                names[attempt.student_id] = attempt.student_name

    averages = {
        student_id: sum(values) / len(values)
        for student_id, values in percentages.items()
    }
    ranked = sorted(averages.items(), key=lambda item: (-item[1], item[0]))[:n]

    return [
        TopPerformer(
            rank=idx + 1,
            student_id=student_id,
            student_name=names.get(student_id),
            average_percentage=round(average, 2),
            total_score=round(total_scores[student_id], 2),
            exam_count=len(percentages[student_id]),
            grade=score_to_grade(average),
        )
        for idx, (student_id, average) in enumerate(ranked)
    ]


def exam_analytics(exam: ExamInstanceRecord) -> ExamAnalytics:
    """Average, spread, pass rate and grade distribution of completed attempts.

    An attempt passes when it reaches the exam's passing marks, or, for exams
    without passing marks, when its grade band is a passing one.
    """
    analytics = ExamAnalytics(
        exam_id=exam.id,
        total_attempts=len(exam.attempts),
        grade_distribution={band.letter: 0 for band in GRADE_BANDS},
    )

    percentages = []
    for attempt in exam.attempts:
        if not attempt.is_completed:
            continue
        percentage = display_score(attempt, exam.total_marks).percentage
        percentages.append(percentage)

        band = grade_band_for(percentage)
        analytics.grade_distribution[band.letter] += 1
        if exam.passing_marks is not None:
            passed = attempt.effective_score >= exam.passing_marks
        else:
            passed = band.is_passing
        if passed:
            analytics.pass_count += 1

    if not percentages:
        return analytics

    analytics.completed_attempts = len(percentages)
    analytics.average_percentage = round(sum(percentages) / len(percentages), 2)
    analytics.highest_percentage = max(percentages)
    analytics.lowest_percentage = min(percentages)
    analytics.pass_rate = round(analytics.pass_count / len(percentages) * 100, 1)
    return analytics
