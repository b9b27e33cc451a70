"""Results overview and ranking endpoints."""

from fastapi import APIRouter, Query

from app.core.dependencies import Now, Results
from app.schemas.results import AttemptScore, GradeBand, GradeResponse, ResultsOverview, TopPerformer
from app.services import grading

router = APIRouter()


@router.get("/overview", response_model=ResultsOverview)
def get_results_overview(service: Results, now: Now):
    """
    Grading progress across all exams and how many exams are
    upcoming, active or ended.
    """
    return service.get_overview(now)


@router.get("/top-performers", response_model=list[TopPerformer])
def get_top_performers(
    service: Results,
    limit: int | None = Query(None, ge=1, le=100),
    class_id: int | None = None,
):
    """Students ranked by average percentage over graded attempts."""
    return service.get_top_performers(limit=limit, class_id=class_id)


@router.get("/grade", response_model=GradeResponse)
def get_grade(percentage: float = Query(...)):
    """Letter grade for a percentage (clamped to 0-100)."""
    band = grading.grade_band_for(percentage)
    return GradeResponse(
        percentage=grading.normalize_percentage(percentage),
        letter=band.letter,
        tone=band.tone,
        is_passing=band.is_passing,
    )


@router.get("/grade-bands", response_model=list[GradeBand])
def get_grade_bands():
    """The percentage-to-grade table."""
    return list(grading.GRADE_BANDS)


@router.get("/exams/{exam_id}/scores", response_model=list[AttemptScore])
def get_exam_scores(exam_id: int, service: Results):
    """Displayed score, percentage and grade of each completed attempt."""
    return service.get_attempt_scores(exam_id)
