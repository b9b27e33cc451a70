"""Subject catalog endpoints."""

from fastapi import APIRouter

from app.core.dependencies import Catalog
from app.models.subject import Department, SchoolLevel, SubjectCategory
from app.schemas.catalog import (
    ClassToggleRequest,
    LevelChangeRequest,
    SubjectCreate,
    SubjectEligibility,
    SubjectRepairResult,
    SubjectResponse,
    SubjectUpdate,
)

router = APIRouter()


@router.get("", response_model=list[SubjectResponse])
def list_subjects(
    service: Catalog,
    level: SchoolLevel | None = None,
    department: Department | None = None,
    active_only: bool = False,
    category: SubjectCategory | None = None,
    class_id: int | None = None,
):
    """
    List subjects.

    - level: subjects taught at that level, including those taught at both
    - department: senior subjects open to that department or to all
    - category: subjects of that category
    - class_id: subjects offered in that class
    """
    return service.list_subjects(
        level=level,
        department=department,
        active_only=active_only,
        category=category,
        class_id=class_id,
    )


@router.get("/{subject_id}", response_model=SubjectResponse)
def get_subject(subject_id: int, service: Catalog):
    """Get a subject."""
    return service.get_subject(subject_id)


@router.post("", response_model=SubjectResponse)
def create_subject(request: SubjectCreate, service: Catalog):
    """
    Create a subject.
    When classes are given they decide the level; otherwise the level does.
    """
    return service.create_subject(request)


@router.patch("/{subject_id}", response_model=SubjectResponse)
def update_subject(subject_id: int, request: SubjectUpdate, service: Catalog):
    """Update a subject; level, class years and departments stay consistent."""
    return service.update_subject(subject_id, request)


@router.post("/eligibility/level", response_model=SubjectEligibility)
def preview_level_change(request: LevelChangeRequest, service: Catalog):
    """Fields that follow from choosing a level. Nothing is saved."""
    return service.preview_level_change(request)


@router.post("/eligibility/classes", response_model=SubjectEligibility)
def preview_class_toggle(request: ClassToggleRequest, service: Catalog):
    """Fields that follow from a class selection. Nothing is saved."""
    return service.preview_class_toggle(request)


@router.post("/repair", response_model=SubjectRepairResult)
def repair_subjects(service: Catalog):
    """Re-derive subjects whose stored level, class years and departments disagree."""
    return service.repair_subjects()
