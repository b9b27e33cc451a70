"""Class and subject catalog service."""

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.exceptions import ConflictError, NotFoundError
from app.models.school_class import ClassName, SchoolClass
from app.models.subject import Department, SchoolLevel, Subject, SubjectCategory
from app.schemas.catalog import (
    ClassToggleRequest,
    LevelChangeRequest,
    SchoolClassCreate,
    SchoolClassRecord,
    SubjectCreate,
    SubjectEligibility,
    SubjectRepairResult,
    SubjectUpdate,
)
from app.services import eligibility

logger = logging.getLogger(__name__)


class CatalogService:
    """School classes and subjects, kept consistent through the eligibility rules."""

    def __init__(self, db: Session):
        self.db = db

    # ==========================================
    # Classes
    # ==========================================

    def list_classes(self) -> list[SchoolClass]:
        """All classes, JSS1 through SS3."""
        result = self.db.execute(select(SchoolClass).order_by(SchoolClass.name))
        return list(result.scalars().all())

    def class_records(self) -> list[SchoolClassRecord]:
        return [SchoolClassRecord.model_validate(c) for c in self.list_classes()]

    def get_class(self, class_id: int) -> SchoolClass:
        """Get class by ID."""
        school_class = self.db.get(SchoolClass, class_id)
        if not school_class:
            raise NotFoundError("Class", str(class_id))
        return school_class

    def _find_class(self, name: ClassName) -> SchoolClass | None:
        result = self.db.execute(select(SchoolClass).where(SchoolClass.name == name))
        return result.scalar_one_or_none()

    def create_class(self, request: SchoolClassCreate) -> SchoolClass:
        """Create a class; each class name exists once."""
        if self._find_class(request.name):
            raise ConflictError("Class already exists", details={"name": request.name.value})

        school_class = SchoolClass(
            name=request.name,
            description=request.description,
            academic_year=request.academic_year,
            max_students=request.max_students,
        )
        self.db.add(school_class)
        self.db.flush()
        self.db.refresh(school_class)
        return school_class

    def initialize_classes(self) -> list[SchoolClass]:
        """Create whichever of JSS1-SS3 are missing."""
        created = 0
        for name in ClassName:
            if self._find_class(name):
                continue
            level = eligibility.class_level(name)
            self.db.add(
                SchoolClass(
                    name=name,
                    description=f"{name.value} - {level.value} Secondary School",
                    max_students=40,
                )
            )
            created += 1
        self.db.flush()
        if created:
            logger.info(f"Initialized {created} school classes")
        return self.list_classes()

    def delete_class(self, class_id: int) -> None:
        """Delete a class; subjects drop it from their class list."""
        school_class = self.get_class(class_id)
        self.db.delete(school_class)
        self.db.flush()

    # ==========================================
    # Subjects
    # ==========================================

    def get_subject(self, subject_id: int) -> Subject:
        """Get subject by ID."""
        subject = self.db.get(Subject, subject_id)
        if not subject:
            raise NotFoundError("Subject", str(subject_id))
        return subject

    def list_subjects(
        self,
        level: SchoolLevel | None = None,
        department: Department | None = None,
        active_only: bool = False,
        category: SubjectCategory | None = None,
        class_id: int | None = None,
    ) -> list[Subject]:
        """Subjects, optionally limited to a level, department, category or class."""
        query = select(Subject).order_by(Subject.name)
        if active_only:
            query = query.where(Subject.is_active.is_(True))
        if category:
            query = query.where(Subject.category == category)
        if class_id is not None:
            query = query.where(Subject.classes.any(SchoolClass.id == class_id))
        subjects = list(self.db.execute(query).scalars().all())

        if level:
            subjects = eligibility.subjects_for_level(subjects, level)
        if department:
            subjects = eligibility.subjects_for_department(subjects, department)
        return subjects

    def _check_code_free(self, code: str | None, subject_id: int | None = None) -> None:
        if not code:
            return
        result = self.db.execute(select(Subject.id).where(Subject.code == code))
        existing = result.scalar_one_or_none()
        if existing is not None and existing != subject_id:
            raise ConflictError("Subject code already in use", details={"code": code})

    def _require_classes(self, class_ids: list[int]) -> list[SchoolClassRecord]:
        """All classes, after checking the requested ids exist."""
        records = self.class_records()
        known = {record.id for record in records}
        missing = [class_id for class_id in class_ids if class_id not in known]
        if missing:
            raise NotFoundError("Class", ", ".join(str(class_id) for class_id in missing))
        return records

    def create_subject(self, request: SubjectCreate) -> Subject:
        """Create a subject with resolved level, class years and departments."""
        self._check_code_free(request.code)

        state = SubjectEligibility(level=request.level, departments=request.departments)
        if request.class_ids:
            records = self._require_classes(request.class_ids)
            state = eligibility.on_class_toggle(request.class_ids, records, state)
        else:
            state = eligibility.on_level_change(request.level, state)

        subject = Subject(
            name=request.name,
            code=request.code,
            description=request.description,
            passing_score=request.passing_score,
            category=request.category,
            is_core=request.is_core,
            is_compulsory=request.is_compulsory,
            credits=request.credits,
        )
        self._apply_eligibility(subject, state)
        self.db.add(subject)
        self.db.flush()
        self.db.refresh(subject)
        logger.info(f"Subject '{subject.name}' created at level {subject.level.value}")
        return subject

    def update_subject(self, subject_id: int, request: SubjectUpdate) -> Subject:
        """Update a subject; eligibility fields are re-resolved together."""
        subject = self.get_subject(subject_id)
        update_data = request.model_dump(
            exclude_unset=True,
            exclude={"level", "departments", "class_ids"},
        )
        if "code" in update_data:
            self._check_code_free(update_data["code"], subject.id)
        for field, value in update_data.items():
            setattr(subject, field, value)

        state = self._eligibility_of(subject)
        if request.departments is not None:
            state.departments = request.departments

        if request.class_ids is not None:
            records = self._require_classes(request.class_ids)
            state = eligibility.on_class_toggle(request.class_ids, records, state)
        elif request.level is not None:
            state = eligibility.on_level_change(request.level, state)
        elif request.departments is not None:
            # Chosen departments only survive on Senior subjects
            state = eligibility.on_level_change(state.level, state)
        else:
            state = eligibility.reconcile(state)

        self._apply_eligibility(subject, state)
        self.db.flush()
        self.db.refresh(subject)
        return subject

    def preview_level_change(self, request: LevelChangeRequest) -> SubjectEligibility:
        """Eligibility after choosing a level, without saving anything."""
        return eligibility.on_level_change(request.level, request.current)

    def preview_class_toggle(self, request: ClassToggleRequest) -> SubjectEligibility:
        """Eligibility after changing the class selection, without saving anything."""
        return eligibility.on_class_toggle(
            request.selected_class_ids,
            self.class_records(),
            request.current,
        )

    def repair_subjects(self) -> SubjectRepairResult:
        """Re-derive eligibility for every subject whose stored fields disagree."""
        subjects = self.list_subjects()
        repaired_ids = []
        for subject in subjects:
            state = self._eligibility_of(subject)
            if eligibility.is_consistent(state):
                continue
            self._apply_eligibility(subject, eligibility.reconcile(state))
            repaired_ids.append(subject.id)

        self.db.flush()
        if repaired_ids:
            logger.info(f"Repaired eligibility of {len(repaired_ids)} subjects")
        return SubjectRepairResult(
            checked=len(subjects),
            repaired=len(repaired_ids),
            repaired_subject_ids=repaired_ids,
        )

    def _eligibility_of(self, subject: Subject) -> SubjectEligibility:
        return SubjectEligibility(
            level=subject.level,
            applicable_levels=subject.applicable_levels or [],
            departments=subject.departments or [],
            classes=[school_class.id for school_class in subject.classes],
        )

    def _apply_eligibility(self, subject: Subject, state: SubjectEligibility) -> None:
        subject.level = state.level
        subject.applicable_levels = [name.value for name in state.applicable_levels]
        subject.departments = [department.value for department in state.departments]

        current_ids = [school_class.id for school_class in subject.classes]
        if current_ids != state.classes:
            by_id = {c.id: c for c in self.list_classes()}
            subject.classes = [by_id[class_id] for class_id in state.classes if class_id in by_id]
