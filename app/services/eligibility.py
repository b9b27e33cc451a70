"""Subject eligibility resolution for the Junior/Senior school structure.

A subject's level, applicable class years and departments are derived
together from one rule table keyed by which tiers are involved. Both entry
points (choosing a level, or choosing classes) go through that table.
"""

import logging
from collections.abc import Iterable, Sequence
from typing import NamedTuple, TypeVar

from app.models.school_class import JUNIOR_CLASS_NAMES, SENIOR_CLASS_NAMES, ClassName
from app.models.subject import Department, SchoolLevel
from app.schemas.catalog import ClassGroups, SchoolClassRecord, SubjectEligibility

logger = logging.getLogger(__name__)

T = TypeVar("T")


class LevelRule(NamedTuple):
    """Derived fields for one combination of tiers."""

    level: SchoolLevel
    applicable_levels: tuple[ClassName, ...]
    keeps_departments: bool


JUNIOR_ONLY = frozenset({SchoolLevel.JUNIOR})
SENIOR_ONLY = frozenset({SchoolLevel.SENIOR})
MIXED = frozenset({SchoolLevel.JUNIOR, SchoolLevel.SENIOR})

# Junior subjects carry no departmental distinction; only Senior-only
# subjects keep the departments already chosen.
LEVEL_RULES: dict[frozenset[SchoolLevel], LevelRule] = {
    JUNIOR_ONLY: LevelRule(SchoolLevel.JUNIOR, JUNIOR_CLASS_NAMES, keeps_departments=False),
    SENIOR_ONLY: LevelRule(SchoolLevel.SENIOR, SENIOR_CLASS_NAMES, keeps_departments=True),
    MIXED: LevelRule(SchoolLevel.BOTH, JUNIOR_CLASS_NAMES + SENIOR_CLASS_NAMES, keeps_departments=False),
}

_TIERS_BY_LEVEL = {
    SchoolLevel.JUNIOR: JUNIOR_ONLY,
    SchoolLevel.SENIOR: SENIOR_ONLY,
    SchoolLevel.BOTH: MIXED,
}


def class_level(name: ClassName | str) -> SchoolLevel:
    """Junior for JSS1-JSS3, Senior otherwise."""
    if not isinstance(name, ClassName):
        name = ClassName.from_string(name)
    return SchoolLevel.JUNIOR if name.is_junior else SchoolLevel.SENIOR


def group_classes_by_level(classes: Iterable[SchoolClassRecord]) -> ClassGroups:
    """Split classes into Junior and Senior groups, keeping their order."""
    groups = ClassGroups()
    for school_class in classes:
        if school_class.is_junior:
            groups.junior.append(school_class)
        else:
            groups.senior.append(school_class)
    return groups


def _canonical_departments(departments: Iterable[Department | str]) -> list[Department]:
    chosen = {Department(d) for d in departments}
    return [d for d in Department if d in chosen]


def _resolve(
    tiers: frozenset[SchoolLevel],
    departments: Sequence[Department | str],
) -> tuple[SchoolLevel, list[ClassName], list[Department]]:
    rule = LEVEL_RULES[tiers]
    resolved_departments = _canonical_departments(departments) if rule.keeps_departments else []
    if not resolved_departments:
        resolved_departments = [Department.ALL]
    return rule.level, list(rule.applicable_levels), resolved_departments


def on_level_change(
    new_level: SchoolLevel,
    prev_state: SubjectEligibility | None = None,
) -> SubjectEligibility:
    """Re-derive class years and departments after a level is chosen.

    The class selection is carried over unchanged.
    """
    prev = prev_state or SubjectEligibility()
    level, applicable_levels, departments = _resolve(_TIERS_BY_LEVEL[new_level], prev.departments)
    return SubjectEligibility(
        level=level,
        applicable_levels=applicable_levels,
        departments=departments,
        classes=list(prev.classes),
    )


def on_class_toggle(
    selected_class_ids: Iterable[int],
    all_classes: Iterable[SchoolClassRecord],
    prev_state: SubjectEligibility | None = None,
) -> SubjectEligibility:
    """
    Re-derive level, class years and departments from a class selection.

    Ids that match no known class are dropped. An empty selection falls back
    to the previous level's rule.
    """
    prev = prev_state or SubjectEligibility()
    known = {school_class.id: school_class for school_class in all_classes}
    selected = [class_id for class_id in dict.fromkeys(selected_class_ids) if class_id in known]

    tiers = frozenset(class_level(known[class_id].name) for class_id in selected)
    if not tiers:
        resolved = on_level_change(prev.level, prev)
        resolved.classes = []
        return resolved

    level, applicable_levels, departments = _resolve(tiers, prev.departments)
    return SubjectEligibility(
        level=level,
        applicable_levels=applicable_levels,
        departments=departments,
        classes=selected,
    )


def toggle_selection(selected_class_ids: Sequence[int], class_id: int) -> list[int]:
    """Add ``class_id`` to the selection, or remove it if already selected."""
    if class_id in selected_class_ids:
        return [selected for selected in selected_class_ids if selected != class_id]
    return [*selected_class_ids, class_id]


def is_consistent(state: SubjectEligibility) -> bool:
    """Whether the stored fields match what the level's rule derives."""
    expected = on_level_change(state.level, state)
    return (
        list(state.applicable_levels) == expected.applicable_levels
        and list(state.departments) == expected.departments
    )


def reconcile(state: SubjectEligibility) -> SubjectEligibility:
    """Return ``state`` if consistent, otherwise re-derive it from its level."""
    if is_consistent(state):
        return state
    logger.warning(
        "Inconsistent subject eligibility (level=%s, applicable_levels=%s, departments=%s); re-deriving",
        state.level.value,
        [c.value for c in state.applicable_levels],
        [d.value for d in state.departments],
    )
    return on_level_change(state.level, state)


def subjects_for_level(subjects: Iterable[T], level: SchoolLevel) -> list[T]:
    """Subjects taught at ``level``, including those taught at both levels."""
    return [subject for subject in subjects if subject.level in (level, SchoolLevel.BOTH)]


def subjects_for_department(subjects: Iterable[T], department: Department) -> list[T]:
    """Senior subjects open to ``department``, directly or through All."""
    return [
        subject
        for subject in subjects
        if subject.level in (SchoolLevel.SENIOR, SchoolLevel.BOTH)
        and (department in subject.departments or Department.ALL in subject.departments)
    ]
