"""Tests for subject eligibility resolution."""

from types import SimpleNamespace

import pytest

from app.models.school_class import ClassName
from app.models.subject import Department, SchoolLevel
from app.schemas.catalog import SchoolClassRecord, SubjectEligibility
from app.services import eligibility

JUNIOR = [ClassName.JSS1, ClassName.JSS2, ClassName.JSS3]
SENIOR = [ClassName.SS1, ClassName.SS2, ClassName.SS3]

# ids 1-6 map to JSS1..SS3
CLASSES = [SchoolClassRecord(id=i, name=name) for i, name in enumerate(JUNIOR + SENIOR, start=1)]
JSS1, JSS2, JSS3, SS1, SS2, SS3 = (c.id for c in CLASSES)


@pytest.mark.parametrize(
    "prev",
    [
        None,
        SubjectEligibility(),
        SubjectEligibility(level=SchoolLevel.SENIOR, departments=[Department.SCIENCE]),
        SubjectEligibility(level=SchoolLevel.BOTH, applicable_levels=SENIOR, departments=[Department.ARTS]),
    ],
)
def test_junior_level_always_resolves_the_same(prev):
    state = eligibility.on_level_change(SchoolLevel.JUNIOR, prev)
    assert state.level == SchoolLevel.JUNIOR
    assert state.applicable_levels == JUNIOR
    assert state.departments == [Department.ALL]


def test_senior_level_keeps_departments():
    prev = SubjectEligibility(departments=[Department.ARTS, Department.SCIENCE])
    state = eligibility.on_level_change(SchoolLevel.SENIOR, prev)
    assert state.applicable_levels == SENIOR
    assert state.departments == [Department.SCIENCE, Department.ARTS]


def test_senior_level_without_departments_defaults_to_all():
    state = eligibility.on_level_change(SchoolLevel.SENIOR)
    assert state.departments == [Department.ALL]


def test_both_levels_cover_every_class():
    prev = SubjectEligibility(departments=[Department.COMMERCIAL])
    state = eligibility.on_level_change(SchoolLevel.BOTH, prev)
    assert state.applicable_levels == JUNIOR + SENIOR
    assert state.departments == [Department.ALL]


def test_level_change_keeps_class_selection():
    prev = SubjectEligibility(classes=[SS1, SS2])
    state = eligibility.on_level_change(SchoolLevel.JUNIOR, prev)
    assert state.classes == [SS1, SS2]


@pytest.mark.parametrize("level", list(SchoolLevel))
def test_level_change_is_idempotent(level):
    once = eligibility.on_level_change(level, SubjectEligibility(departments=[Department.ARTS]))
    twice = eligibility.on_level_change(level, once)
    assert twice == once


def test_mixed_class_selection_resolves_to_both():
    state = eligibility.on_class_toggle([SS1, JSS1], CLASSES)
    assert state.level == SchoolLevel.BOTH
    assert state.applicable_levels == JUNIOR + SENIOR
    assert state.departments == [Department.ALL]
    assert state.classes == [SS1, JSS1]


def test_mixed_class_selection_drops_departments():
    prev = SubjectEligibility(level=SchoolLevel.SENIOR, departments=[Department.SCIENCE])
    state = eligibility.on_class_toggle([JSS2, SS3], CLASSES, prev)
    assert state.departments == [Department.ALL]


def test_junior_class_selection():
    prev = SubjectEligibility(level=SchoolLevel.SENIOR, departments=[Department.SCIENCE])
    state = eligibility.on_class_toggle([JSS1, JSS3], CLASSES, prev)
    assert state.level == SchoolLevel.JUNIOR
    assert state.applicable_levels == JUNIOR
    assert state.departments == [Department.ALL]


def test_senior_class_selection_keeps_departments():
    prev = SubjectEligibility(departments=[Department.SCIENCE, Department.ARTS])
    state = eligibility.on_class_toggle([SS2], CLASSES, prev)
    assert state.level == SchoolLevel.SENIOR
    assert state.applicable_levels == SENIOR
    assert state.departments == [Department.SCIENCE, Department.ARTS]


def test_unknown_and_repeated_class_ids_are_dropped():
    state = eligibility.on_class_toggle([SS1, 99, SS1], CLASSES)
    assert state.classes == [SS1]
    assert state.level == SchoolLevel.SENIOR


def test_empty_selection_falls_back_to_previous_level():
    prev = SubjectEligibility(level=SchoolLevel.JUNIOR, classes=[JSS1])
    state = eligibility.on_class_toggle([], CLASSES, prev)
    assert state.level == SchoolLevel.JUNIOR
    assert state.applicable_levels == JUNIOR
    assert state.classes == []


def test_class_toggle_is_idempotent():
    once = eligibility.on_class_toggle([SS1, SS3], CLASSES, SubjectEligibility(departments=[Department.ARTS]))
    twice = eligibility.on_class_toggle(once.classes, CLASSES, once)
    assert twice == once


def test_toggle_selection():
    assert eligibility.toggle_selection([JSS1], SS1) == [JSS1, SS1]
    assert eligibility.toggle_selection([JSS1, SS1], JSS1) == [SS1]


def test_group_classes_by_level():
    groups = eligibility.group_classes_by_level(reversed(CLASSES))
    assert [c.name for c in groups.junior] == [ClassName.JSS3, ClassName.JSS2, ClassName.JSS1]
    assert [c.name for c in groups.senior] == [ClassName.SS3, ClassName.SS2, ClassName.SS1]


@pytest.mark.parametrize("name, level", [("jss2", SchoolLevel.JUNIOR), ("SS 3", SchoolLevel.SENIOR)])
def test_class_level_accepts_strings(name, level):
    assert eligibility.class_level(name) == level


def test_reconcile_repairs_inconsistent_state():
    broken = SubjectEligibility(
        level=SchoolLevel.JUNIOR,
        applicable_levels=SENIOR,
        departments=[Department.SCIENCE],
    )
    assert not eligibility.is_consistent(broken)

    repaired = eligibility.reconcile(broken)
    assert repaired.applicable_levels == JUNIOR
    assert repaired.departments == [Department.ALL]
    assert eligibility.is_consistent(repaired)


def test_reconcile_leaves_consistent_state_alone():
    state = eligibility.on_level_change(SchoolLevel.SENIOR, SubjectEligibility(departments=[Department.ARTS]))
    assert eligibility.reconcile(state) is state


def subject(level, departments):
    return SimpleNamespace(level=level, departments=departments)


def test_subjects_for_level_includes_both():
    maths = subject(SchoolLevel.BOTH, ["All"])
    basic_science = subject(SchoolLevel.JUNIOR, ["All"])
    physics = subject(SchoolLevel.SENIOR, ["Science"])

    junior = eligibility.subjects_for_level([maths, basic_science, physics], SchoolLevel.JUNIOR)

    assert junior == [maths, basic_science]


def test_subjects_for_department():
    english = subject(SchoolLevel.BOTH, ["All"])
    basic_science = subject(SchoolLevel.JUNIOR, ["All"])
    physics = subject(SchoolLevel.SENIOR, ["Science"])
    literature = subject(SchoolLevel.SENIOR, ["Arts"])

    science = eligibility.subjects_for_department(
        [english, basic_science, physics, literature],
        Department.SCIENCE,
    )

    assert science == [english, physics]
