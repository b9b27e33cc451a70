"""Database models package."""

from app.models.exam import ExamAttempt, ExamInstance, GradingStatus
from app.models.school_class import JUNIOR_CLASS_NAMES, SENIOR_CLASS_NAMES, ClassName, SchoolClass
from app.models.student import Student
from app.models.subject import Department, SchoolLevel, Subject, SubjectCategory, subject_classes

__all__ = [
    # Catalog
    "ClassName",
    "JUNIOR_CLASS_NAMES",
    "SENIOR_CLASS_NAMES",
    "SchoolClass",
    "SchoolLevel",
    "Department",
    "Subject",
    "SubjectCategory",
    "subject_classes",
    # Student
    "Student",
    # Exam
    "ExamInstance",
    "ExamAttempt",
    "GradingStatus",
]
