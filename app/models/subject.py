"""Subject model and its class association."""

import enum

from sqlalchemy import JSON, BigInteger, Boolean, CheckConstraint, Column, Enum, ForeignKey, Integer, String, Table, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base
from app.models.base import IDMixin, TimestampMixin


class SchoolLevel(str, enum.Enum):
    """Tier a subject is taught in."""

    JUNIOR = "Junior"
    SENIOR = "Senior"
    BOTH = "Both"


class Department(str, enum.Enum):
    """Senior secondary department; ALL is the wildcard."""

    ALL = "All"
    SCIENCE = "Science"
    COMMERCIAL = "Commercial"
    ARTS = "Arts"


class SubjectCategory(str, enum.Enum):
    """Curriculum grouping a subject is listed under."""

    CORE = "Core"
    SCIENCE = "Science"
    COMMERCIAL = "Commercial"
    ARTS = "Arts"
    TECHNICAL = "Technical"
    LANGUAGE = "Language"
    RELIGIOUS = "Religious"
    CREATIVE = "Creative"
    SOCIAL = "Social"
    ELECTIVE = "Elective"


# Deleting a class or subject removes its association rows
subject_classes = Table(
    "subject_classes",
    Base.metadata,
    Column(
        "subject_id",
        BigInteger,
        ForeignKey("subjects.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "class_id",
        BigInteger,
        ForeignKey("school_classes.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)


class Subject(Base, IDMixin, TimestampMixin):
    """Subject with its eligible level, class years and departments."""

    __tablename__ = "subjects"

    name: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    code: Mapped[str | None] = mapped_column(String(10), unique=True, nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    level: Mapped[SchoolLevel] = mapped_column(
        Enum(SchoolLevel),
        default=SchoolLevel.BOTH,
        nullable=False,
        index=True,
    )
    # Stored as JSON lists in canonical enum order
    departments: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    applicable_levels: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    passing_score: Mapped[int] = mapped_column(Integer, default=40, nullable=False)
    category: Mapped[SubjectCategory] = mapped_column(
        Enum(SubjectCategory),
        default=SubjectCategory.CORE,
        nullable=False,
        index=True,
    )
    is_core: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    is_compulsory: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    credits: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # Relationships
    classes: Mapped[list["SchoolClass"]] = relationship(
        "SchoolClass",
        secondary=subject_classes,
        back_populates="subjects",
        lazy="selectin",
    )

    __table_args__ = (
        CheckConstraint("credits BETWEEN 1 AND 6", name="ck_subject_credits_range"),
    )

    def __repr__(self) -> str:
        return f"<Subject(id={self.id}, name={self.name}, level={self.level})>"
