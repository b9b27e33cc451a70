"""School class model."""

import enum

from sqlalchemy import Enum, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base
from app.models.base import IDMixin, TimestampMixin
from app.models.subject import SchoolLevel


class ClassName(str, enum.Enum):
    """Class-year names of the two-tier secondary school."""

    JSS1 = "JSS1"
    JSS2 = "JSS2"
    JSS3 = "JSS3"
    SS1 = "SS1"
    SS2 = "SS2"
    SS3 = "SS3"

    @property
    def is_junior(self) -> bool:
        return self in JUNIOR_CLASS_NAMES

    @classmethod
    def from_string(cls, value: str) -> "ClassName":
        """Convert string to ClassName, accepting spacing and case variations."""
        normalized = value.strip().upper().replace(" ", "")
        try:
            return cls(normalized)
        except ValueError:
            raise ValueError(f"Invalid class name: {value}") from None


JUNIOR_CLASS_NAMES = (ClassName.JSS1, ClassName.JSS2, ClassName.JSS3)
SENIOR_CLASS_NAMES = (ClassName.SS1, ClassName.SS2, ClassName.SS3)


class SchoolClass(Base, IDMixin, TimestampMixin):
    """A class year (JSS1-SS3); at most one row per name."""

    __tablename__ = "school_classes"

    name: Mapped[ClassName] = mapped_column(
        Enum(ClassName),
        unique=True,
        nullable=False,
        index=True,
    )
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    academic_year: Mapped[str | None] = mapped_column(String(9), nullable=True)
    max_students: Mapped[int] = mapped_column(Integer, default=40, nullable=False)

    # Relationships
    students: Mapped[list["Student"]] = relationship(
        "Student",
        back_populates="school_class",
        lazy="selectin",
    )
    subjects: Mapped[list["Subject"]] = relationship(
        "Subject",
        secondary="subject_classes",
        back_populates="classes",
        lazy="selectin",
    )

    @property
    def level(self) -> SchoolLevel:
        """Junior or Senior, derived from the class name."""
        return SchoolLevel.JUNIOR if self.name.is_junior else SchoolLevel.SENIOR

    def __repr__(self) -> str:
        return f"<SchoolClass(id={self.id}, name={self.name})>"
