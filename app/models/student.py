"""Student model."""

from sqlalchemy import BigInteger, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base
from app.models.base import IDMixin, TimestampMixin


class Student(Base, IDMixin, TimestampMixin):
    """Student who sits exams."""

    __tablename__ = "students"

    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    admission_number: Mapped[str | None] = mapped_column(String(50), unique=True, nullable=True)
    class_id: Mapped[int | None] = mapped_column(
        BigInteger,
        ForeignKey("school_classes.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    # Relationships
    school_class: Mapped["SchoolClass"] = relationship(
        "SchoolClass",
        back_populates="students",
        lazy="selectin",
    )
    attempts: Mapped[list["ExamAttempt"]] = relationship(
        "ExamAttempt",
        back_populates="student",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<Student(id={self.id}, name={self.full_name})>"
