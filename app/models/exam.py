"""Exam instance and attempt models."""

import enum
from datetime import datetime
from decimal import Decimal

from sqlalchemy import DECIMAL, BigInteger, Boolean, DateTime, Enum, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base
from app.models.base import IDMixin, TimestampMixin


class GradingStatus(str, enum.Enum):
    """Marking progress of a submitted attempt."""

    PENDING = "Pending"
    PARTIAL = "Partial"
    COMPLETED = "Completed"

    @classmethod
    def from_string(cls, value: str) -> "GradingStatus":
        """Convert string to GradingStatus, ignoring case."""
        mapping = {status.value.upper(): status for status in cls}
        key = value.strip().upper()
        if key in mapping:
            return mapping[key]
        raise ValueError(f"Invalid grading status: {value}")


class ExamInstance(Base, IDMixin, TimestampMixin):
    """One scheduled sitting of an exam for a subject and class."""

    __tablename__ = "exam_instances"

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    exam_code: Mapped[str] = mapped_column(String(12), unique=True, nullable=False, index=True)
    subject_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("subjects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    class_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("school_classes.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    start_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    end_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    total_marks: Mapped[int] = mapped_column(Integer, nullable=False)
    passing_marks: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # Relationships
    subject: Mapped["Subject"] = relationship("Subject", lazy="selectin")
    school_class: Mapped["SchoolClass"] = relationship("SchoolClass", lazy="selectin")
    attempts: Mapped[list["ExamAttempt"]] = relationship(
        "ExamAttempt",
        back_populates="exam",
        cascade="all, delete-orphan",
        order_by="ExamAttempt.id",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<ExamInstance(id={self.id}, code={self.exam_code})>"


class ExamAttempt(Base, IDMixin, TimestampMixin):
    """A student's attempt at an exam instance."""

    __tablename__ = "exam_attempts"

    exam_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("exam_instances.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    student_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("students.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    is_completed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    grading_status: Mapped[GradingStatus] = mapped_column(
        Enum(GradingStatus),
        default=GradingStatus.PENDING,
        nullable=False,
    )
    score: Mapped[Decimal] = mapped_column(DECIMAL(10, 2), default=0, nullable=False)
    percentage: Mapped[Decimal | None] = mapped_column(DECIMAL(5, 2), nullable=True)
    # Set by manual grading; once actual_score is set both replace score/percentage
    actual_score: Mapped[Decimal | None] = mapped_column(DECIMAL(10, 2), nullable=True)
    actual_percentage: Mapped[Decimal | None] = mapped_column(DECIMAL(5, 2), nullable=True)
    submitted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    graded_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # Relationships
    exam: Mapped["ExamInstance"] = relationship(
        "ExamInstance",
        back_populates="attempts",
    )
    student: Mapped["Student"] = relationship(
        "Student",
        back_populates="attempts",
        lazy="selectin",
    )

    __table_args__ = (
        UniqueConstraint("exam_id", "student_id", name="uq_attempt_exam_student"),
    )

    @property
    def student_name(self) -> str | None:
        return self.student.full_name if self.student else None

    def __repr__(self) -> str:
        return f"<ExamAttempt(exam_id={self.exam_id}, student_id={self.student_id})>"
