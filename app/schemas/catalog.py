"""Class and subject catalog schemas."""

from datetime import datetime

from pydantic import Field, field_validator

from app.models.school_class import ClassName
from app.models.subject import Department, SchoolLevel, SubjectCategory
from app.schemas.common import BaseSchema


# ==========================================
# School Class Schemas
# ==========================================

class SchoolClassRecord(BaseSchema):
    """Minimal class record consumed by the eligibility resolver."""

    id: int
    name: ClassName

    @property
    def is_junior(self) -> bool:
        return self.name.is_junior


class SchoolClassCreate(BaseSchema):
    """Class creation schema."""

    name: ClassName
    description: str | None = None
    academic_year: str | None = Field(None, pattern=r"^\d{4}(/\d{4})?$")
    max_students: int = Field(40, ge=1, le=100)

    @field_validator("name", mode="before")
    @classmethod
    def normalize_name(cls, v):
        if isinstance(v, str):
            return ClassName.from_string(v)
        return v


class SchoolClassResponse(BaseSchema):
    """Class response schema."""

    id: int
    name: ClassName
    level: SchoolLevel
    description: str | None
    academic_year: str | None
    max_students: int
    created_at: datetime


class ClassGroups(BaseSchema):
    """Classes split by tier."""

    junior: list[SchoolClassRecord] = []
    senior: list[SchoolClassRecord] = []


# ==========================================
# Subject Eligibility
# ==========================================

class SubjectEligibility(BaseSchema):
    """The interdependent level / class-year / department fields of a subject."""

    level: SchoolLevel = SchoolLevel.BOTH
    applicable_levels: list[ClassName] = []
    departments: list[Department] = []
    classes: list[int] = []


class LevelChangeRequest(BaseSchema):
    """Preview of selecting a new level."""

    level: SchoolLevel
    current: SubjectEligibility = Field(default_factory=SubjectEligibility)


class ClassToggleRequest(BaseSchema):
    """Preview of a new class selection."""

    selected_class_ids: list[int]
    current: SubjectEligibility = Field(default_factory=SubjectEligibility)


# ==========================================
# Subject Schemas
# ==========================================

class SubjectCreate(BaseSchema):
    """Subject creation schema.

    Level, class years and departments are resolved together; explicitly
    chosen classes win over the chosen level.
    """

    name: str = Field(..., min_length=1, max_length=100)
    code: str | None = Field(None, max_length=10)
    description: str | None = Field(None, max_length=500)
    level: SchoolLevel = SchoolLevel.BOTH
    departments: list[Department] = []
    class_ids: list[int] = []
    passing_score: int = Field(40, ge=0, le=100)
    category: SubjectCategory = SubjectCategory.CORE
    is_core: bool = True
    is_compulsory: bool = False
    credits: int = Field(1, ge=1, le=6)

    @field_validator("code")
    @classmethod
    def upper_code(cls, v: str | None) -> str | None:
        return v.upper() if v else v


class SubjectUpdate(BaseSchema):
    """Subject update schema."""

    name: str | None = Field(None, min_length=1, max_length=100)
    code: str | None = Field(None, max_length=10)
    description: str | None = Field(None, max_length=500)
    level: SchoolLevel | None = None
    departments: list[Department] | None = None
    class_ids: list[int] | None = None
    passing_score: int | None = Field(None, ge=0, le=100)
    category: SubjectCategory | None = None
    is_core: bool | None = None
    is_compulsory: bool | None = None
    credits: int | None = Field(None, ge=1, le=6)
    is_active: bool | None = None

    @field_validator("code")
    @classmethod
    def upper_code(cls, v: str | None) -> str | None:
        return v.upper() if v else v


class SubjectResponse(BaseSchema):
    """Subject response schema."""

    id: int
    name: str
    code: str | None
    description: str | None
    level: SchoolLevel
    departments: list[Department]
    applicable_levels: list[ClassName]
    classes: list[SchoolClassRecord]
    passing_score: int
    category: SubjectCategory
    is_core: bool
    is_compulsory: bool
    credits: int
    is_active: bool
    created_at: datetime
    updated_at: datetime


class SubjectRepairResult(BaseSchema):
    """Result of re-deriving stored subject eligibility."""

    checked: int
    repaired: int
    repaired_subject_ids: list[int] = []
