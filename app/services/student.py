"""Student management service."""

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from app.core.exceptions import ConflictError, NotFoundError
from app.models.school_class import SchoolClass
from app.models.student import Student
from app.schemas.student import (
    PaginatedStudentResponse,
    StudentCreate,
    StudentFilter,
    StudentResponse,
)


class StudentService:
    """Student management service."""

    def __init__(self, db: Session):
        self.db = db

    def create_student(self, request: StudentCreate) -> StudentResponse:
        """Create a new student."""
        if request.class_id is not None and not self.db.get(SchoolClass, request.class_id):
            raise NotFoundError("Class", str(request.class_id))
        if request.admission_number:
            existing = self.db.execute(
                select(Student.id).where(Student.admission_number == request.admission_number)
            ).first()
            if existing:
                raise ConflictError(
                    "Admission number already in use",
                    details={"admission_number": request.admission_number},
                )

        student = Student(
            full_name=request.full_name,
            admission_number=request.admission_number,
            class_id=request.class_id,
        )
        self.db.add(student)
        self.db.flush()
        self.db.refresh(student)
        return StudentResponse.model_validate(student)

    def list_students(
        self,
        filters: StudentFilter | None = None,
        page: int = 1,
        page_size: int = 50,
    ) -> PaginatedStudentResponse:
        """List students with filtering and pagination."""
        query = select(Student)

        if filters:
            if filters.class_id:
                query = query.where(Student.class_id == filters.class_id)
            if filters.search:
                search_term = f"%{filters.search}%"
                query = query.where(
                    or_(
                        Student.full_name.ilike(search_term),
                        Student.admission_number.ilike(search_term),
                    )
                )

        # Get total count
        count_query = select(func.count()).select_from(query.subquery())
        total = self.db.execute(count_query).scalar() or 0

        # Apply pagination
        offset = (page - 1) * page_size
        query = query.order_by(Student.full_name).offset(offset).limit(page_size)
        students = self.db.execute(query).scalars().all()

        return PaginatedStudentResponse(
            items=[StudentResponse.model_validate(s) for s in students],
            total=total,
            page=page,
            page_size=page_size,
            total_pages=(total + page_size - 1) // page_size,
        )
