"""School class endpoints."""

from fastapi import APIRouter

from app.core.dependencies import Catalog
from app.schemas.catalog import ClassGroups, SchoolClassCreate, SchoolClassResponse
from app.schemas.common import MessageResponse
from app.services import eligibility

router = APIRouter()


@router.get("", response_model=list[SchoolClassResponse])
def list_classes(service: Catalog):
    """List classes, JSS1 through SS3."""
    return service.list_classes()


@router.get("/grouped", response_model=ClassGroups)
def list_classes_by_level(service: Catalog):
    """Classes split into Junior and Senior."""
    return eligibility.group_classes_by_level(service.class_records())


@router.post("", response_model=SchoolClassResponse)
def create_class(request: SchoolClassCreate, service: Catalog):
    """Create a class. Each class name may exist only once."""
    return service.create_class(request)


@router.post("/initialize", response_model=list[SchoolClassResponse])
def initialize_classes(service: Catalog):
    """Create any of JSS1-SS3 that do not exist yet."""
    return service.initialize_classes()


@router.delete("/{class_id}", response_model=MessageResponse)
def delete_class(class_id: int, service: Catalog):
    """Delete a class. Subjects linked to it drop it from their class list."""
    service.delete_class(class_id)
    return MessageResponse(message="Class deleted successfully")
