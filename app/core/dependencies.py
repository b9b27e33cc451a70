"""FastAPI dependency injection utilities."""

from datetime import datetime, timezone
from typing import Annotated

from fastapi import Depends

from app.core.database import DbSession
from app.services.catalog import CatalogService
from app.services.results import ResultsService


def get_now() -> datetime:
    """Current instant, read once per request and passed into the core explicitly."""
    return datetime.now(timezone.utc)


def get_results_service(
    db: DbSession,
) -> ResultsService:
    return ResultsService(db)


def get_catalog_service(
    db: DbSession,
) -> CatalogService:
    return CatalogService(db)


# Type aliases for dependency injection
Now = Annotated[datetime, Depends(get_now)]
Results = Annotated[ResultsService, Depends(get_results_service)]
Catalog = Annotated[CatalogService, Depends(get_catalog_service)]
