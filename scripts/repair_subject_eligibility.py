"""Re-derive subject level, class years and departments where they disagree."""

import logging

from app.core.database import SessionLocal
from app.services.catalog import CatalogService

logging.basicConfig(level=logging.INFO, format="%(levelname)s - %(message)s")

session = SessionLocal()
try:
    service = CatalogService(session)
    result = service.repair_subjects()
    session.commit()
    print(f"Checked {result.checked} subjects, repaired {result.repaired}")
    for subject_id in result.repaired_subject_ids:
        print(f"  repaired subject {subject_id}")
except Exception:
    session.rollback()
    raise
finally:
    session.close()
