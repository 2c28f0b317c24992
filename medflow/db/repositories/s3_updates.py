"""Repository for s3_updates result rows."""

from typing import Optional

from sqlalchemy.orm import Session

from medflow.models import ORMS3Update


class S3UpdateRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, update_id: str) -> Optional[ORMS3Update]:
        """Retrieve one s3_updates row, or None."""
        return self.db.query(ORMS3Update).filter(ORMS3Update.id == update_id).first()
