"""Repository for dashboard profiles."""

from typing import Optional

from sqlalchemy.orm import Session

from medflow.models import ORMProfile


class ProfileRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, profile_id: str) -> Optional[ORMProfile]:
        return self.db.query(ORMProfile).filter(ORMProfile.id == profile_id).first()
