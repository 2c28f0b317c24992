"""Repository for the user_files storage index."""

from typing import List, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from medflow.domain_file_record import StorageIndexRecord
from medflow.models import ORMUserFile
from medflow.storage_exceptions import StorageIndexUnavailable
from medflow.structlog_config import get_logger

logger = get_logger(__name__)


class UserFileRepository:
    """Read access to upload records keyed by s3_key."""

    def __init__(self, db: Session):
        self.db = db

    def find_by_keys(
        self, keys: Sequence[str], owner_id: Optional[str] = None
    ) -> List[StorageIndexRecord]:
        """Return every upload record whose s3_key is in ``keys``.

        Newest first; rows without an upload time come last. When
        ``owner_id`` is given only that owner's rows are returned.

        Raises:
            StorageIndexUnavailable: if the query fails.
        """
        distinct_keys = list(dict.fromkeys(keys))
        if not distinct_keys:
            return []

        logger.debug(
            "Querying storage index",
            operation="db_query",
            table="user_files",
            key_count=len(distinct_keys),
            owner_filtered=owner_id is not None,
        )
        try:
            query = self.db.query(ORMUserFile).filter(
                ORMUserFile.s3_key.in_(distinct_keys)
            )
            if owner_id is not None:
                query = query.filter(ORMUserFile.user_id == owner_id)
            rows = query.order_by(
                ORMUserFile.uploaded_at.is_(None),
                ORMUserFile.uploaded_at.desc(),
            ).all()
        except SQLAlchemyError as e:
            logger.error(
                "Storage index query failed",
                operation="db_query",
                table="user_files",
                error_type=type(e).__name__,
                error_message=str(e),
            )
            raise StorageIndexUnavailable("Storage index query failed") from e

        logger.debug(
            "Storage index query complete",
            operation="db_query",
            table="user_files",
            row_count=len(rows),
        )
        return [StorageIndexRecord.from_orm(row) for row in rows]
