from typing import Annotated, Optional

from fastapi import Depends, HTTPException
from sqlalchemy.orm import Session

from medflow.config import get_settings
from medflow.db.database import get_db
from medflow.db.repositories.s3_updates import S3UpdateRepository
from medflow.db.repositories.task_attachments import TaskAttachmentRepository
from medflow.db.repositories.user_files import UserFileRepository
from medflow.key_resolver import KeyResolver
from medflow.s3_object_storage import S3Config, S3ObjectStorage


def get_key_resolver(db: Annotated[Session, Depends(get_db)]) -> KeyResolver:
    """
    Dependency-injected KeyResolver backed by the user_files table.
    """
    settings = get_settings()
    return KeyResolver(
        UserFileRepository(db), elevated_roles=settings.get_elevated_roles()
    )


def get_task_attachment_repository(
    db: Annotated[Session, Depends(get_db)]
) -> TaskAttachmentRepository:
    return TaskAttachmentRepository(db)


def get_s3_update_repository(
    db: Annotated[Session, Depends(get_db)]
) -> S3UpdateRepository:
    return S3UpdateRepository(db)


# Singleton instance of S3ObjectStorage
_s3_storage: Optional[S3ObjectStorage] = None


def get_s3_object_storage() -> S3ObjectStorage:
    """
    Get the S3ObjectStorage instance.
    Uses singleton pattern to reuse the same S3 client across requests.
    """
    global _s3_storage

    if _s3_storage is None:
        settings = get_settings()

        if not settings.AWS_S3_BUCKET_NAME:
            raise HTTPException(
                status_code=500,
                detail="S3 configuration is incomplete. Please check environment variables.",
            )

        config = S3Config(
            bucket_name=settings.AWS_S3_BUCKET_NAME,
            region=settings.AWS_REGION,
            endpoint_url=settings.S3_ENDPOINT_URL,
            access_key_id=settings.AWS_ACCESS_KEY_ID,
            secret_access_key=settings.AWS_SECRET_ACCESS_KEY,
        )

        _s3_storage = S3ObjectStorage(config)

    return _s3_storage
