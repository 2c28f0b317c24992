from fastapi import APIRouter, Depends, HTTPException, status

from medflow.auth_schemas import Requester
from medflow.auth_utils import get_current_requester
from medflow.config import get_settings
from medflow.db.repositories.s3_updates import S3UpdateRepository
from medflow.dependencies import get_s3_object_storage, get_s3_update_repository
from medflow.s3_object_storage import S3ObjectStorage
from medflow.schemas import S3UpdatePresignedUrlResponse
from medflow.storage_exceptions import ObjectNotFound
from medflow.structlog_config import get_logger
from medflow.utils.file_keys import display_name_from_key
from medflow.utils.path_normalization import build_object_key, normalize_object_key

logger = get_logger(__name__)

router = APIRouter()


@router.get("/{update_id}/presigned-url", response_model=S3UpdatePresignedUrlResponse)
def get_s3_update_presigned_url(
    update_id: str,
    _: Requester = Depends(get_current_requester),
    repo: S3UpdateRepository = Depends(get_s3_update_repository),
    storage: S3ObjectStorage = Depends(get_s3_object_storage),
):
    """Issue a 24-hour download URL for an s3_updates result file."""
    row = repo.get_by_id(update_id)
    if row is None:
        logger.warning(
            "s3_update not found",
            operation="s3_update_presigned_url",
            error_type="not_found",
            update_id=update_id,
        )
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"error": "S3 update record not found", "code": "S3_UPDATE_NOT_FOUND"},
        )

    s3_key = normalize_object_key(build_object_key(row.file_name, row.bucket_name))
    if not s3_key:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot determine the S3 object key; check file_name",
        )

    expires_in = get_settings().S3_UPDATE_URL_EXPIRES
    try:
        url = storage.generate_download_url(s3_key, expires_in)
    except ObjectNotFound:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"error": "Object is not in S3", "code": "S3_OBJECT_NOT_FOUND"},
        )

    return S3UpdatePresignedUrlResponse(
        url=url,
        expiresIn=expires_in,
        fileName=row.file_name or display_name_from_key(s3_key, fallback="download"),
    )
