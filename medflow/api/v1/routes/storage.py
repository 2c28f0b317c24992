"""
Storage routes for the medflow backend.

This module provides API endpoints for:
- Resolving client file references to authoritative storage keys
- Issuing signed download URLs
- Streaming downloads through the backend
- Reporting the download window of a client upload
"""

from typing import Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.responses import StreamingResponse
from starlette.background import BackgroundTask

from medflow.access import can_read_object
from medflow.auth_schemas import Requester
from medflow.auth_utils import get_current_requester
from medflow.config import get_settings
from medflow.db.repositories.task_attachments import TaskAttachmentRepository
from medflow.dependencies import (
    get_key_resolver,
    get_s3_object_storage,
    get_task_attachment_repository,
)
from medflow.key_resolver import KeyResolver
from medflow.rate_limit import limiter
from medflow.s3_object_storage import S3ObjectStorage
from medflow.schemas import (
    FileExpiry,
    ResolveFileKeysRequest,
    ResolveFileKeysResponse,
    SignedUrlResponse,
)
from medflow.storage_exceptions import ObjectNotFound, StorageIndexUnavailable
from medflow.structlog_config import get_logger
from medflow.utils.expiry import calculate_file_expiry, clamp_expires_in
from medflow.utils.file_keys import display_name_from_key, normalize_file_keys
from medflow.utils.path_normalization import key_from_path

logger = get_logger(__name__)

router = APIRouter()


def rate_limit() -> str:
    return get_settings().RATE_LIMIT


def content_disposition(key: str) -> str:
    """Attachment header with an ASCII fallback and an RFC 5987 UTF-8 name."""
    safe_name = display_name_from_key(key, fallback="download")
    # Control characters are not allowed in header values at all
    safe_name = "".join(c for c in safe_name if ord(c) >= 0x20 and c != "\x7f")
    ascii_name = "".join(
        c for c in safe_name if c.isascii() and c not in ('"', "\\")
    )
    ascii_name = ascii_name or "download"
    safe_name = safe_name or "download"
    encoded_name = quote(safe_name, safe="!~*'()")
    return f"attachment; filename=\"{ascii_name}\"; filename*=UTF-8''{encoded_name}"


def _require_readable(
    requester: Requester,
    key: str,
    attachments: TaskAttachmentRepository,
) -> None:
    settings = get_settings()
    if not can_read_object(
        requester, key, attachments, elevated_roles=settings.get_elevated_roles()
    ):
        logger.warning(
            "Object read denied",
            operation="check_read_access",
            error_type="forbidden",
            requester_id=requester.id,
            s3_key=key,
        )
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")


@router.post("/resolve-file-keys", response_model=ResolveFileKeysResponse)
@limiter.limit(rate_limit)
def resolve_file_keys(
    request: Request,
    payload: ResolveFileKeysRequest,
    requester: Requester = Depends(get_current_requester),
    resolver: KeyResolver = Depends(get_key_resolver),
):
    """Map client file references to their authoritative storage keys.

    Returns exactly one entry per normalized key, in request order. Keys with
    no visible upload resolve to themselves with ``resolved`` false.
    """
    if not isinstance(payload.fileKeys, list):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="fileKeys must be a list",
        )

    keys = normalize_file_keys(payload.fileKeys)
    try:
        resolved_keys = resolver.resolve(keys, requester)
    except StorageIndexUnavailable as e:
        logger.error(
            "Failed to resolve file keys",
            operation="resolve_file_keys",
            error_type=type(e).__name__,
            error=str(e),
            requester_id=requester.id,
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error",
        )

    return ResolveFileKeysResponse(resolvedKeys=resolved_keys)


@router.get("/signed-url", response_model=SignedUrlResponse)
@limiter.limit(rate_limit)
def get_signed_url(
    request: Request,
    path: Optional[str] = None,
    expires_in: Optional[str] = Query(default=None, alias="expiresIn"),
    requester: Requester = Depends(get_current_requester),
    attachments: TaskAttachmentRepository = Depends(get_task_attachment_repository),
    storage: S3ObjectStorage = Depends(get_s3_object_storage),
):
    """Issue a time-limited download URL for an object the requester may read."""
    if not path:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Path is required"
        )

    settings = get_settings()
    key = key_from_path(path, storage.config.bucket_name)
    _require_readable(requester, key, attachments)

    seconds = clamp_expires_in(expires_in, default=settings.SIGNED_URL_DEFAULT_EXPIRES)
    try:
        url = storage.generate_download_url(key, seconds)
    except ObjectNotFound:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="File does not exist or its download period has ended",
        )

    return SignedUrlResponse(signedUrl=url, expiresIn=seconds)


@router.get("/download", response_class=StreamingResponse)
@limiter.limit(rate_limit)
def download_object(
    request: Request,
    path: Optional[str] = None,
    requester: Requester = Depends(get_current_requester),
    attachments: TaskAttachmentRepository = Depends(get_task_attachment_repository),
    storage: S3ObjectStorage = Depends(get_s3_object_storage),
) -> StreamingResponse:
    """Stream an object the requester may read. Returns 404 if it is missing."""
    if not path:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Path is required"
        )

    key = key_from_path(path, storage.config.bucket_name)
    _require_readable(requester, key, attachments)

    try:
        stored = storage.open_object(key)
    except ObjectNotFound:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="File not found")

    headers = {"Content-Disposition": content_disposition(key)}
    if stored.content_length is not None:
        headers["Content-Length"] = str(stored.content_length)

    return StreamingResponse(
        content=stored.iter_chunks(),
        media_type=stored.content_type,
        headers=headers,
        background=BackgroundTask(stored.close),
    )


@router.get("/expiry", response_model=FileExpiry)
def get_file_expiry(
    uploaded_at: Optional[str] = Query(default=None, alias="uploadedAt"),
    _: Requester = Depends(get_current_requester),
):
    """Download window of a client upload, given its ``uploadedAt`` value."""
    settings = get_settings()
    return calculate_file_expiry(uploaded_at, retention_days=settings.FILE_RETENTION_DAYS)
