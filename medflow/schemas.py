from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ResolvedKey(BaseModel):
    """Schema for one resolve-file-keys result, serialized with wire names."""

    model_config = ConfigDict(populate_by_name=True)

    original_key: str = Field(serialization_alias="originalKey")
    storage_key: str = Field(serialization_alias="s3Key")
    display_name: str = Field(serialization_alias="fileName")
    owner_id: Optional[str] = Field(default=None, serialization_alias="userId")
    uploaded_at: Optional[str] = Field(
        default=None,
        serialization_alias="uploadedAt",
        description="ISO-8601 UTC upload time of the authoritative record.",
    )
    resolved: bool = Field(
        default=False,
        description="True when a storage-index record backed this entry.",
    )


class ResolveFileKeysRequest(BaseModel):
    """Request body for resolve-file-keys.

    Elements of fileKeys may be strings or objects with a key field; they are
    normalized server side.
    """

    fileKeys: Any = None


class ResolveFileKeysResponse(BaseModel):
    resolvedKeys: List[ResolvedKey]


class SignedUrlResponse(BaseModel):
    signedUrl: str
    expiresIn: int


class S3UpdatePresignedUrlResponse(BaseModel):
    url: str
    expiresIn: int
    fileName: str


class FileExpiry(BaseModel):
    """Download window of a client upload."""

    model_config = ConfigDict(populate_by_name=True)

    expires_at: datetime = Field(serialization_alias="expiresAt")
    days_remaining: int = Field(serialization_alias="daysRemaining")
    is_expired: bool = Field(serialization_alias="isExpired")
