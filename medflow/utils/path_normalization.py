"""Path normalization utilities for bucket-relative object keys."""

import re
from typing import Optional

_REPEATED_SLASHES = re.compile(r"/+")


def build_object_key(file_name: Optional[str], bucket_name: Optional[str]) -> str:
    """
    Derive the bucket-relative object key for an s3_updates row.

    The row's bucket_name column holds a key prefix, not a bucket. A prefix
    that trims to nothing is ignored.

    Examples:
        >>> build_object_key("report.pdf", None)
        'report.pdf'
        >>> build_object_key("a", "uploads/2024")
        'uploads/2024/a'
        >>> build_object_key("f", "   ")
        'f'
        >>> build_object_key("", "p")
        'p/'
    """
    name = file_name or ""
    prefix = (bucket_name or "").strip()
    if prefix:
        return f"{prefix}/{name}"
    return name


def normalize_object_key(raw_key: Optional[str]) -> str:
    """
    Normalize a stored key before handing it to S3.

    Strips an ``s3://<bucket>/`` prefix, collapses repeated slashes and drops
    one leading and one trailing slash. Falls back to the raw input when the
    result would be empty.

    Examples:
        >>> normalize_object_key("s3://bucket/a//b/")
        'a/b'
        >>> normalize_object_key("/uploads/x.dcm")
        'uploads/x.dcm'
    """
    raw = raw_key or ""
    key = raw.strip()
    if key.startswith("s3://"):
        after = key[len("s3://"):]
        first_slash = after.find("/")
        key = after[first_slash + 1:] if first_slash >= 0 else after
    key = _REPEATED_SLASHES.sub("/", key)
    if key.startswith("/"):
        key = key[1:]
    if key.endswith("/"):
        key = key[:-1]
    return key or raw


def key_from_path(path: str, bucket_name: str) -> str:
    """
    Turn a caller-supplied path into an object key.

    Only ``s3://<our bucket>/`` is stripped; anything else is already a key.
    """
    prefix = f"s3://{bucket_name}/"
    if path.startswith(prefix):
        return path[len(prefix):]
    return path
