"""
Read-capability checks for stored objects.

The key resolver (owner filter on the storage index) and the download
endpoints (path checks on object keys) both ask this module whether an
identity may read something.
"""

from typing import Iterable, Optional, Protocol

from sqlalchemy.exc import SQLAlchemyError

from medflow.auth_schemas import Requester
from medflow.structlog_config import get_logger

logger = get_logger(__name__)

DEFAULT_ELEVATED_ROLES = ("admin", "staff")

# Task attachments are uploaded here with the uploader's id in the path
TEMP_ATTACHMENT_PREFIX = "temp/attachment/"


class AttachmentLookup(Protocol):
    def find_task_id(self, s3_key: str) -> Optional[str]: ...

    def user_can_access_task(self, task_id: str, user_id: str) -> bool: ...


def is_elevated(
    requester: Requester, elevated_roles: Iterable[str] = DEFAULT_ELEVATED_ROLES
) -> bool:
    """True if the requester may see every owner's files."""
    if not requester.role:
        return False
    return requester.role.lower() in {role.lower() for role in elevated_roles}


def owner_scope(
    requester: Requester, elevated_roles: Iterable[str] = DEFAULT_ELEVATED_ROLES
) -> Optional[str]:
    """
    Owner filter to apply to storage-index lookups.

    Returns None (no filter) for elevated requesters, the requester's own id
    otherwise.
    """
    if is_elevated(requester, elevated_roles):
        return None
    return requester.id


def has_path_traversal(key: str) -> bool:
    return ".." in key


def is_temp_attachment(key: str) -> bool:
    return key.startswith(TEMP_ATTACHMENT_PREFIX) and not has_path_traversal(key)


def is_owned_path(key: str, user_id: str) -> bool:
    """True if the key lives under the user's own ``<user_id>/`` directory."""
    if not key or not user_id:
        return False
    return key.startswith(f"{user_id}/") and not has_path_traversal(key)


def can_read_object(
    requester: Requester,
    key: str,
    attachments: Optional[AttachmentLookup] = None,
    elevated_roles: Iterable[str] = DEFAULT_ELEVATED_ROLES,
) -> bool:
    """
    Decide whether ``requester`` may download the object at ``key``.

    Elevated requesters may read any key, matching the unfiltered index view
    they get from the key resolver. This is wider than a task-attachment
    check: staff and admins can also download other users' uploads and keys
    that no task references. Everyone else may read temporary task
    attachments, keys under their own directory, and keys attached to a task
    they assigned, were assigned, or hold a subtask of.
    """
    if not key or has_path_traversal(key):
        return False
    if is_elevated(requester, elevated_roles):
        return True
    if is_temp_attachment(key) or is_owned_path(key, requester.id):
        return True
    if attachments is None:
        return False

    try:
        task_id = attachments.find_task_id(key)
        if task_id is None:
            return False
        return attachments.user_can_access_task(task_id, requester.id)
    except SQLAlchemyError as e:
        # Without the attachment index only the path rules apply
        logger.warning(
            "Task attachment lookup failed",
            operation="can_read_object",
            error_type=type(e).__name__,
            error=str(e),
            s3_key=key,
        )
        return False
