"""
Resolution of canonical file keys against the storage index.

Each input key maps to exactly one ResolvedKey, in input order. When the
index holds several uploads under the same key the most recent one wins;
keys with no visible upload resolve to themselves.
"""

from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Protocol, Sequence

from medflow.access import DEFAULT_ELEVATED_ROLES, owner_scope
from medflow.auth_schemas import Requester
from medflow.domain_file_record import StorageIndexRecord
from medflow.schemas import ResolvedKey
from medflow.structlog_config import get_logger
from medflow.utils.file_keys import display_name_from_key
from medflow.utils.timestamps import parse_timestamp, to_iso8601

logger = get_logger(__name__)

_EPOCH = datetime.fromtimestamp(0, tz=timezone.utc)


class StorageIndex(Protocol):
    def find_by_keys(
        self, keys: Sequence[str], owner_id: Optional[str] = None
    ) -> List[StorageIndexRecord]: ...


def _recency(record: StorageIndexRecord) -> tuple:
    uploaded = parse_timestamp(record.uploaded_at)
    if uploaded is None:
        return (0, _EPOCH)
    return (1, uploaded)


def latest_by_key(records: Iterable[StorageIndexRecord]) -> Dict[str, StorageIndexRecord]:
    """
    Pick the most recently uploaded record for each storage key.

    Records without a usable upload time rank below any timestamped record.
    On a tie the record seen first is kept.
    """
    latest: Dict[str, StorageIndexRecord] = {}
    for record in records:
        current = latest.get(record.storage_key)
        if current is None or _recency(record) > _recency(current):
            latest[record.storage_key] = record
    return latest


def fallback_resolution(key: str) -> ResolvedKey:
    """Resolution for a key the index knows nothing about (or hides)."""
    return ResolvedKey(
        original_key=key,
        storage_key=key,
        display_name=display_name_from_key(key),
        owner_id=None,
        uploaded_at=None,
        resolved=False,
    )


def resolution_from_record(key: str, record: StorageIndexRecord) -> ResolvedKey:
    return ResolvedKey(
        original_key=key,
        storage_key=record.storage_key,
        display_name=record.display_name or display_name_from_key(record.storage_key),
        owner_id=record.owner_id or None,
        uploaded_at=to_iso8601(record.uploaded_at),
        resolved=True,
    )


class KeyResolver:
    """Resolves canonical keys for a requester against a storage index."""

    def __init__(
        self,
        index: StorageIndex,
        elevated_roles: Iterable[str] = DEFAULT_ELEVATED_ROLES,
    ):
        self.index = index
        self.elevated_roles = tuple(elevated_roles)

    def resolve(self, keys: Sequence[str], requester: Requester) -> List[ResolvedKey]:
        """
        Resolve ``keys`` for ``requester``.

        Non-elevated requesters only see their own uploads. Storage-index
        failures propagate unchanged.
        """
        keys = list(keys)
        if not keys:
            return []

        owner_id = owner_scope(requester, self.elevated_roles)
        records = self.index.find_by_keys(keys, owner_id=owner_id)
        latest = latest_by_key(records)

        resolved_keys = []
        for key in keys:
            record = latest.get(key)
            if record is None:
                resolved_keys.append(fallback_resolution(key))
            else:
                resolved_keys.append(resolution_from_record(key, record))

        logger.info(
            "Resolved file keys",
            operation="resolve_file_keys",
            requester_id=requester.id,
            owner_filtered=owner_id is not None,
            key_count=len(keys),
            matched_count=sum(1 for item in resolved_keys if item.resolved),
        )
        return resolved_keys
