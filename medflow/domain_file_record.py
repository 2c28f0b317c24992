"""Domain model for storage-index records.

A StorageIndexRecord is one upload event as read back from the user_files
table, decoupled from the ORM row and from the wire representation.
"""

from typing import Any, Optional

from medflow.models import ORMUserFile


class StorageIndexRecord:
    def __init__(
        self,
        storage_key: str,
        display_name: str,
        owner_id: Optional[str] = None,
        uploaded_at: Optional[Any] = None,
    ):
        self.storage_key = storage_key
        self.display_name = display_name
        self.owner_id = owner_id
        # Left as read from the index; coerced when a ResolvedKey is built
        self.uploaded_at = uploaded_at

    @classmethod
    def from_orm(cls, orm_obj: ORMUserFile) -> "StorageIndexRecord":
        return cls(
            storage_key=orm_obj.s3_key,
            display_name=orm_obj.file_name,
            owner_id=orm_obj.user_id,
            uploaded_at=orm_obj.uploaded_at,
        )

    def __repr__(self):
        return (
            f"<StorageIndexRecord(storage_key={self.storage_key}, "
            f"owner_id={self.owner_id}, uploaded_at={self.uploaded_at})>"
        )

