class StorageException(Exception):
    """
    Base exception for storage errors.

    Allows routes to handle object-storage and storage-index failures uniformly.
    """

    pass


class ObjectNotFound(StorageException):
    """Raised when an object key does not exist in the bucket."""

    def __init__(self, key: str):
        super().__init__(f"Object not found: {key}")
        self.key = key


class StorageIndexUnavailable(StorageException):
    """Raised when the storage index (user_files and friends) cannot be queried."""

    pass
