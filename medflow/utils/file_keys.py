"""Normalization of client-submitted file references into canonical keys.

Clients send file references in several shapes: a bare key string, or an
object carrying the key under ``key``, ``s3_key``, ``s3Key`` or ``path``.
Everything in this module is pure and never raises on bad input.
"""

from typing import Any, List, Mapping, Optional, Sequence, Union

# Probed in this order; the first non-empty string wins.
OBJECT_KEY_FIELDS = ("key", "s3_key", "s3Key", "path")

DEFAULT_DISPLAY_NAME = "file"


def _non_empty_str(value: Any) -> bool:
    return isinstance(value, str) and len(value) > 0


class StringKey:
    """A file reference sent as a bare key string."""

    def __init__(self, value: str):
        self.value = value

    def canonical(self) -> Optional[str]:
        return self.value


class ObjectKey:
    """A file reference sent as an object with one of the key fields."""

    def __init__(self, fields: Mapping[str, Any]):
        self.fields = fields

    def canonical(self) -> Optional[str]:
        for name in OBJECT_KEY_FIELDS:
            value = self.fields.get(name)
            if _non_empty_str(value):
                return value
        return None


FileKeyInput = Union[StringKey, ObjectKey]


def parse_file_key(item: Any) -> Optional[FileKeyInput]:
    """Classify one raw element, or return None when it cannot carry a key."""
    if _non_empty_str(item):
        return StringKey(item)
    if isinstance(item, Mapping):
        return ObjectKey(item)
    return None


def normalize_file_keys(keys: Any) -> List[str]:
    """
    Reduce a client-submitted list of file references to canonical keys.

    Non-list input yields an empty list. Input order and duplicates are kept;
    elements that carry no usable key are dropped.

    Examples:
        >>> normalize_file_keys(["a", {"key": "b"}, "", None, {"s3_key": "c"}])
        ['a', 'b', 'c']
        >>> normalize_file_keys({"key": "a"})
        []
    """
    # str is a Sequence too, but a bare string is not a list of keys
    if not isinstance(keys, Sequence) or isinstance(keys, (str, bytes, bytearray)):
        return []

    canonical_keys = []
    for item in keys:
        parsed = parse_file_key(item)
        if parsed is None:
            continue
        key = parsed.canonical()
        if key:
            canonical_keys.append(key)
    return canonical_keys


def display_name_from_key(key: Any, fallback: str = DEFAULT_DISPLAY_NAME) -> str:
    """Return the last path segment of a key, or ``fallback`` when it is empty."""
    if not _non_empty_str(key):
        return fallback
    return key.split("/")[-1] or fallback
