# bucketsync Hashing Utilities
# Identity fingerprints for object comparison

import hashlib
from collections.abc import Iterable
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from bucketsync.sync.item import ObjectRecord

FINGERPRINT_ALGORITHM = "md5"


def content_hash(content: str | bytes, *, algorithm: str = "sha256") -> str:
    """
    Calculate hash of content.

    Args:
        content: String or bytes content.
        algorithm: Hash algorithm (default sha256).

    Returns:
        Hex digest of hash.
    """
    if isinstance(content, str):
        content = content.encode("utf-8")

    hasher = hashlib.new(algorithm)
    hasher.update(content)
    return hasher.hexdigest()


def fingerprint(record: "ObjectRecord") -> str:
    """
    Calculate the identity fingerprint of an object.

    The fingerprint depends only on the object's size and key, so two
    objects with the same key and size but different bytes share a
    fingerprint. Only the key and the size are ever compared.

    Args:
        record: Listed object.

    Returns:
        Token of the form ``md5:<hexdigest>``.
    """
    return fingerprint_of(record.size, record.key)


def fingerprint_of(size: int, key: str) -> str:
    """Fingerprint for a raw ``(size, key)`` pair."""
    # NUL separates the decimal size from the key
    payload = f"{size}\x00{key}"
    return f"{FINGERPRINT_ALGORITHM}:{content_hash(payload, algorithm=FINGERPRINT_ALGORITHM)}"


def fingerprint_set(records: Iterable["ObjectRecord"]) -> set[str]:
    """Build the set of fingerprints for a listing."""
    return {fingerprint(record) for record in records}
