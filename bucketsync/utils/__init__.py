# bucketsync Utilities Module
# Helper functions for object keys and fingerprints

from bucketsync.utils.hashing import (
    content_hash,
    fingerprint,
    fingerprint_of,
    fingerprint_set,
)
from bucketsync.utils.paths import (
    is_directory_marker,
    join_key,
    key_basename,
    normalize_prefix,
    relative_key,
)

__all__ = [
    # Keys
    "join_key",
    "key_basename",
    "normalize_prefix",
    "relative_key",
    "is_directory_marker",
    # Hashing
    "content_hash",
    "fingerprint",
    "fingerprint_of",
    "fingerprint_set",
]
