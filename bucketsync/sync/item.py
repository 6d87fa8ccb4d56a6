# bucketsync Object Records
# Listed objects and location enumeration

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from bucketsync.errors import BucketSyncError, ListingError
from bucketsync.utils.hashing import fingerprint
from bucketsync.utils.paths import is_directory_marker, relative_key

if TYPE_CHECKING:
    from bucketsync.sync.location import StorageLocation

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ObjectRecord:
    """
    One object found under a location's prefix.

    ``key`` is relative to the prefix the object was listed under.
    """

    key: str
    size: int

    def __post_init__(self) -> None:
        if self.size < 0:
            raise ValueError(f"Object size must be non-negative: {self.key} ({self.size})")

    @property
    def fingerprint(self) -> str:
        """Identity fingerprint of this record."""
        return fingerprint(self)


def list_objects(location: "StorageLocation") -> list[ObjectRecord]:
    """
    List every object under a location's prefix.

    Pagination is handled by the storage capability, which must exhaust
    all pages. Empty "folder" marker objects are skipped.

    Args:
        location: Location to enumerate.

    Returns:
        Records in listing order, keys relative to the prefix.

    Raises:
        ListingError: If the location cannot be listed completely.
    """
    records: list[ObjectRecord] = []
    skipped = 0

    try:
        for key, size in location.storage.list_objects(location.bucket, location.prefix):
            if is_directory_marker(key, size):
                skipped += 1
                continue
            records.append(ObjectRecord(key=relative_key(key, location.prefix), size=size))
    except BucketSyncError:
        raise
    except Exception as e:
        raise ListingError(f"Unable to list {location.uri}: {e}", uri=location.uri) from e

    logger.debug("Listed %d objects under %s (%d folder markers skipped)", len(records), location.uri, skipped)
    return records
