# bucketsync Storage Capability
# Abstract object-storage interface consumed by the sync engine

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Optional

DEFAULT_REGION = "us-east-1"


@dataclass(frozen=True)
class Credentials:
    """
    Explicit credential reference for a storage location.

    Passed into every location instead of being read from the process
    environment deep inside the call path.
    """

    profile: Optional[str] = None

    @property
    def display_name(self) -> str:
        """Human-readable profile name."""
        return self.profile or "default chain"


class ObjectStorage(ABC):
    """
    Object-storage capability: list, copy, existence check, region lookup.

    Implementations must be safe for concurrent calls from multiple
    worker threads; the engine shares one instance per location across
    all copy tasks without locking.
    """

    @abstractmethod
    def list_objects(self, bucket: str, prefix: str) -> Iterator[tuple[str, int]]:
        """
        Yield ``(key, size)`` for every object under a prefix.

        Must follow continuation tokens until the listing is exhausted.

        Raises:
            ListingError: If any page cannot be fetched.
        """

    @abstractmethod
    def copy_object(self, src_bucket: str, src_key: str, dst_bucket: str, dst_key: str) -> None:
        """
        Server-side copy of one object.

        Raises:
            CopyError: If the copy request is rejected or fails.
        """

    @abstractmethod
    def wait_until_exists(self, bucket: str, key: str, *, timeout: float) -> None:
        """
        Block until an object is visible, for at most ``timeout`` seconds.

        Raises:
            VerificationError: If the object is not visible in time.
        """

    @abstractmethod
    def resolve_region(self, bucket: str, fallback_region: str) -> str:
        """
        Discover the region serving a bucket.

        Raises:
            RegionResolutionError: If the region cannot be determined.
        """


# Builds a storage client for (credentials, region)
StorageFactory = Callable[[Credentials, str], ObjectStorage]
