# bucketsync Storage Location
# Location URI parsing with lazily resolved region and storage client

import logging
import re
import threading
from typing import Optional

from bucketsync.errors import ConfigurationError, RegionResolutionError
from bucketsync.storage.base import DEFAULT_REGION, Credentials, ObjectStorage, StorageFactory
from bucketsync.utils.paths import join_key, key_basename, normalize_prefix

logger = logging.getLogger(__name__)

SUPPORTED_SCHEMES = ("s3",)

BUCKET_NAME_RE = re.compile(r"^[a-z0-9][a-z0-9._-]{1,253}[a-z0-9]$", re.IGNORECASE)


def parse_location_uri(uri: Optional[str]) -> tuple[str, str]:
    """
    Split a location URI into bucket and normalized key prefix.

    Args:
        uri: URI of the form ``s3://bucket/optional/prefix``.

    Returns:
        Tuple of (bucket, prefix). The prefix is empty or ends with ``/``.

    Raises:
        ConfigurationError: If the URI is empty or malformed.
    """
    if not uri or not uri.strip():
        raise ConfigurationError("Location URI is empty")

    scheme, separator, rest = uri.strip().partition("://")
    if not separator:
        raise ConfigurationError(f"Location URI '{uri}' has no scheme (expected s3://bucket/prefix)")
    if scheme.lower() not in SUPPORTED_SCHEMES:
        raise ConfigurationError(
            f"Unsupported scheme '{scheme}' in '{uri}' (supported: {', '.join(SUPPORTED_SCHEMES)})"
        )

    bucket, _, prefix = rest.partition("/")
    if not bucket:
        raise ConfigurationError(f"Location URI '{uri}' has no bucket")
    if not BUCKET_NAME_RE.match(bucket):
        raise ConfigurationError(f"Invalid bucket name '{bucket}' in '{uri}'")

    return bucket, normalize_prefix(prefix)


class StorageLocation:
    """
    A bucket plus key prefix that one sync run reads from or writes to.

    Bucket and prefix are parsed eagerly and fail fast. The serving region
    and the storage client are resolved on first use and cached for the
    lifetime of this object; the cache only saves network calls.

    Args:
        uri: Location URI (``s3://bucket/prefix``).
        credentials: Credential reference used for every client.
        storage_factory: Builds a storage client for (credentials, region).
        fallback_region: Region used for discovery and when discovery fails.
    """

    def __init__(
        self,
        uri: str,
        credentials: Credentials,
        storage_factory: StorageFactory,
        *,
        fallback_region: str = DEFAULT_REGION,
    ):
        self.bucket, self.prefix = parse_location_uri(uri)
        self.uri = uri
        self.credentials = credentials
        self.fallback_region = fallback_region
        self._storage_factory = storage_factory
        self._region: Optional[str] = None
        self._storage: Optional[ObjectStorage] = None
        # Reentrant: storage resolution resolves the region first
        self._lock = threading.RLock()

    def __repr__(self) -> str:
        return f"StorageLocation({self.uri!r})"

    @property
    def scope(self) -> str:
        """Bucket the location lives in."""
        return self.bucket

    @property
    def region(self) -> str:
        """Region serving the bucket, discovered once."""
        with self._lock:
            if self._region is None:
                self._region = self._resolve_region()
            return self._region

    @property
    def storage(self) -> ObjectStorage:
        """Storage client bound to the resolved region."""
        with self._lock:
            # Resolving the region may already install the discovery client
            region = self.region
            if self._storage is None:
                self._storage = self._storage_factory(self.credentials, region)
            return self._storage

    def _resolve_region(self) -> str:
        """Ask the storage capability for the region, falling back on failure."""
        discovery = self._storage_factory(self.credentials, self.fallback_region)

        try:
            region = discovery.resolve_region(self.bucket, self.fallback_region)
        except RegionResolutionError as e:
            logger.warning("Unable to find region of %s, using %s: %s", self.uri, self.fallback_region, e)
            region = self.fallback_region

        if region == self.fallback_region and self._storage is None:
            self._storage = discovery

        logger.debug("Region of %s: %s", self.uri, region)
        return region

    def full_key(self, relative: str) -> str:
        """Full object key for a key relative to this location's prefix."""
        return f"{self.prefix}{relative}"

    def destination_key(self, source_key: str) -> str:
        """
        Key a copied object gets in this location.

        The layout is flat: only the last segment of the source key is
        kept, joined to this location's prefix.
        """
        return join_key(self.prefix, key_basename(source_key))

    def uri_for(self, key: str) -> str:
        """Render a full object key as a URI."""
        return f"s3://{self.bucket}/{key}"
