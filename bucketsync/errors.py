# bucketsync Errors
# Exception hierarchy for sync runs


class BucketSyncError(Exception):
    """Base exception for all bucketsync errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ConfigurationError(BucketSyncError):
    """Raised for malformed location URIs or missing required settings.

    Always raised before any network call is made.
    """


class RegionResolutionError(BucketSyncError):
    """Raised when the serving region of a bucket cannot be discovered.

    Never fatal: the location falls back to its default region.
    """

    def __init__(self, message: str, bucket: str = ""):
        self.bucket = bucket
        super().__init__(message)


class ListingError(BucketSyncError):
    """Raised when a location cannot be listed completely."""

    def __init__(self, message: str, uri: str = ""):
        self.uri = uri
        super().__init__(message)


class CopyError(BucketSyncError):
    """Raised when a server-side copy request fails."""

    def __init__(self, message: str, key: str = ""):
        self.key = key
        super().__init__(message)


class VerificationError(BucketSyncError):
    """Raised when a copied object does not become visible in time."""

    def __init__(self, message: str, key: str = ""):
        self.key = key
        super().__init__(message)
