"""bucketsync - one-way synchronization between object-storage buckets.

Copies objects that exist under a source location but are missing from a
destination location, using server-side copies. Objects are identified by
key and size only.
"""

__version__ = "1.0.0"

__all__ = [
    "__version__",
    "StorageLocation",
    "ObjectRecord",
    "DiffSet",
    "CopyTask",
    "TaskStatus",
    "SyncEngine",
    "SyncReport",
    "SyncOutcome",
    "compute_diff",
    "list_objects",
    "fingerprint",
]


def __getattr__(name: str):
    """Lazy import to avoid loading dependencies during setup."""
    if name == "fingerprint":
        from bucketsync.utils.hashing import fingerprint

        return fingerprint
    if name in (
        "StorageLocation",
        "ObjectRecord",
        "DiffSet",
        "CopyTask",
        "TaskStatus",
        "SyncEngine",
        "SyncReport",
        "SyncOutcome",
        "compute_diff",
        "list_objects",
    ):
        from bucketsync import sync

        return getattr(sync, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
