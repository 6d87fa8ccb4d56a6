# bucketsync Storage Module
# Object-storage capability and its S3 implementation

from bucketsync.storage.base import DEFAULT_REGION, Credentials, ObjectStorage, StorageFactory
from bucketsync.storage.s3 import S3Storage, s3_storage_factory

__all__ = [
    "DEFAULT_REGION",
    "Credentials",
    "ObjectStorage",
    "StorageFactory",
    "S3Storage",
    "s3_storage_factory",
]
