# bucketsync S3 Storage
# boto3 implementation of the storage capability

import functools
import logging
import math
from collections.abc import Iterator
from typing import Any

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError, WaiterError

from bucketsync.errors import (
    ConfigurationError,
    CopyError,
    ListingError,
    RegionResolutionError,
    VerificationError,
)
from bucketsync.storage.base import Credentials, ObjectStorage, StorageFactory

logger = logging.getLogger(__name__)

REGION_HEADER = "x-amz-bucket-region"

# GetBucketLocation returns legacy names for a few regions
LEGACY_LOCATIONS = {
    None: "us-east-1",
    "": "us-east-1",
    "EU": "eu-west-1",
}


def _error_message(error: Exception) -> str:
    """Extract a short message from a botocore exception."""
    if isinstance(error, ClientError):
        details = error.response.get("Error", {})
        code = details.get("Code", "Unknown")
        message = details.get("Message", "")
        return f"{code}: {message}" if message else code
    return str(error)


class S3Storage(ObjectStorage):
    """
    Amazon S3 (or S3-compatible) storage via a boto3 client.

    boto3 clients are thread-safe, so one instance is shared by all
    copy workers of a location.

    Args:
        client: boto3 S3 client.
        poll_delay: Seconds between existence checks while verifying.
    """

    def __init__(self, client: Any, *, poll_delay: float = 5.0):
        self.client = client
        self.poll_delay = poll_delay

    @classmethod
    def from_credentials(
        cls,
        credentials: Credentials,
        region: str,
        *,
        max_pool_connections: int = 10,
        request_timeout: float = 60.0,
        poll_delay: float = 5.0,
    ) -> "S3Storage":
        """
        Create a storage client for a profile and region.

        Args:
            credentials: Credential reference (AWS profile).
            region: Region the client talks to.
            max_pool_connections: HTTP connection pool size; should match
                the number of copy workers.
            request_timeout: Connect and read timeout per request.
            poll_delay: Seconds between existence checks.

        Returns:
            S3Storage instance.

        Raises:
            ConfigurationError: If the profile does not exist or the region
                is invalid.
        """
        config = Config(
            max_pool_connections=max_pool_connections,
            connect_timeout=request_timeout,
            read_timeout=request_timeout,
        )
        logger.debug("Creating S3 client (profile=%s, region=%s)", credentials.display_name, region)

        try:
            session = boto3.Session(profile_name=credentials.profile, region_name=region)
            client = session.client("s3", config=config)
        except (BotoCoreError, ValueError) as e:
            raise ConfigurationError(
                f"Cannot create S3 client (profile '{credentials.display_name}', region '{region}'): {e}"
            ) from e

        return cls(client, poll_delay=poll_delay)

    def list_objects(self, bucket: str, prefix: str) -> Iterator[tuple[str, int]]:
        """Yield every object under a prefix, following all pages."""
        try:
            paginator = self.client.get_paginator("list_objects_v2")
            pages = paginator.paginate(Bucket=bucket, Prefix=prefix)

            for page_number, page in enumerate(pages, start=1):
                contents = page.get("Contents", [])
                logger.debug("s3://%s/%s page %d: %d objects", bucket, prefix, page_number, len(contents))
                for obj in contents:
                    yield obj["Key"], int(obj["Size"])
        except (ClientError, BotoCoreError) as e:
            raise ListingError(
                f"Unable to list s3://{bucket}/{prefix}: {_error_message(e)}",
                uri=f"s3://{bucket}/{prefix}",
            ) from e

    def copy_object(self, src_bucket: str, src_key: str, dst_bucket: str, dst_key: str) -> None:
        """Copy one object server-side with CopyObject."""
        try:
            self.client.copy_object(
                Bucket=dst_bucket,
                Key=dst_key,
                CopySource={"Bucket": src_bucket, "Key": src_key},
            )
        except (ClientError, BotoCoreError) as e:
            raise CopyError(
                f"Failed to copy s3://{src_bucket}/{src_key}: {_error_message(e)}",
                key=src_key,
            ) from e

    def wait_until_exists(self, bucket: str, key: str, *, timeout: float) -> None:
        """Poll HeadObject through the ``object_exists`` waiter."""
        delay = max(1, math.ceil(self.poll_delay))
        attempts = max(1, math.ceil(timeout / delay))

        try:
            waiter = self.client.get_waiter("object_exists")
            waiter.wait(
                Bucket=bucket,
                Key=key,
                WaiterConfig={"Delay": delay, "MaxAttempts": attempts},
            )
        except WaiterError as e:
            raise VerificationError(
                f"s3://{bucket}/{key} not visible after {attempts * delay}s: {e}",
                key=key,
            ) from e
        except (ClientError, BotoCoreError) as e:
            raise VerificationError(
                f"Failed to check s3://{bucket}/{key}: {_error_message(e)}",
                key=key,
            ) from e

    def resolve_region(self, bucket: str, fallback_region: str) -> str:
        """
        Discover a bucket's region.

        Uses the ``x-amz-bucket-region`` header of HeadBucket, which S3
        returns even on redirects and access-denied responses, and falls
        back to GetBucketLocation when the header is missing.
        """
        headers: dict[str, str] = {}
        try:
            response = self.client.head_bucket(Bucket=bucket)
            headers = response.get("ResponseMetadata", {}).get("HTTPHeaders", {})
        except ClientError as e:
            headers = e.response.get("ResponseMetadata", {}).get("HTTPHeaders", {})
        except BotoCoreError as e:
            raise RegionResolutionError(f"Unable to reach bucket '{bucket}': {e}", bucket=bucket) from e

        region = headers.get(REGION_HEADER)
        if region:
            return region

        try:
            location = self.client.get_bucket_location(Bucket=bucket).get("LocationConstraint")
        except (ClientError, BotoCoreError) as e:
            raise RegionResolutionError(
                f"Unable to find region of bucket '{bucket}' (hint {fallback_region}): {_error_message(e)}",
                bucket=bucket,
            ) from e

        return LEGACY_LOCATIONS.get(location, location)


def s3_storage_factory(
    *,
    max_pool_connections: int = 10,
    request_timeout: float = 60.0,
    poll_delay: float = 5.0,
) -> StorageFactory:
    """
    Build a storage factory producing configured S3Storage clients.

    Returns:
        Callable taking (credentials, region).
    """
    return functools.partial(
        S3Storage.from_credentials,
        max_pool_connections=max_pool_connections,
        request_timeout=request_timeout,
        poll_delay=poll_delay,
    )
