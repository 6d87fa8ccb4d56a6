# bucketsync Test Fixtures
# Pytest fixtures and an in-memory storage capability

import logging
import tempfile
import threading
import time
from collections.abc import Callable, Generator, Iterator
from pathlib import Path
from typing import Optional

import pytest
import yaml

from bucketsync.errors import CopyError, VerificationError
from bucketsync.storage.base import Credentials, ObjectStorage
from bucketsync.sync.location import StorageLocation


class FakeStorage(ObjectStorage):
    """
    In-memory object storage shared by every location of a test.

    Lists in key order with bounded pages, records every call and can be
    told to fail specific operations.
    """

    def __init__(self, *, page_size: int = 1000, region: str = "us-east-1"):
        self.buckets: dict[str, dict[str, int]] = {}
        self.page_size = page_size
        self.region = region
        self.copy_delay = 0.0
        self.verify_delay = 0.0
        self.wait_timeouts: list[float] = []
        self.fail_copy: dict[str, Exception] = {}
        self.fail_verify: set[str] = set()
        self.list_error: Optional[Exception] = None
        self.region_error: Optional[Exception] = None
        self.calls: list[tuple[str, ...]] = []
        self.pages_served = 0
        self.active = 0
        self.max_active = 0
        self._lock = threading.Lock()

    def put(self, bucket: str, key: str, size: int) -> None:
        """Store an object."""
        self.buckets.setdefault(bucket, {})[key] = size

    def objects(self, bucket: str) -> dict[str, int]:
        """Snapshot of a bucket's objects."""
        with self._lock:
            return dict(self.buckets.get(bucket, {}))

    def count(self, operation: str) -> int:
        """Number of recorded calls of an operation."""
        with self._lock:
            return sum(1 for call in self.calls if call[0] == operation)

    def _record(self, *call: str) -> None:
        with self._lock:
            self.calls.append(call)

    def list_objects(self, bucket: str, prefix: str) -> Iterator[tuple[str, int]]:
        self._record("list_objects", bucket, prefix)
        if self.list_error is not None:
            raise self.list_error

        keys = sorted(key for key in self.buckets.get(bucket, {}) if key.startswith(prefix))
        for start in range(0, len(keys), self.page_size):
            self.pages_served += 1
            for key in keys[start:start + self.page_size]:
                yield key, self.buckets[bucket][key]

    def copy_object(self, src_bucket: str, src_key: str, dst_bucket: str, dst_key: str) -> None:
        self._record("copy_object", src_bucket, src_key, dst_bucket, dst_key)
        with self._lock:
            self.active += 1
            self.max_active = max(self.max_active, self.active)
        try:
            if self.copy_delay:
                time.sleep(self.copy_delay)
            if src_key in self.fail_copy:
                raise self.fail_copy[src_key]
            with self._lock:
                size = self.buckets.get(src_bucket, {}).get(src_key)
                if size is None:
                    raise CopyError(f"NoSuchKey: {src_key}", key=src_key)
                self.buckets.setdefault(dst_bucket, {})[dst_key] = size
        finally:
            with self._lock:
                self.active -= 1

    def wait_until_exists(self, bucket: str, key: str, *, timeout: float) -> None:
        self._record("wait_until_exists", bucket, key)
        with self._lock:
            self.wait_timeouts.append(timeout)
        if self.verify_delay:
            # Object becomes visible only after verify_delay seconds
            time.sleep(min(self.verify_delay, timeout))
            if self.verify_delay > timeout:
                raise VerificationError(f"s3://{bucket}/{key} not visible after {timeout}s", key=key)
        if key in self.fail_verify or key not in self.objects(bucket):
            raise VerificationError(f"s3://{bucket}/{key} not visible after {timeout}s", key=key)

    def resolve_region(self, bucket: str, fallback_region: str) -> str:
        self._record("resolve_region", bucket)
        if self.region_error is not None:
            raise self.region_error
        return self.region


@pytest.fixture(autouse=True)
def reset_package_logger() -> Generator[None, None, None]:
    """Undo CLI logging setup so caplog sees package records."""
    yield
    logger = logging.getLogger("bucketsync")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def temp_home(temp_dir: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Create a temporary home directory without a bucketsync config."""
    home = temp_dir / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.delenv("BUCKETSYNC_CONFIG", raising=False)
    for variable in ("SOURCE_URI", "DESTINATION_URI", "AWS_PROFILE"):
        monkeypatch.delenv(variable, raising=False)
    return home


@pytest.fixture
def storage() -> FakeStorage:
    """Empty in-memory storage."""
    return FakeStorage()


@pytest.fixture
def storage_factory(storage: FakeStorage) -> Callable[[Credentials, str], ObjectStorage]:
    """Factory handing out the shared fake storage, recording requested regions."""
    requested: list[str] = []

    def factory(credentials: Credentials, region: str) -> ObjectStorage:
        requested.append(region)
        return storage

    factory.requested = requested  # type: ignore[attr-defined]
    return factory


@pytest.fixture
def make_location(storage_factory) -> Callable[[str], StorageLocation]:
    """Build locations backed by the fake storage."""

    def make(uri: str) -> StorageLocation:
        return StorageLocation(uri, Credentials(profile="test"), storage_factory)

    return make


@pytest.fixture
def populated_storage(storage: FakeStorage) -> FakeStorage:
    """Source with two flat objects, empty destination."""
    storage.put("src-bucket", "data/a.txt", 100)
    storage.put("src-bucket", "data/b.txt", 200)
    storage.buckets.setdefault("dst-bucket", {})
    return storage


@pytest.fixture
def sample_config() -> dict:
    """Create sample configuration dict."""
    return {
        "sync": {
            "source": "s3://src-bucket/data",
            "destination": "s3://dst-bucket/backup",
            "profile": "test",
            "fallback_region": "eu-west-1",
        },
        "concurrency": {"max_workers": 4, "request_timeout": 30, "run_deadline": None},
        "verification": {"poll_delay": 1, "timeout": 10},
        "policy": {"fail_on_errors": False},
        "output": {"verbose": False, "colored": False},
    }


@pytest.fixture
def config_file(temp_home: Path, sample_config: dict) -> Path:
    """Create a configuration file."""
    config_dir = temp_home / ".config" / "bucketsync"
    config_dir.mkdir(parents=True)
    config_path = config_dir / "config.yaml"

    with open(config_path, "w", encoding="utf-8") as f:
        yaml.dump(sample_config, f, default_flow_style=False)

    return config_path
