# bucketsync Sync Engine
# Diff computation and concurrent copy orchestration

import logging
import time
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from bucketsync.config.schema import BucketSyncConfig
from bucketsync.errors import ConfigurationError
from bucketsync.storage.base import StorageFactory
from bucketsync.storage.s3 import s3_storage_factory
from bucketsync.sync.actions import CopyTask, TaskStatus, build_tasks, run_copy_task
from bucketsync.sync.diff import DiffSet, compute_diff
from bucketsync.sync.item import ObjectRecord, list_objects
from bucketsync.sync.location import StorageLocation

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 16
DEFAULT_VERIFY_TIMEOUT = 100.0


class SyncOutcome(str, Enum):
    """Overall result of a sync run."""

    NOTHING_TO_DO = "nothing_to_do"
    PLANNED = "planned"
    COMPLETED = "completed"
    COMPLETED_WITH_FAILURES = "completed_with_failures"


@dataclass
class TaskFailure:
    """A copy task that did not complete."""

    key: str
    destination_key: str
    stage: str
    reason: str

    @classmethod
    def from_task(cls, task: CopyTask) -> "TaskFailure":
        """Create from a failed task."""
        if task.timed_out:
            stage = "deadline"
        elif task.failed_stage in (None, TaskStatus.PENDING, TaskStatus.COPYING):
            stage = "copy"
        else:
            stage = "verification"
        return cls(
            key=task.source_key,
            destination_key=task.destination_key,
            stage=stage,
            reason=task.error or "unknown error",
        )


@dataclass
class SyncReport:
    """Result of a complete sync run."""

    source_uri: str
    destination_uri: str
    diff: DiffSet = field(default_factory=DiffSet)
    completed: list[CopyTask] = field(default_factory=list)
    failures: list[TaskFailure] = field(default_factory=list)
    planned: list[CopyTask] = field(default_factory=list)
    dry_run: bool = False
    deadline_exceeded: bool = False
    duration: float = 0.0

    @property
    def total(self) -> int:
        """Number of objects that needed copying."""
        return len(self.diff)

    @property
    def succeeded(self) -> int:
        """Number of objects copied and verified."""
        return len(self.completed)

    @property
    def failed(self) -> int:
        """Number of objects that failed."""
        return len(self.failures)

    @property
    def success(self) -> bool:
        """Check if no task failed."""
        return not self.failures

    @property
    def outcome(self) -> SyncOutcome:
        """Classify the run for the final summary."""
        if self.diff.is_empty:
            return SyncOutcome.NOTHING_TO_DO
        if self.dry_run:
            return SyncOutcome.PLANNED
        if self.failures:
            return SyncOutcome.COMPLETED_WITH_FAILURES
        return SyncOutcome.COMPLETED


class SyncEngine:
    """
    One-directional sync from a source location into a destination.

    Lists both locations, computes the DiffSet once, then copies every
    missing object on a bounded worker pool and waits for all of them.

    Args:
        source: Location to copy from.
        destination: Location to copy into.
        max_workers: Upper bound on concurrent copy tasks.
        verify_timeout: Seconds each task waits for its copy to become visible.
        run_deadline: Optional overall bound in seconds for the copy phase.
    """

    def __init__(
        self,
        source: StorageLocation,
        destination: StorageLocation,
        *,
        max_workers: int = DEFAULT_MAX_WORKERS,
        verify_timeout: float = DEFAULT_VERIFY_TIMEOUT,
        run_deadline: Optional[float] = None,
    ):
        if max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {max_workers}")

        self.source = source
        self.destination = destination
        self.max_workers = max_workers
        self.verify_timeout = verify_timeout
        self.run_deadline = run_deadline
        self._source_records: Optional[list[ObjectRecord]] = None
        self._destination_records: Optional[list[ObjectRecord]] = None
        self._diff: Optional[DiffSet] = None

    @classmethod
    def from_config(
        cls,
        config: BucketSyncConfig,
        *,
        storage_factory: Optional[StorageFactory] = None,
    ) -> "SyncEngine":
        """
        Build an engine and both locations from configuration.

        Args:
            config: Effective configuration.
            storage_factory: Optional storage factory (default: boto3 S3).

        Returns:
            SyncEngine ready to run.

        Raises:
            ConfigurationError: If a location is missing or malformed.
        """
        missing = config.missing_locations()
        if missing:
            raise ConfigurationError(f"Missing required setting(s): {', '.join(missing)}")

        if storage_factory is None:
            storage_factory = s3_storage_factory(
                max_pool_connections=config.concurrency.max_workers,
                request_timeout=config.concurrency.request_timeout,
                poll_delay=config.verification.poll_delay,
            )

        credentials = config.sync.credentials
        source = StorageLocation(
            config.sync.source,
            credentials,
            storage_factory,
            fallback_region=config.sync.fallback_region,
        )
        destination = StorageLocation(
            config.sync.destination,
            credentials,
            storage_factory,
            fallback_region=config.sync.fallback_region,
        )

        return cls(
            source,
            destination,
            max_workers=config.concurrency.max_workers,
            verify_timeout=config.verification.timeout,
            run_deadline=config.concurrency.run_deadline,
        )

    def source_records(self) -> list[ObjectRecord]:
        """List the source location (cached)."""
        if self._source_records is None:
            self._source_records = list_objects(self.source)
        return self._source_records

    def destination_records(self) -> list[ObjectRecord]:
        """List the destination location (cached)."""
        if self._destination_records is None:
            self._destination_records = list_objects(self.destination)
        return self._destination_records

    def get_diff(self) -> DiffSet:
        """
        Compute the DiffSet for this run.

        Both locations are listed before any copy starts and the result is
        cached, so the DiffSet is a snapshot for the whole run.

        Raises:
            ListingError: If either location cannot be listed.
        """
        if self._diff is None:
            source = self.source_records()
            destination = self.destination_records()
            self._diff = compute_diff(source, destination)
            logger.info(
                "%d of %d source objects missing from %s",
                len(self._diff),
                len(source),
                self.destination.uri,
            )
        return self._diff

    def sync(
        self,
        *,
        dry_run: bool = False,
        on_copy: Optional[Callable[[CopyTask], None]] = None,
    ) -> SyncReport:
        """
        Copy every object missing from the destination.

        Args:
            dry_run: If True, compute and report the plan without copying.
            on_copy: Optional callback invoked (from a worker thread) when
                each copy starts.

        Returns:
            SyncReport with per-object results.

        Raises:
            ListingError: If either location cannot be listed.
        """
        start = time.monotonic()
        diff = self.get_diff()
        report = SyncReport(
            source_uri=self.source.uri,
            destination_uri=self.destination.uri,
            diff=diff,
            dry_run=dry_run,
        )

        if diff.is_empty:
            report.duration = time.monotonic() - start
            return report

        tasks = build_tasks(diff, self.source, self.destination)

        if dry_run:
            report.planned = tasks
            report.duration = time.monotonic() - start
            return report

        self._run_tasks(tasks, report, on_copy)
        report.duration = time.monotonic() - start

        logger.info(
            "Sync finished in %.1fs: %d copied, %d failed",
            report.duration,
            report.succeeded,
            report.failed,
        )
        return report

    def _run_tasks(
        self,
        tasks: list[CopyTask],
        report: SyncReport,
        on_copy: Optional[Callable[[CopyTask], None]],
    ) -> None:
        """Execute tasks on the worker pool and collect results in task order."""
        # Resolve the shared client before fanning out
        _ = self.destination.storage

        workers = min(self.max_workers, len(tasks))
        logger.debug("Starting %d copy tasks on %d workers", len(tasks), workers)

        deadline = None
        if self.run_deadline is not None:
            deadline = time.monotonic() + self.run_deadline

        executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="bucketsync-copy")
        submitted: list[tuple[CopyTask, Future]] = []
        try:
            for task in tasks:
                future = executor.submit(
                    run_copy_task,
                    task,
                    self.source,
                    self.destination,
                    verify_timeout=self.verify_timeout,
                    deadline=deadline,
                    on_start=on_copy,
                )
                submitted.append((task, future))

            _, not_done = wait([future for _, future in submitted], timeout=self.run_deadline)
        except BaseException:
            executor.shutdown(wait=False, cancel_futures=True)
            raise

        if not_done:
            report.deadline_exceeded = True
            logger.warning("Run deadline of %ss exceeded with %d tasks unfinished", self.run_deadline, len(not_done))

        # In-flight tasks observe the deadline, so joining them is bounded
        executor.shutdown(wait=True, cancel_futures=bool(not_done))

        for task, future in submitted:
            if future.cancelled():
                report.failures.append(
                    TaskFailure(
                        key=task.source_key,
                        destination_key=task.destination_key,
                        stage="deadline",
                        reason="run deadline exceeded",
                    )
                )
                continue

            error = future.exception()
            if error is not None:
                report.failures.append(
                    TaskFailure(
                        key=task.source_key,
                        destination_key=task.destination_key,
                        stage="copy",
                        reason=str(error) or type(error).__name__,
                    )
                )
            elif task.succeeded:
                report.completed.append(task)
            else:
                report.failures.append(TaskFailure.from_task(task))

        if any(failure.stage == "deadline" for failure in report.failures):
            report.deadline_exceeded = True
