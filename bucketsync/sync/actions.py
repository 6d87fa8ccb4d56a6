# bucketsync Copy Actions
# Copy task state machine and execution

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Optional

from bucketsync.sync.diff import DiffSet
from bucketsync.sync.item import ObjectRecord

if TYPE_CHECKING:
    from bucketsync.sync.location import StorageLocation

logger = logging.getLogger(__name__)


class TaskStatus(str, Enum):
    """Lifecycle of a copy task."""

    PENDING = "pending"
    COPYING = "copying"
    VERIFYING = "verifying"

    # Terminal
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class CopyTask:
    """
    Copy of one DiffSet entry into the destination.

    ``source_key`` and ``destination_key`` are full object keys.
    """

    record: ObjectRecord
    source_key: str
    destination_key: str
    status: TaskStatus = TaskStatus.PENDING
    failed_stage: Optional[TaskStatus] = None
    error: Optional[str] = None
    duration: float = 0.0
    timed_out: bool = False

    @property
    def is_terminal(self) -> bool:
        """Check if the task has finished, successfully or not."""
        return self.status in (TaskStatus.COMPLETED, TaskStatus.FAILED)

    @property
    def succeeded(self) -> bool:
        """Check if the object was copied and verified."""
        return self.status == TaskStatus.COMPLETED


def build_tasks(diff: DiffSet, source: "StorageLocation", destination: "StorageLocation") -> list[CopyTask]:
    """
    Create one pending task per DiffSet entry.

    Args:
        diff: Objects to copy.
        source: Location the objects were listed from.
        destination: Location to copy into.

    Returns:
        Tasks in DiffSet order.
    """
    tasks: list[CopyTask] = []
    for record in diff:
        source_key = source.full_key(record.key)
        tasks.append(
            CopyTask(
                record=record,
                source_key=source_key,
                destination_key=destination.destination_key(source_key),
            )
        )
    return tasks


def run_copy_task(
    task: CopyTask,
    source: "StorageLocation",
    destination: "StorageLocation",
    *,
    verify_timeout: float,
    deadline: Optional[float] = None,
    on_start: Optional[Callable[[CopyTask], None]] = None,
) -> CopyTask:
    """
    Copy one object server-side and wait until it is visible.

    Failures are recorded on the task instead of being raised, so one
    failing object never affects its siblings.

    Args:
        task: Pending task.
        source: Source location.
        destination: Destination location; its client issues the copy.
        verify_timeout: Upper bound in seconds for the visibility wait.
        deadline: Optional ``time.monotonic()`` instant after which no copy
            is started and no wait extends.
        on_start: Optional callback invoked when the copy starts.

    Returns:
        The same task, in a terminal state.
    """
    start = time.monotonic()

    if deadline is not None and start >= deadline:
        return _expire(task, start, "run deadline exceeded")

    storage = destination.storage

    task.status = TaskStatus.COPYING
    if on_start is not None:
        on_start(task)

    try:
        storage.copy_object(source.bucket, task.source_key, destination.bucket, task.destination_key)
    except Exception as e:
        return _fail(task, e, start)

    task.status = TaskStatus.VERIFYING
    timeout = verify_timeout
    if deadline is not None:
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            return _expire(task, start, "run deadline exceeded")
        timeout = min(verify_timeout, remaining)

    try:
        storage.wait_until_exists(destination.bucket, task.destination_key, timeout=timeout)
    except Exception as e:
        if timeout < verify_timeout:
            return _expire(task, start, f"run deadline exceeded: {e}")
        return _fail(task, e, start)

    task.status = TaskStatus.COMPLETED
    task.duration = time.monotonic() - start
    logger.debug("Copied %s -> %s in %.2fs", task.source_key, task.destination_key, task.duration)
    return task


def _fail(task: CopyTask, error: Exception, start: float) -> CopyTask:
    """Move a task to the failed state, remembering where it broke."""
    task.failed_stage = task.status
    task.status = TaskStatus.FAILED
    task.error = str(error) or type(error).__name__
    task.duration = time.monotonic() - start

    stage = "copy" if task.failed_stage == TaskStatus.COPYING else "verification"
    logger.error("Failed %s of %s: %s", stage, task.source_key, task.error)
    return task


def _expire(task: CopyTask, start: float, reason: str) -> CopyTask:
    """Move a task cut short by the run deadline to the failed state."""
    task.failed_stage = task.status
    task.status = TaskStatus.FAILED
    task.timed_out = True
    task.error = reason
    task.duration = time.monotonic() - start
    logger.warning("Gave up on %s: %s", task.source_key, reason)
    return task
