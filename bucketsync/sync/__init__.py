# bucketsync Sync Module
# Listing, diffing and copy orchestration

from bucketsync.sync.actions import CopyTask, TaskStatus, build_tasks, run_copy_task
from bucketsync.sync.diff import DiffSet, compute_diff
from bucketsync.sync.engine import SyncEngine, SyncOutcome, SyncReport, TaskFailure
from bucketsync.sync.item import ObjectRecord, list_objects
from bucketsync.sync.location import StorageLocation, parse_location_uri

__all__ = [
    # Location
    "StorageLocation",
    "parse_location_uri",
    # Listing
    "ObjectRecord",
    "list_objects",
    # Diff
    "DiffSet",
    "compute_diff",
    # Actions
    "CopyTask",
    "TaskStatus",
    "build_tasks",
    "run_copy_task",
    # Engine
    "SyncEngine",
    "SyncOutcome",
    "SyncReport",
    "TaskFailure",
]
