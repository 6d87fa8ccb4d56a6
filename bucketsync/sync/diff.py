# bucketsync Diff
# Set difference between source and destination listings

from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass

from bucketsync.sync.item import ObjectRecord
from bucketsync.utils.hashing import fingerprint, fingerprint_set


@dataclass(frozen=True)
class DiffSet:
    """
    Source objects missing from the destination, in source listing order.

    Immutable; computed once per sync run.
    """

    records: tuple[ObjectRecord, ...] = ()
    source_count: int = 0
    destination_count: int = 0

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[ObjectRecord]:
        return iter(self.records)

    def __bool__(self) -> bool:
        return bool(self.records)

    @property
    def is_empty(self) -> bool:
        """Check if there is nothing to copy."""
        return not self.records

    @property
    def total_bytes(self) -> int:
        """Total size of all objects to copy."""
        return sum(record.size for record in self.records)


def compute_diff(source: Sequence[ObjectRecord], destination: Iterable[ObjectRecord]) -> DiffSet:
    """
    Find source records whose fingerprint is absent from the destination.

    Builds the destination fingerprint set once and tests each source
    record against it, so the cost is linear in both listings.

    Args:
        source: Source listing.
        destination: Destination listing.

    Returns:
        DiffSet preserving the order of ``source``.
    """
    destination = list(destination)
    present = fingerprint_set(destination)

    missing = tuple(record for record in source if fingerprint(record) not in present)

    return DiffSet(
        records=missing,
        source_count=len(source),
        destination_count=len(destination),
    )
