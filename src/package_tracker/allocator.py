"""Tracking number allocation.

The next number is always derived from the package collection, never
held in process memory: read the current maximum, hand out the numbers
after it. Read-then-insert is not atomic, so two writers can pick the
same number. The unique constraint on ``tracking_number`` rejects the
loser, which :func:`allocate_and_insert` retries with a fresh read.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from package_tracker.exceptions import AllocationError, DuplicateKeyError
from package_tracker.protocols import PackageRepository

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def next_tracking_number(repository: PackageRepository) -> int:
    """Return max(TrackingNumber) + 1, or 1 for an empty collection."""
    current = await repository.get_max_tracking_number()
    return 1 if current is None else current + 1


async def allocate_block(
    repository: PackageRepository, count: int
) -> list[int]:
    """Allocate ``count`` consecutive numbers with a single query."""
    if count <= 0:
        return []
    first = await next_tracking_number(repository)
    return list(range(first, first + count))


async def allocate_and_insert(
    repository: PackageRepository,
    count: int,
    insert: Callable[[list[int]], Awaitable[T]],
    *,
    attempts: int = 3,
) -> T:
    """Allocate a block and run ``insert`` with it, retrying on collisions.

    Only duplicate tracking numbers are retried; every other error
    propagates from the first attempt.
    """
    for attempt in range(1, attempts + 1):
        numbers = await allocate_block(repository, count)
        try:
            return await insert(numbers)
        except DuplicateKeyError as exc:
            if exc.field != "tracking_number":
                raise
            logger.warning(
                "Tracking number collision on %s (attempt %d/%d)",
                numbers[0] if numbers else None,
                attempt,
                attempts,
            )

    logger.error(
        "Tracking number allocation failed after %d attempts", attempts
    )
    raise AllocationError(
        f"Could not allocate a unique tracking number after {attempts} attempts"
    )
