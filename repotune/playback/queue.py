"""Bounded FIFO of accepted events awaiting playback.

A full queue sheds new arrivals instead of growing or blocking ingestion.
"""

from __future__ import annotations

import collections
import enum
import typing as typ

from repotune.logging import get_logger, log_debug

from .config import DEFAULT_QUEUE_CAPACITY

if typ.TYPE_CHECKING:
    from repotune.feed.models import RawEvent

logger = get_logger(__name__)


class EnqueueOutcome(enum.StrEnum):
    """Result of offering an event to the queue."""

    ACCEPTED = "accepted"
    DROPPED = "dropped"

    @property
    def accepted(self) -> bool:
        """Return whether the event is now pending playback."""
        return self is EnqueueOutcome.ACCEPTED


class PlaybackQueue:
    """Strict FIFO holding at most ``capacity`` pending events."""

    def __init__(self, capacity: int = DEFAULT_QUEUE_CAPACITY) -> None:
        """Create an empty queue.

        Raises
        ------
        ValueError
            If ``capacity`` is less than one.

        """
        if capacity < 1:
            msg = f"queue capacity must be positive, got {capacity}"
            raise ValueError(msg)
        self._capacity = capacity
        self._entries: collections.deque[RawEvent] = collections.deque()

    def __len__(self) -> int:
        """Return the number of pending events."""
        return len(self._entries)

    def __iter__(self) -> typ.Iterator[RawEvent]:
        """Iterate pending events in dequeue order without removing them."""
        return iter(tuple(self._entries))

    @property
    def capacity(self) -> int:
        """Return the maximum number of pending events."""
        return self._capacity

    @property
    def is_full(self) -> bool:
        """Return whether the next enqueue would be dropped."""
        return len(self._entries) >= self._capacity

    def enqueue(self, event: RawEvent) -> EnqueueOutcome:
        """Append ``event`` unless the queue is full."""
        if self.is_full:
            log_debug(
                logger,
                "Playback queue full (capacity=%d); dropped event id=%s kind=%s",
                self._capacity,
                event.id,
                event.kind,
            )
            return EnqueueOutcome.DROPPED
        self._entries.append(event)
        return EnqueueOutcome.ACCEPTED

    def dequeue_one(self) -> RawEvent | None:
        """Remove and return the oldest pending event, or ``None``."""
        if not self._entries:
            return None
        return self._entries.popleft()

    def clear(self) -> None:
        """Discard every pending event."""
        self._entries.clear()
