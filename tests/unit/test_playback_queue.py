"""Unit tests for the bounded playback queue."""

from __future__ import annotations

import pytest

from repotune.feed.models import RawEvent
from repotune.playback.queue import EnqueueOutcome, PlaybackQueue
from tests.helpers.feed_records import at


def _event(index: int) -> RawEvent:
    return RawEvent(id=str(index), kind="PushEvent", created_at=at(index))


def test_overflow_drops_new_arrivals_and_keeps_order() -> None:
    """Sixty offers against capacity fifty keep the first fifty in order."""
    queue = PlaybackQueue(capacity=50)

    outcomes = [queue.enqueue(_event(index)) for index in range(60)]

    assert outcomes.count(EnqueueOutcome.ACCEPTED) == 50
    assert outcomes.count(EnqueueOutcome.DROPPED) == 10
    assert all(not outcome.accepted for outcome in outcomes[50:])
    assert queue.is_full

    drained = []
    while (event := queue.dequeue_one()) is not None:
        drained.append(event.id)
    assert drained == [str(index) for index in range(50)]


def test_default_capacity_is_fifty() -> None:
    """The default bound matches the playback default."""
    assert PlaybackQueue().capacity == 50


def test_dequeue_on_empty_returns_none() -> None:
    """An empty queue yields nothing."""
    assert PlaybackQueue().dequeue_one() is None


def test_space_frees_after_dequeue() -> None:
    """A dequeue makes room for exactly one more event."""
    queue = PlaybackQueue(capacity=1)
    assert queue.enqueue(_event(1)).accepted
    assert queue.enqueue(_event(2)) is EnqueueOutcome.DROPPED

    queue.dequeue_one()

    assert queue.enqueue(_event(3)).accepted
    assert [event.id for event in queue] == ["3"]


def test_iteration_does_not_consume() -> None:
    """Iterating shows pending events without removing them."""
    queue = PlaybackQueue()
    queue.enqueue(_event(1))
    queue.enqueue(_event(2))

    assert [event.id for event in queue] == ["1", "2"]
    assert len(queue) == 2


def test_clear_discards_pending_events() -> None:
    """clear empties the queue."""
    queue = PlaybackQueue()
    queue.enqueue(_event(1))

    queue.clear()

    assert len(queue) == 0


@pytest.mark.parametrize("capacity", [0, -1])
def test_rejects_non_positive_capacity(capacity: int) -> None:
    """Capacity must allow at least one pending event."""
    with pytest.raises(ValueError, match="capacity must be positive"):
        PlaybackQueue(capacity)
