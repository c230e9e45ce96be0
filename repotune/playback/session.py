"""Session state shared by the polling driver and the pacing scheduler.

A session binds the playback pipeline to one feed source. Starting a new
session, or ending the current one, resets the watermark, the seen set, the
pending queue, the scheduler, the activity display and the counters together.
The generation number changes on every start and end so continuations of
work begun for an earlier session can recognise that they are stale.
"""

from __future__ import annotations

import asyncio
import dataclasses
import datetime as dt
import typing as typ

import msgspec

from .config import PlaybackConfig
from .filter import DedupFilter
from .queue import PlaybackQueue
from .scheduler import PacingScheduler
from .sink import RecentActivityFeed, actor_label, kind_label
from .stats import PlaybackStats

if typ.TYPE_CHECKING:
    from repotune.feed.models import RawEvent, RawRecord

    from .mapping import KindMapping
    from .scheduler import Sleep
    from .sink import FeedDisplay, PlaybackSink


@dataclasses.dataclass(frozen=True, slots=True)
class IngestResult:
    """Summary of one poll batch passing through the filter and queue."""

    accepted: int = 0
    stale: int = 0
    duplicate: int = 0
    malformed: int = 0
    enqueued: int = 0
    dropped: int = 0

    @property
    def total(self) -> int:
        """Return the number of records evaluated."""
        return self.accepted + self.stale + self.duplicate + self.malformed


class SessionSnapshot(msgspec.Struct, kw_only=True, frozen=True):
    """Read-only view of the session for status reporting."""

    source: str | None
    session_id: int
    scheduler_state: str
    watermark: dt.datetime | None
    seen_count: int
    queue_depth: int
    queue_capacity: int
    stats: dict[str, int]


class PlaybackSession:
    """Explicit owner of all mutable per-session playback state."""

    def __init__(  # noqa: PLR0913
        self,
        sink: PlaybackSink,
        *,
        display: FeedDisplay | None = None,
        mapping: KindMapping | None = None,
        config: PlaybackConfig | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        """Assemble the filter, queue and scheduler for a sink."""
        self.config = config or PlaybackConfig()
        self.sink = sink
        self.display: FeedDisplay = display or RecentActivityFeed()
        self.stats = PlaybackStats()
        self.filter = DedupFilter()
        self.queue = PlaybackQueue(self.config.queue_capacity)
        self.scheduler = PacingScheduler(
            self.queue,
            sink,
            mapping=mapping,
            config=self.config.pacing,
            stats=self.stats,
            sleep=sleep,
        )
        self._source: str | None = None
        self._generation = 0

    @property
    def source(self) -> str | None:
        """Return the feed source bound to the current session."""
        return self._source

    @property
    def generation(self) -> int:
        """Return the identity of the current session."""
        return self._generation

    def is_current(self, generation: int) -> bool:
        """Return whether ``generation`` identifies the live session."""
        return self._source is not None and generation == self._generation

    def begin(self, source: str) -> int:
        """Reset all state and bind a new session to ``source``."""
        self.reset()
        self._source = source
        self._generation += 1
        return self._generation

    def end(self) -> None:
        """Reset all state and unbind the current source."""
        self.reset()
        self._source = None
        self._generation += 1

    def reset(self) -> None:
        """Clear filter, queue, scheduler, display, sink and counters."""
        self.scheduler.reset()
        self.filter.reset()
        self.queue.clear()
        self.display.clear()
        self.sink.clear()
        self.stats.reset()

    def ingest(
        self,
        records: typ.Iterable[RawRecord | RawEvent],
        *,
        newest_first: bool = True,
    ) -> IngestResult:
        """Filter a poll batch and enqueue the accepted events.

        Runs without suspending, so no other task observes a partial update.
        Every enqueued event is shown on the activity display. Arming the
        scheduler is left to the caller.
        """
        counts = dict.fromkeys(
            ("accepted", "stale", "duplicate", "malformed", "enqueued", "dropped"),
            0,
        )
        for decision in self.filter.evaluate(records, newest_first=newest_first):
            self.stats.record_filter(decision.outcome)
            counts[decision.outcome.value] += 1
            if not decision.accepted or decision.event is None:
                continue
            outcome = self.queue.enqueue(decision.event)
            self.stats.record_enqueue(outcome)
            if not outcome.accepted:
                counts["dropped"] += 1
                continue
            counts["enqueued"] += 1
            self.display.display(
                actor_label(decision.event), kind_label(decision.event.kind)
            )
        return IngestResult(**counts)

    def snapshot(self) -> SessionSnapshot:
        """Return the current session status."""
        return SessionSnapshot(
            source=self._source,
            session_id=self._generation,
            scheduler_state=self.scheduler.state.value,
            watermark=self.filter.watermark,
            seen_count=self.filter.seen_count,
            queue_depth=len(self.queue),
            queue_capacity=self.queue.capacity,
            stats=self.stats.as_dict(),
        )
