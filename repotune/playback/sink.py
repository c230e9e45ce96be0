"""Playback sink and activity display collaborators.

The core hands every mapped event to a :class:`PlaybackSink` and every
enqueued event to a :class:`FeedDisplay`. The implementations here keep their
state in memory so the HTTP surface can expose it to a renderer.
"""

from __future__ import annotations

import collections
import dataclasses
import time
import typing as typ

from repotune.common.time import monotonic_ms
from repotune.logging import get_logger, log_info

from .config import DEFAULT_VISUALS_LIFETIME_MS

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from repotune.feed.models import RawEvent

    from .mapping import Color, PlaybackTrigger

logger = get_logger(__name__)

FEED_DISPLAY_LIMIT = 15
_UNKNOWN_ACTOR = "unknown"


@typ.runtime_checkable
class PlaybackSink(typ.Protocol):
    """Receives playback triggers and performs audio/visual side effects."""

    def play(self, trigger: PlaybackTrigger) -> None:
        """Start playback for ``trigger``; must not block."""
        ...

    def clear(self) -> None:
        """Drop any playback state held for the previous session."""
        ...


@typ.runtime_checkable
class FeedDisplay(typ.Protocol):
    """Append-only presentation of recently enqueued events."""

    def display(self, actor_label: str, kind_label: str) -> None:
        """Show one event."""
        ...

    def clear(self) -> None:
        """Remove every displayed event."""
        ...


def kind_label(kind: str) -> str:
    """Return the display label for an event kind (``PushEvent`` -> ``Push``)."""
    return kind.replace("Event", "") or kind


def actor_label(event: RawEvent) -> str:
    """Return the display label for the actor behind ``event``."""
    return event.actor_login or _UNKNOWN_ACTOR


@dataclasses.dataclass(frozen=True, slots=True)
class FeedEntry:
    """One row of the activity display."""

    actor: str
    kind: str


class RecentActivityFeed:
    """Keep the most recent activity entries, newest first."""

    def __init__(self, limit: int = FEED_DISPLAY_LIMIT) -> None:
        """Create an empty feed holding at most ``limit`` entries."""
        self._entries: collections.deque[FeedEntry] = collections.deque(
            maxlen=limit
        )

    def __len__(self) -> int:
        """Return the number of displayed entries."""
        return len(self._entries)

    def display(self, actor_label: str, kind_label: str) -> None:
        """Prepend an entry, evicting the oldest when the feed is full."""
        self._entries.appendleft(FeedEntry(actor=actor_label, kind=kind_label))

    def entries(self) -> list[FeedEntry]:
        """Return displayed entries, newest first."""
        return list(self._entries)

    def clear(self) -> None:
        """Remove every entry."""
        self._entries.clear()


@dataclasses.dataclass(frozen=True, slots=True)
class ActiveVisual:
    """A visual spawned by a trigger and still within its lifetime."""

    born_ms: int
    key: int
    color: Color
    label: str


class TimelinePlaybackSink:
    """Log triggers and track the visuals they spawn.

    Visuals expire ``lifetime_ms`` after they are born. Audio synthesis is
    left to whatever consumes the logged triggers and visuals.
    """

    def __init__(
        self,
        *,
        lifetime_ms: int = DEFAULT_VISUALS_LIFETIME_MS,
        clock: cabc.Callable[[], float] = time.monotonic,
    ) -> None:
        """Create a sink using ``clock`` (seconds) to age visuals."""
        self._lifetime_ms = lifetime_ms
        self._clock = clock
        self._visuals: list[ActiveVisual] = []

    @property
    def lifetime_ms(self) -> int:
        """Return how long each visual stays active."""
        return self._lifetime_ms

    def now_ms(self) -> int:
        """Return the sink clock in milliseconds."""
        return monotonic_ms(self._clock())

    def play(self, trigger: PlaybackTrigger) -> None:
        """Record a visual for ``trigger`` and log the chord to play."""
        now = self.now_ms()
        self._prune(now)
        self._visuals.append(
            ActiveVisual(
                born_ms=now,
                key=trigger.key,
                color=trigger.color,
                label=trigger.label,
            )
        )
        log_info(
            logger,
            "Playing kind=%s label=%s notes=%s duration_s=%.1f key=%d",
            trigger.kind,
            trigger.label,
            "/".join(trigger.notes),
            trigger.duration_hint_s,
            trigger.key,
        )

    def active_visuals(self) -> list[ActiveVisual]:
        """Return visuals still alive, oldest first."""
        self._prune(self.now_ms())
        return list(self._visuals)

    def clear(self) -> None:
        """Drop every visual."""
        self._visuals.clear()

    def _prune(self, now_ms: int) -> None:
        cutoff = now_ms - self._lifetime_ms
        self._visuals = [v for v in self._visuals if v.born_ms > cutoff]
