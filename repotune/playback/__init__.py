"""Event ingestion and paced playback.

Data flows from the polling driver through the dedup/ordering filter into
the bounded playback queue, and from there through the pacing scheduler to
the playback sink.
"""

from __future__ import annotations

from .config import PacingConfig, PlaybackConfig
from .driver import NoActiveSessionError, PollingDriver, PollResult
from .filter import DedupFilter, FilterDecision, FilterOutcome
from .mapping import DEFAULT_KIND_STYLES, KindMapping, KindStyle, PlaybackTrigger
from .observability import (
    ErrorCategory,
    PollContext,
    PollEventLogger,
    PollEventType,
    categorize_error,
)
from .queue import EnqueueOutcome, PlaybackQueue
from .scheduler import (
    DrainOutcome,
    DrainResult,
    PacingScheduler,
    SchedulerState,
    compute_delay_ms,
)
from .session import IngestResult, PlaybackSession, SessionSnapshot
from .sink import (
    ActiveVisual,
    FeedDisplay,
    FeedEntry,
    PlaybackSink,
    RecentActivityFeed,
    TimelinePlaybackSink,
)
from .stats import PlaybackStats

__all__ = [
    "DEFAULT_KIND_STYLES",
    "ActiveVisual",
    "DedupFilter",
    "DrainOutcome",
    "DrainResult",
    "EnqueueOutcome",
    "ErrorCategory",
    "FeedDisplay",
    "FeedEntry",
    "FilterDecision",
    "FilterOutcome",
    "IngestResult",
    "KindMapping",
    "KindStyle",
    "NoActiveSessionError",
    "PacingConfig",
    "PacingScheduler",
    "PlaybackConfig",
    "PlaybackQueue",
    "PlaybackSession",
    "PlaybackSink",
    "PlaybackStats",
    "PlaybackTrigger",
    "PollContext",
    "PollEventLogger",
    "PollEventType",
    "PollResult",
    "PollingDriver",
    "RecentActivityFeed",
    "SchedulerState",
    "SessionSnapshot",
    "TimelinePlaybackSink",
    "categorize_error",
    "compute_delay_ms",
]
