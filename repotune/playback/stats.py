"""Per-session counters for every accept, drop and skip path."""

from __future__ import annotations

import dataclasses

from .filter import FilterOutcome
from .queue import EnqueueOutcome


@dataclasses.dataclass(slots=True)
class PlaybackStats:
    """Mutable counters reset together with the session."""

    accepted: int = 0
    stale: int = 0
    duplicate: int = 0
    malformed: int = 0
    enqueued: int = 0
    dropped: int = 0
    played: int = 0
    unmapped: int = 0
    polls_completed: int = 0
    polls_failed: int = 0

    def record_filter(self, outcome: FilterOutcome) -> None:
        """Count a filter decision."""
        match outcome:
            case FilterOutcome.ACCEPTED:
                self.accepted += 1
            case FilterOutcome.STALE:
                self.stale += 1
            case FilterOutcome.DUPLICATE:
                self.duplicate += 1
            case FilterOutcome.MALFORMED:
                self.malformed += 1

    def record_enqueue(self, outcome: EnqueueOutcome) -> None:
        """Count an enqueue attempt."""
        if outcome.accepted:
            self.enqueued += 1
        else:
            self.dropped += 1

    def reset(self) -> None:
        """Zero every counter."""
        for field in dataclasses.fields(self):
            setattr(self, field.name, 0)

    def as_dict(self) -> dict[str, int]:
        """Return the counters as a plain mapping."""
        return dataclasses.asdict(self)
