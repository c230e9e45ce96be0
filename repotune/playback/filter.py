"""Deduplication and ordering of polled feed records.

The filter owns the session watermark (the greatest ``created_at`` accepted so
far) and the set of accepted event ids. Each poll batch is decoded,
normalised to chronological order and checked record by record:

* records missing an id, kind or timezone-aware timestamp are ``MALFORMED``;
* events at or below the watermark are ``STALE``;
* events whose id was already accepted are ``DUPLICATE``;
* everything else is ``ACCEPTED``, recorded in the seen set and raises the
  watermark before it is handed downstream.

Ordering across poll batches is best-effort: a later batch can only
contribute events newer than everything accepted before it.
"""

from __future__ import annotations

import dataclasses
import enum
import operator
import typing as typ

from repotune.feed.models import RawEvent, decode_record

if typ.TYPE_CHECKING:
    import datetime as dt

    from repotune.feed.models import RawRecord


class FilterOutcome(enum.StrEnum):
    """Result of evaluating one record against the filter state."""

    ACCEPTED = "accepted"
    STALE = "stale"
    DUPLICATE = "duplicate"
    MALFORMED = "malformed"


@dataclasses.dataclass(frozen=True, slots=True)
class FilterDecision:
    """Outcome for a single record, with the decoded event when valid."""

    outcome: FilterOutcome
    event: RawEvent | None = None

    @property
    def accepted(self) -> bool:
        """Return whether the record passed the filter."""
        return self.outcome is FilterOutcome.ACCEPTED


_by_created_at = operator.attrgetter("created_at")


class DedupFilter:
    """Reject stale and duplicate events and order the remainder."""

    def __init__(self) -> None:
        """Create a filter with no watermark and an empty seen set."""
        self._watermark: dt.datetime | None = None
        self._seen: set[str] = set()

    @property
    def watermark(self) -> dt.datetime | None:
        """Return the greatest ``created_at`` accepted, or ``None``."""
        return self._watermark

    @property
    def seen_count(self) -> int:
        """Return how many distinct ids have been accepted."""
        return len(self._seen)

    def has_seen(self, event_id: str) -> bool:
        """Return whether ``event_id`` was accepted this session."""
        return event_id in self._seen

    def reset(self) -> None:
        """Forget the watermark and every accepted id."""
        self._watermark = None
        self._seen.clear()

    def evaluate(
        self,
        batch: typ.Iterable[RawRecord | RawEvent],
        *,
        newest_first: bool,
    ) -> list[FilterDecision]:
        """Evaluate a poll batch and return one decision per record.

        Malformed records come first, in input order, followed by the valid
        events in chronological order. Accepted events update the filter
        state as they are decided, so later events in the same batch are
        checked against the raised watermark.
        """
        decisions: list[FilterDecision] = []
        events: list[RawEvent] = []
        for record in batch:
            event = decode_record(record)
            if event is None:
                decisions.append(FilterDecision(FilterOutcome.MALFORMED))
            else:
                events.append(event)

        if newest_first:
            events.reverse()
        events.sort(key=_by_created_at)

        decisions.extend(
            FilterDecision(self._decide(event), event) for event in events
        )
        return decisions

    def accept(
        self,
        batch: typ.Iterable[RawRecord | RawEvent],
        *,
        newest_first: bool,
    ) -> list[RawEvent]:
        """Return the newly accepted events of ``batch`` in chronological order."""
        return [
            decision.event
            for decision in self.evaluate(batch, newest_first=newest_first)
            if decision.accepted and decision.event is not None
        ]

    def _decide(self, event: RawEvent) -> FilterOutcome:
        if self._watermark is not None and event.created_at <= self._watermark:
            return FilterOutcome.STALE
        if event.id in self._seen:
            return FilterOutcome.DUPLICATE

        self._seen.add(event.id)
        if self._watermark is None or event.created_at > self._watermark:
            self._watermark = event.created_at
        return FilterOutcome.ACCEPTED
