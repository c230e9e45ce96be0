"""Typed models for activity feed records.

Feed responses are decoded leniently: the fetch collaborator returns raw JSON
objects and :func:`decode_record` turns each into a :class:`RawEvent`, or
``None`` when a required field is missing or unusable.
"""

from __future__ import annotations

import collections.abc as cabc
import dataclasses
import datetime as dt
import typing as typ

import msgspec

type RawRecord = cabc.Mapping[str, typ.Any]


class FeedActor(msgspec.Struct, kw_only=True, frozen=True):
    """Display metadata for the account behind an event."""

    login: str | None = None
    avatar_url: str | None = None


class FeedRecord(msgspec.Struct, kw_only=True, frozen=True):
    """Wire shape of a single GitHub repository event.

    Unknown fields (``repo``, ``payload``, ``public``) are ignored.
    """

    id: str | int
    kind: typ.Annotated[str, msgspec.Meta(min_length=1)] = msgspec.field(
        name="type"
    )
    created_at: typ.Annotated[dt.datetime, msgspec.Meta(tz=True)]
    actor: FeedActor | None = None


@dataclasses.dataclass(frozen=True, slots=True)
class RawEvent:
    """Validated feed event ready for deduplication and playback."""

    id: str
    kind: str
    created_at: dt.datetime
    actor: FeedActor | None = None

    @property
    def actor_login(self) -> str | None:
        """Return the actor login when the feed supplied one."""
        return self.actor.login if self.actor is not None else None


def decode_record(record: RawRecord | RawEvent) -> RawEvent | None:
    """Decode a raw feed record, returning ``None`` for malformed input.

    Integer identifiers are normalised to strings so ``1`` and ``"1"`` refer
    to the same event. Timestamps are normalised to UTC.
    """
    if isinstance(record, RawEvent):
        return record
    try:
        decoded = msgspec.convert(record, type=FeedRecord)
    except msgspec.ValidationError:
        return None

    event_id = str(decoded.id)
    if not event_id:
        return None
    return RawEvent(
        id=event_id,
        kind=decoded.kind,
        created_at=decoded.created_at.astimezone(dt.UTC),
        actor=decoded.actor,
    )
