"""Activity feed fetch collaborators and record models."""

from __future__ import annotations

from .client import FeedFetcher, GitHubEventsClient, GitHubEventsConfig
from .errors import (
    FeedAPIError,
    FeedFetchError,
    FeedResponseShapeError,
    FeedSourceError,
    FeedTransportError,
)
from .models import FeedActor, FeedRecord, RawEvent, RawRecord, decode_record

__all__ = [
    "FeedAPIError",
    "FeedActor",
    "FeedFetchError",
    "FeedFetcher",
    "FeedRecord",
    "FeedResponseShapeError",
    "FeedSourceError",
    "FeedTransportError",
    "GitHubEventsClient",
    "GitHubEventsConfig",
    "RawEvent",
    "RawRecord",
    "decode_record",
]
