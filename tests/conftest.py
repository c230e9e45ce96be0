"""Shared fixtures for unit and feature tests."""

from __future__ import annotations

import pytest

from repotune.playback.config import PlaybackConfig
from repotune.playback.session import PlaybackSession
from repotune.playback.sink import RecentActivityFeed
from tests.helpers.fakes import FakeFetcher, GatedSleep, RecordingSink


@pytest.fixture
def recording_sink() -> RecordingSink:
    """Return a fresh recording sink."""
    return RecordingSink()


@pytest.fixture
def activity_feed() -> RecentActivityFeed:
    """Return an empty activity feed."""
    return RecentActivityFeed()


@pytest.fixture
def fake_fetcher() -> FakeFetcher:
    """Return a fetcher with no scripted responses."""
    return FakeFetcher()


@pytest.fixture
def session(
    recording_sink: RecordingSink, activity_feed: RecentActivityFeed
) -> PlaybackSession:
    """Return a session whose scheduler sleeps until released."""
    return PlaybackSession(
        recording_sink,
        display=activity_feed,
        config=PlaybackConfig(),
        sleep=GatedSleep(),
    )
