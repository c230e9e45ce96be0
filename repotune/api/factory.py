"""Factory for assembling the playback pipeline behind the API.

Usage
-----
Build services from environment configuration::

    from repotune.api.factory import build_playback_services

    services = build_playback_services()
    app = create_app(AppDependencies(services=services))

"""

from __future__ import annotations

import dataclasses as dc
import typing as typ

from repotune.feed.client import GitHubEventsClient, GitHubEventsConfig
from repotune.playback.config import PlaybackConfig
from repotune.playback.driver import PollingDriver
from repotune.playback.session import PlaybackSession
from repotune.playback.sink import RecentActivityFeed, TimelinePlaybackSink

if typ.TYPE_CHECKING:
    import httpx

    from repotune.feed.client import FeedFetcher

__all__ = ["PlaybackServices", "build_playback_services"]


@dc.dataclass(frozen=True, slots=True)
class PlaybackServices:
    """Collaborators exposed through the HTTP surface.

    Attributes
    ----------
    driver
        Polling driver owning the playback session.
    feed
        Activity display rendered by ``GET /feed``.
    sink
        Playback sink whose visuals are rendered by ``GET /visuals``.

    """

    driver: PollingDriver
    feed: RecentActivityFeed
    sink: TimelinePlaybackSink

    async def aclose(self) -> None:
        """Stop the session and release the fetcher's HTTP resources."""
        await self.driver.stop()
        aclose = getattr(self.driver.fetcher, "aclose", None)
        if aclose is not None:
            await aclose()


def build_playback_services(
    config: PlaybackConfig | None = None,
    *,
    fetcher: FeedFetcher | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> PlaybackServices:
    """Build the playback pipeline from configuration.

    Parameters
    ----------
    config
        Playback configuration; read from the environment when omitted.
    fetcher
        Fetch collaborator; a :class:`GitHubEventsClient` configured from the
        environment is created when omitted.
    http_client
        Optional HTTP client handed to the default GitHub client.

    Returns
    -------
    PlaybackServices
        Driver, activity feed and sink sharing one session.

    """
    resolved = config or PlaybackConfig.from_env()
    feed = RecentActivityFeed()
    sink = TimelinePlaybackSink(lifetime_ms=resolved.visuals_lifetime_ms)
    session = PlaybackSession(sink, display=feed, config=resolved)
    resolved_fetcher = fetcher if fetcher is not None else GitHubEventsClient(
        GitHubEventsConfig.from_env(), http_client=http_client
    )
    return PlaybackServices(
        driver=PollingDriver(session, resolved_fetcher),
        feed=feed,
        sink=sink,
    )
