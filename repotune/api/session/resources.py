"""Session control and presentation resources.

``/session`` starts, inspects and ends the playback session; ``/feed`` and
``/visuals`` expose the activity display and the sink's live visuals so a
renderer can poll them.

Usage
-----
Register the resources on the Falcon app::

    app.add_route("/session", SessionResource(services.driver))
    app.add_route("/feed", FeedResource(services.driver, services.feed))
    app.add_route("/visuals", VisualsResource(services.driver, services.sink))

"""

from __future__ import annotations

import dataclasses as dc
import typing as typ
from http import HTTPStatus

import msgspec

from repotune.api.errors import InvalidInputError, SessionNotStartedError
from repotune.common.slug import normalize_repo_slug

if typ.TYPE_CHECKING:
    from falcon.asgi import Request, Response

    from repotune.playback.driver import PollingDriver
    from repotune.playback.sink import RecentActivityFeed, TimelinePlaybackSink

__all__ = ["FeedResource", "SessionResource", "VisualsResource"]


def _source_from_media(media: object) -> str:
    """Extract and validate the ``source`` slug from a request body."""
    if not isinstance(media, dict):
        reason = "request body must be a JSON object"
        raise InvalidInputError(reason)
    raw = media.get("source")
    if not isinstance(raw, str):
        reason = "expected an 'owner/name' repository slug"
        raise InvalidInputError(reason, field="source")
    try:
        return normalize_repo_slug(raw)
    except ValueError as exc:
        raise InvalidInputError(str(exc), field="source") from exc


def _require_session(driver: PollingDriver) -> None:
    if driver.session.source is None:
        raise SessionNotStartedError


class SessionResource:
    """Start, inspect and end the playback session."""

    def __init__(self, driver: PollingDriver) -> None:
        """Bind the resource to the polling driver."""
        self._driver = driver

    async def on_post(self, req: Request, resp: Response) -> None:
        """Handle POST /session by starting a session for ``source``.

        Any running session is replaced. Responds with HTTP 202 because the
        first poll runs in the background.

        Raises
        ------
        InvalidInputError
            If the body is missing a valid ``source`` slug.

        """
        media = await req.get_media()
        source = _source_from_media(media)
        session_id = self._driver.start_session(source)
        resp.media = {"source": source, "session_id": session_id}
        resp.status = HTTPStatus.ACCEPTED

    async def on_get(self, _req: Request, resp: Response) -> None:
        """Handle GET /session by returning the session snapshot."""
        _require_session(self._driver)
        snapshot = msgspec.to_builtins(self._driver.session.snapshot())
        snapshot["polling"] = self._driver.running
        resp.media = snapshot
        resp.status = HTTPStatus.OK

    async def on_delete(self, _req: Request, resp: Response) -> None:
        """Handle DELETE /session by ending the session."""
        _require_session(self._driver)
        await self._driver.stop()
        resp.status = HTTPStatus.NO_CONTENT


class FeedResource:
    """Expose the recent activity display, newest first."""

    def __init__(self, driver: PollingDriver, feed: RecentActivityFeed) -> None:
        """Bind the resource to the driver and activity feed."""
        self._driver = driver
        self._feed = feed

    async def on_get(self, _req: Request, resp: Response) -> None:
        """Handle GET /feed requests."""
        resp.media = {
            "source": self._driver.session.source,
            "entries": [dc.asdict(entry) for entry in self._feed.entries()],
        }
        resp.status = HTTPStatus.OK


class VisualsResource:
    """Expose the visuals still alive in the playback sink."""

    def __init__(self, driver: PollingDriver, sink: TimelinePlaybackSink) -> None:
        """Bind the resource to the driver and playback sink."""
        self._driver = driver
        self._sink = sink

    async def on_get(self, _req: Request, resp: Response) -> None:
        """Handle GET /visuals requests.

        Each visual reports its age so a renderer can animate it without
        sharing the server clock.
        """
        now = self._sink.now_ms()
        resp.media = {
            "lifetime_ms": self._sink.lifetime_ms,
            "visuals": [
                {
                    "key": visual.key,
                    "color": list(visual.color),
                    "label": visual.label,
                    "age_ms": now - visual.born_ms,
                }
                for visual in self._sink.active_visuals()
            ],
        }
        resp.status = HTTPStatus.OK
