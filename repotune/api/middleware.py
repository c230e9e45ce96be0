"""Lifespan middleware tying the playback session to the ASGI app.

On startup the middleware optionally starts a session for a configured
source; on shutdown it stops polling and playback and closes the fetcher's
HTTP client, so no background task outlives the server.

Usage
-----
Register the middleware when creating the Falcon app::

    from repotune.api.middleware import PlaybackLifecycle

    app = falcon.asgi.App(middleware=[PlaybackLifecycle(services, "octo/reef")])

"""

from __future__ import annotations

import typing as typ

from repotune.logging import get_logger, log_info

if typ.TYPE_CHECKING:
    from repotune.api.factory import PlaybackServices

__all__ = ["PlaybackLifecycle"]

logger = get_logger(__name__)


class PlaybackLifecycle:
    """Falcon middleware managing the playback session across the lifespan.

    Parameters
    ----------
    services
        Playback pipeline served by the application.
    autostart_source
        Optional ``owner/name`` slug to start replaying at startup.

    """

    def __init__(
        self,
        services: PlaybackServices,
        autostart_source: str | None = None,
    ) -> None:
        """Initialise the middleware with services and an optional source."""
        self._services = services
        self._autostart_source = autostart_source

    async def process_startup(
        self, _scope: dict[str, typ.Any], _event: dict[str, typ.Any]
    ) -> None:
        """Start the configured session, if any."""
        if self._autostart_source is None:
            return
        log_info(logger, "Auto-starting playback for %s", self._autostart_source)
        self._services.driver.start_session(self._autostart_source)

    async def process_shutdown(
        self, _scope: dict[str, typ.Any], _event: dict[str, typ.Any]
    ) -> None:
        """Stop the session and release HTTP resources."""
        await self._services.aclose()
