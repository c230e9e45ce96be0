"""Health probe resources for liveness and readiness checks.

Usage
-----
Register health endpoints on the Falcon app::

    from repotune.api.health.resources import HealthResource, ReadyResource

    app.add_route("/health", HealthResource())
    app.add_route("/ready", ReadyResource(driver))

"""

from __future__ import annotations

import typing as typ
from http import HTTPStatus

if typ.TYPE_CHECKING:
    from falcon.asgi import Request, Response

    from repotune.playback.driver import PollingDriver

__all__ = ["HealthResource", "ReadyResource"]


class HealthResource:
    """Liveness probe resource returning ``{"status": "ok"}``."""

    async def on_get(self, _req: Request, resp: Response) -> None:
        """Handle GET /health requests."""
        resp.media = {"status": "ok"}
        resp.status = HTTPStatus.OK


class ReadyResource:
    """Readiness probe reporting whether a session is polling.

    The service is ready as soon as it can accept a session, so the probe
    always answers HTTP 200; ``polling`` tells operators whether a feed is
    currently being replayed.

    """

    def __init__(self, driver: PollingDriver | None = None) -> None:
        """Create the probe, optionally bound to a polling driver."""
        self._driver = driver

    async def on_get(self, _req: Request, resp: Response) -> None:
        """Handle GET /ready requests."""
        polling = self._driver is not None and self._driver.running
        resp.media = {"status": "ready", "polling": polling}
        resp.status = HTTPStatus.OK
