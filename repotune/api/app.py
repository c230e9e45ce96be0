"""Application factory for the repotune Falcon ASGI application.

This module provides ``create_app()`` which builds the Falcon ASGI
application with health endpoints and, when playback services are supplied,
session control and presentation endpoints.

Usage
-----
Create a health-only app::

    app = create_app()

Create a full app::

    from repotune.api.app import AppDependencies, create_app
    from repotune.api.factory import build_playback_services

    deps = AppDependencies(services=build_playback_services())
    app = create_app(deps)

"""

from __future__ import annotations

import dataclasses as dc
import typing as typ

import falcon.asgi

from repotune.api.errors import (
    InvalidInputError,
    SessionNotStartedError,
    handle_invalid_input,
    handle_session_not_started,
)
from repotune.api.health.resources import HealthResource, ReadyResource

if typ.TYPE_CHECKING:
    from repotune.api.factory import PlaybackServices

__all__ = ["AppDependencies", "create_app"]


@dc.dataclass(frozen=True, slots=True)
class AppDependencies:
    """Dependencies for the Falcon ASGI application.

    Attributes
    ----------
    services
        Playback pipeline; when ``None`` only health endpoints are served.
    autostart_source
        Optional ``owner/name`` slug replayed from application startup.

    """

    services: PlaybackServices | None = None
    autostart_source: str | None = None


def create_app(
    dependencies: AppDependencies | None = None,
) -> falcon.asgi.App:
    """Create and configure the Falcon ASGI application.

    Parameters
    ----------
    dependencies
        Optional application dependencies.  When ``None`` or without
        services, only ``/health`` and ``/ready`` are available.

    Returns
    -------
    falcon.asgi.App
        Configured Falcon ASGI application.

    """
    services = dependencies.services if dependencies is not None else None
    middleware: list[object] = []

    if services is not None and dependencies is not None:
        from repotune.api.middleware import PlaybackLifecycle

        middleware.append(
            PlaybackLifecycle(services, dependencies.autostart_source)
        )

    app = falcon.asgi.App(middleware=middleware)  # type: ignore[no-matching-overload]  # Falcon stubs

    app.add_route("/health", HealthResource())
    app.add_route(
        "/ready", ReadyResource(services.driver if services is not None else None)
    )

    if services is not None:
        from repotune.api.session.resources import (
            FeedResource,
            SessionResource,
            VisualsResource,
        )

        app.add_route("/session", SessionResource(services.driver))
        app.add_route("/feed", FeedResource(services.driver, services.feed))
        app.add_route("/visuals", VisualsResource(services.driver, services.sink))

    app.add_error_handler(SessionNotStartedError, handle_session_not_started)
    app.add_error_handler(InvalidInputError, handle_invalid_input)

    return app
