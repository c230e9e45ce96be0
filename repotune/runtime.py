"""repotune runtime entrypoint.

This module provides the ASGI application factory served by Granian.  It
delegates to :func:`repotune.api.app.create_app` for application
construction while keeping the ``repotune.runtime:create_app`` entrypoint
stable.

The runtime always builds the playback pipeline so the session control and
presentation endpoints are available.  When ``REPOTUNE_SOURCE`` is set, a
session for that repository starts with the application.

Configuration is driven by environment variables:

- ``REPOTUNE_HOST``: Bind address (default ``127.0.0.1``)
- ``REPOTUNE_PORT``: Listen port (default ``8080``)
- ``REPOTUNE_LOG_LEVEL``: Log level (default ``INFO``)
- ``REPOTUNE_SOURCE``: Optional ``owner/name`` slug to replay at startup

Run the service directly with ``python -m repotune.runtime``.
"""

from __future__ import annotations

import os
import typing as typ

from repotune.common.env import parse_str
from repotune.common.slug import normalize_repo_slug
from repotune.logging import (
    configure_logging,
    get_logger,
    log_error,
    log_info,
    log_warning,
)

if typ.TYPE_CHECKING:
    import falcon.asgi

__all__ = ["create_app", "main"]

logger = get_logger(__name__)

# TCP port number range limits
_MIN_PORT = 1
_MAX_PORT = 65535


def _parse_port(port_str: str) -> int:
    """Parse and validate a port number string.

    Raises
    ------
    SystemExit
        If port_str is not a valid integer in range 1-65535.

    """
    try:
        port = int(port_str)
        if not (_MIN_PORT <= port <= _MAX_PORT):
            msg = f"port {port} outside valid range {_MIN_PORT}-{_MAX_PORT}"
            raise ValueError(msg)  # noqa: TRY301 - unify conversion and range errors
    except ValueError as exc:
        # Use error() not exception() - validation failures need no traceback
        log_error(
            logger,
            "Invalid REPOTUNE_PORT value: %r (must be %d-%d): %s",
            port_str,
            _MIN_PORT,
            _MAX_PORT,
            exc,
        )
        raise SystemExit(1) from exc
    return port


def _autostart_source() -> str | None:
    """Return the normalized ``REPOTUNE_SOURCE`` slug, if configured.

    Raises
    ------
    SystemExit
        If the configured value is not an ``owner/name`` slug.

    """
    raw = parse_str("REPOTUNE_SOURCE")
    if raw is None:
        return None
    try:
        return normalize_repo_slug(raw)
    except ValueError as exc:
        log_error(logger, "Invalid REPOTUNE_SOURCE value: %r: %s", raw, exc)
        raise SystemExit(1) from exc


def create_app() -> falcon.asgi.App:
    """Create and configure the Falcon ASGI application.

    Builds the playback pipeline from environment configuration and
    optionally schedules a session for ``REPOTUNE_SOURCE`` at startup.

    Returns
    -------
    falcon.asgi.App
        Configured Falcon ASGI application.

    """
    from repotune.api.app import AppDependencies
    from repotune.api.app import create_app as _create_api_app
    from repotune.api.factory import build_playback_services

    deps = AppDependencies(
        services=build_playback_services(),
        autostart_source=_autostart_source(),
    )
    return _create_api_app(deps)


def main() -> None:
    """Start the repotune runtime server using Granian.

    Reads ``REPOTUNE_HOST``, ``REPOTUNE_PORT``, and ``REPOTUNE_LOG_LEVEL``
    from the environment and starts the ASGI server.
    """
    from granian import Granian
    from granian.constants import Interfaces

    host = os.environ.get("REPOTUNE_HOST", "127.0.0.1")
    port_str = os.environ.get("REPOTUNE_PORT", "8080")
    port = _parse_port(port_str)
    log_level_str = os.environ.get("REPOTUNE_LOG_LEVEL", "INFO")

    normalized_level, invalid_level = configure_logging(log_level_str)
    if invalid_level:
        log_warning(
            logger,
            "Invalid REPOTUNE_LOG_LEVEL %r, falling back to %s",
            log_level_str,
            normalized_level,
        )

    log_info(
        logger,
        "Starting repotune runtime on %s:%d (log_level=%s)",
        host,
        port,
        normalized_level,
    )

    server = Granian(
        "repotune.runtime:create_app",
        address=host,
        port=port,
        interface=Interfaces.ASGI,
        factory=True,
    )
    server.serve()


if __name__ == "__main__":
    main()
