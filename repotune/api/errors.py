"""Domain exceptions and Falcon error handlers for the API layer.

Usage
-----
Register error handlers on the Falcon app::

    from repotune.api.errors import (
        InvalidInputError,
        SessionNotStartedError,
        handle_invalid_input,
        handle_session_not_started,
    )

    app.add_error_handler(InvalidInputError, handle_invalid_input)
    app.add_error_handler(SessionNotStartedError, handle_session_not_started)

"""

from __future__ import annotations

import typing as typ

import falcon

if typ.TYPE_CHECKING:
    from falcon.asgi import Request, Response

__all__ = [
    "InvalidInputError",
    "SessionNotStartedError",
    "handle_invalid_input",
    "handle_session_not_started",
]


class SessionNotStartedError(Exception):
    """Raised when a session-scoped resource is read with no session running."""

    def __init__(self) -> None:
        """Initialise with a fixed message."""
        super().__init__("No playback session is running.")


class InvalidInputError(Exception):
    """Raised for client validation errors that should map to HTTP 400.

    Attributes
    ----------
    reason
        Human-readable description of the validation failure.
    field
        Optional name of the input field that failed validation.

    """

    def __init__(self, reason: str, *, field: str | None = None) -> None:
        """Initialise with a validation reason and optional field name."""
        self.reason = reason
        self.field = field
        message = f"{field}: {reason}" if field is not None else reason
        super().__init__(message)


async def handle_session_not_started(
    _req: Request,
    resp: Response,
    ex: SessionNotStartedError,
    _params: dict[str, typ.Any],
) -> None:
    """Map ``SessionNotStartedError`` to an HTTP 404 JSON response."""
    resp.status = falcon.HTTP_404
    resp.media = {
        "title": "Session not started",
        "description": str(ex),
    }


async def handle_invalid_input(
    _req: Request,
    resp: Response,
    ex: InvalidInputError,
    _params: dict[str, typ.Any],
) -> None:
    """Map ``InvalidInputError`` to an HTTP 400 JSON response.

    Parameters
    ----------
    _req
        Falcon request (unused).
    resp
        Falcon response whose status and media are set.
    ex
        The validation exception containing reason and optional field.
    _params
        URI template parameters (unused).

    """
    resp.status = falcon.HTTP_400
    media: dict[str, str] = {
        "title": "Invalid input",
        "description": ex.reason,
    }
    if ex.field is not None:
        media["field"] = ex.field
    resp.media = media
