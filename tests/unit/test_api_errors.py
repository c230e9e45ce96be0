"""Unit tests for API error types and handlers."""

from __future__ import annotations

from http import HTTPStatus

import falcon.asgi
import falcon.testing

from repotune.api.errors import (
    InvalidInputError,
    SessionNotStartedError,
    handle_invalid_input,
    handle_session_not_started,
)


class _RaisingResource:
    def __init__(self, exc: Exception) -> None:
        self._exc = exc

    async def on_get(
        self, _req: falcon.asgi.Request, _resp: falcon.asgi.Response
    ) -> None:
        raise self._exc


def _client(exc: Exception) -> falcon.testing.TestClient:
    app = falcon.asgi.App()
    app.add_route("/boom", _RaisingResource(exc))
    app.add_error_handler(InvalidInputError, handle_invalid_input)
    app.add_error_handler(SessionNotStartedError, handle_session_not_started)
    return falcon.testing.TestClient(app)


def test_invalid_input_maps_to_400_with_field() -> None:
    """Validation errors report the offending field."""
    result = _client(InvalidInputError("bad slug", field="source")).simulate_get(
        "/boom"
    )

    assert result.status_code == HTTPStatus.BAD_REQUEST
    assert result.json == {
        "title": "Invalid input",
        "description": "bad slug",
        "field": "source",
    }


def test_invalid_input_without_field() -> None:
    """The field key is omitted when not applicable."""
    result = _client(InvalidInputError("body must be an object")).simulate_get("/boom")

    assert result.json == {
        "title": "Invalid input",
        "description": "body must be an object",
    }


def test_session_not_started_maps_to_404() -> None:
    """Reading a session that does not exist is a 404."""
    result = _client(SessionNotStartedError()).simulate_get("/boom")

    assert result.status_code == HTTPStatus.NOT_FOUND
    assert result.json == {
        "title": "Session not started",
        "description": "No playback session is running.",
    }


def test_invalid_input_message_includes_field() -> None:
    """The exception message names the field."""
    assert str(InvalidInputError("bad", field="source")) == "source: bad"
