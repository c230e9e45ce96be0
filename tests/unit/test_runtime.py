"""Unit tests for the repotune.runtime module."""

from __future__ import annotations

import typing as typ
from http import HTTPStatus

import falcon.asgi
import falcon.testing
import pytest

from repotune import runtime


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    """Remove runtime overrides from the environment."""
    for name in (
        "REPOTUNE_SOURCE",
        "REPOTUNE_HOST",
        "REPOTUNE_PORT",
        "REPOTUNE_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestCreateApp:
    """Tests for the Granian application factory."""

    def test_returns_falcon_app_with_session_routes(
        self, clean_env: pytest.MonkeyPatch
    ) -> None:
        """The runtime app serves health and session endpoints."""
        app = runtime.create_app()
        assert isinstance(app, falcon.asgi.App)

        client = falcon.testing.TestClient(app)
        assert client.simulate_get("/health").json == {"status": "ok"}
        assert client.simulate_get("/ready").json == {
            "status": "ready",
            "polling": False,
        }
        assert client.simulate_get("/session").status_code == HTTPStatus.NOT_FOUND
        assert client.simulate_get("/feed").json == {"source": None, "entries": []}

    def test_invalid_source_exits(self, clean_env: pytest.MonkeyPatch) -> None:
        """A malformed REPOTUNE_SOURCE stops startup."""
        clean_env.setenv("REPOTUNE_SOURCE", "reef")
        with pytest.raises(SystemExit):
            runtime.create_app()


class TestParsePort:
    """Tests for port validation."""

    @pytest.mark.parametrize("value", ["1", "8080", "65535"])
    def test_accepts_valid_ports(self, value: str) -> None:
        """Ports inside the TCP range parse."""
        assert runtime._parse_port(value) == int(value)

    @pytest.mark.parametrize("value", ["0", "65536", "http", ""])
    def test_rejects_invalid_ports(self, value: str) -> None:
        """Anything else exits."""
        with pytest.raises(SystemExit):
            runtime._parse_port(value)


def test_main_starts_granian(
    clean_env: pytest.MonkeyPatch,
) -> None:
    """main configures logging and serves the factory with Granian."""
    captured: dict[str, typ.Any] = {}

    class _FakeGranian:
        def __init__(self, target: str, **kwargs: typ.Any) -> None:
            captured["target"] = target
            captured.update(kwargs)

        def serve(self) -> None:
            captured["served"] = True

    levels: list[str] = []

    def fake_configure_logging(level: str) -> tuple[str, bool]:
        levels.append(level)
        return ("DEBUG", False)

    clean_env.setenv("REPOTUNE_PORT", "9000")
    clean_env.setenv("REPOTUNE_LOG_LEVEL", "debug")
    clean_env.setattr("granian.Granian", _FakeGranian)
    clean_env.setattr(runtime, "configure_logging", fake_configure_logging)

    runtime.main()

    assert levels == ["debug"]
    assert captured["target"] == "repotune.runtime:create_app"
    assert captured["address"] == "127.0.0.1"
    assert captured["port"] == 9000
    assert captured["factory"] is True
    assert captured["served"] is True
