"""Unit tests for the femtologging helpers."""

from __future__ import annotations

import pytest

from repotune.logging import (
    configure_logging,
    format_log_message,
    log_debug,
    log_error,
    log_exception,
    log_info,
    log_warning,
    normalize_log_level,
)


class _FakeLogger:
    """Collects log calls for assertions."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, str, object | None, bool]] = []

    def log(
        self,
        level: str,
        message: str,
        /,
        *,
        exc_info: object | None = None,
        stack_info: bool = False,
    ) -> str:
        self.calls.append((level, message, exc_info, stack_info))
        return message


@pytest.mark.parametrize(
    ("raw", "expected", "invalid"),
    [
        ("debug", "DEBUG", False),
        ("  Warn ", "WARN", False),
        ("CRITICAL", "CRITICAL", False),
        (None, "INFO", True),
        ("", "INFO", True),
        ("loud", "INFO", True),
    ],
)
def test_normalize_log_level(
    raw: str | None, expected: str, invalid: bool  # noqa: FBT001
) -> None:
    """Known levels are upper-cased; anything else falls back to INFO."""
    assert normalize_log_level(raw) == (expected, invalid)


def test_format_log_message_interpolates_arguments() -> None:
    """Percent placeholders are filled in order."""
    assert format_log_message("%s polled %d events", "octo/reef", 4) == (
        "octo/reef polled 4 events"
    )


def test_template_without_arguments_is_not_interpolated() -> None:
    """A template with a literal percent sign is passed through untouched."""
    logger = _FakeLogger()

    log_info(logger, "queue 100% full")

    assert logger.calls == [("INFO", "queue 100% full", None, False)]


@pytest.mark.parametrize(
    ("helper", "level"),
    [
        (log_debug, "DEBUG"),
        (log_info, "INFO"),
        (log_warning, "WARNING"),
        (log_error, "ERROR"),
    ],
)
def test_level_helpers_emit_their_level(helper: object, level: str) -> None:
    """Each helper formats the message and tags it with its level."""
    logger = _FakeLogger()

    helper(logger, "session %d for %s", 3, "octo/reef")  # type: ignore[operator]

    assert logger.calls == [(level, "session 3 for octo/reef", None, False)]


def test_log_warning_forwards_exc_info() -> None:
    """Exception payloads are attached to the record."""
    logger = _FakeLogger()
    exc = TimeoutError("slow feed")

    log_warning(logger, "poll %s failed", "octo/reef", exc_info=exc)

    assert logger.calls == [("WARNING", "poll octo/reef failed", exc, False)]


def test_log_exception_attaches_exception() -> None:
    """log_exception logs at ERROR with the exception as exc_info."""
    logger = _FakeLogger()
    exc = RuntimeError("sink crashed")

    log_exception(logger, "Playback sink failed for kind=PushEvent", exc)

    assert logger.calls == [
        ("ERROR", "Playback sink failed for kind=PushEvent", exc, False)
    ]


def test_configure_logging_passes_normalized_level(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """configure_logging hands the normalized level to basicConfig."""
    captured: dict[str, object] = {}

    def fake_basic_config(**kwargs: object) -> None:
        captured.update(kwargs)

    monkeypatch.setattr("repotune.logging.basicConfig", fake_basic_config)

    assert configure_logging("nonsense", force=True) == ("INFO", True)
    assert captured == {"level": "INFO", "force": True}
