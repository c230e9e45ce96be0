"""Observability primitives for feed polling.

Provides structured logging and error categorisation for poll cycles and
session lifecycle. Every event is a single log line of the form
``[event.type] key=value ...`` suitable for parsing by log aggregators.
"""

from __future__ import annotations

import dataclasses
import enum
import typing as typ

from repotune.feed.errors import (
    FeedAPIError,
    FeedResponseShapeError,
    FeedSourceError,
    FeedTransportError,
)
from repotune.logging import get_logger, log_error, log_info, log_warning

if typ.TYPE_CHECKING:
    import datetime as dt

    from .session import IngestResult

logger = get_logger(__name__)

_HTTP_SERVER_ERROR_THRESHOLD = 500
_HTTP_RATE_LIMITED = 429


class PollEventType(enum.StrEnum):
    """Structured log event types for polling observability."""

    SESSION_STARTED = "poll.session.started"
    SESSION_STOPPED = "poll.session.stopped"
    CYCLE_COMPLETED = "poll.cycle.completed"
    CYCLE_FAILED = "poll.cycle.failed"
    CYCLE_DISCARDED = "poll.cycle.discarded"


class ErrorCategory(enum.StrEnum):
    """Categories for fetch failure classification."""

    TRANSIENT = "transient"
    CLIENT_ERROR = "client_error"
    SCHEMA_DRIFT = "schema_drift"
    CONFIGURATION = "configuration"
    UNKNOWN = "unknown"


@dataclasses.dataclass(frozen=True, slots=True)
class PollContext:
    """Shared context for a single poll cycle."""

    source: str
    session_id: int
    started_at: dt.datetime


_EXCEPTION_CATEGORY_MAP: tuple[tuple[type[BaseException], ErrorCategory], ...] = (
    (FeedTransportError, ErrorCategory.TRANSIENT),
    (FeedResponseShapeError, ErrorCategory.SCHEMA_DRIFT),
    (FeedSourceError, ErrorCategory.CONFIGURATION),
)


def categorize_error(exc: BaseException) -> ErrorCategory:
    """Categorise a fetch failure for log routing.

    Returns:
        ErrorCategory describing the kind of failure.

    """
    # Rate limiting and 5xx are retried by the next poll; other statuses are not.
    if isinstance(exc, FeedAPIError):
        status = exc.status_code
        if status is not None and (
            status >= _HTTP_SERVER_ERROR_THRESHOLD or status == _HTTP_RATE_LIMITED
        ):
            return ErrorCategory.TRANSIENT
        return ErrorCategory.CLIENT_ERROR

    for exc_type, category in _EXCEPTION_CATEGORY_MAP:
        if isinstance(exc, exc_type):
            return category

    return ErrorCategory.UNKNOWN


class PollEventLogger:
    """Emit structured polling events via femtologging.

    Session lifecycle and completed cycles log at INFO, discarded cycles at
    WARNING and failed cycles at ERROR.
    """

    def log_session_started(self, source: str, session_id: int) -> None:
        """Log the start of a session."""
        log_info(
            logger,
            "[%s] source=%s session_id=%d",
            PollEventType.SESSION_STARTED,
            source,
            session_id,
        )

    def log_session_stopped(self, source: str | None, session_id: int) -> None:
        """Log the end of a session."""
        log_info(
            logger,
            "[%s] source=%s session_id=%d",
            PollEventType.SESSION_STOPPED,
            source,
            session_id,
        )

    def log_cycle_completed(
        self,
        context: PollContext,
        result: IngestResult,
        duration: dt.timedelta,
    ) -> None:
        """Log a completed poll cycle with per-outcome counts."""
        log_info(
            logger,
            "[%s] source=%s session_id=%d duration_seconds=%.3f fetched=%d "
            "accepted=%d stale=%d duplicate=%d malformed=%d enqueued=%d dropped=%d",
            PollEventType.CYCLE_COMPLETED,
            context.source,
            context.session_id,
            duration.total_seconds(),
            result.total,
            result.accepted,
            result.stale,
            result.duplicate,
            result.malformed,
            result.enqueued,
            result.dropped,
        )

    def log_cycle_failed(
        self,
        context: PollContext,
        error: BaseException,
        duration: dt.timedelta,
    ) -> None:
        """Log a skipped poll cycle with error categorisation."""
        log_error(
            logger,
            "[%s] source=%s session_id=%d duration_seconds=%.3f "
            "error_type=%s error_category=%s error_message=%s",
            PollEventType.CYCLE_FAILED,
            context.source,
            context.session_id,
            duration.total_seconds(),
            type(error).__name__,
            categorize_error(error),
            str(error),
            exc_info=error,
        )

    def log_cycle_discarded(self, context: PollContext, current_session_id: int) -> None:
        """Log a fetch whose results arrived after its session ended."""
        log_warning(
            logger,
            "[%s] source=%s session_id=%d current_session_id=%d",
            PollEventType.CYCLE_DISCARDED,
            context.source,
            context.session_id,
            current_session_id,
        )
