"""Polling driver feeding the playback session.

The driver polls the fetch collaborator once when a session starts and then
on a fixed interval. Every batch passes newest-first through the session's
filter into its queue, after which the pacing scheduler is armed. A failed
fetch is logged and skipped; the next scheduled poll runs regardless. There
is no backoff.

Starting a new session cancels the polling task of the previous one. A fetch
that was already in flight completes into a stale generation and its
results are discarded.
"""

from __future__ import annotations

import asyncio
import contextlib
import dataclasses
import typing as typ

from repotune.common.time import utcnow
from repotune.logging import get_logger, log_exception

from .observability import PollContext, PollEventLogger

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    import datetime as dt

    from repotune.feed.client import FeedFetcher

    from .scheduler import Sleep
    from .session import IngestResult, PlaybackSession

logger = get_logger(__name__)

_MS_PER_SECOND = 1000


@dataclasses.dataclass(frozen=True, slots=True)
class PollResult:
    """Outcome of one poll cycle.

    Exactly one of ``ingest`` and ``error`` is set unless the cycle was
    ``discarded`` because its session ended while the fetch was in flight.
    """

    source: str
    session_id: int
    ingest: IngestResult | None = None
    error: Exception | None = None
    discarded: bool = False

    @property
    def failed(self) -> bool:
        """Return whether the fetch failed."""
        return self.error is not None


class NoActiveSessionError(RuntimeError):
    """Raised when a poll is requested without a running session."""

    def __init__(self) -> None:
        """Initialise with a fixed message."""
        super().__init__("no playback session is active")


class PollingDriver:
    """Drive periodic polling for one :class:`PlaybackSession`."""

    def __init__(  # noqa: PLR0913
        self,
        session: PlaybackSession,
        fetcher: FeedFetcher,
        *,
        sleep: Sleep = asyncio.sleep,
        event_logger: PollEventLogger | None = None,
        clock: cabc.Callable[[], dt.datetime] = utcnow,
    ) -> None:
        """Bind the driver to a session and a fetch collaborator."""
        self._session = session
        self._fetcher = fetcher
        self._sleep = sleep
        self._event_logger = event_logger or PollEventLogger()
        self._clock = clock
        self._task: asyncio.Task[None] | None = None

    @property
    def session(self) -> PlaybackSession:
        """Return the session this driver feeds."""
        return self._session

    @property
    def fetcher(self) -> FeedFetcher:
        """Return the fetch collaborator."""
        return self._fetcher

    @property
    def running(self) -> bool:
        """Return whether the polling task is alive."""
        return self._task is not None and not self._task.done()

    def start_session(self, source: str) -> int:
        """Start polling ``source``, replacing any current session.

        The previous polling task is cancelled and all session state is
        reset before the new session's first poll is scheduled.

        Returns
        -------
        int
            The new session identifier.

        """
        previous = self._session.source
        self._cancel_polling()
        if previous is not None:
            self._event_logger.log_session_stopped(previous, self._session.generation)
        generation = self._session.begin(source)
        loop = asyncio.get_running_loop()
        self._task = loop.create_task(
            self._poll_forever(source, generation),
            name=f"repotune-poll-{generation}",
        )
        self._task.add_done_callback(_log_unexpected_failure)
        self._event_logger.log_session_started(source, generation)
        return generation

    async def stop(self) -> None:
        """End the current session, cancelling polling and playback.

        A session started while the cancelled tasks wind down is left
        running.
        """
        task = self._cancel_polling()
        source = self._session.source
        generation = self._session.generation
        await self._session.scheduler.aclose()
        if task is not None:
            with contextlib.suppress(asyncio.CancelledError):
                await task
        if self._session.generation != generation:
            return
        self._session.end()
        if source is not None:
            self._event_logger.log_session_stopped(source, generation)

    async def poll_once(self) -> PollResult:
        """Run one poll cycle for the current session immediately.

        Raises
        ------
        NoActiveSessionError
            If no session has been started.

        """
        source = self._session.source
        if source is None:
            raise NoActiveSessionError
        return await self._poll(source, self._session.generation)

    async def _poll_forever(self, source: str, generation: int) -> None:
        interval_s = self._session.config.poll_interval_ms / _MS_PER_SECOND
        while self._session.is_current(generation):
            await self._poll(source, generation)
            await self._sleep(interval_s)

    async def _poll(self, source: str, generation: int) -> PollResult:
        context = PollContext(
            source=source, session_id=generation, started_at=self._clock()
        )
        try:
            records = await self._fetcher.fetch(source)
        except Exception as exc:  # noqa: BLE001 - every fetch failure skips the cycle
            if self._session.is_current(generation):
                self._session.stats.polls_failed += 1
            self._event_logger.log_cycle_failed(
                context, exc, self._clock() - context.started_at
            )
            return PollResult(source=source, session_id=generation, error=exc)

        if not self._session.is_current(generation):
            self._event_logger.log_cycle_discarded(context, self._session.generation)
            return PollResult(source=source, session_id=generation, discarded=True)

        ingest = self._session.ingest(records, newest_first=True)
        self._session.stats.polls_completed += 1
        if ingest.enqueued:
            self._session.scheduler.kick()
        self._event_logger.log_cycle_completed(
            context, ingest, self._clock() - context.started_at
        )
        return PollResult(source=source, session_id=generation, ingest=ingest)

    def _cancel_polling(self) -> asyncio.Task[None] | None:
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()
        return task


def _log_unexpected_failure(task: asyncio.Task[None]) -> None:
    """Report a polling task that died from an error outside the fetch call."""
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        log_exception(logger, f"Polling task {task.get_name()} stopped", exc)
