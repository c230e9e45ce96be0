"""Adaptive pacing scheduler.

The scheduler drains the playback queue one entry at a time. Each drain hands
the entry's trigger to the sink and then holds the scheduler in ``DRAINING``
for a delay derived from the remaining backlog::

    delay_ms = min(max_delay_ms, base_delay_ms + backlog * per_item_delay_ms)

When the delay elapses the scheduler returns to ``IDLE`` and immediately
drains again if entries remain. Nothing is scheduled while idle; each
successful enqueue re-arms the machine through :meth:`PacingScheduler.kick`.

Draining runs in a single asyncio task per scheduler so at most one playback
is in flight, and :meth:`PacingScheduler.reset` cancels that task.
"""

from __future__ import annotations

import asyncio
import contextlib
import dataclasses
import enum
import typing as typ

from repotune.logging import get_logger, log_debug, log_exception

from .config import PacingConfig
from .mapping import KindMapping

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from repotune.feed.models import RawEvent

    from .mapping import PlaybackTrigger
    from .queue import PlaybackQueue
    from .sink import PlaybackSink
    from .stats import PlaybackStats

    type Sleep = cabc.Callable[[float], cabc.Awaitable[None]]

logger = get_logger(__name__)

_MS_PER_SECOND = 1000


class SchedulerState(enum.StrEnum):
    """Pacing state machine states."""

    IDLE = "idle"
    DRAINING = "draining"


class DrainOutcome(enum.StrEnum):
    """Result of a single drain step."""

    PLAYED = "played"
    UNMAPPED = "unmapped"
    BUSY = "busy"
    EMPTY = "empty"


@dataclasses.dataclass(frozen=True, slots=True)
class DrainResult:
    """What a drain step did and how long to wait before the next one.

    ``delay_ms`` is ``None`` when nothing was dequeued.
    """

    outcome: DrainOutcome
    event: RawEvent | None = None
    trigger: PlaybackTrigger | None = None
    delay_ms: int | None = None


def compute_delay_ms(backlog: int, config: PacingConfig | None = None) -> int:
    """Return the spacing before the next drain for a given backlog.

    Examples
    --------
    >>> compute_delay_ms(5)
    250
    >>> compute_delay_ms(40)
    600

    """
    pacing = config or PacingConfig()
    return min(
        pacing.max_delay_ms,
        pacing.base_delay_ms + max(backlog, 0) * pacing.per_item_delay_ms,
    )


class PacingScheduler:
    """Single-consumer drain loop enforcing spacing between triggers."""

    def __init__(  # noqa: PLR0913
        self,
        queue: PlaybackQueue,
        sink: PlaybackSink,
        *,
        mapping: KindMapping | None = None,
        config: PacingConfig | None = None,
        stats: PlaybackStats | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        """Bind the scheduler to a queue and a sink.

        Parameters
        ----------
        queue
            Queue drained by this scheduler.
        sink
            Receives one trigger per mapped entry.
        mapping
            Kind to style lookup; defaults to the built-in styles.
        config
            Pacing calibration.
        stats
            Optional session counters updated on every drain.
        sleep
            Awaitable used for pacing delays, in seconds.

        """
        self._queue = queue
        self._sink = sink
        self._mapping = mapping or KindMapping()
        self._config = config or PacingConfig()
        self._stats = stats
        self._sleep = sleep
        self._state = SchedulerState.IDLE
        self._task: asyncio.Task[None] | None = None

    @property
    def state(self) -> SchedulerState:
        """Return the current state."""
        return self._state

    @property
    def draining(self) -> bool:
        """Return whether a playback is in flight."""
        return self._state is SchedulerState.DRAINING

    @property
    def active(self) -> bool:
        """Return whether the drain task is running."""
        return self._task is not None and not self._task.done()

    @property
    def config(self) -> PacingConfig:
        """Return the pacing calibration."""
        return self._config

    def drain_once(self) -> DrainResult:
        """Perform one drain step.

        Does nothing while another drain is in flight or when the queue is
        empty. Otherwise marks the scheduler as draining, plays the oldest
        entry (unmapped kinds are discarded without a sink call) and returns
        the delay to hold before :meth:`release`.
        """
        if self._state is SchedulerState.DRAINING:
            return DrainResult(DrainOutcome.BUSY)
        event = self._queue.dequeue_one()
        if event is None:
            return DrainResult(DrainOutcome.EMPTY)

        self._state = SchedulerState.DRAINING
        trigger = self._mapping.trigger_for(event)
        if trigger is None:
            outcome = DrainOutcome.UNMAPPED
            log_debug(
                logger, "No playback style for kind=%s id=%s", event.kind, event.id
            )
        else:
            outcome = DrainOutcome.PLAYED
            self._deliver(trigger)
        if self._stats is not None:
            if outcome is DrainOutcome.PLAYED:
                self._stats.played += 1
            else:
                self._stats.unmapped += 1

        delay_ms = compute_delay_ms(len(self._queue), self._config)
        return DrainResult(outcome, event, trigger, delay_ms)

    def release(self) -> None:
        """End the current drain once its delay has elapsed."""
        self._state = SchedulerState.IDLE

    def kick(self) -> bool:
        """Start the drain task if idle with pending entries.

        Returns
        -------
        bool
            ``True`` when a new drain task was started.

        Raises
        ------
        RuntimeError
            If called outside a running event loop.

        """
        if self.active or self._state is SchedulerState.DRAINING:
            return False
        if not len(self._queue):
            return False
        loop = asyncio.get_running_loop()
        self._task = loop.create_task(self._run(), name="repotune-pacing")
        return True

    def reset(self) -> None:
        """Cancel any in-flight drain and return to ``IDLE``."""
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()
        self._state = SchedulerState.IDLE

    async def aclose(self) -> None:
        """Reset and wait for the cancelled drain task to finish."""
        task = self._task
        self.reset()
        if task is not None:
            with contextlib.suppress(asyncio.CancelledError):
                await task

    async def wait_idle(self) -> None:
        """Wait until the current drain task, if any, has finished."""
        task = self._task
        if task is not None:
            await asyncio.shield(task)

    async def _run(self) -> None:
        task = asyncio.current_task()
        try:
            while self._task is task:
                result = self.drain_once()
                if result.delay_ms is None:
                    return
                await self._sleep(result.delay_ms / _MS_PER_SECOND)
                if self._task is task:
                    self.release()
        finally:
            if self._task is task:
                self._task = None
                self._state = SchedulerState.IDLE

    def _deliver(self, trigger: PlaybackTrigger) -> None:
        try:
            self._sink.play(trigger)
        except Exception as exc:  # noqa: BLE001
            log_exception(logger, f"Playback sink failed for kind={trigger.kind}", exc)
