"""Behavioural tests for deduplication, shedding and paced playback."""

from __future__ import annotations

import asyncio
import typing as typ

import pytest
from pytest_bdd import given, parsers, scenario, then, when

from repotune.playback.config import PlaybackConfig
from repotune.playback.driver import PollingDriver
from repotune.playback.scheduler import DrainOutcome
from repotune.playback.session import PlaybackSession
from tests.helpers.fakes import (
    FakeFetcher,
    GatedSleep,
    RecordingSink,
    RecordingSleep,
    settle,
)
from tests.helpers.feed_records import make_record

if typ.TYPE_CHECKING:
    from repotune.playback.scheduler import DrainResult
    from repotune.playback.session import IngestResult

_MS_PER_SECOND = 1000


def run_async[T](coro: typ.Coroutine[typ.Any, typ.Any, T]) -> T:
    """Run async coroutines in sync BDD step functions."""
    return asyncio.run(coro)


class PacingContext(typ.TypedDict, total=False):
    """Shared state used by BDD steps."""

    sink: RecordingSink
    session: PlaybackSession
    ingest: IngestResult
    drain: DrainResult
    fetcher: FakeFetcher
    playback_sleep: RecordingSleep


@scenario("../playback_pacing.feature", "Repeated polls do not replay events")
def test_repeated_polls() -> None:
    """Wrap the pytest-bdd scenario for dedup across polls."""


@scenario(
    "../playback_pacing.feature",
    "Backlog stretches the spacing between playbacks",
)
def test_backlog_spacing() -> None:
    """Wrap the pytest-bdd scenario for adaptive spacing."""


@scenario("../playback_pacing.feature", "Overflow sheds excess events")
def test_overflow() -> None:
    """Wrap the pytest-bdd scenario for queue shedding."""


@scenario("../playback_pacing.feature", "Unknown kinds are skipped without sound")
def test_unknown_kinds() -> None:
    """Wrap the pytest-bdd scenario for unmapped kinds."""


@scenario("../playback_pacing.feature", "A started session drains its first poll")
def test_session_drains() -> None:
    """Wrap the pytest-bdd scenario for end-to-end draining."""


@pytest.fixture
def pacing_context() -> PacingContext:
    """Provide empty scenario state."""
    return {}


def _records(count: int, kind: str) -> list[dict[str, typ.Any]]:
    records = [
        make_record(f"{kind}-{index}", kind=kind, seconds=index)
        for index in range(count)
    ]
    records.reverse()
    return records


@given("a fresh playback session")
def given_fresh_session(pacing_context: PacingContext) -> None:
    """Create a session whose scheduler never finishes a delay on its own."""
    sink = RecordingSink()
    pacing_context["sink"] = sink
    pacing_context["session"] = PlaybackSession(sink, sleep=GatedSleep())


@given(
    parsers.parse('a polling driver whose feed publishes {count:d} "{kind}" events')
)
def given_driver_with_feed(
    pacing_context: PacingContext, count: int, kind: str
) -> None:
    """Script a fetcher with one batch of events."""
    pacing_context["fetcher"] = FakeFetcher({"octo/reef": [_records(count, kind)]})
    pacing_context["sink"] = RecordingSink()
    pacing_context["playback_sleep"] = RecordingSleep()


@when(parsers.parse('a poll returns events "{ids}" newest first'))
def when_poll_returns_ids(pacing_context: PacingContext, ids: str) -> None:
    """Ingest records whose timestamps follow their numeric ids."""
    batch = [
        make_record(event_id, seconds=int(event_id)) for event_id in ids.split(",")
    ]
    pacing_context["ingest"] = pacing_context["session"].ingest(batch)


@when(parsers.parse('a poll returns {count:d} "{kind}" events'))
def when_poll_returns_count(
    pacing_context: PacingContext, count: int, kind: str
) -> None:
    """Ingest a newest-first batch of one kind."""
    pacing_context["ingest"] = pacing_context["session"].ingest(_records(count, kind))


@when("the scheduler drains once")
def when_drain_once(pacing_context: PacingContext) -> None:
    """Run a single synchronous drain step."""
    pacing_context["drain"] = pacing_context["session"].scheduler.drain_once()


@when(parsers.parse('a session starts for "{source}" and the backlog drains'))
def when_session_drains(pacing_context: PacingContext, source: str) -> None:
    """Start a session and wait until playback is idle again."""
    session = PlaybackSession(
        pacing_context["sink"],
        config=PlaybackConfig(),
        sleep=pacing_context["playback_sleep"],
    )
    driver = PollingDriver(session, pacing_context["fetcher"], sleep=GatedSleep())

    async def _run() -> None:
        driver.start_session(source)
        await settle()
        await session.scheduler.wait_idle()
        await driver.stop()

    run_async(_run())


@then(parsers.parse('the queue holds events "{ids}" in order'))
def then_queue_holds(pacing_context: PacingContext, ids: str) -> None:
    """Assert pending events in dequeue order."""
    queued = [event.id for event in pacing_context["session"].queue]
    assert queued == ids.split(",")


@then(parsers.parse("{count:d} records were rejected as stale"))
def then_stale(pacing_context: PacingContext, count: int) -> None:
    """Assert the last batch's stale count."""
    ingest = pacing_context["ingest"]
    assert ingest.stale == count
    assert ingest.enqueued == 0


@then(parsers.parse("{queued:d} events are queued and {dropped:d} are dropped"))
def then_queued_and_dropped(
    pacing_context: PacingContext, queued: int, dropped: int
) -> None:
    """Assert enqueue and drop counts."""
    ingest = pacing_context["ingest"]
    assert ingest.enqueued == queued
    assert ingest.dropped == dropped
    assert len(pacing_context["session"].queue) == queued


@then(parsers.parse('a "{kind}" trigger was played'))
def then_trigger_played(pacing_context: PacingContext, kind: str) -> None:
    """Assert the sink received exactly one trigger of ``kind``."""
    assert pacing_context["sink"].kinds == [kind]


@then("nothing was played")
def then_nothing_played(pacing_context: PacingContext) -> None:
    """Assert the sink was never called."""
    assert pacing_context["sink"].played == []
    assert pacing_context["drain"].outcome is DrainOutcome.UNMAPPED


@then(parsers.parse("the next playback waits {delay:d} ms"))
def then_delay(pacing_context: PacingContext, delay: int) -> None:
    """Assert the delay computed by the last drain."""
    assert pacing_context["drain"].delay_ms == delay


@then("another drain is refused while playback is in flight")
def then_busy(pacing_context: PacingContext) -> None:
    """Assert the draining flag blocks a concurrent drain."""
    session = pacing_context["session"]
    assert session.scheduler.drain_once().outcome is DrainOutcome.BUSY


@then(parsers.parse('{count:d} "{kind}" triggers were played'))
def then_triggers_played(
    pacing_context: PacingContext, count: int, kind: str
) -> None:
    """Assert the sink received ``count`` triggers of ``kind``."""
    assert pacing_context["sink"].kinds == [kind] * count


@then(parsers.parse("the pacing delays were {first:d}, {second:d} and {third:d} ms"))
def then_pacing_delays(
    pacing_context: PacingContext, first: int, second: int, third: int
) -> None:
    """Assert the delays the scheduler slept for, in milliseconds."""
    delays = [
        round(seconds * _MS_PER_SECOND)
        for seconds in pacing_context["playback_sleep"].delays
    ]
    assert delays == [first, second, third]
