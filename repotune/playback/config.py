"""Configuration for polling, queueing and playback pacing.

All durations are whole milliseconds.

Usage
-----
Create a configuration with defaults:

>>> config = PlaybackConfig()
>>> config.poll_interval_ms
15000
>>> config.pacing.max_delay_ms
600

Or load overrides from environment variables:

>>> import os
>>> os.environ["REPOTUNE_QUEUE_CAPACITY"] = "20"
>>> PlaybackConfig.from_env().queue_capacity
20

"""

from __future__ import annotations

import dataclasses as dc

from repotune.common.env import ConfigError, parse_int

DEFAULT_POLL_INTERVAL_MS = 15_000
DEFAULT_QUEUE_CAPACITY = 50
DEFAULT_BASE_DELAY_MS = 200
DEFAULT_PER_ITEM_DELAY_MS = 10
DEFAULT_MAX_DELAY_MS = 600
DEFAULT_VISUALS_LIFETIME_MS = 6_000


@dc.dataclass(frozen=True, slots=True)
class PacingConfig:
    """Spacing between consecutive playback triggers.

    Attributes
    ----------
    base_delay_ms
        Spacing applied when the queue is empty after a drain.
    per_item_delay_ms
        Additional spacing per entry still waiting in the queue.
    max_delay_ms
        Ceiling applied to the computed spacing.

    """

    base_delay_ms: int = DEFAULT_BASE_DELAY_MS
    per_item_delay_ms: int = DEFAULT_PER_ITEM_DELAY_MS
    max_delay_ms: int = DEFAULT_MAX_DELAY_MS

    def __post_init__(self) -> None:
        """Reject negative spacing values."""
        for field in dc.fields(self):
            value = getattr(self, field.name)
            if value < 0:
                raise ConfigError.below_minimum(field.name, value, 0)

    @classmethod
    def from_env(cls) -> PacingConfig:
        """Read ``REPOTUNE_PACING_{BASE,PER_ITEM,MAX}_MS`` overrides."""
        return cls(
            base_delay_ms=parse_int(
                "REPOTUNE_PACING_BASE_MS", DEFAULT_BASE_DELAY_MS, minimum=0
            ),
            per_item_delay_ms=parse_int(
                "REPOTUNE_PACING_PER_ITEM_MS", DEFAULT_PER_ITEM_DELAY_MS, minimum=0
            ),
            max_delay_ms=parse_int(
                "REPOTUNE_PACING_MAX_MS", DEFAULT_MAX_DELAY_MS, minimum=0
            ),
        )


@dc.dataclass(frozen=True, slots=True)
class PlaybackConfig:
    """Runtime knobs for one playback session.

    Attributes
    ----------
    poll_interval_ms
        Delay between feed polls after the immediate first poll.
    queue_capacity
        Maximum number of accepted events waiting for playback.
    pacing
        Spacing rules applied by the scheduler.
    visuals_lifetime_ms
        How long the playback sink keeps a visual alive.

    """

    poll_interval_ms: int = DEFAULT_POLL_INTERVAL_MS
    queue_capacity: int = DEFAULT_QUEUE_CAPACITY
    pacing: PacingConfig = dc.field(default_factory=PacingConfig)
    visuals_lifetime_ms: int = DEFAULT_VISUALS_LIFETIME_MS

    def __post_init__(self) -> None:
        """Reject non-positive intervals and capacities."""
        if self.poll_interval_ms < 1:
            raise ConfigError.below_minimum(
                "poll_interval_ms", self.poll_interval_ms, 1
            )
        if self.queue_capacity < 1:
            raise ConfigError.below_minimum("queue_capacity", self.queue_capacity, 1)
        if self.visuals_lifetime_ms < 0:
            raise ConfigError.below_minimum(
                "visuals_lifetime_ms", self.visuals_lifetime_ms, 0
            )

    @classmethod
    def from_env(cls) -> PlaybackConfig:
        """Create configuration from environment variables.

        Reads the following environment variables:

        - ``REPOTUNE_POLL_INTERVAL_MS``: delay between polls.
        - ``REPOTUNE_QUEUE_CAPACITY``: pending playback limit.
        - ``REPOTUNE_PACING_BASE_MS``, ``REPOTUNE_PACING_PER_ITEM_MS`` and
          ``REPOTUNE_PACING_MAX_MS``: pacing calibration.
        - ``REPOTUNE_VISUALS_LIFETIME_MS``: visual lifetime in the sink.

        Raises
        ------
        ConfigError
            If any value is not an integer or is out of range.

        """
        return cls(
            poll_interval_ms=parse_int(
                "REPOTUNE_POLL_INTERVAL_MS", DEFAULT_POLL_INTERVAL_MS
            ),
            queue_capacity=parse_int("REPOTUNE_QUEUE_CAPACITY", DEFAULT_QUEUE_CAPACITY),
            pacing=PacingConfig.from_env(),
            visuals_lifetime_ms=parse_int(
                "REPOTUNE_VISUALS_LIFETIME_MS", DEFAULT_VISUALS_LIFETIME_MS, minimum=0
            ),
        )
