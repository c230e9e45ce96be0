"""Translation of event kinds into playback triggers.

Each known kind maps to a chord, a colour, a visual column and a short label.
Kinds without a style are not played.
"""

from __future__ import annotations

import dataclasses
import types
import typing as typ

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from repotune.feed.models import RawEvent

type Color = tuple[int, int, int]

DEFAULT_DURATION_S = 0.4


@dataclasses.dataclass(frozen=True, slots=True)
class KindStyle:
    """Sound and visual style for one event kind."""

    notes: tuple[str, ...]
    color: Color
    key: int
    label: str
    duration_s: float = DEFAULT_DURATION_S


@dataclasses.dataclass(frozen=True, slots=True)
class PlaybackTrigger:
    """Ephemeral instruction handed to a playback sink."""

    kind: str
    key: int
    color: Color
    label: str
    notes: tuple[str, ...]
    duration_hint_s: float


DEFAULT_KIND_STYLES: cabc.Mapping[str, KindStyle] = types.MappingProxyType(
    {
        "PushEvent": KindStyle(
            notes=("C4", "E4", "G4"),
            color=(255, 160, 200),
            key=0,
            label="PE",
            duration_s=0.6,
        ),
        "PullRequestEvent": KindStyle(
            notes=("F4", "A4", "C5"),
            color=(170, 255, 200),
            key=1,
            label="PR",
            duration_s=0.7,
        ),
        "IssuesEvent": KindStyle(
            notes=("G3", "B3", "D4"), color=(170, 200, 255), key=2, label="IE"
        ),
        "WatchEvent": KindStyle(
            notes=("C5",), color=(220, 180, 255), key=3, label="WE"
        ),
        "CreateEvent": KindStyle(
            notes=("D4", "F4", "A4"), color=(255, 220, 140), key=0, label="CE"
        ),
    }
)


class KindMapping:
    """Look up playback styles by event kind."""

    def __init__(self, styles: cabc.Mapping[str, KindStyle] | None = None) -> None:
        """Create a mapping, defaulting to :data:`DEFAULT_KIND_STYLES`."""
        self._styles = dict(DEFAULT_KIND_STYLES if styles is None else styles)

    def lookup(self, kind: str) -> KindStyle | None:
        """Return the style for ``kind`` or ``None`` when unmapped."""
        return self._styles.get(kind)

    def trigger_for(self, event: RawEvent) -> PlaybackTrigger | None:
        """Build the playback trigger for ``event``, if its kind is mapped."""
        style = self.lookup(event.kind)
        if style is None:
            return None
        return PlaybackTrigger(
            kind=event.kind,
            key=style.key,
            color=style.color,
            label=style.label,
            notes=style.notes,
            duration_hint_s=style.duration_s,
        )
