"""Replay repository activity feeds as paced audio and visual playback."""

from __future__ import annotations

__version__ = "0.1.0"
