"""
Host bridge — the player side of the embedding protocol.

Outgoing messages go through ``post`` (in a browser this is
``window.parent.postMessage``). Incoming messages are checked against
the allowed origins before any command runs. Time updates are throttled
to one per ``timeupdate_interval`` seconds.
"""
from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any, Callable, Dict, Iterable, Optional

from snapie.core.config import get_settings
from snapie.player.messages import (
    DurationChange,
    Ended,
    HostMessage,
    Pause,
    Play,
    PlayerError,
    PlayerReady,
    PlayerState,
    TimeUpdate,
    orientation,
    parse_command,
)

if TYPE_CHECKING:
    from snapie.player.controller import MediaPipeline, PlaybackController

logger = logging.getLogger(__name__)


class HostBridge:
    def __init__(
        self,
        pipeline: "MediaPipeline",
        post: Callable[[Dict[str, Any]], None],
        allowed_origins: Optional[Iterable[str]] = None,
        timeupdate_interval: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        settings = get_settings()
        self.pipeline = pipeline
        self._post = post
        self.allowed_origins = frozenset(
            allowed_origins if allowed_origins is not None else settings.host_allowed_origins
        )
        self.timeupdate_interval = (
            timeupdate_interval if timeupdate_interval is not None
            else settings.timeupdate_interval_seconds
        )
        self._clock = clock
        self._last_timeupdate: Optional[float] = None
        self.controller: Optional["PlaybackController"] = None

    def attach(self, controller: "PlaybackController"):
        self.controller = controller

    # ── Player → Host ────────────────────────────────────────────────────

    def send(self, message: HostMessage):
        self._post(message.to_message())

    def dimensions(self, width: int, height: int):
        self.send(PlayerReady.from_dimensions(width, height))

    def timeupdate(self, force: bool = False):
        now = self._clock()
        if (
            not force
            and self._last_timeupdate is not None
            and now - self._last_timeupdate < self.timeupdate_interval
        ):
            return
        self._last_timeupdate = now
        p = self.pipeline
        self.send(TimeUpdate(
            current_time=p.current_time,
            duration=p.duration,
            paused=p.paused,
            muted=p.muted,
            volume=p.volume,
        ))

    def duration_change(self, duration: float):
        self.send(DurationChange(duration=duration))

    def play(self):
        self.send(Play())

    def pause(self):
        self.send(Pause())

    def ended(self):
        self.send(Ended())

    def error(self, classification: str, message: str):
        self.send(PlayerError(classification=classification, message=message))

    def state(self):
        p = self.pipeline
        session = self.controller.session if self.controller else None
        dims = session.dimensions if session else None
        self.send(PlayerState(
            state=session.state.value if session else "idle",
            current_time=p.current_time,
            duration=p.duration,
            paused=p.paused,
            muted=p.muted,
            volume=p.volume,
            fullscreen=p.fullscreen,
            orientation=orientation(*dims) if dims else None,
            is_placeholder=session.video.is_placeholder if session else False,
        ))

    # ── Host → Player ────────────────────────────────────────────────────

    def origin_allowed(self, origin: str) -> bool:
        return "*" in self.allowed_origins or origin in self.allowed_origins

    def receive(self, origin: str, data: Any) -> bool:
        """Handle one host message. Returns True when a command ran."""
        if not self.origin_allowed(origin):
            logger.warning(f"Ignoring host message from disallowed origin {origin!r}")
            return False

        cmd = parse_command(data)
        if cmd is None:
            logger.debug(f"Ignoring unrecognised host message: {data!r}")
            return False

        p = self.pipeline
        name = cmd.command
        if name == "play":
            p.play()
        elif name == "pause":
            p.pause()
        elif name == "toggle-play":
            if p.paused:
                p.play()
            else:
                p.pause()
        elif name == "mute":
            p.set_muted(True)
        elif name == "unmute":
            p.set_muted(False)
        elif name == "toggleMute":
            p.set_muted(not p.muted)
        elif name == "seek":
            if cmd.time is None:
                return False
            p.seek(self._clamp_time(cmd.time))
        elif name == "seekForward":
            p.seek(self._clamp_time(p.current_time + cmd.seconds))
        elif name == "seekBackward":
            p.seek(self._clamp_time(p.current_time - cmd.seconds))
        elif name == "enterFullscreen":
            p.set_fullscreen(True)
        elif name == "exitFullscreen":
            p.set_fullscreen(False)
        elif name == "toggleFullscreen":
            p.set_fullscreen(not p.fullscreen)
        elif name == "setVolume":
            if cmd.volume is None:
                return False
            p.set_volume(_clamp_volume(cmd.volume))
        elif name == "volumeUp":
            p.set_volume(_clamp_volume(p.volume + cmd.step))
        elif name == "volumeDown":
            p.set_volume(_clamp_volume(p.volume - cmd.step))
        elif name == "getState":
            self.state()
        return True

    def _clamp_time(self, value: float) -> float:
        value = max(0.0, value)
        duration = self.pipeline.duration
        if duration:
            value = min(value, duration)
        return value


def _clamp_volume(value: float) -> float:
    return min(1.0, max(0.0, value))
