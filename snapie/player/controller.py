"""
Snapie Playback Resilience Controller.

Supervises one media pipeline for the lifetime of a playback session:

  - assigns the resolved chain's first candidate on load
  - measures stall density (stalls closer together than the window)
    and fails over to the next gateway after ``stall_threshold`` of them,
    resuming at the exact position captured before the switch
  - recovers from one decode error per session by reloading the next
    candidate from the start; a second one is fatal (codec)
  - picks the initial quality rung and relaxes the bandwidth rule once
    playback has started
  - counts the view exactly once, on the first transition into playing
  - forwards state changes to the embedding host

Single-threaded and event driven: every public ``on_*`` method is a
reaction to one pipeline event, processed in arrival order. Events
tagged with a stale ``session_id`` are dropped.
"""
from __future__ import annotations

import asyncio
import inspect
import logging
import time
from typing import Any, Callable, List, Optional, Protocol, Set

from snapie.core.config import get_settings
from snapie.models.video import CollectionKind
from snapie.player.errors import (
    DecodeError,
    ErrorClass,
    NetworkError,
    PlaybackError,
    PlaybackFatalError,
)
from snapie.player.host_bridge import HostBridge
from snapie.player.quality import QualityTier, initial_tier, sort_tiers, tier_for_bandwidth
from snapie.player.session import PlayableVideo, PlaybackSession, PlaybackState
from snapie.services.views.view_accounting import should_count

logger = logging.getLogger(__name__)


class MediaPipeline(Protocol):
    """The opaque decode/fetch subsystem (video.js + VHS in the browser)."""

    current_time: float
    duration: float
    paused: bool
    muted: bool
    volume: float
    fullscreen: bool

    def load(self, url: str, start_time: float = 0.0) -> None: ...

    def play(self) -> None: ...

    def pause(self) -> None: ...

    def seek(self, position: float) -> None: ...

    def set_quality(self, tier: int) -> None: ...

    def set_muted(self, muted: bool) -> None: ...

    def set_volume(self, volume: float) -> None: ...

    def set_fullscreen(self, fullscreen: bool) -> None: ...


ViewCounter = Callable[[PlayableVideo], Any]


class PlaybackController:
    def __init__(
        self,
        pipeline: MediaPipeline,
        view_counter: Optional[ViewCounter] = None,
        host: Optional[HostBridge] = None,
        clock: Callable[[], float] = time.monotonic,
        stall_window: Optional[float] = None,
        stall_threshold: Optional[int] = None,
        bandwidth_factor: Optional[float] = None,
        on_fatal: Optional[Callable[[PlaybackFatalError], None]] = None,
    ):
        settings = get_settings()
        self.pipeline = pipeline
        self.host = host
        self._view_counter = view_counter
        self._clock = clock
        self._on_fatal = on_fatal
        self.stall_window = stall_window if stall_window is not None else settings.stall_window_seconds
        self.stall_threshold = stall_threshold if stall_threshold is not None else settings.stall_failover_threshold
        self.bandwidth_factor = (
            bandwidth_factor if bandwidth_factor is not None else settings.permissive_bandwidth_factor
        )
        self.session: Optional[PlaybackSession] = None
        self._view_tasks: Set[asyncio.Task] = set()
        if host is not None:
            host.attach(self)

    @property
    def state(self) -> PlaybackState:
        return self.session.state if self.session else PlaybackState.IDLE

    # ── Session Lifecycle ────────────────────────────────────────────────

    def load(self, video: PlayableVideo, tiers: Optional[List[QualityTier]] = None) -> PlaybackSession:
        """Start a fresh session; the previous one's guards die with it."""
        if self.session is not None:
            logger.debug(f"Discarding session {self.session.session_id} ({self.session.video.permlink})")

        session = PlaybackSession(video=video, tiers=sort_tiers(tiers or []))
        self.session = session
        self._transition(session, PlaybackState.LOADING)
        self.pipeline.load(session.current_source)
        logger.info(
            f"Loading {video.collection} {video.owner}/{video.permlink} "
            f"from {session.current_source} (placeholder={video.is_placeholder})"
        )
        return session

    def _current(self, session_id: Optional[str]) -> Optional[PlaybackSession]:
        session = self.session
        if session is None:
            return None
        if session_id is not None and session_id != session.session_id:
            logger.debug(f"Dropping event for stale session {session_id}")
            return None
        if session.state == PlaybackState.ERRORED:
            return None
        return session

    def _transition(self, session: PlaybackSession, target: PlaybackState) -> bool:
        if not session.can_transition(target):
            logger.debug(f"Ignoring transition {session.state.value} → {target.value}")
            return False
        session.state = target
        return True

    # ── Pipeline Events ──────────────────────────────────────────────────

    def on_metadata(self, tiers: Optional[List[QualityTier]] = None, session_id: Optional[str] = None):
        session = self._current(session_id)
        if session is None:
            return
        if tiers is not None:
            session.tiers = sort_tiers(tiers)

        if session.state == PlaybackState.LOADING:
            self._transition(session, PlaybackState.READY)
            session.quality_tier = initial_tier(session.tiers)
            if session.quality_tier is not None:
                self.pipeline.set_quality(session.quality_tier)
        elif session.state == PlaybackState.RECOVERING:
            if session.quality_tier is not None:
                self.pipeline.set_quality(session.quality_tier)
            if session.resume_playing:
                self.pipeline.play()
            else:
                self._transition(session, PlaybackState.READY)

    def on_play(self, session_id: Optional[str] = None):
        session = self._current(session_id)
        if session is None or session.state == PlaybackState.PLAYING:
            return
        if not self._transition(session, PlaybackState.PLAYING):
            return

        session.permissive_abr = True
        self._count_view_once(session)
        if self.host:
            self.host.play()

    def on_pause(self, session_id: Optional[str] = None):
        session = self._current(session_id)
        if session is None:
            return
        if self._transition(session, PlaybackState.PAUSED) and self.host:
            self.host.pause()

    def on_ended(self, session_id: Optional[str] = None):
        session = self._current(session_id)
        if session is None:
            return
        if self._transition(session, PlaybackState.ENDED) and self.host:
            self.host.ended()

    def on_time_update(self, session_id: Optional[str] = None):
        if self._current(session_id) is not None and self.host:
            self.host.timeupdate()

    def on_duration_change(self, duration: float, session_id: Optional[str] = None):
        if self._current(session_id) is not None and self.host:
            self.host.duration_change(duration)

    def on_dimensions(self, width: int, height: int, session_id: Optional[str] = None):
        session = self._current(session_id)
        if session is None or not width or not height:
            return
        if session.dimensions == (width, height):
            return
        session.dimensions = (width, height)
        if self.host:
            self.host.dimensions(width, height)

    def on_bandwidth(self, throughput: float, session_id: Optional[str] = None):
        session = self._current(session_id)
        if session is None or not session.tiers:
            return
        factor = self.bandwidth_factor if session.permissive_abr else 1.0
        tier = tier_for_bandwidth(session.tiers, throughput, factor)
        if tier != session.quality_tier:
            logger.debug(f"Quality rung {session.quality_tier} → {tier} (throughput={throughput:.0f})")
            session.quality_tier = tier
            self.pipeline.set_quality(tier)

    def on_stall(self, session_id: Optional[str] = None):
        session = self._current(session_id)
        if session is None or session.state != PlaybackState.PLAYING:
            return

        now = self._clock()
        if session.last_stall_at is not None and now - session.last_stall_at < self.stall_window:
            session.stall_count += 1
        else:
            session.stall_count = 1
        session.last_stall_at = now

        if session.stall_count >= self.stall_threshold:
            session.stall_count = 0
            self._failover(session)

    def on_error(self, error: PlaybackError, session_id: Optional[str] = None):
        session = self._current(session_id)
        if session is None:
            return

        if isinstance(error, DecodeError):
            self._decode_recovery(session, error)
        elif isinstance(error, NetworkError) and session.state != PlaybackState.PLAYING:
            # Stall density is only measured while playing.
            logger.warning(f"Network error on {session.current_source}: {error}")
            self._failover(session)
        else:
            self.on_stall(session_id=session.session_id)

    # ── Recovery ─────────────────────────────────────────────────────────

    def _failover(self, session: PlaybackSession):
        """Advance to the next gateway candidate, keeping the playback position."""
        if not session.has_next_candidate:
            logger.error(f"Gateway chain exhausted on last candidate {session.current_source}")
            self._fail(session, ErrorClass.NETWORK, "failover exhausted the gateway chain")
            return

        if session.state == PlaybackState.RECOVERING:
            position = session.resume_position
        else:
            position = self.pipeline.current_time
            session.resume_playing = session.state == PlaybackState.PLAYING
        session.chain_position += 1
        session.resume_position = position
        self._transition(session, PlaybackState.RECOVERING)
        logger.warning(
            f"Failing over to candidate {session.chain_position} "
            f"({session.current_source}) at {position:.2f}s"
        )
        self.pipeline.load(session.current_source, start_time=position)

    def _decode_recovery(self, session: PlaybackSession, error: DecodeError):
        if session.tried_fallback or not session.has_next_candidate:
            logger.error(f"Decode error not recoverable on {session.current_source}: {error}")
            self._fail(session, ErrorClass.CODEC, str(error))
            return

        if session.state != PlaybackState.RECOVERING:
            session.resume_playing = session.state == PlaybackState.PLAYING
        session.tried_fallback = True
        session.chain_position += 1
        session.resume_position = 0.0
        self._transition(session, PlaybackState.RECOVERING)
        logger.warning(f"Decode error; reloading from candidate {session.chain_position} ({session.current_source})")
        self.pipeline.load(session.current_source, start_time=0.0)

    def _fail(self, session: PlaybackSession, classification: ErrorClass, detail: str):
        fatal = PlaybackFatalError(classification, detail)
        session.error = fatal
        self._transition(session, PlaybackState.ERRORED)
        if self.host:
            self.host.error(classification.value, fatal.message)
        if self._on_fatal:
            self._on_fatal(fatal)

    # ── View Accounting ──────────────────────────────────────────────────

    def _count_view_once(self, session: PlaybackSession):
        if session.has_counted_view:
            return
        session.has_counted_view = True

        video = session.video
        if video.is_placeholder or not should_count(video.status, CollectionKind(video.collection)):
            logger.debug(f"Not counting view for status {video.status!r}")
            return
        if self._view_counter is None:
            return

        result = self._view_counter(video)
        if not inspect.isawaitable(result):
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            if inspect.iscoroutine(result):
                result.close()
            session.has_counted_view = False
            raise RuntimeError("async view counter needs a running event loop") from None

        task = asyncio.ensure_future(result, loop=loop)
        self._view_tasks.add(task)
        task.add_done_callback(self._view_task_done)

    def _view_task_done(self, task: "asyncio.Future"):
        self._view_tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(f"View counter failed: {exc!r}")
