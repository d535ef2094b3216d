"""
Playback session state.

A ``PlaybackSession`` belongs to exactly one loaded video. Loading a new
video creates a new session with a new id; events tagged with an older
id are dropped by the controller.

    idle → loading → ready → playing ⇄ paused → ended
                       ↘        ↘         ↘
                        recovering (gateway failover)  →  playing | ready
    any state after loading → errored (terminal)
"""
from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple

from snapie.player.errors import PlaybackFatalError
from snapie.player.quality import QualityTier


class PlaybackState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    PLAYING = "playing"
    PAUSED = "paused"
    ENDED = "ended"
    RECOVERING = "recovering"
    ERRORED = "errored"


TRANSITIONS: Dict[PlaybackState, frozenset] = {
    PlaybackState.IDLE: frozenset({PlaybackState.LOADING}),
    PlaybackState.LOADING: frozenset({
        PlaybackState.READY, PlaybackState.RECOVERING, PlaybackState.ERRORED,
    }),
    PlaybackState.READY: frozenset({
        PlaybackState.PLAYING, PlaybackState.RECOVERING, PlaybackState.ERRORED,
    }),
    PlaybackState.PLAYING: frozenset({
        PlaybackState.PAUSED, PlaybackState.ENDED,
        PlaybackState.RECOVERING, PlaybackState.ERRORED,
    }),
    PlaybackState.PAUSED: frozenset({
        PlaybackState.PLAYING, PlaybackState.ENDED,
        PlaybackState.RECOVERING, PlaybackState.ERRORED,
    }),
    PlaybackState.ENDED: frozenset({
        PlaybackState.PLAYING, PlaybackState.RECOVERING, PlaybackState.ERRORED,
    }),
    PlaybackState.RECOVERING: frozenset({
        PlaybackState.READY, PlaybackState.PLAYING,
        PlaybackState.RECOVERING, PlaybackState.ERRORED,
    }),
    PlaybackState.ERRORED: frozenset(),
}


@dataclass(frozen=True)
class PlayableVideo:
    """What the player knows about a video after resolution."""

    owner: str
    permlink: str
    collection: str  # "legacy" | "embed"
    chain: Tuple[str, ...]
    status: Optional[str] = None
    is_placeholder: bool = False
    title: Optional[str] = None
    thumbnail: Optional[str] = None
    duration: float = 0
    views: int = 0

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "PlayableVideo":
        keys = ("videoUrl", "videoUrlFallback1", "videoUrlFallback2", "videoUrlFallback3")
        chain = tuple(payload[k] for k in keys if payload.get(k))
        if not chain:
            raise ValueError("payload carries no video URL")
        return cls(
            owner=payload["owner"],
            permlink=payload["permlink"],
            collection=payload.get("type", "legacy"),
            chain=chain,
            status=payload.get("status"),
            is_placeholder=bool(payload.get("isPlaceholder", False)),
            title=payload.get("title"),
            thumbnail=payload.get("thumbnail"),
            duration=payload.get("duration") or 0,
            views=payload.get("views") or 0,
        )


@dataclass
class PlaybackSession:
    video: PlayableVideo
    session_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    state: PlaybackState = PlaybackState.IDLE
    chain_position: int = 0
    stall_count: int = 0
    last_stall_at: Optional[float] = None
    tried_fallback: bool = False
    has_counted_view: bool = False
    tiers: List[QualityTier] = field(default_factory=list)
    quality_tier: Optional[int] = None
    permissive_abr: bool = False
    resume_position: float = 0.0
    resume_playing: bool = False
    dimensions: Optional[Tuple[int, int]] = None
    error: Optional[PlaybackFatalError] = None

    @property
    def chain(self) -> Tuple[str, ...]:
        return self.video.chain

    @property
    def current_source(self) -> str:
        return self.chain[self.chain_position]

    @property
    def has_next_candidate(self) -> bool:
        return self.chain_position + 1 < len(self.chain)

    def can_transition(self, target: PlaybackState) -> bool:
        return target in TRANSITIONS[self.state]
