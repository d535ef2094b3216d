"""
Host ↔ player message protocol.

Player → host messages are a closed set of tagged models; every model
serialises to ``{"type": "3speak-...", <camelCase fields>}``.
Host → player messages are ``{"command": <name>, ...}``; names outside
``COMMANDS`` are ignored.
"""
from __future__ import annotations

from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def orientation(width: int, height: int) -> str:
    if height > width:
        return "vertical"
    if height == width:
        return "square"
    return "horizontal"


class HostMessage(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    type: str

    def to_message(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


class PlayerReady(HostMessage):
    type: Literal["3speak-player-ready"] = "3speak-player-ready"
    is_vertical: bool
    width: int
    height: int
    aspect_ratio: float
    orientation: str

    @classmethod
    def from_dimensions(cls, width: int, height: int) -> "PlayerReady":
        return cls(
            is_vertical=height > width,
            width=width,
            height=height,
            aspect_ratio=round(width / height, 4),
            orientation=orientation(width, height),
        )


class TimeUpdate(HostMessage):
    type: Literal["3speak-timeupdate"] = "3speak-timeupdate"
    current_time: float
    duration: float
    paused: bool
    muted: bool
    volume: float


class DurationChange(HostMessage):
    type: Literal["3speak-durationchange"] = "3speak-durationchange"
    duration: float


class Play(HostMessage):
    type: Literal["3speak-play"] = "3speak-play"


class Pause(HostMessage):
    type: Literal["3speak-pause"] = "3speak-pause"


class Ended(HostMessage):
    type: Literal["3speak-ended"] = "3speak-ended"


class PlayerState(HostMessage):
    type: Literal["3speak-state"] = "3speak-state"
    state: str
    current_time: float
    duration: float
    paused: bool
    muted: bool
    volume: float
    fullscreen: bool
    orientation: Optional[str] = None
    is_placeholder: bool = False


class PlayerError(HostMessage):
    type: Literal["3speak-error"] = "3speak-error"
    classification: str
    message: str


# ── Host → Player ────────────────────────────────────────────────────────

COMMANDS = frozenset({
    "play", "pause", "toggle-play",
    "mute", "unmute", "toggleMute",
    "seek", "seekForward", "seekBackward",
    "enterFullscreen", "exitFullscreen", "toggleFullscreen",
    "setVolume", "volumeUp", "volumeDown",
    "getState",
})


class HostCommand(BaseModel):
    model_config = ConfigDict(extra="ignore")

    command: str
    time: Optional[float] = None
    seconds: float = Field(10.0, ge=0)
    volume: Optional[float] = None
    step: float = Field(0.1, ge=0)


def parse_command(data: Any) -> Optional[HostCommand]:
    """Parse a host message; anything unrecognised or malformed gives None."""
    if not isinstance(data, dict) or data.get("command") not in COMMANDS:
        return None
    try:
        return HostCommand.model_validate(data)
    except ValueError:
        return None
