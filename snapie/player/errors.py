"""
Snapie player errors.

Pipeline error events are classified as stall, network or decode. Only
two outcomes ever reach the viewer, and they are kept distinct:
  CODEC:   the content itself is broken (retrying elsewhere failed)
  NETWORK: every gateway in the chain was exhausted
"""
from __future__ import annotations

from enum import Enum
from typing import Optional


class ErrorClass(str, Enum):
    CODEC = "codec"
    NETWORK = "network"


FATAL_MESSAGES = {
    ErrorClass.CODEC: (
        "This video could not be decoded. The file may be corrupted "
        "or encoded with an unsupported codec."
    ),
    ErrorClass.NETWORK: (
        "None of the video gateways could deliver this video. "
        "Please try again later."
    ),
}


class PlaybackError(Exception):
    """An error event reported by the media pipeline."""


class StallError(PlaybackError):
    """Buffer ran dry; recovered through stall accounting."""


class NetworkError(PlaybackError):
    """Fetch failed or timed out; counted like a stall."""


class DecodeError(PlaybackError):
    """Media could not be decoded; recovered at most once per session."""


class PlaybackFatalError(Exception):
    """Terminal, viewer-visible failure of a playback session."""

    def __init__(self, classification: ErrorClass, detail: Optional[str] = None):
        self.classification = classification
        self.message = FATAL_MESSAGES[classification]
        self.detail = detail
        super().__init__(self.message)


class ResolutionFailed(Exception):
    """The resolution API answered with a non-2xx status."""

    def __init__(self, status_code: int, error: str, status: Optional[str] = None):
        self.status_code = status_code
        self.error = error
        self.status = status
        super().__init__(f"{status_code}: {error}")
