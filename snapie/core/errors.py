"""
Snapie error taxonomy.

Every server-side failure that reaches a client maps to a stable
``{"error": ..., "status": ...}`` body. ``status`` echoes the raw record
status when one is known.
"""
from __future__ import annotations

from typing import Any, Dict, Optional


class SnapieError(Exception):
    """Base class for errors surfaced through the HTTP API."""

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None, raw_status: Optional[str] = None):
        self.message = message or self.default_message
        self.raw_status = raw_status
        super().__init__(self.message)

    def to_body(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"error": self.message}
        if self.raw_status is not None:
            body["status"] = self.raw_status
        return body


class ValidationError(SnapieError):
    """Missing or malformed identifier / request body."""

    status_code = 400
    default_message = "Invalid request"


class NotFoundError(SnapieError):
    status_code = 404
    default_message = "Video not found"


# ── Resolution ───────────────────────────────────────────────────────────

class ResolutionError(SnapieError):
    """A record exists but cannot be turned into a source chain."""


class ConfigurationError(ResolutionError):
    """A placeholder (or gateway) needed for this record is not configured."""

    status_code = 400
    default_message = "Video not ready"

    def __init__(self, category: str, raw_status: Optional[str] = None):
        self.category = category
        super().__init__(
            f"Video not ready: no {category} placeholder configured",
            raw_status=raw_status,
        )


class NotReadyError(ResolutionError):
    status_code = 404
    default_message = "Video not ready"


class SourceUnavailableError(ResolutionError):
    status_code = 404
    default_message = "Video source not available"
