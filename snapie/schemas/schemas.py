"""
Snapie API Schemas — Pydantic v2 models for request/response validation.

Wire format is camelCase (``videoUrl``, ``isPlaceholder``) to match the
player front-end; Python attributes stay snake_case.
"""
from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ═══════════════════════════════════════════════════════════════════════
# Watch / Embed
# ═══════════════════════════════════════════════════════════════════════

class VideoResponse(CamelModel):
    success: bool = True
    type: str
    owner: str
    permlink: str
    title: str
    status: Optional[str] = None
    is_placeholder: bool
    thumbnail: Optional[str] = None
    video_url: str
    video_url_fallback1: str
    video_url_fallback2: str
    video_url_fallback3: str
    duration: float = 0
    views: int = 0


class WatchResponse(VideoResponse):
    type: str = "legacy"
    description: str = ""
    tags: List[str] = []


class EmbedResponse(VideoResponse):
    type: str = "embed"
    short: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    encoding_progress: float = 0


# ═══════════════════════════════════════════════════════════════════════
# Views
# ═══════════════════════════════════════════════════════════════════════

class ViewRequest(BaseModel):
    """All fields optional so missing ones produce the API's own 400 message."""

    owner: Optional[str] = None
    permlink: Optional[str] = None
    type: Optional[str] = None


class ViewResponse(BaseModel):
    success: bool
    counted: bool
    reason: Optional[str] = None


class ErrorResponse(BaseModel):
    error: str
    status: Optional[str] = None
