"""
Snapie API — Video resolution and view-count routes.

  GET  /watch?v=owner/permlink  — legacy collection
  GET  /embed?v=owner/permlink  — embed collection
  POST /view                    — count a view (READY videos only)
"""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from snapie.core.database import VideoDatabase, get_video_store
from snapie.core.errors import ValidationError
from snapie.models.video import CollectionKind
from snapie.schemas.schemas import EmbedResponse, ErrorResponse, ViewRequest, ViewResponse, WatchResponse
from snapie.services.views.view_accounting import ViewAccountingGate, view_gate
from snapie.services.watch.watch_service import WatchService, watch_service

router = APIRouter(tags=["Videos"])

ERROR_RESPONSES = {400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}}


def get_watch_service() -> WatchService:
    return watch_service


def get_view_gate() -> ViewAccountingGate:
    return view_gate


@router.get("/watch", response_model=WatchResponse, responses=ERROR_RESPONSES)
async def watch_video(
    v: Optional[str] = Query(None, description="owner/permlink"),
    store: VideoDatabase = Depends(get_video_store),
    service: WatchService = Depends(get_watch_service),
):
    """Resolve a legacy video to its source chain."""
    return await service.lookup(store, CollectionKind.LEGACY, v)


@router.get("/embed", response_model=EmbedResponse, responses=ERROR_RESPONSES)
async def embed_video(
    v: Optional[str] = Query(None, description="owner/permlink"),
    store: VideoDatabase = Depends(get_video_store),
    service: WatchService = Depends(get_watch_service),
):
    """Resolve an embed video to its source chain (placeholder-aware)."""
    return await service.lookup(store, CollectionKind.EMBED, v)


@router.post(
    "/view", response_model=ViewResponse, response_model_exclude_none=True, responses=ERROR_RESPONSES,
)
async def count_view(
    data: ViewRequest,
    store: VideoDatabase = Depends(get_video_store),
    gate: ViewAccountingGate = Depends(get_view_gate),
):
    """Increment the view counter once for a playable video."""
    if not data.owner or not data.permlink or not data.type:
        raise ValidationError("Missing required fields")
    try:
        kind = CollectionKind(data.type)
    except ValueError:
        raise ValidationError('Invalid type. Must be "legacy" or "embed"')

    outcome = await gate.record_view(store, kind, data.owner, data.permlink)
    return ViewResponse(success=outcome.success, counted=outcome.counted, reason=outcome.reason)
