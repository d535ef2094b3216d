"""
Snapie Watch Service — request-level orchestration for /api/watch and /api/embed.

Steps per request:
1. Parse ``v=owner/permlink`` (exactly two non-empty segments)
2. Look the record up in the collection for the requested kind
3. Resolve it to a placeholder or real chain
4. Shape the response payload (four URL slots, display defaults)
"""
from __future__ import annotations

import logging
from typing import Optional, Protocol, Sequence, Tuple, Union

from snapie.core.config import get_settings
from snapie.core.errors import NotFoundError, ResolutionError, ValidationError
from snapie.core.metrics import resolution_errors_total, resolutions_total
from snapie.models.video import CollectionKind, ResolvedSource, VideoRecord
from snapie.schemas.schemas import EmbedResponse, WatchResponse
from snapie.services.resolver.status_resolver import StatusResolver

logger = logging.getLogger(__name__)

URL_SLOTS = 4


class VideoStore(Protocol):
    async def find_video(self, kind: CollectionKind, owner: str, permlink: str) -> Optional[VideoRecord]: ...


def parse_video_id(value: Optional[str]) -> Tuple[str, str]:
    """Split ``owner/permlink``; anything else is a ValidationError."""
    if not value:
        raise ValidationError("Missing video parameter (v)")
    parts = value.split("/")
    if len(parts) != 2 or not all(p.strip() for p in parts):
        raise ValidationError("Invalid video format. Expected: owner/permlink")
    return parts[0], parts[1]


def url_slots(chain: Sequence[str]) -> Tuple[str, ...]:
    """Spread a chain over the fixed response slots, repeating the tail."""
    return tuple(chain[min(i, len(chain) - 1)] for i in range(URL_SLOTS))


class WatchService:
    def __init__(self, resolver: StatusResolver):
        self.resolver = resolver

    async def lookup(self, store: VideoStore, kind: CollectionKind, video_param: Optional[str]) -> Union[WatchResponse, EmbedResponse]:
        owner, permlink = parse_video_id(video_param)

        record = await store.find_video(kind, owner, permlink)
        if record is None:
            raise NotFoundError()

        try:
            source = self.resolver.resolve(record)
        except ResolutionError as e:
            resolution_errors_total.labels(collection=kind.value, error=type(e).__name__).inc()
            logger.info(f"Resolution failed for {kind.value} {record.video_id}: {e.message} (status={record.status!r})")
            raise

        resolutions_total.labels(
            collection=kind.value, kind=source.kind.value, category=source.category.value,
        ).inc()

        if kind == CollectionKind.EMBED:
            return self._embed_payload(record, source)
        return self._watch_payload(record, source)

    # ── Payloads ─────────────────────────────────────────────────────────

    def _common(self, record: VideoRecord, source: ResolvedSource) -> dict:
        primary, fb1, fb2, fb3 = url_slots(source.chain)
        return dict(
            owner=record.owner,
            permlink=record.permlink,
            title=record.title or record.video_id,
            status=record.status,
            is_placeholder=source.is_placeholder,
            video_url=primary,
            video_url_fallback1=fb1,
            video_url_fallback2=fb2,
            video_url_fallback3=fb3,
            duration=record.duration,
            views=record.views,
            # Placeholders never carry the real video's thumbnail.
            thumbnail=None if source.is_placeholder else self.resolver.thumbnail_url(record),
        )

    def _watch_payload(self, record: VideoRecord, source: ResolvedSource) -> WatchResponse:
        return WatchResponse(
            **self._common(record, source),
            description=record.description,
            tags=record.tags,
        )

    def _embed_payload(self, record: VideoRecord, source: ResolvedSource) -> EmbedResponse:
        return EmbedResponse(
            **self._common(record, source),
            short=record.short,
            created_at=record.created_at,
            updated_at=record.updated_at,
            encoding_progress=record.encoding_progress,
        )


watch_service = WatchService(StatusResolver.from_settings(get_settings()))
