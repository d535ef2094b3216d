"""
Snapie Document Store Layer — MongoDB async driver.

Two collections hold video documents keyed by (owner, permlink):
  legacy  → settings.mongodb_collection_legacy  (video_v2, thumbnail, tags_v2)
  embed   → settings.mongodb_collection_new     (manifest_cid, thumbnail_url)

Documents are written by the upload/encoding pipeline. This service only
reads them and bumps ``views`` with an atomic ``$inc``.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from pymongo import AsyncMongoClient
from pymongo.errors import PyMongoError

from snapie.core.config import get_settings
from snapie.models.video import CollectionKind, VideoRecord

logger = logging.getLogger(__name__)
settings = get_settings()


class VideoDatabase:
    """Async MongoDB wrapper exposing the two video collections."""

    def __init__(self):
        self._client: Optional[AsyncMongoClient] = None

    async def connect(self):
        """Create the client and verify the server answers."""
        if self._client is not None:
            return
        self._client = AsyncMongoClient(
            settings.mongodb_uri,
            serverSelectionTimeoutMS=settings.mongodb_timeout_ms,
        )
        try:
            await self._client.admin.command("ping")
            logger.info("MongoDB connected", extra={"database": settings.mongodb_database})
        except PyMongoError:
            logger.error("MongoDB not reachable; lookups will fail until it recovers")

    async def close(self):
        if self._client is not None:
            await self._client.close()
            self._client = None
            logger.info("MongoDB connection closed")

    def _collection(self, kind: CollectionKind):
        if self._client is None:
            raise RuntimeError("Database not connected. Call connect() first.")
        name = (
            settings.mongodb_collection_new
            if kind == CollectionKind.EMBED
            else settings.mongodb_collection_legacy
        )
        return self._client[settings.mongodb_database][name]

    # ── Queries ──────────────────────────────────────────────────────────

    async def find_video(self, kind: CollectionKind, owner: str, permlink: str) -> Optional[VideoRecord]:
        doc: Optional[Dict[str, Any]] = await self._collection(kind).find_one(
            {"owner": owner, "permlink": permlink}
        )
        if doc is None:
            return None
        return VideoRecord.from_document(kind, doc, **_mapping_options(kind))

    async def increment_views(self, kind: CollectionKind, owner: str, permlink: str) -> bool:
        """Atomic +1. A missing ``views`` field is created by ``$inc``."""
        result = await self._collection(kind).update_one(
            {"owner": owner, "permlink": permlink},
            {"$inc": {"views": 1}},
        )
        return result.modified_count > 0

    # ── Health ───────────────────────────────────────────────────────────

    async def health_check(self) -> Dict[str, Any]:
        try:
            if self._client is None:
                return {"status": "degraded", "mongodb": "not connected"}
            await self._client.admin.command("ping")
            return {"status": "healthy", "mongodb": "connected"}
        except PyMongoError as e:
            return {"status": "degraded", "mongodb": str(e)}


def _mapping_options(kind: CollectionKind) -> Dict[str, Any]:
    if kind == CollectionKind.EMBED:
        return {"manifest_filename": settings.manifest_filename}
    return {}


# Module-level singleton
video_db = VideoDatabase()


def get_video_store() -> VideoDatabase:
    """FastAPI dependency; overridden in tests."""
    return video_db
