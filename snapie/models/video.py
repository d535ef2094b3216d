"""
Snapie Video Models — the two document shapes read from MongoDB.

Legacy and embed collections were written by different generations of
the upload pipeline. Both are normalised into a single ``VideoRecord``
here; only field access differs, never status semantics.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional


class CollectionKind(str, Enum):
    LEGACY = "legacy"
    EMBED = "embed"


class StatusCategory(str, Enum):
    DELETED = "deleted"
    PROCESSING = "processing"
    FAILED = "failed"
    READY = "ready"
    UNKNOWN = "unknown"


class SourceKind(str, Enum):
    PLACEHOLDER = "placeholder"
    REAL = "real"


@dataclass
class VideoRecord:
    owner: str
    permlink: str
    kind: CollectionKind
    status: Optional[str] = None
    source_uri: Optional[str] = None
    thumbnail_uri: Optional[str] = None
    title: Optional[str] = None
    description: str = ""
    tags: List[str] = field(default_factory=list)
    duration: float = 0
    views: int = 0
    has_manifest: bool = True
    # embed only
    short: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    encoding_progress: float = 0

    @property
    def video_id(self) -> str:
        return f"{self.owner}/{self.permlink}"

    # ── Document Mapping ─────────────────────────────────────────────────

    @classmethod
    def from_legacy(cls, doc: Mapping[str, Any]) -> "VideoRecord":
        return cls(
            owner=doc["owner"],
            permlink=doc["permlink"],
            kind=CollectionKind.LEGACY,
            status=doc.get("status"),
            source_uri=doc.get("video_v2") or None,
            thumbnail_uri=doc.get("thumbnail") or None,
            title=doc.get("title") or "Untitled Video",
            description=doc.get("description") or "",
            tags=list(doc.get("tags_v2") or doc.get("tags") or []),
            duration=doc.get("duration") or 0,
            views=doc.get("views") or 0,
        )

    @classmethod
    def from_embed(cls, doc: Mapping[str, Any], manifest_filename: str = "manifest.m3u8") -> "VideoRecord":
        manifest_cid = doc.get("manifest_cid")
        owner, permlink = doc["owner"], doc["permlink"]
        return cls(
            owner=owner,
            permlink=permlink,
            kind=CollectionKind.EMBED,
            status=doc.get("status"),
            source_uri=f"ipfs://{manifest_cid}/{manifest_filename}" if manifest_cid else None,
            thumbnail_uri=doc.get("thumbnail_url") or None,
            title=doc.get("originalFilename") or f"{owner}/{permlink}",
            duration=doc.get("duration") or 0,
            views=doc.get("views") or 0,
            has_manifest=bool(manifest_cid),
            short=bool(doc.get("short", False)),
            created_at=doc.get("createdAt"),
            updated_at=doc.get("updatedAt"),
            encoding_progress=doc.get("encodingProgress") or 0,
        )

    @classmethod
    def from_document(cls, kind: CollectionKind, doc: Mapping[str, Any], **kwargs) -> "VideoRecord":
        if kind == CollectionKind.EMBED:
            return cls.from_embed(doc, **kwargs)
        return cls.from_legacy(doc)


@dataclass(frozen=True)
class ResolvedSource:
    """Output of the status resolver. Built per request, never cached."""

    kind: SourceKind
    chain: tuple
    status: Optional[str]
    category: StatusCategory

    def __post_init__(self):
        if not self.chain:
            raise ValueError("ResolvedSource chain must not be empty")

    @property
    def is_placeholder(self) -> bool:
        return self.kind == SourceKind.PLACEHOLDER
