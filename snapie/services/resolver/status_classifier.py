"""
Snapie Status Classifier.

The only place raw status literals live. Both collections share one
table; legacy aliases (``uploading``, ``failed``, ``self_deleted``...)
are folded into the same categories as their modern names.
"""
from __future__ import annotations

from typing import Dict, Optional

from snapie.models.video import CollectionKind, StatusCategory

_STATUS_TABLE: Dict[StatusCategory, frozenset] = {
    StatusCategory.DELETED: frozenset({
        "deleted", "self_deleted", "removed", "banned",
    }),
    StatusCategory.PROCESSING: frozenset({
        "uploading", "uploaded", "processing", "finalizing", "queued",
        "encoding", "encoding_queued", "encoding_preparing", "encoding_ipfs",
        "ipfs_pinning", "pinning",
    }),
    StatusCategory.FAILED: frozenset({
        "failed", "encoding_failed", "ipfs_pinning_failed",
        "pinning_failed", "upload_failed",
    }),
    StatusCategory.READY: frozenset({
        "published", "scheduled", "publish_manual", "publish_later",
        "manual", "later",
    }),
}

_LOOKUP: Dict[str, StatusCategory] = {
    status: category
    for category, statuses in _STATUS_TABLE.items()
    for status in statuses
}


def classify(
    status: Optional[str],
    kind: CollectionKind = CollectionKind.LEGACY,
    has_manifest: bool = True,
) -> StatusCategory:
    """
    Map a raw status string to its category. Total: garbage → UNKNOWN.

    An embed record claiming to be published without a manifest is not
    playable, so it is demoted to UNKNOWN.
    """
    if not isinstance(status, str):
        return StatusCategory.UNKNOWN
    category = _LOOKUP.get(status.strip().lower(), StatusCategory.UNKNOWN)
    if category == StatusCategory.READY and kind == CollectionKind.EMBED and not has_manifest:
        return StatusCategory.UNKNOWN
    return category
