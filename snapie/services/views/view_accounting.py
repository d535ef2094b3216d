"""
Snapie View Accounting Gate.

Only READY videos count. Placeholders (processing / failed / deleted)
and unclassifiable records are answered with ``counted=False`` and a
reason. Not counting is a normal outcome, not an error.

The store performs a single atomic increment, so concurrent sessions
never lose updates. At-most-once per playback session is enforced on
the client by the playback controller.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Protocol

from snapie.core.errors import NotFoundError
from snapie.core.metrics import view_requests_total
from snapie.models.video import CollectionKind, StatusCategory, VideoRecord
from snapie.services.resolver.status_classifier import classify

logger = logging.getLogger(__name__)


class ViewStore(Protocol):
    async def find_video(self, kind: CollectionKind, owner: str, permlink: str) -> Optional[VideoRecord]: ...

    async def increment_views(self, kind: CollectionKind, owner: str, permlink: str) -> bool: ...


@dataclass
class ViewOutcome:
    success: bool
    counted: bool
    reason: Optional[str] = None


def should_count(
    status: Optional[str],
    kind: CollectionKind = CollectionKind.LEGACY,
    has_manifest: bool = True,
) -> bool:
    return classify(status, kind, has_manifest) == StatusCategory.READY


class ViewAccountingGate:
    """Decides whether a play counts and performs the increment."""

    async def record_view(
        self, store: ViewStore, kind: CollectionKind, owner: str, permlink: str
    ) -> ViewOutcome:
        record = await store.find_video(kind, owner, permlink)
        if record is None:
            raise NotFoundError()

        if not should_count(record.status, record.kind, record.has_manifest):
            view_requests_total.labels(collection=kind.value, outcome="skipped").inc()
            return ViewOutcome(
                success=False,
                counted=False,
                reason=f"Views are not counted for videos with status '{record.status}'",
            )

        counted = await self.increment(store, kind, owner, permlink)
        if not counted:
            view_requests_total.labels(collection=kind.value, outcome="missed").inc()
            return ViewOutcome(success=False, counted=False, reason="View counter was not updated")

        view_requests_total.labels(collection=kind.value, outcome="counted").inc()
        return ViewOutcome(success=True, counted=True)

    async def increment(self, store: ViewStore, kind: CollectionKind, owner: str, permlink: str) -> bool:
        updated = await store.increment_views(kind, owner, permlink)
        if updated:
            logger.debug(f"View counted for {kind.value} {owner}/{permlink}")
        else:
            logger.warning(f"View increment matched nothing for {kind.value} {owner}/{permlink}")
        return updated


view_gate = ViewAccountingGate()
