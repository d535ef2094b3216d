"""
Snapie Status Resolver — record lifecycle status → playable source chain.

    DELETED / PROCESSING / FAILED → placeholder chain (all slots equal)
    READY                         → real chain across every gateway
    UNKNOWN                       → NotReadyError

Resolution is pure: the same record and configuration always give the
same result, and nothing is written or counted here.
"""
from __future__ import annotations

import logging
from typing import Dict, Optional, Sequence

from snapie.core.config import Settings
from snapie.core.errors import ConfigurationError, NotReadyError, SourceUnavailableError
from snapie.models.video import ResolvedSource, SourceKind, StatusCategory, VideoRecord
from snapie.services.resolver.gateway_chain import build_chain, gateway_url
from snapie.services.resolver.status_classifier import classify

logger = logging.getLogger(__name__)

PLACEHOLDER_CATEGORIES = (
    StatusCategory.DELETED,
    StatusCategory.PROCESSING,
    StatusCategory.FAILED,
)


class StatusResolver:
    """Resolves ``VideoRecord`` instances against a static gateway/placeholder config."""

    def __init__(
        self,
        gateways: Sequence[str],
        chain_length: int = 4,
        placeholders: Optional[Dict[StatusCategory, Optional[str]]] = None,
    ):
        if not gateways:
            raise ValueError("at least one gateway is required")
        self.gateways = tuple(gateways)
        self.chain_length = chain_length
        self.placeholders = dict(placeholders or {})

    @classmethod
    def from_settings(cls, settings: Settings) -> "StatusResolver":
        return cls(
            gateways=settings.ipfs_gateways,
            chain_length=settings.chain_length,
            placeholders={
                StatusCategory.PROCESSING: settings.placeholder_processing_cid,
                StatusCategory.FAILED: settings.placeholder_failed_cid,
                StatusCategory.DELETED: settings.placeholder_deleted_cid,
            },
        )

    @property
    def primary_gateway(self) -> str:
        return self.gateways[0]

    # ── Resolution ───────────────────────────────────────────────────────

    def resolve(self, record: VideoRecord) -> ResolvedSource:
        category = classify(record.status)

        if category in PLACEHOLDER_CATEGORIES:
            return self._placeholder(category, record.status)

        if category == StatusCategory.READY:
            # Covers embed records marked published with no manifest_cid.
            if not record.source_uri:
                raise SourceUnavailableError(raw_status=record.status)
            chain = build_chain(record.source_uri, self.gateways, self.chain_length)
            return ResolvedSource(
                kind=SourceKind.REAL,
                chain=tuple(chain),
                status=record.status,
                category=category,
            )

        raise NotReadyError(raw_status=record.status)

    def _placeholder(self, category: StatusCategory, raw_status: Optional[str]) -> ResolvedSource:
        configured = self.placeholders.get(category)
        if not configured:
            logger.error(
                f"No placeholder configured for category={category.value} "
                f"(status={raw_status!r})"
            )
            raise ConfigurationError(category.value, raw_status=raw_status)

        url = gateway_url(configured, self.primary_gateway)
        return ResolvedSource(
            kind=SourceKind.PLACEHOLDER,
            chain=tuple([url] * self.chain_length),
            status=raw_status,
            category=category,
        )

    def thumbnail_url(self, record: VideoRecord) -> Optional[str]:
        """Thumbnails always go through the primary gateway."""
        if not record.thumbnail_uri:
            return None
        return gateway_url(record.thumbnail_uri, self.primary_gateway)
