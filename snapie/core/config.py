"""
Snapie Core Settings — IPFS video resolution + playback resilience.

Environment variables keep the names used by the deployment
(MONGODB_URI, MONGODB_COLLECTION_LEGACY, PLACEHOLDER_DELETED_CID, ...).
Gateways are listed CDN-first; the first entry is the primary gateway.
"""
from __future__ import annotations

from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8",
        case_sensitive=False, extra="ignore",
    )

    # ── App ──────────────────────────────────────────────────────────────
    app_name: str = "Snapie"
    app_version: str = "1.0.0"
    log_level: str = "INFO"
    api_prefix: str = "/api"
    port: int = 3005
    cors_origins: List[str] = ["*"]

    # ── MongoDB ──────────────────────────────────────────────────────────
    mongodb_uri: str = "mongodb://localhost:27017"
    mongodb_database: str = "threespeak"
    mongodb_collection_legacy: str = "videos"
    mongodb_collection_new: str = "embed-video"
    mongodb_timeout_ms: int = 10000

    # ── IPFS Gateways (priority order, CDN first) ────────────────────────
    ipfs_gateways: List[str] = [
        "https://ipfs-3speak.b-cdn.net/ipfs",
        "https://ipfs.3speak.tv/ipfs",
        "https://ipfs.io/ipfs",
        "https://dweb.link/ipfs",
    ]
    chain_length: int = 4
    manifest_filename: str = "manifest.m3u8"
    gateway_timeout_seconds: float = 30.0
    gateway_connect_timeout_seconds: float = 5.0

    # ── Placeholders (CID, ipfs:// URI or absolute URL) ──────────────────
    placeholder_processing_cid: Optional[str] = None
    placeholder_failed_cid: Optional[str] = None
    placeholder_deleted_cid: Optional[str] = None

    # ── Player ───────────────────────────────────────────────────────────
    stall_window_seconds: float = 10.0
    stall_failover_threshold: int = 3
    permissive_bandwidth_factor: float = 1.5
    timeupdate_interval_seconds: float = 0.25
    host_allowed_origins: List[str] = ["*"]


@lru_cache()
def get_settings() -> Settings:
    return Settings()
