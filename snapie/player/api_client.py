"""
Client for the Snapie resolution API, used by the player.

    client = SnapieClient("https://play.3speak.tv")
    video = await client.resolve("alice/my-video", kind="embed")
    controller = PlaybackController(pipeline, view_counter=client.record_view)
    controller.load(video)

or, with quality tiers read from the master playlist:

    session = await open_video(client, controller, "alice/my-video", loader=ManifestLoader())
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from snapie.core.config import get_settings
from snapie.player.controller import PlaybackController
from snapie.player.errors import NetworkError, ResolutionFailed
from snapie.player.manifest import ManifestLoader
from snapie.player.session import PlayableVideo, PlaybackSession

logger = logging.getLogger(__name__)

ENDPOINTS = {"legacy": "/api/watch", "embed": "/api/embed"}


class SnapieClient:
    def __init__(
        self,
        base_url: str,
        timeout: Optional[httpx.Timeout] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        settings = get_settings()
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout or httpx.Timeout(
            settings.gateway_timeout_seconds,
            connect=settings.gateway_connect_timeout_seconds,
        )
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout, transport=self._transport)

    async def resolve(self, video_param: str, kind: str = "legacy") -> PlayableVideo:
        """Fetch ``/api/watch`` or ``/api/embed`` and build a PlayableVideo."""
        if kind not in ENDPOINTS:
            raise ValueError(f"unknown video type {kind!r}")
        async with self._client() as client:
            response = await client.get(ENDPOINTS[kind], params={"v": video_param})
        payload = _json_or_empty(response)
        if response.status_code != 200:
            raise ResolutionFailed(
                response.status_code,
                payload.get("error") or "Failed to fetch video",
                payload.get("status"),
            )
        return PlayableVideo.from_payload(payload)

    async def record_view(self, video: PlayableVideo) -> bool:
        """POST /api/view. Failures are logged; a lost view never breaks playback."""
        body = {"owner": video.owner, "permlink": video.permlink, "type": video.collection}
        try:
            async with self._client() as client:
                response = await client.post("/api/view", json=body)
        except httpx.HTTPError as e:
            logger.error(f"Error incrementing view count for {video.owner}/{video.permlink}: {e}")
            return False

        payload = _json_or_empty(response)
        counted = response.status_code == 200 and bool(payload.get("counted"))
        if counted:
            logger.info("View count incremented")
        else:
            logger.info(f"View not counted: {payload.get('reason') or payload.get('error')}")
        return counted


def _json_or_empty(response: httpx.Response) -> Dict[str, Any]:
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


async def open_video(
    client: SnapieClient,
    controller: PlaybackController,
    video_param: str,
    kind: str = "legacy",
    loader: Optional[ManifestLoader] = None,
) -> PlaybackSession:
    """Resolve a video, read its quality tiers and hand it to the controller."""
    video = await client.resolve(video_param, kind=kind)
    tiers = []
    if loader is not None and not video.is_placeholder:
        try:
            position, tiers = await loader.load(video.chain)
            logger.debug(f"Read {len(tiers)} quality tiers from candidate {position}")
        except NetworkError as e:
            logger.warning(f"Could not read quality tiers for {video_param}: {e}")
    return controller.load(video, tiers=tiers)
