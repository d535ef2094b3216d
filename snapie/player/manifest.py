"""
HLS master playlist loading across the gateway chain.

Each gateway request carries a bounded timeout so an unresponsive gateway
turns into a NetworkError (and the next candidate is tried) instead of
hanging the player.
"""
from __future__ import annotations

import logging
import re
from typing import Dict, List, Optional, Sequence, Tuple
from urllib.parse import urljoin

import httpx

from snapie.core.config import get_settings
from snapie.player.errors import NetworkError
from snapie.player.quality import QualityTier, sort_tiers

logger = logging.getLogger(__name__)

STREAM_INF = "#EXT-X-STREAM-INF:"
_ATTR_RE = re.compile(r'([A-Z0-9-]+)=("[^"]*"|[^,]*)')


def _parse_attributes(line: str) -> Dict[str, str]:
    return {key: value.strip('"') for key, value in _ATTR_RE.findall(line)}


def parse_master_playlist(text: str, base_url: Optional[str] = None) -> List[QualityTier]:
    """
    Extract the variant streams of a master playlist.

    A media playlist (no ``#EXT-X-STREAM-INF``) yields no tiers.
    """
    lines = [line.strip() for line in text.splitlines()]
    if not lines or lines[0] != "#EXTM3U":
        raise ValueError("not an HLS playlist")

    tiers: List[QualityTier] = []
    pending: Optional[Dict[str, str]] = None
    for line in lines[1:]:
        if line.startswith(STREAM_INF):
            pending = _parse_attributes(line[len(STREAM_INF):])
        elif pending is not None and line and not line.startswith("#"):
            width = height = None
            if "RESOLUTION" in pending:
                w, _, h = pending["RESOLUTION"].partition("x")
                width, height = int(w), int(h)
            bitrate = int(pending.get("BANDWIDTH") or pending.get("AVERAGE-BANDWIDTH") or 0)
            uri = urljoin(base_url, line) if base_url else line
            tiers.append(QualityTier(bitrate=bitrate, width=width, height=height, uri=uri))
            pending = None
    return sort_tiers(tiers)


class ManifestLoader:
    """Fetches the master playlist from the first gateway that answers."""

    def __init__(self, timeout: Optional[httpx.Timeout] = None, transport: Optional[httpx.AsyncBaseTransport] = None):
        settings = get_settings()
        self.timeout = timeout or httpx.Timeout(
            settings.gateway_timeout_seconds,
            connect=settings.gateway_connect_timeout_seconds,
        )
        self._transport = transport

    async def load(self, chain: Sequence[str], start: int = 0) -> Tuple[int, List[QualityTier]]:
        """Return ``(chain_position, tiers)`` for the first candidate that works."""
        last_error: Optional[Exception] = None
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            for position in range(start, len(chain)):
                url = chain[position]
                try:
                    response = await client.get(url)
                    response.raise_for_status()
                    return position, parse_master_playlist(response.text, base_url=url)
                except httpx.TimeoutException as e:
                    logger.warning(f"Gateway timed out for {url}: {e}")
                    last_error = e
                except httpx.HTTPError as e:
                    logger.warning(f"Gateway request failed for {url}: {e}")
                    last_error = e
                except ValueError as e:
                    logger.warning(f"Gateway returned an invalid playlist for {url}: {e}")
                    last_error = e
        raise NetworkError(f"all gateways failed: {last_error}")
