"""
Snapie Gateway Chain Builder.

Turns a content URI into a fixed-length list of fetchable URLs, one per
configured gateway, highest priority first:

    ipfs://QmCID/manifest.m3u8
      → https://cdn/ipfs/QmCID/manifest.m3u8
      → https://gw2/ipfs/QmCID/manifest.m3u8
      → ...

Plain HTTP(S) URLs are passed through; every slot then holds the same URL.
Consumers index the chain positionally, so entries are not guaranteed
to be distinct.
"""
from __future__ import annotations

from typing import List, Sequence

IPFS_SCHEME = "ipfs://"


def is_content_uri(uri: str) -> bool:
    return uri.lower().startswith(IPFS_SCHEME)


def is_http_url(uri: str) -> bool:
    lowered = uri.lower()
    return lowered.startswith("http://") or lowered.startswith("https://")


def content_path(uri: str) -> str:
    """Strip the scheme from a content URI. Bare CIDs are returned as-is."""
    if is_content_uri(uri):
        return uri[len(IPFS_SCHEME):].lstrip("/")
    return uri.lstrip("/")


def gateway_url(uri: str, gateway: str) -> str:
    """Translate a single URI through one gateway."""
    if is_http_url(uri):
        return uri
    return f"{gateway.rstrip('/')}/{content_path(uri)}"


def build_chain(uri: str, gateways: Sequence[str], length: int) -> List[str]:
    """
    Build the ordered candidate chain for ``uri``.

    The result always has exactly ``length`` entries. Missing gateway slots
    are filled by repeating the last gateway's URL; extra gateways are
    ignored.
    """
    if length < 1:
        raise ValueError("chain length must be >= 1")
    if not uri:
        raise ValueError("cannot build a chain for an empty URI")

    if is_http_url(uri):
        return [uri] * length
    if not gateways:
        raise ValueError("no IPFS gateways configured")

    chain = [gateway_url(uri, gw) for gw in list(gateways)[:length]]
    while len(chain) < length:
        chain.append(chain[-1])
    return chain
