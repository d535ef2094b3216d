"""
Adaptive-bitrate tier selection.

Tiers are kept sorted by bitrate, lowest first. The rung index is
independent of which gateway the chain is currently on.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional


@dataclass(frozen=True)
class QualityTier:
    bitrate: int  # bits per second
    width: Optional[int] = None
    height: Optional[int] = None
    uri: Optional[str] = None

    @property
    def label(self) -> str:
        if self.height:
            return f"{self.height}p"
        return f"{self.bitrate // 1000}kbps"


def sort_tiers(tiers: Iterable[QualityTier]) -> List[QualityTier]:
    return sorted(tiers, key=lambda t: t.bitrate)


def initial_tier(tiers: List[QualityTier]) -> Optional[int]:
    """Middle rung when more than two exist, else the lowest."""
    if not tiers:
        return None
    if len(tiers) > 2:
        return len(tiers) // 2
    return 0


def tier_for_bandwidth(tiers: List[QualityTier], throughput: float, factor: float = 1.0) -> Optional[int]:
    """Highest rung whose bitrate is at most ``factor`` × throughput; lowest if none fits."""
    if not tiers:
        return None
    budget = throughput * factor
    best = 0
    for index, tier in enumerate(tiers):
        if tier.bitrate <= budget:
            best = index
    return best
