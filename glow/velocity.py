"""
glow/velocity.py - Velocity Tracker

Turns the global pointer-move stream into an instantaneous speed and a shared
transient boost. One tracker per pointer; every tile reads it, only the
pointer handler and the engine's end-of-frame decay write it.
"""

import logging
import math
from typing import Optional

from .constants import (
    BOOST_FLOOR,
    BOOST_POLICY_SUM,
    MIN_SAMPLE_INTERVAL_MS,
    SPEED_TIER_THRESHOLDS,
    SpeedTier,
)
from .types_config import EngineConfig, CONFIG_DEFAULT
from .types_state import PointerSample

logger = logging.getLogger(__name__)


# =============================================================================
# PURE HELPERS
# =============================================================================

def sample_speed(prev: PointerSample, curr: PointerSample) -> float:
    """
    Speed between two samples in px/ms.

    Returns 0.0 when the samples are closer than MIN_SAMPLE_INTERVAL_MS or
    time runs backwards.
    """
    elapsed = curr.timestamp_ms - prev.timestamp_ms
    if elapsed < MIN_SAMPLE_INTERVAL_MS:
        return 0.0
    return math.hypot(curr.x - prev.x, curr.y - prev.y) / elapsed


def boost_contribution(speed: float, config: EngineConfig) -> float:
    """min(max_velocity_boost, speed * velocity_sensitivity), never negative."""
    if not math.isfinite(speed) or speed <= 0:
        return 0.0
    return min(config.max_velocity_boost, speed * config.velocity_sensitivity)


def merge_boost(boost: float, contribution: float, config: EngineConfig) -> float:
    """
    Fold a new contribution into the running boost.

    MAX keeps the largest recent burst; SUM accumulates. Both are capped at
    max_velocity_boost, and a new sample never lowers the boost.
    """
    if config.boost_policy == BOOST_POLICY_SUM:
        merged = boost + contribution
    else:
        merged = max(boost, contribution)
    return max(0.0, min(config.max_velocity_boost, merged))


def classify_speed(speed: float) -> SpeedTier:
    """Bucket a speed (px/ms) into SLOW / MEDIUM / FAST / EXTREME."""
    if speed >= SPEED_TIER_THRESHOLDS[SpeedTier.EXTREME]:
        return SpeedTier.EXTREME
    if speed >= SPEED_TIER_THRESHOLDS[SpeedTier.FAST]:
        return SpeedTier.FAST
    if speed >= SPEED_TIER_THRESHOLDS[SpeedTier.MEDIUM]:
        return SpeedTier.MEDIUM
    return SpeedTier.SLOW


# =============================================================================
# TRACKER
# =============================================================================

class VelocityTracker:
    """Global pointer tracker holding the last two samples and the boost."""

    def __init__(self, config: EngineConfig = CONFIG_DEFAULT):
        self.config = config
        self.previous: Optional[PointerSample] = None
        self.latest: Optional[PointerSample] = None
        self.speed = 0.0
        self._boost = 0.0
        self.samples_accepted = 0
        self.samples_rejected = 0

    @property
    def current_boost(self) -> float:
        return self._boost

    @property
    def speed_tier(self) -> SpeedTier:
        return classify_speed(self.speed)

    def on_sample(self, sample: PointerSample) -> float:
        """
        Record a pointer sample.

        Non-finite samples are dropped: the pointer is treated as not having
        moved and nothing is merged into the boost.

        Returns:
            float: Boost contribution of this sample
        """
        if not sample.is_finite():
            self.samples_rejected += 1
            logger.debug("dropping non-finite pointer sample %r", sample)
            return 0.0

        contribution = 0.0
        if self.latest is not None:
            self.speed = sample_speed(self.latest, sample)
            contribution = boost_contribution(self.speed, self.config)
            self._boost = merge_boost(self._boost, contribution, self.config)
        else:
            self.speed = 0.0

        self.previous = self.latest
        self.latest = sample
        self.samples_accepted += 1
        return contribution

    def decay(self) -> float:
        """Apply one frame of geometric decay; returns the new boost."""
        boost = self._boost * self.config.velocity_boost_decay
        self._boost = boost if boost >= BOOST_FLOOR else 0.0
        return self._boost

    def reset(self) -> None:
        self.previous = None
        self.latest = None
        self.speed = 0.0
        self._boost = 0.0
