"""
glow/types_config.py - EngineConfig Dataclass and Tuning Presets

Immutable, process-wide tuning constants for the glow engine.
Frozen dataclass, no behavior.
"""

from dataclasses import dataclass

from .constants import (
    PROXIMITY_THRESHOLD,
    SPRING_FACTOR,
    MIN_INTENSITY_FOR_RENDER,
    VELOCITY_SENSITIVITY,
    VELOCITY_BOOST_DECAY,
    MAX_VELOCITY_BOOST,
    BORDER_WIDTH,
    BOOST_POLICY_MAX,
)


@dataclass(frozen=True)
class EngineConfig:
    """Engine tuning (immutable)."""
    proximity_threshold: float = PROXIMITY_THRESHOLD
    spring_factor: float = SPRING_FACTOR  # 0 < k <= 1
    min_intensity_for_render: float = MIN_INTENSITY_FOR_RENDER
    velocity_sensitivity: float = VELOCITY_SENSITIVITY
    velocity_boost_decay: float = VELOCITY_BOOST_DECAY  # 0 < d < 1
    max_velocity_boost: float = MAX_VELOCITY_BOOST
    border_width: float = BORDER_WIDTH
    # "MAX" keeps only the fastest recent burst, "SUM" accumulates bursts
    boost_policy: str = BOOST_POLICY_MAX
    name: str = "DEFAULT"

    @property
    def intensity_ceiling(self) -> float:
        return 1.0 + self.max_velocity_boost


# =============================================================================
# TUNING PRESETS
# =============================================================================

CONFIG_DEFAULT = EngineConfig()

CONFIG_SNAPPY = EngineConfig(
    spring_factor=0.35,
    velocity_boost_decay=0.8,
    name="SNAPPY"
)

CONFIG_CALM = EngineConfig(
    proximity_threshold=80.0,
    spring_factor=0.08,
    velocity_sensitivity=0.002,
    max_velocity_boost=0.25,
    name="CALM"
)

PRESETS = {
    "DEFAULT": CONFIG_DEFAULT,
    "SNAPPY": CONFIG_SNAPPY,
    "CALM": CONFIG_CALM,
}
