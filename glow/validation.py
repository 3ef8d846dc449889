"""
glow/validation.py - Config and State Validation

Range rules for EngineConfig and invariant checks for TileSimState.
Pure functions returning violation lists; callers decide whether to raise.
"""

import math
from typing import List

from .constants import BOOST_POLICIES
from .types_config import EngineConfig
from .types_state import TileSimState


def validate_config(config: EngineConfig) -> List[str]:
    """
    Check EngineConfig ranges.

    Rules:
    - proximity_threshold > 0
    - 0 < spring_factor <= 1
    - 0 <= min_intensity_for_render <= 1
    - velocity_sensitivity >= 0
    - 0 < velocity_boost_decay < 1
    - max_velocity_boost >= 0
    - border_width >= 0
    - boost_policy in BOOST_POLICIES

    Returns:
        List of human-readable violations (empty when valid)
    """
    violations: List[str] = []

    numeric = {
        "proximity_threshold": config.proximity_threshold,
        "spring_factor": config.spring_factor,
        "min_intensity_for_render": config.min_intensity_for_render,
        "velocity_sensitivity": config.velocity_sensitivity,
        "velocity_boost_decay": config.velocity_boost_decay,
        "max_velocity_boost": config.max_velocity_boost,
        "border_width": config.border_width,
    }
    for name, value in numeric.items():
        if not isinstance(value, (int, float)) or not math.isfinite(value):
            violations.append(f"{name} must be a finite number, got {value!r}")
    if violations:
        return violations

    if config.proximity_threshold <= 0:
        violations.append(f"proximity_threshold {config.proximity_threshold} must be > 0")
    if not 0 < config.spring_factor <= 1:
        violations.append(f"spring_factor {config.spring_factor} out of range (0, 1]")
    if not 0 <= config.min_intensity_for_render <= 1:
        violations.append(
            f"min_intensity_for_render {config.min_intensity_for_render} out of range [0, 1]")
    if config.velocity_sensitivity < 0:
        violations.append(f"velocity_sensitivity {config.velocity_sensitivity} must be >= 0")
    if not 0 < config.velocity_boost_decay < 1:
        violations.append(
            f"velocity_boost_decay {config.velocity_boost_decay} out of range (0, 1)")
    if config.max_velocity_boost < 0:
        violations.append(f"max_velocity_boost {config.max_velocity_boost} must be >= 0")
    if config.border_width < 0:
        violations.append(f"border_width {config.border_width} must be >= 0")
    if config.boost_policy not in BOOST_POLICIES:
        violations.append(
            f"boost_policy '{config.boost_policy}' must be one of {list(BOOST_POLICIES)}")

    return violations


def check_state(state: TileSimState, config: EngineConfig) -> List[str]:
    """
    Check TileSimState invariants against a config.

    Returns:
        List of violated invariants (empty when the state is consistent)
    """
    violations: List[str] = []

    if not 0.0 <= state.intensity <= config.intensity_ceiling:
        violations.append(
            f"intensity {state.intensity} outside [0, {config.intensity_ceiling}]")
    if not 0.0 <= state.position <= 1.0:
        violations.append(f"position {state.position} outside [0, 1]")
    if not 0.0 <= state.velocity_boost <= config.max_velocity_boost:
        violations.append(
            f"velocity_boost {state.velocity_boost} outside [0, {config.max_velocity_boost}]")
    if state.edge is not None and state.intensity < config.min_intensity_for_render:
        violations.append(
            f"edge {state.edge.value} set while intensity {state.intensity} "
            f"< {config.min_intensity_for_render}")

    return violations
