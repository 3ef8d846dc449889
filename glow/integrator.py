"""
glow/integrator.py - Per-Frame State Integrator

One step of the tile simulation: proximity -> eased target, velocity boost,
exponential "spring" smoothing, clamping and the repaint signal.

The smoothing is a discrete first-order low-pass filter. Each step moves a
fraction spring_factor of the way toward a bounded target, so for any
spring_factor in (0, 1] it converges monotonically and cannot overshoot.
"""

import math
from dataclasses import replace

from .constants import BOOST_FLOOR, EPSILON, Zone
from .types_config import EngineConfig, CONFIG_DEFAULT
from .types_result import StepResult
from .types_state import ClassifierOutput, TileSimState


def ease_out_cubic(t: float) -> float:
    """1 - (1 - t)^3 on t clamped to [0, 1]."""
    t = max(0.0, min(1.0, t))
    return 1.0 - (1.0 - t) ** 3


def _clamp(value: float, lo: float, hi: float) -> float:
    if not math.isfinite(value):
        return lo
    return max(lo, min(hi, value))


def proximity_target(classified: ClassifierOutput, config: EngineConfig) -> float:
    """
    Base target intensity from proximity alone.

    Returns 0.0 at or beyond proximity_threshold, easeOutCubic of the
    normalized closeness otherwise.
    """
    if not math.isfinite(classified.distance) or classified.distance >= config.proximity_threshold:
        return 0.0
    t = 1.0 - classified.distance / config.proximity_threshold
    return ease_out_cubic(t)


def is_render_visible(intensity: float, config: EngineConfig) -> bool:
    return intensity >= config.min_intensity_for_render


def step(state: TileSimState,
         classified: ClassifierOutput,
         global_boost: float,
         config: EngineConfig = CONFIG_DEFAULT) -> StepResult:
    """
    Advance one tile by one animation frame.

    Args:
        state: Current tile state (not modified)
        classified: Classifier output for this frame
        global_boost: Shared boost read from the velocity tracker
        config: Engine tuning

    Returns:
        StepResult with the new state, the changed signal and whether
        render-visibility flipped this frame.
    """
    k = config.spring_factor
    ceiling = config.intensity_ceiling

    # Fold the tracker's boost into this tile; a new burst never lowers it
    if not math.isfinite(global_boost):
        global_boost = 0.0
    boost = _clamp(max(state.velocity_boost, global_boost), 0.0, config.max_velocity_boost)

    base = proximity_target(classified, config)
    if base > 0.0:
        position_target = _clamp(classified.raw_position, 0.0, 1.0)
    else:
        # Hold the last position so the glow fades in place
        position_target = state.position

    target = min(ceiling, base + boost)

    boost *= config.velocity_boost_decay
    if boost < BOOST_FLOOR:
        boost = 0.0

    intensity = _clamp(state.intensity + (target - state.intensity) * k, 0.0, ceiling)
    position = _clamp(state.position + (position_target - state.position) * k, 0.0, 1.0)

    visible = is_render_visible(intensity, config)
    if not visible:
        edge = None
    elif classified.zone is Zone.NONE:
        edge = state.edge
    else:
        edge = classified.zone

    was_visible = state.edge is not None
    flipped = visible != was_visible

    changed = (
        abs(intensity - state.intensity) > EPSILON
        or abs(position - state.position) > EPSILON
        or abs(boost - state.velocity_boost) > EPSILON
        or flipped
        or edge != state.edge
    )

    new_state = replace(
        state,
        intensity=intensity,
        position=position,
        edge=edge,
        velocity_boost=boost
    )
    return StepResult(state=new_state, changed=changed, visibility_flipped=flipped)
