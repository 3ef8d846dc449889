"""
glow/render.py - Render Mapper

Turns tile state into a declarative RenderSpec for the host renderer. Pure
functions: nothing here touches a drawing surface. Every number handed to
the host is finite and clamped.
"""

import math
from dataclasses import replace
from typing import Optional, Tuple

from .constants import (
    CORNER_ZONES,
    Zone,
    SEGMENT_BASE_LENGTH,
    SEGMENT_SHRINK_SPAN,
    SEGMENT_OVERSHOOT_GROWTH,
    CORNER_SIZE_BASE,
    CORNER_SIZE_GAIN,
    CORNER_SIZE_MAX,
    GLOW_RADIUS_GAIN,
    DROP_SHADOW_GAIN,
    TRACE_OPACITY_RATIO,
    GLOW_COLOR,
    CIRCUIT_PERIOD_MS,
    CIRCUIT_OFFSET_STEP,
    CIRCUIT_OFFSET_WRAP,
)
from .types_config import EngineConfig, CONFIG_DEFAULT
from .types_result import RenderSpec
from .types_state import CircuitPhase, StaticHighlight, TileSimState


def _finite(value: float, fallback: float = 0.0) -> float:
    return value if math.isfinite(value) else fallback


# =============================================================================
# SEGMENT GEOMETRY
# =============================================================================

def segment_length(intensity: float) -> float:
    """
    Highlighted share of the edge, in percent.

    Shrinks from SEGMENT_BASE_LENGTH + SEGMENT_SHRINK_SPAN toward
    SEGMENT_BASE_LENGTH as intensity approaches 1, then grows again with
    velocity overshoot above 1.
    """
    steady = min(1.0, max(0.0, intensity))
    overshoot = max(0.0, intensity - 1.0)
    length = (SEGMENT_BASE_LENGTH
              + SEGMENT_SHRINK_SPAN * (1.0 - steady)
              + SEGMENT_OVERSHOOT_GROWTH * overshoot)
    return min(100.0, length)


def segment_span(position: float, length: float) -> Tuple[float, float, float]:
    """Return (center, start, end) in percent, clipped to [0, 100]."""
    center = max(0.0, min(100.0, _finite(position) * 100.0))
    half = length / 2.0
    start = max(0.0, center - half)
    end = min(100.0, center + half)
    return center, start, end


def corner_size(intensity: float) -> float:
    """Corner wedge length in px."""
    return min(CORNER_SIZE_MAX, CORNER_SIZE_BASE + intensity * CORNER_SIZE_GAIN)


# =============================================================================
# CIRCUIT TRACE CLOCK
# =============================================================================

def advance_circuit(circuit: CircuitPhase, timestamp_ms: float) -> CircuitPhase:
    """Advance the trace clock by one active frame."""
    elapsed = max(0.0, _finite(timestamp_ms - circuit.start_ms))
    phase = (elapsed % CIRCUIT_PERIOD_MS) / CIRCUIT_PERIOD_MS
    offset = (circuit.dash_offset + CIRCUIT_OFFSET_STEP) % CIRCUIT_OFFSET_WRAP
    return replace(circuit, phase=phase, dash_offset=offset)


# =============================================================================
# MAPPING
# =============================================================================

def _build_spec(edge: Zone, intensity: float, position: float,
                config: EngineConfig,
                circuit: Optional[CircuitPhase]) -> RenderSpec:
    intensity = max(0.0, min(config.intensity_ceiling, intensity))
    length = segment_length(intensity)
    center, start, end = segment_span(position, length)
    opacity = min(1.0, intensity)

    return RenderSpec(
        edge=edge,
        is_corner=edge in CORNER_ZONES,
        center=center,
        start=start,
        end=end,
        length=end - start,
        corner_size=corner_size(intensity),
        glow_radius=GLOW_RADIUS_GAIN * intensity,
        drop_shadow=DROP_SHADOW_GAIN * intensity,
        opacity=opacity,
        visual_scale=intensity,
        border_width=max(0.0, _finite(config.border_width)),
        trace_opacity=TRACE_OPACITY_RATIO * opacity,
        phase=circuit.phase if circuit is not None else 0.0,
        dash_offset=circuit.dash_offset if circuit is not None else 0.0,
        color=GLOW_COLOR,
    )


def to_render_description(state: TileSimState,
                          config: EngineConfig = CONFIG_DEFAULT,
                          circuit: Optional[CircuitPhase] = None) -> Optional[RenderSpec]:
    """
    Map tile state to a RenderSpec.

    Args:
        state: Tile state after this frame's step
        config: Engine tuning
        circuit: Optional trace clock to stamp into the RenderSpec

    Returns:
        RenderSpec, or None when intensity is below min_intensity_for_render
        (or not a finite number) and nothing should be drawn.
    """
    intensity = state.intensity
    if not math.isfinite(intensity) or intensity < config.min_intensity_for_render:
        return None
    if state.edge is None or state.edge is Zone.NONE:
        return None
    return _build_spec(state.edge, intensity, state.position, config, circuit)


def render_static(highlight: Optional[StaticHighlight],
                  config: EngineConfig = CONFIG_DEFAULT,
                  circuit: Optional[CircuitPhase] = None) -> Optional[RenderSpec]:
    """
    Render a host-precomputed highlight directly (low-capability mode).

    No classification, tracking or integration is involved.
    """
    if highlight is None or highlight.edge is Zone.NONE:
        return None
    intensity = _finite(highlight.intensity)
    if intensity < config.min_intensity_for_render:
        return None
    position = max(0.0, min(1.0, _finite(highlight.position, 0.5)))
    return _build_spec(highlight.edge, intensity, position, config, circuit)
