"""
glow - Proximity-Reactive Border Glow Engine

Public API: geometry classification, velocity tracking, per-frame state
integration, render mapping and the per-tile lifecycle controller.
"""

# =============================================================================
# TYPES (Dataclasses)
# =============================================================================
from .types_config import (
    EngineConfig,
    CONFIG_DEFAULT,
    CONFIG_SNAPPY,
    CONFIG_CALM,
    PRESETS,
)
from .types_state import (
    PointerSample,
    ElementBounds,
    TileFlags,
    FrameContext,
    ClassifierOutput,
    TileSimState,
    StaticHighlight,
    CircuitPhase,
    SelectEvent,
)
from .types_result import StepResult, RenderSpec

# =============================================================================
# CONSTANTS
# =============================================================================
from .constants import (
    Zone,
    SpeedTier,
    EDGE_ZONES,
    CORNER_ZONES,
    BOOST_POLICY_MAX,
    BOOST_POLICY_SUM,
    EPSILON,
)

# =============================================================================
# SIMULATION
# =============================================================================
from .geometry import classify, clamp01, position_along_zone
from .velocity import (
    VelocityTracker,
    sample_speed,
    boost_contribution,
    merge_boost,
    classify_speed,
)
from .integrator import step, ease_out_cubic, proximity_target
from .render import (
    to_render_description,
    render_static,
    segment_length,
    advance_circuit,
)
from .validation import validate_config, check_state

# =============================================================================
# RUNTIME
# =============================================================================
from .scheduler import FrameScheduler
from .lifecycle import TileController, LifecycleState
from .engine import GlowEngine, is_full_capability, random_static_highlight


__all__ = [
    # Types
    "EngineConfig",
    "CONFIG_DEFAULT",
    "CONFIG_SNAPPY",
    "CONFIG_CALM",
    "PRESETS",
    "PointerSample",
    "ElementBounds",
    "TileFlags",
    "FrameContext",
    "ClassifierOutput",
    "TileSimState",
    "StaticHighlight",
    "CircuitPhase",
    "SelectEvent",
    "StepResult",
    "RenderSpec",
    # Constants
    "Zone",
    "SpeedTier",
    "EDGE_ZONES",
    "CORNER_ZONES",
    "BOOST_POLICY_MAX",
    "BOOST_POLICY_SUM",
    "EPSILON",
    # Simulation
    "classify",
    "clamp01",
    "position_along_zone",
    "VelocityTracker",
    "sample_speed",
    "boost_contribution",
    "merge_boost",
    "classify_speed",
    "step",
    "ease_out_cubic",
    "proximity_target",
    "to_render_description",
    "render_static",
    "segment_length",
    "advance_circuit",
    "validate_config",
    "check_state",
    # Runtime
    "FrameScheduler",
    "TileController",
    "LifecycleState",
    "GlowEngine",
    "is_full_capability",
    "random_static_highlight",
]
