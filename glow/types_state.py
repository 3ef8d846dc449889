"""
glow/types_state.py - Pointer, Bounds and Tile State Dataclasses

Inputs read from the host each frame and the per-tile simulation state.
Dataclasses for state, no simulation logic.
"""

import math
from dataclasses import dataclass
from typing import Optional

from .constants import Zone, IDLE_POSITION


# =============================================================================
# HOST INPUTS
# =============================================================================

@dataclass(frozen=True)
class PointerSample:
    """One pointer-move event in viewport coordinates."""
    x: float
    y: float
    timestamp_ms: float

    def is_finite(self) -> bool:
        return (math.isfinite(self.x) and math.isfinite(self.y)
                and math.isfinite(self.timestamp_ms))


@dataclass(frozen=True)
class ElementBounds:
    """On-screen bounding rectangle of a tile, owned by the host."""
    left: float
    top: float
    width: float
    height: float

    def is_usable(self) -> bool:
        """True when the rect is finite and has a non-zero area."""
        values = (self.left, self.top, self.width, self.height)
        if not all(math.isfinite(v) for v in values):
            return False
        return self.width > 0 and self.height > 0


@dataclass(frozen=True)
class TileFlags:
    """Capability and page-transition flags granted by the host per tile.

    Attributes:
        full_capability: Device can afford the per-frame simulation
        is_transition_target: This tile was selected and is transitioning
        other_is_transition_target: A sibling tile is transitioning
    """
    full_capability: bool = True
    is_transition_target: bool = False
    other_is_transition_target: bool = False

    @property
    def in_transition(self) -> bool:
        return self.is_transition_target or self.other_is_transition_target


@dataclass(frozen=True)
class FrameContext:
    """Per-frame timing handed to every scheduled callback."""
    timestamp_ms: float
    visible: bool = True


# =============================================================================
# CLASSIFIER OUTPUT
# =============================================================================

@dataclass(frozen=True)
class ClassifierOutput:
    """Nearest zone, proximity distance and position along that zone.

    distance is measured to the nearest boundary point; inside=True marks
    points within the rect (the distance is then to the nearest edge).
    """
    zone: Zone
    distance: float
    raw_position: float
    inside: bool = False


# =============================================================================
# TILE SIMULATION STATE
# =============================================================================

@dataclass(frozen=True)
class TileSimState:
    """Per-tile integrated state.

    Invariants:
        0 <= intensity <= 1 + max_velocity_boost
        0 <= position <= 1
        edge is not None only while intensity >= min_intensity_for_render
    """
    intensity: float = 0.0
    position: float = IDLE_POSITION
    edge: Optional[Zone] = None
    velocity_boost: float = 0.0

    @classmethod
    def idle(cls) -> "TileSimState":
        return cls()


@dataclass(frozen=True)
class StaticHighlight:
    """Host-precomputed highlight for low-capability devices."""
    edge: Zone
    intensity: float
    position: float


@dataclass(frozen=True)
class CircuitPhase:
    """Circuit trace animation clock (2 s phase cycle, dash offset)."""
    start_ms: float
    phase: float = 0.0
    dash_offset: float = 0.0


@dataclass(frozen=True)
class SelectEvent:
    """Selection notification carrying the tile identity and its bounds."""
    tile_id: str
    bounds: Optional[ElementBounds]
