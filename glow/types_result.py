"""
glow/types_result.py - StepResult and RenderSpec Dataclasses

Outputs of the integrator and the render mapper.
"""

from dataclasses import dataclass, asdict

from .constants import Zone
from .types_state import TileSimState


@dataclass(frozen=True)
class StepResult:
    """One integrator step: the new state plus the repaint signal."""
    state: TileSimState
    changed: bool
    visibility_flipped: bool = False


@dataclass(frozen=True)
class RenderSpec:
    """Declarative description of what the host should paint for a tile.

    Lengths along an edge are percentages of that edge; corner_size,
    glow_radius, drop_shadow and border_width are pixels. Corner zones use
    the same segment fields as edges, centred on position (at most 50%),
    and the host draws a corner_size wedge on both adjoining sides.
    """
    edge: Zone
    is_corner: bool
    center: float          # % along the edge
    start: float           # % along the edge, >= 0
    end: float             # % along the edge, <= 100
    length: float          # end - start
    corner_size: float
    glow_radius: float
    drop_shadow: float
    opacity: float         # [0, 1]
    visual_scale: float    # may exceed 1 during velocity bursts
    border_width: float
    trace_opacity: float
    phase: float = 0.0
    dash_offset: float = 0.0
    color: str = "#ff0066"

    def to_dict(self) -> dict:
        data = asdict(self)
        data["edge"] = self.edge.value
        return data

