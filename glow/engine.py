"""
glow/engine.py - Engine Facade and Host Helpers

Global wiring shared by every tile: one velocity tracker, one frame
scheduler, the tile registry and broadcast of capability and page-transition
flags. Also hosts the small device and static-highlight helpers a host needs
before it can create tiles.
"""

import logging
import math
from typing import Dict, Optional

import numpy as np

from .constants import (
    EDGE_ZONES,
    MOBILE_MAX_WIDTH,
    STATIC_HIGHLIGHT_PROBABILITY,
    STATIC_INTENSITY_MIN,
    STATIC_INTENSITY_SPAN,
)
from .lifecycle import BoundsProvider, RenderCallback, SelectCallback, TileController
from .scheduler import FrameScheduler
from .types_config import EngineConfig, CONFIG_DEFAULT
from .types_state import FrameContext, PointerSample, StaticHighlight, TileFlags
from .validation import validate_config
from .velocity import VelocityTracker

logger = logging.getLogger(__name__)


# =============================================================================
# HOST HELPERS
# =============================================================================

def is_full_capability(viewport_width: float, coarse_pointer: bool = False) -> bool:
    """Full per-frame simulation only on wide viewports with a fine pointer."""
    if not math.isfinite(viewport_width):
        return False
    return viewport_width > MOBILE_MAX_WIDTH and not coarse_pointer


def random_static_highlight(rng: np.random.Generator,
                            probability: float = STATIC_HIGHLIGHT_PROBABILITY
                            ) -> Optional[StaticHighlight]:
    """
    Draw the precomputed highlight for one low-capability tile.

    With the given probability the tile gets a highlight on one of the four
    edges, with intensity in [0.3, 1.0) and position in [0, 1); otherwise None.
    """
    if rng.random() >= probability:
        return None
    edge = EDGE_ZONES[int(rng.integers(0, len(EDGE_ZONES)))]
    intensity = STATIC_INTENSITY_MIN + float(rng.random()) * STATIC_INTENSITY_SPAN
    position = float(rng.random())
    return StaticHighlight(edge=edge, intensity=intensity, position=position)


# =============================================================================
# ENGINE
# =============================================================================

class GlowEngine:
    """
    Shared runtime for all tiles on a page.

    The host forwards pointer moves to pointer_move() and calls frame() once
    per animation frame. Each frame runs every active tile's step, then decays
    the shared boost once, so a burst seen by tiles this frame is exactly the
    boost their own state decays from.
    """

    def __init__(self, config: EngineConfig = CONFIG_DEFAULT):
        violations = validate_config(config)
        if violations:
            raise ValueError("Invalid EngineConfig:\n" + "\n".join(f"  - {v}" for v in violations))
        self.config = config
        self.tracker = VelocityTracker(config)
        self.scheduler = FrameScheduler()
        self.tiles: Dict[str, TileController] = {}
        self.full_capability = True
        self.transition_target: Optional[str] = None

    # -------------------------------------------------------------------------
    # Global inputs
    # -------------------------------------------------------------------------

    def pointer_move(self, x: float, y: float, timestamp_ms: float) -> float:
        """Feed one pointer sample; returns its boost contribution."""
        return self.tracker.on_sample(PointerSample(x=x, y=y, timestamp_ms=timestamp_ms))

    def frame(self, timestamp_ms: float, visible: bool = True) -> int:
        """
        Run one animation frame for every active tile.

        Hidden frames pause everything in place: tiles skip their step and
        the shared boost is not decayed.

        Returns:
            int: Number of tile callbacks run
        """
        ran = self.scheduler.tick(FrameContext(timestamp_ms=timestamp_ms, visible=visible))
        if visible:
            self.tracker.decay()
        return ran

    # -------------------------------------------------------------------------
    # Tiles
    # -------------------------------------------------------------------------

    def _flags_for(self, tile_id: str) -> TileFlags:
        target = self.transition_target
        return TileFlags(
            full_capability=self.full_capability,
            is_transition_target=target is not None and target == tile_id,
            other_is_transition_target=target is not None and target != tile_id,
        )

    def add_tile(self,
                 tile_id: str,
                 bounds_provider: BoundsProvider,
                 on_render: Optional[RenderCallback] = None,
                 on_select: Optional[SelectCallback] = None,
                 static_highlight: Optional[StaticHighlight] = None,
                 mount: bool = True) -> TileController:
        """Create (and by default mount) a tile controller."""
        if tile_id in self.tiles:
            raise ValueError(f"tile '{tile_id}' already registered")
        tile = TileController(
            tile_id=tile_id,
            tracker=self.tracker,
            scheduler=self.scheduler,
            bounds_provider=bounds_provider,
            on_render=on_render,
            on_select=on_select,
            config=self.config,
            static_highlight=static_highlight,
        )
        self.tiles[tile_id] = tile
        if mount:
            tile.mount(self._flags_for(tile_id))
        return tile

    def remove_tile(self, tile_id: str) -> None:
        """Unmount and forget a tile. Raises KeyError for unknown ids."""
        tile = self.tiles.pop(tile_id)
        tile.unmount()

    def set_full_capability(self, full_capability: bool) -> None:
        """Broadcast a device-capability change (e.g. a viewport resize)."""
        self.full_capability = full_capability
        self._broadcast()

    def begin_transition(self, tile_id: str) -> None:
        """Mark tile_id as the page-transition target; siblings see 'other'."""
        if tile_id not in self.tiles:
            raise KeyError(tile_id)
        self.transition_target = tile_id
        self._broadcast()

    def end_transition(self) -> None:
        self.transition_target = None
        self._broadcast()

    def _broadcast(self) -> None:
        for tile_id, tile in list(self.tiles.items()):
            tile.update_flags(self._flags_for(tile_id))

    def shutdown(self) -> None:
        """Unmount every tile; no callback remains scheduled afterwards."""
        for tile_id in list(self.tiles):
            self.remove_tile(tile_id)
        self.tracker.reset()
        logger.debug("engine shut down, %d frames run", self.scheduler.frames_run)
