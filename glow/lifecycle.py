"""
glow/lifecycle.py - Per-Tile Lifecycle Controller

Owns one tile's simulation loop. Decides from explicit host flags whether the
tile runs the full per-frame simulation (ACTIVE), paints a precomputed static
highlight (STATIC), or stays dark (DISABLED), and exposes the tile's
selection action.

State machine:
    UNMOUNTED --mount--> DISABLED | ACTIVE | STATIC
    ACTIVE/STATIC/DISABLED --flags--> ACTIVE/STATIC/DISABLED
    any --unmount--> UNMOUNTED (terminal)

ACTIVE and STATIC (with a highlight) run a frame loop so the circuit trace
keeps animating. Leaving either cancels the frame handle and resets the tile
to idle; no callback mutates the tile after that.
"""

import logging
from enum import Enum
from typing import Callable, List, Optional

from receipts import emit_receipt

from .constants import ACTIVATION_KEYS, TENANT_ID
from .geometry import classify
from .integrator import step
from .render import advance_circuit, render_static, to_render_description
from .scheduler import FrameScheduler
from .types_config import EngineConfig, CONFIG_DEFAULT
from .types_result import RenderSpec
from .types_state import (
    CircuitPhase,
    ElementBounds,
    FrameContext,
    SelectEvent,
    StaticHighlight,
    TileFlags,
    TileSimState,
)
from .velocity import VelocityTracker

logger = logging.getLogger(__name__)

BoundsProvider = Callable[[], Optional[ElementBounds]]
RenderCallback = Callable[[str, Optional[RenderSpec]], None]
SelectCallback = Callable[[SelectEvent], None]


class LifecycleState(Enum):
    UNMOUNTED = "UNMOUNTED"
    DISABLED = "DISABLED"
    ACTIVE = "ACTIVE"
    STATIC = "STATIC"


_LOOPING_STATES = (LifecycleState.ACTIVE, LifecycleState.STATIC)


def _require_callable(name: str, value) -> None:
    if value is not None and not callable(value):
        raise ValueError(f"{name} must be callable, got {value!r}")


class TileController:
    """
    Lifecycle controller for a single tile.

    Args:
        tile_id: Host identity of the tile, passed back on render and select
        tracker: Shared global velocity tracker (read-only here)
        scheduler: Frame scheduler used for the per-frame loop
        bounds_provider: Returns the tile's current bounds, or None
        on_render: Called with (tile_id, RenderSpec | None) when paint changes
        on_select: Called with a SelectEvent on activation
        config: Engine tuning
        static_highlight: Precomputed highlight used in STATIC mode
    """

    def __init__(self,
                 tile_id: str,
                 tracker: VelocityTracker,
                 scheduler: FrameScheduler,
                 bounds_provider: BoundsProvider,
                 on_render: Optional[RenderCallback] = None,
                 on_select: Optional[SelectCallback] = None,
                 config: EngineConfig = CONFIG_DEFAULT,
                 static_highlight: Optional[StaticHighlight] = None):
        if bounds_provider is None:
            raise ValueError("bounds_provider is required")
        _require_callable("bounds_provider", bounds_provider)
        _require_callable("on_render", on_render)
        _require_callable("on_select", on_select)

        self.tile_id = tile_id
        self.tracker = tracker
        self.scheduler = scheduler
        self.config = config
        self.static_highlight = static_highlight

        self._bounds_provider = bounds_provider
        self._on_render = on_render
        self._on_select = on_select

        self.state = TileSimState.idle()
        self.lifecycle = LifecycleState.UNMOUNTED
        self.flags = TileFlags()
        self.last_spec: Optional[RenderSpec] = None
        self.receipts: List[dict] = []

        self._mounted = False
        self._terminated = False
        self._handle: Optional[int] = None
        self._circuit: Optional[CircuitPhase] = None
        self._pending_selection: Optional[SelectEvent] = None

        self.frames_stepped = 0
        self.frames_skipped = 0

    # -------------------------------------------------------------------------
    # Host wiring
    # -------------------------------------------------------------------------

    @property
    def is_active(self) -> bool:
        return self.lifecycle is LifecycleState.ACTIVE

    @property
    def has_pending_frame(self) -> bool:
        return self._handle is not None and self.scheduler.is_pending(self._handle)

    def mount(self, flags: Optional[TileFlags] = None) -> LifecycleState:
        """Mount the tile and enter the state its flags allow."""
        if self._terminated:
            logger.warning("tile %s: mount after unmount ignored", self.tile_id)
            return self.lifecycle
        if flags is not None:
            self.flags = flags
        self._mounted = True
        self._apply("mount")
        return self.lifecycle

    def update_flags(self, flags: TileFlags) -> LifecycleState:
        """Apply new capability / transition flags from the host."""
        self.flags = flags
        if not flags.is_transition_target:
            self._pending_selection = None
        if self._mounted:
            self._apply("flags")
        return self.lifecycle

    def unmount(self) -> None:
        """Tear the tile down for good."""
        if self._terminated:
            return
        self._mounted = False
        self._apply("unmount")
        self._terminated = True
        self._pending_selection = None

    def set_static_highlight(self, highlight: Optional[StaticHighlight]) -> None:
        """Replace the precomputed highlight; repaints if currently STATIC."""
        self.static_highlight = highlight
        if self.lifecycle is LifecycleState.STATIC:
            self._stop_loop()
            self._enter_static()

    # -------------------------------------------------------------------------
    # Selection
    # -------------------------------------------------------------------------

    def select(self) -> SelectEvent:
        """
        Notify the host that this tile was activated.

        Always permitted, whatever the lifecycle state. Repeated calls while
        a selection is pending return the same event without notifying the
        host again; the selection clears once the host reports the tile is no
        longer the transition target, or on release_selection().
        """
        if self._pending_selection is not None:
            return self._pending_selection

        event = SelectEvent(tile_id=self.tile_id, bounds=self._read_bounds())
        self._pending_selection = event
        self.receipts.append(emit_receipt("tile_selected", {
            "tenant_id": TENANT_ID,
            "tile_id": self.tile_id,
            "lifecycle": self.lifecycle.value,
            "bounds": None if event.bounds is None else [
                event.bounds.left, event.bounds.top,
                event.bounds.width, event.bounds.height
            ],
        }))
        if self._on_select is not None:
            self._on_select(event)
        return event

    def release_selection(self) -> None:
        self._pending_selection = None

    def handle_key(self, key: str) -> bool:
        """Keyboard activation: Enter or Space selects. Returns True if handled."""
        if key in ACTIVATION_KEYS:
            self.select()
            return True
        return False

    # -------------------------------------------------------------------------
    # State machine
    # -------------------------------------------------------------------------

    def _target_state(self) -> LifecycleState:
        if not self._mounted:
            return LifecycleState.UNMOUNTED
        if self.flags.in_transition:
            return LifecycleState.DISABLED
        if self.flags.full_capability:
            return LifecycleState.ACTIVE
        return LifecycleState.STATIC

    def _apply(self, reason: str) -> None:
        target = self._target_state()
        previous = self.lifecycle
        if target is previous:
            return

        if previous in _LOOPING_STATES:
            self._stop_loop()

        self.lifecycle = target

        if target is LifecycleState.ACTIVE:
            self._start_loop()
        elif target is LifecycleState.STATIC:
            self._enter_static()
        elif self.last_spec is not None:
            self._paint(None)

        logger.debug("tile %s: %s -> %s (%s)",
                     self.tile_id, previous.value, target.value, reason)
        self.receipts.append(emit_receipt("lifecycle_transition", {
            "tenant_id": TENANT_ID,
            "tile_id": self.tile_id,
            "from_state": previous.value,
            "to_state": target.value,
            "reason": reason,
            "full_capability": self.flags.full_capability,
            "is_transition_target": self.flags.is_transition_target,
            "other_is_transition_target": self.flags.other_is_transition_target,
        }))

    def _start_loop(self) -> None:
        self.state = TileSimState.idle()
        self._circuit = None
        self._handle = self.scheduler.request(self._on_frame)

    def _enter_static(self) -> None:
        """Paint the precomputed highlight; loop only while there is one."""
        self._circuit = None
        spec = render_static(self.static_highlight, self.config)
        self._paint(spec)
        if spec is not None:
            self._handle = self.scheduler.request(self._on_frame)

    def _stop_loop(self) -> None:
        if self._handle is not None:
            self.scheduler.cancel(self._handle)
            self._handle = None
        self.state = TileSimState.idle()
        self._circuit = None

    # -------------------------------------------------------------------------
    # Frame loop
    # -------------------------------------------------------------------------

    def _read_bounds(self) -> Optional[ElementBounds]:
        return self._bounds_provider()

    def _advance_trace(self, timestamp_ms: float) -> CircuitPhase:
        if self._circuit is None:
            self._circuit = CircuitPhase(start_ms=timestamp_ms)
        self._circuit = advance_circuit(self._circuit, timestamp_ms)
        return self._circuit

    def _on_frame(self, context: FrameContext) -> None:
        self._handle = None
        if self.lifecycle not in _LOOPING_STATES:
            return

        self._handle = self.scheduler.request(self._on_frame)

        if not context.visible:
            self.frames_skipped += 1
            return

        if self.lifecycle is LifecycleState.STATIC:
            circuit = self._advance_trace(context.timestamp_ms)
            self._paint(render_static(self.static_highlight, self.config, circuit))
            return

        bounds = self._read_bounds()
        if bounds is None or not bounds.is_usable():
            self.frames_skipped += 1
            logger.debug("tile %s: bounds unavailable, frame skipped", self.tile_id)
            return

        pointer = self.tracker.latest
        if pointer is None:
            self.frames_skipped += 1
            return

        classified = classify(pointer, bounds)
        result = step(self.state, classified, self.tracker.current_boost, self.config)
        self.state = result.state
        circuit = self._advance_trace(context.timestamp_ms)
        self.frames_stepped += 1

        spec = to_render_description(self.state, self.config, circuit)
        # A visible glow repaints every frame to carry the trace clock
        if result.changed or spec is not None:
            self._paint(spec)

    def _paint(self, spec: Optional[RenderSpec]) -> None:
        self.last_spec = spec
        if self._on_render is not None:
            self._on_render(self.tile_id, spec)
