"""
glow/constants.py - Engine and Rendering Constants

All tuning constants for the proximity glow engine. Centralized for tuning.
Pure data, no behavior.
"""

from enum import Enum


# =============================================================================
# ZONES
# =============================================================================

class Zone(Enum):
    """Nearest edge or corner of a tile relative to the pointer."""
    TOP = "top"
    RIGHT = "right"
    BOTTOM = "bottom"
    LEFT = "left"
    TOP_LEFT = "topLeft"
    TOP_RIGHT = "topRight"
    BOTTOM_LEFT = "bottomLeft"
    BOTTOM_RIGHT = "bottomRight"
    NONE = "none"


EDGE_ZONES = (Zone.TOP, Zone.RIGHT, Zone.BOTTOM, Zone.LEFT)
CORNER_ZONES = (Zone.TOP_LEFT, Zone.TOP_RIGHT, Zone.BOTTOM_LEFT, Zone.BOTTOM_RIGHT)


# =============================================================================
# ENGINE DEFAULTS
# =============================================================================

PROXIMITY_THRESHOLD = 60.0        # px; pointer farther than this drives target to 0
SPRING_FACTOR = 0.15              # exponential smoothing coefficient, (0, 1]
MIN_INTENSITY_FOR_RENDER = 0.01   # below this nothing is painted
VELOCITY_SENSITIVITY = 0.005      # boost per px/ms of pointer speed
VELOCITY_BOOST_DECAY = 0.9        # per-frame geometric decay, (0, 1)
MAX_VELOCITY_BOOST = 0.5          # ceiling on the transient boost
BORDER_WIDTH = 2.0                # px

BOOST_POLICY_MAX = "MAX"          # burst capped to the fastest recent sample
BOOST_POLICY_SUM = "SUM"          # contributions accumulate up to the ceiling
BOOST_POLICIES = (BOOST_POLICY_MAX, BOOST_POLICY_SUM)

# =============================================================================
# NUMERIC GUARDS
# =============================================================================

EPSILON = 1e-4                    # "changed" threshold for the repaint signal
BOOST_FLOOR = 1e-6                # boosts below this snap to 0
MIN_SAMPLE_INTERVAL_MS = 5.0      # samples closer than this carry no speed
IDLE_POSITION = 0.5

# =============================================================================
# SPEED TIERS (px/ms)
# =============================================================================

class SpeedTier(Enum):
    SLOW = "SLOW"
    MEDIUM = "MEDIUM"
    FAST = "FAST"
    EXTREME = "EXTREME"


SPEED_TIER_THRESHOLDS = {
    SpeedTier.MEDIUM: 0.5,
    SpeedTier.FAST: 1.0,
    SpeedTier.EXTREME: 2.0,
}

# =============================================================================
# RENDER MAPPING
# =============================================================================

SEGMENT_BASE_LENGTH = 20.0        # % of edge at full intensity
SEGMENT_SHRINK_SPAN = 50.0        # extra % of edge at zero intensity
SEGMENT_OVERSHOOT_GROWTH = 40.0   # % of edge per unit of intensity above 1
CORNER_SIZE_BASE = 30.0           # px
CORNER_SIZE_GAIN = 20.0           # px per unit intensity
CORNER_SIZE_MAX = 40.0            # px
GLOW_RADIUS_GAIN = 6.0            # box-shadow blur px per unit intensity
DROP_SHADOW_GAIN = 4.0            # drop-shadow px per unit intensity
TRACE_OPACITY_RATIO = 0.7         # circuit trace opacity relative to segment
GLOW_COLOR = "#ff0066"

# Circuit trace animation
CIRCUIT_PERIOD_MS = 2000.0
CIRCUIT_OFFSET_STEP = 0.5
CIRCUIT_OFFSET_WRAP = 30.0

# =============================================================================
# CAPABILITY / STATIC MODE
# =============================================================================

MOBILE_MAX_WIDTH = 768.0          # viewports at or below this are low-capability
STATIC_HIGHLIGHT_PROBABILITY = 0.15
STATIC_INTENSITY_MIN = 0.3
STATIC_INTENSITY_SPAN = 0.7
ACTIVATION_KEYS = ("Enter", " ")

# =============================================================================
# RECEIPTS
# =============================================================================

TENANT_ID = "glow"
