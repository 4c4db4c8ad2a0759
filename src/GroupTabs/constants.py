# constants.py
"""
Timing and size constants shared by the tab grouping engine.
All durations are milliseconds, all sizes are pixels.
"""

# --- Tab bar geometry ---
TAB_BAR_HEIGHT = 40
CLOSE_GROUP_BUTTON_WIDTH = 32
DEFAULT_TAB_LABEL = "Window"

# --- Sync re-entrancy guards ---
POSITION_SYNC_SETTLE_MS = 50
MAXIMIZE_SYNC_SETTLE_MS = 100

# --- Tiled detection ---
TILED_TOLERANCE = 10

# --- Hover reveal ---
HOVER_POLL_INTERVAL_MS = 50
HOVER_REVEAL_DEBOUNCE_MS = 200
HOVER_TOP_BAND = 5
TILED_MODE_GRACE_MS = 100

# --- Pointer gestures ---
DRAG_THRESHOLD = 5
REORDER_COOLDOWN_MS = 150
GESTURE_RESET_DELAY_MS = 50
POINTER_POLL_INTERVAL_MS = 16

# --- Modifier keys ---
MODIFIER_POLL_INTERVAL_MS = 100

# --- Drop indicator ---
DROP_INDICATOR_MARGIN = 5
