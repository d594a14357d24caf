"""
#WHERE
    Imported by every animlab module and by tests — single source of truth
    for trajectory layout, contact defaults and axis conventions.

#WHAT
    Centralised constants used across 3+ modules.  Edit here, not in
    individual module files.

#INPUT / #OUTPUT
    Pure constants — no I/O.
"""

# ── Axes ─────────────────────────────────────────────────────────────────
# Clips are Y-up, +Z forward (BVH / Unity convention).

UP_AXIS: int = 1
FORWARD_AXIS: int = 2
DEFAULT_MIRROR_AXIS: int = 0    # reflect across the YZ plane

# ── Trajectory window ────────────────────────────────────────────────────

TRAJECTORY_POINTS: int = 12
PAST_POINTS: int = 6
FUTURE_POINTS: int = 5
CURRENT_INDEX: int = 6
PAST_WINDOW: float = 1.0        # seconds covered by points 0–5
FUTURE_WINDOW: float = 1.0      # seconds covered by points 7–11
PROVIDER_WINDOW: int = 0        # smoothing window passed to style/phase providers

# ── Contacts ─────────────────────────────────────────────────────────────

DEFAULT_CONTACT_THRESHOLD: float = 0.1
DEFAULT_CONTACT_NORMAL = (0.0, -1.0, 0.0)
DEFAULT_CONTACT_OFFSET = (0.0, 0.0, 0.0)

# ── Collision layers ─────────────────────────────────────────────────────

ALL_LAYERS: int = -1            # every layer bit set
MAX_LAYER: int = 30             # highest usable layer bit (signed 32-bit mask)
GROUND_LAYER: int = 0
RAY_BATCH_SIZE: int = 1024      # rays per PyBullet batch query

# ── Data ─────────────────────────────────────────────────────────────────

DEFAULT_FRAMERATE: float = 30.0
DEFAULT_OUTPUT_DIR = "outputs"
