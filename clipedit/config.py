# clipedit/config.py
import os

from dotenv import load_dotenv

# Environment overrides are read once, at import time.
load_dotenv()

# --- Static Configuration ---
# All editing settings are stored in this dictionary.
CONFIG = {
    # --- Timing ---
    "DEFAULT_FPS": int(os.getenv("CLIPEDIT_FPS", "10")),
    # Seconds to wait on one external frame edit before giving up on that frame.
    "EDIT_FRAME_TIMEOUT_SEC": float(os.getenv("CLIPEDIT_EDIT_TIMEOUT_SEC", "120")),

    # --- Text Overlay Defaults ---
    "DEFAULT_OVERLAY_DURATION_SEC": 2.0,
    "DEFAULT_OVERLAY_POSITION": {"x": 50, "y": 50},
    # Overlay and speed windows start at least this far before the end of the clip.
    "END_MARGIN_SEC": 0.1,

    # --- Key Frame Policy ---
    # Relative positions used by effects / colorGrading.
    "SPREAD_KEY_FRAME_POSITIONS": (0.0, 0.25, 0.5, 0.75, 1.0),

    # --- Fallbacks for loosely specified actions ---
    "DEFAULT_EFFECT": "visual",
    "DEFAULT_COLOR_PRESET": "cinematic",
    "DEFAULT_COLOR_INTENSITY": 0.5,

    # --- Filenames (can be left as default) ---
    "LOG_FILENAME": "clipedit.log",
    "RUN_SUMMARY_FILENAME": "run_summary.json",
    "FRAMES_SUBDIR": "frames",
}
