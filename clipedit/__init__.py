# clipedit/__init__.py

"""
clipedit: applies AI-suggested edits (trim, text overlay, speed, key-frame
effects) to an in-memory sequence of video frames.

The edit pipeline, the tool registry, the Gemini response schemas and the
frame I/O helpers are re-exported here; `__all__` lists the supported names.
"""

# --- Configuration ---
from .config import CONFIG

# --- Data Model ---
from .DataModel import (
    Frame,
    EditingAction,
    ViralPotential,
    AISuggestion,
    ClipSuggestion,
    VideoMetadata,
    ProcessedVideo,
)

# --- Utility Functions ---
from .utils import to_seconds, log_run_summary

from .LoggerSetup import setup_logging

# --- Tool Registry ---
from .ToolRegistry import (
    ToolName,
    EditingTool,
    VIDEO_EDITING_TOOLS,
    get_tool,
    get_tool_descriptions,
    execute_editing_pipeline,
)

# --- Frame Edit Primitives ---
from .FramePrimitives import (
    apply_trim,
    apply_speed_change,
    apply_text_overlay,
    select_range_key_frames,
    select_spread_key_frames,
)

# --- Edit Pipeline ---
from .EditPipeline import apply_action, process_video_with_edits, process_clip_suggestion

# --- AI Schemas ---
from .Schemas import (
    suggestion_schema,
    clip_suggestion_schema,
    build_generation_config,
    parse_clip_suggestion,
    parse_suggestions,
)

# --- Frame I/O ---
from .FrameIO import load_frames_from_dir, write_frames_to_dir, load_actions_file


__all__ = [
    # Config
    "CONFIG",
    # Data model
    "Frame",
    "EditingAction",
    "ViralPotential",
    "AISuggestion",
    "ClipSuggestion",
    "VideoMetadata",
    "ProcessedVideo",
    # Utils
    "to_seconds",
    "log_run_summary",
    "setup_logging",
    # Registry
    "ToolName",
    "EditingTool",
    "VIDEO_EDITING_TOOLS",
    "get_tool",
    "get_tool_descriptions",
    "execute_editing_pipeline",
    # Primitives
    "apply_trim",
    "apply_speed_change",
    "apply_text_overlay",
    "select_range_key_frames",
    "select_spread_key_frames",
    # Pipeline
    "apply_action",
    "process_video_with_edits",
    "process_clip_suggestion",
    # Schemas
    "suggestion_schema",
    "clip_suggestion_schema",
    "build_generation_config",
    "parse_clip_suggestion",
    "parse_suggestions",
    # Frame I/O
    "load_frames_from_dir",
    "write_frames_to_dir",
    "load_actions_file",
]
