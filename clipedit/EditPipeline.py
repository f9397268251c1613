import logging
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from .config import CONFIG
from .DataModel import ClipSuggestion, EditingAction, Frame, ProcessedVideo, VideoMetadata
from .FramePrimitives import (
    EditFrameFn,
    apply_prompt_to_key_frames,
    apply_speed_change,
    apply_text_overlay,
    apply_trim,
    resolve_trim_bounds,
    select_spread_key_frames,
)
from .ToolRegistry import ToolName
from .utils import format_number, to_float, to_seconds

logger = logging.getLogger(f"clipedit.{__name__}")

ActionLike = Union[EditingAction, Mapping[str, Any]]

# Tools that need whole-video processing and are handed to the export stage untouched.
EXPORT_ONLY_TOOLS = (ToolName.AUDIO, ToolName.CROP_ZOOM, ToolName.TRANSITION)

StepResult = Tuple[List[Frame], Optional[str]]


def _tool_name(action: Any) -> Any:
    if isinstance(action, EditingAction):
        return action.tool
    if isinstance(action, Mapping):
        return action.get("tool")
    return None


async def _trim_step(frames: List[Frame], params: Mapping[str, Any], fps: int) -> StepResult:
    start, end = resolve_trim_bounds(frames, params.get("startTime"), params.get("endTime"), fps)
    if start >= end:
        logger.warning(f"Trim range {start}-{end}s is empty. Keeping current frames.")
        return frames, None

    trimmed = await apply_trim(frames, start, end, fps)
    if not trimmed:
        logger.warning("Trim resulted in 0 frames, keeping original")
        return frames, None
    return trimmed, f"Trimmed to {start:.1f}-{end:.1f}s"


async def _text_overlay_step(frames: List[Frame], params: Mapping[str, Any], fps: int,
                             edit_frame_fn: EditFrameFn) -> StepResult:
    current_duration = len(frames) / fps
    # Fit the window inside the (possibly already trimmed) sequence.
    start_time = min(to_seconds(params.get("startTime")) or 0.0,
                     current_duration - CONFIG["END_MARGIN_SEC"])
    duration = min(to_seconds(params.get("duration")) or CONFIG["DEFAULT_OVERLAY_DURATION_SEC"],
                   current_duration - start_time)

    text = params.get("text")
    text = "" if text is None else str(text)
    position = params.get("position")
    if not isinstance(position, Mapping):
        position = CONFIG["DEFAULT_OVERLAY_POSITION"]

    edited = await apply_text_overlay(frames, text, position, start_time, duration, fps, edit_frame_fn)
    return edited, f'Added text: "{text}"'


async def _speed_step(frames: List[Frame], params: Mapping[str, Any], fps: int) -> StepResult:
    current_duration = len(frames) / fps
    start_time = min(to_seconds(params.get("startTime")) or 0.0,
                     current_duration - CONFIG["END_MARGIN_SEC"])
    end_time = min(to_seconds(params.get("endTime")) or current_duration, current_duration)
    if start_time >= end_time:
        logger.warning(f"Speed change range {start_time}-{end_time}s is empty. Skipping.")
        return frames, None

    multiplier = to_float(params.get("speedMultiplier"), 1.0)
    changed = await apply_speed_change(frames, start_time, end_time, multiplier, fps)
    return changed, f"Speed {format_number(multiplier)}x at {start_time:.1f}-{end_time:.1f}s"


def build_effect_prompt(tool: ToolName, params: Mapping[str, Any]) -> str:
    if tool is ToolName.EFFECTS:
        return f"Apply {params.get('effect') or CONFIG['DEFAULT_EFFECT']} effect"
    preset = params.get("preset") or CONFIG["DEFAULT_COLOR_PRESET"]
    intensity = params.get("intensity")
    if intensity is None:
        intensity = CONFIG["DEFAULT_COLOR_INTENSITY"]
    if isinstance(intensity, (int, float)) and not isinstance(intensity, bool):
        intensity = format_number(intensity)
    return f"Apply {preset} color grading with {intensity} intensity"


async def _key_frame_effect_step(frames: List[Frame], tool: ToolName, params: Mapping[str, Any],
                                 edit_frame_fn: EditFrameFn) -> StepResult:
    prompt = build_effect_prompt(tool, params)
    key_frames = select_spread_key_frames(len(frames))
    logger.info(f"{tool.value}: Editing {len(key_frames)} key frames instead of {len(frames)} frames")

    edited = await apply_prompt_to_key_frames(frames, prompt, key_frames, edit_frame_fn)
    return edited, f"Applied {tool.value} to {len(key_frames)} key frames: {prompt}"


async def apply_action(
    frames: Sequence[Frame],
    action: ActionLike,
    fps: int = 10,
    edit_frame_fn: Optional[EditFrameFn] = None
) -> StepResult:
    """
    Applies one editing action to a frame sequence.

    This is the step function of the pipeline: it never modifies `frames`
    and returns the sequence to carry forward plus the audit entry to record
    (None when nothing was committed).

    Args:
        frames (Sequence[Frame]): The current frame sequence.
        action (ActionLike): An EditingAction or a raw {"tool", "params"} dict.
        fps (int): Sampling rate of the sequence.
        edit_frame_fn (Optional[EditFrameFn]): External image-edit callback. Required
                                               by textOverlay, effects and colorGrading.

    Returns:
        Tuple[List[Frame], Optional[str]]: (frames to carry forward, audit entry or None).

    Raises:
        ValueError: If a frame-editing tool is requested without an edit callback,
                    or the action's parameters are unusable.
    """
    if not isinstance(action, EditingAction):
        action = EditingAction.from_dict(action)
    current: List[Frame] = list(frames)
    params = action.params

    tool = ToolName.lookup(action.tool)
    if tool is None:
        logger.debug(f"Ignoring unknown tool '{action.tool}'.")
        return current, None

    if tool is ToolName.TRIM:
        return await _trim_step(current, params, fps)

    if tool is ToolName.SPEED:
        return await _speed_step(current, params, fps)

    if tool in EXPORT_ONLY_TOOLS:
        logger.info(f"Note: {tool.value} will be applied during final video export: {dict(params)}")
        return current, f"Noted for video export: {tool.value}"

    if edit_frame_fn is None:
        raise ValueError(f"'{tool.value}' needs a frame edit callback, but none was provided.")

    if tool is ToolName.TEXT_OVERLAY:
        return await _text_overlay_step(current, params, fps, edit_frame_fn)

    # effects / colorGrading
    return await _key_frame_effect_step(current, tool, params, edit_frame_fn)


async def process_video_with_edits(
    frames: Sequence[Frame],
    actions: Iterable[ActionLike],
    fps: Optional[int] = None,
    edit_frame_fn: Optional[EditFrameFn] = None
) -> ProcessedVideo:
    """
    Applies a list of editing actions to a clip's frames, in order.

    Each action sees the output of the one before it, so time values are
    always read against the current (possibly trimmed or re-timed) sequence.
    An action that raises is logged and skipped; the run always completes and
    the audit log only lists what was actually applied.

    Args:
        frames (Sequence[Frame]): The clip's frames, in order.
        actions (Iterable[ActionLike]): Editing actions, typically a ClipSuggestion's editing_actions.
        fps (Optional[int]): Sampling rate. Defaults to CONFIG["DEFAULT_FPS"].
        edit_frame_fn (Optional[EditFrameFn]): External image-edit callback.

    Returns:
        ProcessedVideo: Final frames plus metadata with the applied-edits audit log.
    """
    if fps is None:
        fps = CONFIG["DEFAULT_FPS"]
    if fps <= 0:
        raise ValueError(f"fps must be positive, got {fps}.")

    current: List[Frame] = list(frames)
    applied_edits: List[str] = []

    logger.info(f"Processing video with {len(current)} frames ({len(current) / fps}s) at {fps}fps")

    for action in actions:
        tool_name = _tool_name(action)
        if not current:
            logger.warning(f"Skipping {tool_name} - no frames to process")
            continue
        try:
            current, entry = await apply_action(current, action, fps, edit_frame_fn)
        except Exception as e:
            logger.error(f"Error applying {tool_name}: {e}", exc_info=True)
            continue
        if entry is not None:
            applied_edits.append(entry)
            logger.info(f"✅ {entry}")

    duration = len(current) / fps
    logger.info(f"Finished editing: {len(current)} frames ({duration}s), {len(applied_edits)} edits applied.")

    return ProcessedVideo(
        frames=current,
        metadata=VideoMetadata(
            duration=duration,
            start_time=0,
            end_time=duration,
            applied_edits=applied_edits,
        ),
    )


async def process_clip_suggestion(
    frames: Sequence[Frame],
    suggestion: ClipSuggestion,
    fps: Optional[int] = None,
    edit_frame_fn: Optional[EditFrameFn] = None
) -> ProcessedVideo:
    """Runs the editing actions attached to an AI clip suggestion."""
    logger.info(f"Applying {len(suggestion.editing_actions)} actions for {suggestion.viral_potential.value}-potential clip "
                f"[{suggestion.start_time:.2f}s - {suggestion.end_time:.2f}s]: {suggestion.reason}")
    return await process_video_with_edits(frames, suggestion.editing_actions, fps, edit_frame_fn)
