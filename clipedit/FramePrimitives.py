import asyncio
import inspect
import logging
import math
from dataclasses import replace
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence, Tuple, Union

from .config import CONFIG
from .DataModel import Frame
from .utils import dedupe_preserving_order, format_number, to_seconds

logger = logging.getLogger(f"clipedit.{__name__}")

# editFrame(frame, prompt, prev_frame, next_frame) -> new encoded frame data.
# Normally a coroutine function wrapping an image-edit model; plain functions are accepted too.
EditFrameFn = Callable[[Frame, str, Optional[Frame], Optional[Frame]], Union[Awaitable[str], str]]


def _reindex(frames: Sequence[Frame]) -> List[Frame]:
    return [replace(frame, id=index) for index, frame in enumerate(frames)]


async def call_edit_frame(
    edit_frame_fn: EditFrameFn,
    frame: Frame,
    prompt: str,
    prev_frame: Optional[Frame],
    next_frame: Optional[Frame],
    timeout: Optional[float] = None
) -> str:
    """
    Invokes the external frame edit callback and waits for it under a deadline.

    Args:
        edit_frame_fn (EditFrameFn): The callback. May return the data directly or an awaitable;
                                     plain functions are run in a worker thread.
        frame (Frame): The frame to edit.
        prompt (str): Natural-language edit instruction.
        prev_frame (Optional[Frame]): Neighbouring frame before, for continuity, or None.
        next_frame (Optional[Frame]): Neighbouring frame after, or None.
        timeout (Optional[float]): Seconds to wait. Defaults to CONFIG["EDIT_FRAME_TIMEOUT_SEC"];
                                   zero or negative disables the deadline.

    Returns:
        str: The new encoded frame data.

    Raises:
        asyncio.TimeoutError: If the callback does not finish in time.
        ValueError: If the callback returns no data.
    """
    if timeout is None:
        timeout = CONFIG["EDIT_FRAME_TIMEOUT_SEC"]

    async def invoke() -> Any:
        # Sync callbacks run in a worker thread so the deadline also covers them.
        # A timed-out worker thread cannot be stopped; its result is discarded.
        result: Any = await asyncio.to_thread(edit_frame_fn, frame, prompt, prev_frame, next_frame)
        if inspect.isawaitable(result):
            result = await result
        return result

    if timeout and timeout > 0:
        result = await asyncio.wait_for(invoke(), timeout=timeout)
    else:
        result = await invoke()

    if result is None:
        raise ValueError(f"Frame edit callback returned no data for frame {frame.id}.")
    return result


def _neighbours(frames: Sequence[Frame], index: int) -> Tuple[Optional[Frame], Optional[Frame]]:
    prev_frame = frames[index - 1] if index > 0 else None
    next_frame = frames[index + 1] if index < len(frames) - 1 else None
    return prev_frame, next_frame


def select_range_key_frames(start_frame: int, end_frame: int, frame_count: int) -> List[int]:
    """
    First, middle and last frame of [start_frame, end_frame], deduplicated and
    limited to valid indices of a sequence of `frame_count` frames.
    """
    candidates = [
        start_frame,
        (start_frame + end_frame) // 2,
        min(end_frame, frame_count - 1),
    ]
    return [i for i in dedupe_preserving_order(candidates) if 0 <= i < frame_count]


def select_spread_key_frames(frame_count: int, positions: Optional[Sequence[float]] = None) -> List[int]:
    """
    Key frames at relative positions of the whole sequence (0.0 = first frame,
    1.0 = last frame), deduplicated and bounds-checked.
    """
    if positions is None:
        positions = CONFIG["SPREAD_KEY_FRAME_POSITIONS"]
    candidates = [min(int(math.floor(frame_count * p)), frame_count - 1) for p in positions]
    return [i for i in dedupe_preserving_order(candidates) if 0 <= i < frame_count]


def resolve_trim_bounds(frames: Sequence[Frame], start_time: Any, end_time: Any, fps: int = 10) -> Tuple[float, float]:
    """
    Clamps loosely specified trim bounds to the current sequence.

    A missing or unparseable start becomes 0. A missing, zero or out-of-range
    end becomes the sequence duration.

    Returns:
        Tuple[float, float]: (start, end) in seconds.
    """
    start: Optional[float] = to_seconds(start_time)
    if start is None:
        logger.warning("Trim: Invalid startTime, using 0")
        start = 0.0

    max_time: float = len(frames) / fps
    end: Optional[float] = to_seconds(end_time)
    if not end or end > max_time:
        logger.warning(f"Trim: Invalid endTime ({end_time}), using max duration ({max_time})")
        end = max_time

    return start, end


async def apply_trim(frames: Sequence[Frame], start_time: Any, end_time: Any, fps: int = 10) -> List[Frame]:
    """
    Keeps only the frames between start_time and end_time (inclusive of both
    boundary frames) and re-indexes them from 0.

    A degenerate range (start >= end after clamping) is a no-op: the input
    sequence comes back unchanged.

    Args:
        frames (Sequence[Frame]): The current frame sequence.
        start_time (Any): Start in seconds; loosely typed.
        end_time (Any): End in seconds; loosely typed.
        fps (int): Sampling rate of the sequence.

    Returns:
        List[Frame]: The trimmed sequence.
    """
    start, end = resolve_trim_bounds(frames, start_time, end_time, fps)

    if start >= end:
        logger.warning(f"Trim: startTime ({start}) >= endTime ({end}), returning original frames")
        return list(frames)

    start_frame: int = max(0, int(math.floor(start * fps)))
    end_frame: int = min(len(frames) - 1, int(math.floor(end * fps)))

    logger.info(f"Trimming: {start}s-{end}s (frames {start_frame}-{end_frame} of {len(frames)})")

    return _reindex(frames[start_frame:end_frame + 1])


async def apply_speed_change(
    frames: Sequence[Frame],
    start_time: float,
    end_time: float,
    speed_multiplier: float,
    fps: int = 10
) -> List[Frame]:
    """
    Approximates a speed change over [start_time, end_time] by dropping or
    duplicating frames.

    Speed-up keeps every floor(m)-th frame by absolute index (decimation, not
    resampling). Slow-down follows each frame with floor(1/m) - 1 copies.
    Frames outside the range pass through. A multiplier of exactly 1 is a no-op.

    Raises:
        ValueError: If speed_multiplier is not positive.
    """
    if speed_multiplier == 1:
        return list(frames)
    if speed_multiplier <= 0:
        raise ValueError(f"Speed multiplier must be positive, got {speed_multiplier}.")

    start_frame: int = int(math.floor(start_time * fps))
    end_frame: int = int(math.floor(end_time * fps))

    result: List[Frame] = []
    if speed_multiplier > 1:
        stride: int = int(math.floor(speed_multiplier))
        for i, frame in enumerate(frames):
            if start_frame <= i <= end_frame and i % stride != 0:
                continue
            result.append(frame)
    else:
        duplicates: int = int(math.floor(1 / speed_multiplier)) - 1
        for i, frame in enumerate(frames):
            result.append(frame)
            if start_frame <= i <= end_frame:
                result.extend([frame] * duplicates)

    logger.info(f"Speed {format_number(speed_multiplier)}x over frames {start_frame}-{end_frame}: "
                f"{len(frames)} -> {len(result)} frames")
    return _reindex(result)


def build_text_overlay_prompt(text: str, position: Dict[str, Any]) -> str:
    x = position.get("x", 50)
    y = position.get("y", 50)
    if isinstance(x, (int, float)):
        x = format_number(x)
    if isinstance(y, (int, float)):
        y = format_number(y)
    return (f'Add text overlay "{text}" at position {x}%, {y}% from top-left. '
            f'Make it clearly visible with good contrast.')


async def apply_text_overlay(
    frames: Sequence[Frame],
    text: str,
    position: Dict[str, Any],
    start_time: float,
    duration: float,
    fps: int,
    edit_frame_fn: EditFrameFn
) -> List[Frame]:
    """
    Renders a text overlay onto the first, middle and last frame of the overlay
    window through the external edit callback.

    Only those key frames are sent for editing; the rest of the window is left
    as it is. A failure on one key frame is logged and the next one is tried.

    Args:
        frames (Sequence[Frame]): The current frame sequence.
        text (str): Overlay text.
        position (Dict[str, Any]): {"x": %, "y": %} measured from the top-left corner.
        start_time (float): Overlay start in seconds.
        duration (float): Overlay duration in seconds.
        fps (int): Sampling rate of the sequence.
        edit_frame_fn (EditFrameFn): External image-edit callback.

    Returns:
        List[Frame]: A new sequence with the successfully edited key frames replaced.
    """
    start_frame: int = int(math.floor(start_time * fps))
    end_frame: int = int(math.floor((start_time + duration) * fps))
    key_frames: List[int] = select_range_key_frames(start_frame, end_frame, len(frames))

    logger.info(f"Text overlay: Editing {len(key_frames)} key frames instead of {end_frame - start_frame + 1} frames")

    prompt: str = build_text_overlay_prompt(text, position)
    edited_frames: List[Frame] = list(frames)
    for frame_index in key_frames:
        prev_frame, next_frame = _neighbours(frames, frame_index)
        logger.debug(f"Editing frame {frame_index} with text overlay...")
        try:
            edited_data = await call_edit_frame(edit_frame_fn, frames[frame_index], prompt, prev_frame, next_frame)
        except Exception as e:
            logger.error(f"Error editing frame {frame_index}: {e!r}")
            continue
        edited_frames[frame_index] = replace(frames[frame_index], data=edited_data)

    return edited_frames


async def apply_prompt_to_key_frames(
    frames: Sequence[Frame],
    prompt: str,
    key_frames: Sequence[int],
    edit_frame_fn: EditFrameFn
) -> List[Frame]:
    """
    Sends each key frame through the edit callback with the same prompt.

    Unlike the text overlay, a failure here is not absorbed: it propagates so
    the whole action is treated as failed and the input sequence is kept.
    """
    edited_frames: List[Frame] = list(frames)
    for frame_index in key_frames:
        prev_frame, next_frame = _neighbours(edited_frames, frame_index)
        logger.debug(f"Applying '{prompt}' to frame {frame_index}...")
        edited_data = await call_edit_frame(edit_frame_fn, edited_frames[frame_index], prompt, prev_frame, next_frame)
        edited_frames[frame_index] = replace(edited_frames[frame_index], data=edited_data)
    return edited_frames
