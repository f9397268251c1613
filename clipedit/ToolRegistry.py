"""
The fixed set of editing tools the AI is allowed to ask for.

Each tool's `execute` is a pass-through stub: it echoes its parameters tagged
`applied: True`. Real frame work for trim / textOverlay / speed / effects /
colorGrading lives in FramePrimitives and is driven by EditPipeline; the
remaining tools are left to the export stage.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Mapping, Optional, Union

from .DataModel import EditingAction

logger = logging.getLogger(f"clipedit.{__name__}")


class ToolName(str, Enum):
    TRIM = "trim"
    TEXT_OVERLAY = "textOverlay"
    EFFECTS = "effects"
    AUDIO = "audio"
    CROP_ZOOM = "cropZoom"
    SPEED = "speed"
    COLOR_GRADING = "colorGrading"
    TRANSITION = "transition"

    @classmethod
    def lookup(cls, name: Any) -> Optional["ToolName"]:
        """Returns the matching ToolName, or None for anything outside the closed set."""
        try:
            return cls(name)
        except (ValueError, TypeError):
            return None


@dataclass(frozen=True)
class EditingTool:
    name: ToolName
    description: str
    execute: Callable[[Dict[str, Any]], Awaitable[Dict[str, Any]]]


def _echo(*keys: str) -> Callable[[Dict[str, Any]], Awaitable[Dict[str, Any]]]:
    async def execute(params: Dict[str, Any]) -> Dict[str, Any]:
        result: Dict[str, Any] = {"applied": True}
        result.update({key: params.get(key) for key in keys})
        return result
    return execute


async def _execute_trim(params: Dict[str, Any]) -> Dict[str, Any]:
    # The actual cut happens in FramePrimitives.apply_trim.
    start_time = params.get("startTime")
    end_time = params.get("endTime")
    duration = None
    if isinstance(start_time, (int, float)) and isinstance(end_time, (int, float)):
        duration = end_time - start_time
    return {"applied": True, "startTime": start_time, "endTime": end_time, "duration": duration}


# Declaration order is significant: it is the order tools are described to the model.
VIDEO_EDITING_TOOLS: Dict[ToolName, EditingTool] = {
    ToolName.TRIM: EditingTool(
        ToolName.TRIM, "Trim video to specific start and end time", _execute_trim),
    ToolName.TEXT_OVERLAY: EditingTool(
        ToolName.TEXT_OVERLAY, "Add text overlay at specific position and time",
        _echo("text", "position", "startTime", "duration")),
    ToolName.EFFECTS: EditingTool(
        ToolName.EFFECTS, "Apply visual effects like filters, transitions, speed changes",
        _echo("effect", "params")),
    ToolName.AUDIO: EditingTool(
        ToolName.AUDIO, "Add background music or sound effects",
        _echo("audioType", "volume", "fadeIn", "fadeOut")),
    ToolName.CROP_ZOOM: EditingTool(
        ToolName.CROP_ZOOM, "Crop video or apply zoom effects",
        _echo("cropArea", "zoomLevel", "panDirection")),
    ToolName.SPEED: EditingTool(
        ToolName.SPEED, "Change video speed for dramatic effect",
        _echo("startTime", "endTime", "speedMultiplier")),
    ToolName.COLOR_GRADING: EditingTool(
        ToolName.COLOR_GRADING, "Apply color grading for mood enhancement",
        _echo("preset", "intensity")),
    ToolName.TRANSITION: EditingTool(
        ToolName.TRANSITION, "Add transitions between clips",
        _echo("type", "duration", "position")),
}


def get_tool(name: Any) -> Optional[EditingTool]:
    """Looks up a tool by name. Unknown names return None rather than raising."""
    tool_name = ToolName.lookup(name)
    if tool_name is None:
        return None
    return VIDEO_EDITING_TOOLS[tool_name]


def get_tool_descriptions() -> str:
    """Renders the registry as "- name: description" lines for embedding in a prompt."""
    return "\n".join(f"- {name.value}: {tool.description}" for name, tool in VIDEO_EDITING_TOOLS.items())


async def execute_editing_pipeline(
    actions: Iterable[Union[EditingAction, Mapping[str, Any]]],
    video_file: Any = None
) -> List[Dict[str, Any]]:
    """
    Runs each action's registry stub in order and collects the results.

    Unknown tools are skipped. The video file handle is passed through to every
    tool in its params under 'videoFile'.

    Args:
        actions: EditingAction objects or raw {"tool", "params"} dicts.
        video_file: Optional handle to the source video.

    Returns:
        List[Dict[str, Any]]: One {"tool": name, "result": {...}} entry per executed tool.
    """
    results: List[Dict[str, Any]] = []
    for action in actions:
        if not isinstance(action, EditingAction):
            action = EditingAction.from_dict(action)
        tool = get_tool(action.tool)
        if tool is None:
            logger.debug(f"Registry has no tool named '{action.tool}'. Skipping.")
            continue
        result = await tool.execute({**action.params, "videoFile": video_file})
        results.append({"tool": tool.name.value, "result": result})
    return results
