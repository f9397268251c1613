"""
Shared data models for the clip editing pipeline.

Frames and suggestions arrive from the browser / AI side as camelCase JSON;
the `from_dict` / `to_dict` helpers here are the only places that know about
that wire shape.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple


@dataclass(frozen=True)
class Frame:
    """One still image sample of the clip. `data` is an opaque encoded payload (base64)."""

    id: int
    data: str
    mime_type: str = "image/jpeg"

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "data": self.data, "mimeType": self.mime_type}


@dataclass
class EditingAction:
    """One declarative editing instruction. Validated only loosely."""

    tool: str
    params: Dict[str, Any] = field(default_factory=dict)
    description: str = ""

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "EditingAction":
        params = raw.get("params")
        return cls(
            tool=str(raw.get("tool") or ""),
            params=dict(params) if isinstance(params, Mapping) else {},
            description=str(raw.get("description") or ""),
        )


class ViralPotential(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class AISuggestion:
    """A per-moment suggestion. `frame_index` is in seconds from the clip start and may be fractional."""

    frame_index: float
    suggestion: str

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "AISuggestion":
        for key in ("frameIndex", "suggestion"):
            if key not in raw:
                raise ValueError(f"AI suggestion is missing required field '{key}'.")
        try:
            frame_index = float(raw["frameIndex"])
        except (TypeError, ValueError) as e:
            raise ValueError(f"AI suggestion frameIndex must be a number: {e}") from e
        return cls(frame_index=frame_index, suggestion=str(raw["suggestion"]))


_CLIP_REQUIRED_FIELDS = ("startTime", "endTime", "duration", "reason", "viralPotential", "editingSuggestions")


@dataclass(frozen=True)
class ClipSuggestion:
    """An AI-proposed viral clip. Immutable once received."""

    start_time: float
    end_time: float
    duration: float
    reason: str
    viral_potential: ViralPotential
    editing_suggestions: Tuple[str, ...] = ()
    editing_actions: Tuple[EditingAction, ...] = ()

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "ClipSuggestion":
        """
        Builds a ClipSuggestion from the model's JSON reply.

        Raises:
            ValueError: If a required field is missing or null, a time is not
                        numeric, a list field is not a list, or `viralPotential`
                        is not one of low / medium / high.
        """
        missing = [key for key in _CLIP_REQUIRED_FIELDS if key not in raw]
        if missing:
            raise ValueError(f"Clip suggestion is missing required field(s): {', '.join(missing)}")
        null_fields = [key for key in _CLIP_REQUIRED_FIELDS if raw[key] is None]
        if null_fields:
            raise ValueError(f"Clip suggestion has null required field(s): {', '.join(null_fields)}")

        try:
            potential = ViralPotential(str(raw["viralPotential"]).lower())
        except ValueError as e:
            raise ValueError(f"Invalid viralPotential '{raw['viralPotential']}'. Expected low, medium or high.") from e

        suggestions = raw["editingSuggestions"]
        if not isinstance(suggestions, list):
            raise ValueError(f"editingSuggestions must be a list, got {type(suggestions).__name__}.")
        actions = raw.get("editingActions")
        if actions is None:
            actions = []
        elif not isinstance(actions, list):
            raise ValueError(f"editingActions must be a list, got {type(actions).__name__}.")

        try:
            start_time = float(raw["startTime"])
            end_time = float(raw["endTime"])
            duration = float(raw["duration"])
        except (TypeError, ValueError) as e:
            raise ValueError(f"Clip suggestion times must be numbers: {e}") from e

        return cls(
            start_time=start_time,
            end_time=end_time,
            duration=duration,
            reason=str(raw["reason"]),
            viral_potential=potential,
            editing_suggestions=tuple(str(s) for s in suggestions),
            editing_actions=tuple(EditingAction.from_dict(a) for a in actions if isinstance(a, Mapping)),
        )


@dataclass
class VideoMetadata:
    duration: float
    start_time: float
    end_time: float
    applied_edits: List[str] = field(default_factory=list)


@dataclass
class ProcessedVideo:
    """Output of one pipeline run. `applied_edits` lists only what was actually committed."""

    metadata: VideoMetadata
    frames: Optional[List[Frame]] = None
    video_url: Optional[str] = None

    def to_dict(self, include_frames: bool = True) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "metadata": {
                "duration": self.metadata.duration,
                "startTime": self.metadata.start_time,
                "endTime": self.metadata.end_time,
                "appliedEdits": list(self.metadata.applied_edits),
            }
        }
        if include_frames and self.frames is not None:
            result["frames"] = [frame.to_dict() for frame in self.frames]
        if self.video_url is not None:
            result["videoUrl"] = self.video_url
        return result
