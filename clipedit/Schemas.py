# clipedit/Schemas.py
"""
Structured-output schemas handed to Gemini when asking for clip and editing
suggestions, plus helpers for turning the model's JSON reply into data-model
objects. Making the request itself is up to the caller.
"""
import json
from typing import Any, Dict, List, Mapping, Union

import google.generativeai as genai

from .DataModel import AISuggestion, ClipSuggestion
from .ToolRegistry import ToolName

suggestion_schema: Dict[str, Any] = {
    "type": "ARRAY",
    "items": {
        "type": "OBJECT",
        "properties": {
            "frameIndex": {
                "type": "NUMBER",
                "description": "The time in seconds, relative to the start of the clip, where the suggestion applies. Can be a float.",
            },
            "suggestion": {
                "type": "STRING",
                "description": "A creative and actionable editing suggestion for this frame. e.g., \"Add celebratory confetti\" or \"Overlay text: 'Unbelievable!'\"",
            },
        },
        "required": ["frameIndex", "suggestion"],
    },
}

# Every parameter any tool understands; the model fills in the ones its tool needs.
_action_params_schema: Dict[str, Any] = {
    "type": "OBJECT",
    "description": "Parameters specific to the tool",
    "properties": {
        "text": {"type": "STRING"},
        "startTime": {"type": "NUMBER"},
        "endTime": {"type": "NUMBER"},
        "duration": {"type": "NUMBER"},
        "position": {
            "type": "OBJECT",
            "properties": {"x": {"type": "NUMBER"}, "y": {"type": "NUMBER"}},
        },
        "effect": {"type": "STRING"},
        "audioType": {"type": "STRING"},
        "volume": {"type": "NUMBER"},
        "fadeIn": {"type": "BOOLEAN"},
        "fadeOut": {"type": "BOOLEAN"},
        "cropArea": {
            "type": "OBJECT",
            "properties": {
                "x": {"type": "NUMBER"},
                "y": {"type": "NUMBER"},
                "width": {"type": "NUMBER"},
                "height": {"type": "NUMBER"},
            },
        },
        "zoomLevel": {"type": "NUMBER"},
        "panDirection": {"type": "STRING"},
        "speedMultiplier": {"type": "NUMBER"},
        "preset": {"type": "STRING"},
        "intensity": {"type": "NUMBER"},
        "type": {"type": "STRING"},
    },
}

clip_suggestion_schema: Dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "startTime": {
            "type": "NUMBER",
            "description": "The starting time in seconds for the optimized clip (relative to the analyzed video segment).",
        },
        "endTime": {
            "type": "NUMBER",
            "description": "The ending time in seconds for the optimized clip (relative to the analyzed video segment).",
        },
        "duration": {
            "type": "NUMBER",
            "description": "The duration of the clip in seconds (ideally 5-10 seconds for optimal virality).",
        },
        "reason": {
            "type": "STRING",
            "description": "Explanation of why this specific sequence was chosen for viral potential.",
        },
        "viralPotential": {
            "type": "STRING",
            "enum": ["low", "medium", "high"],
            "description": "Assessment of the viral potential of this clip.",
        },
        "editingSuggestions": {
            "type": "ARRAY",
            "items": {"type": "STRING"},
            "description": "Specific editing suggestions to enhance the viral potential of this clip.",
        },
        "editingActions": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "tool": {
                        "type": "STRING",
                        "enum": [tool.value for tool in ToolName],
                        "description": "The editing tool to use",
                    },
                    "params": _action_params_schema,
                    "description": {
                        "type": "STRING",
                        "description": "Human-readable description of what this action does",
                    },
                },
                "required": ["tool", "params", "description"],
            },
            "description": "Automated editing actions to apply using the available tools.",
        },
    },
    "required": ["startTime", "endTime", "duration", "reason", "viralPotential", "editingSuggestions"],
}


def build_generation_config(schema: Dict[str, Any], temperature: float = 1.0) -> "genai.types.GenerationConfig":
    """Generation config asking Gemini for JSON that conforms to `schema`."""
    return genai.types.GenerationConfig(
        response_mime_type="application/json",
        response_schema=schema,
        temperature=temperature,
    )


def strip_code_fences(response_text: str) -> str:
    """Removes a ```json ... ``` wrapper the model sometimes adds around its JSON."""
    response_text = response_text.strip()
    if response_text.startswith("```json"):
        response_text = response_text[7:]
    if response_text.startswith("```"):
        response_text = response_text[3:]
    if response_text.endswith("```"):
        response_text = response_text[:-3]
    return response_text.strip()


def _load(reply: Union[str, bytes, Mapping[str, Any], List[Any]]) -> Any:
    if isinstance(reply, bytes):
        reply = reply.decode("utf-8")
    if isinstance(reply, str):
        # json.JSONDecodeError is a ValueError; callers handle both the same way.
        return json.loads(strip_code_fences(reply))
    return reply


def parse_clip_suggestion(reply: Union[str, bytes, Mapping[str, Any]]) -> ClipSuggestion:
    """
    Parses a clip-suggestion reply (raw model text or already-decoded JSON).

    Raises:
        ValueError: If the reply is not valid JSON or does not match clip_suggestion_schema.
    """
    data = _load(reply)
    if not isinstance(data, Mapping):
        raise ValueError(f"Expected a JSON object for a clip suggestion, got {type(data).__name__}.")
    return ClipSuggestion.from_dict(data)


def parse_suggestions(reply: Union[str, bytes, List[Any]]) -> List[AISuggestion]:
    """
    Parses a per-moment suggestion reply (suggestion_schema).

    Raises:
        ValueError: If the reply is not a JSON array of suggestion objects.
    """
    data = _load(reply)
    if not isinstance(data, list):
        raise ValueError(f"Expected a JSON array of suggestions, got {type(data).__name__}.")
    suggestions = []
    for item in data:
        if not isinstance(item, Mapping):
            raise ValueError(f"Expected a suggestion object, got {type(item).__name__}.")
        suggestions.append(AISuggestion.from_dict(item))
    return suggestions
