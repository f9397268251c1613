import json
import math

import pytest

from clipedit import AISuggestion, EditingAction, ViralPotential
from clipedit.Schemas import (
    build_generation_config,
    clip_suggestion_schema,
    parse_clip_suggestion,
    parse_suggestions,
    strip_code_fences,
    suggestion_schema,
)
from clipedit.utils import to_seconds

CLIP_REPLY = {
    "startTime": 3.5,
    "endTime": 11.0,
    "duration": 7.5,
    "reason": "The dog catches the frisbee mid-air.",
    "viralPotential": "high",
    "editingSuggestions": ["Slow down the catch", "Add a caption"],
    "editingActions": [
        {"tool": "speed", "params": {"startTime": 2, "endTime": 3, "speedMultiplier": 0.5}, "description": "Slow-mo"},
        {"tool": "textOverlay", "params": {"text": "GOOD BOY", "position": {"x": 50, "y": 15}}},
    ],
}


def test_clip_schema_lists_every_tool():
    tool_schema = clip_suggestion_schema["properties"]["editingActions"]["items"]["properties"]["tool"]
    assert tool_schema["enum"] == [
        "trim", "textOverlay", "effects", "audio", "cropZoom", "speed", "colorGrading", "transition",
    ]
    assert "editingActions" not in clip_suggestion_schema["required"]
    assert suggestion_schema["items"]["required"] == ["frameIndex", "suggestion"]


def test_generation_config_requests_json():
    config = build_generation_config(suggestion_schema, temperature=0.4)
    assert config.response_mime_type == "application/json"
    assert config.response_schema is suggestion_schema
    assert config.temperature == 0.4


def test_strip_code_fences():
    assert strip_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'
    assert strip_code_fences('  [1, 2]  ') == '[1, 2]'


def test_parse_clip_suggestion_from_fenced_reply():
    suggestion = parse_clip_suggestion("```json\n" + json.dumps(CLIP_REPLY) + "\n```")

    assert suggestion.viral_potential is ViralPotential.HIGH
    assert suggestion.editing_suggestions == ("Slow down the catch", "Add a caption")
    assert suggestion.editing_actions[0] == EditingAction(
        "speed", {"startTime": 2, "endTime": 3, "speedMultiplier": 0.5}, "Slow-mo")
    # Missing description defaults silently.
    assert suggestion.editing_actions[1].description == ""


def test_parse_clip_suggestion_without_actions():
    reply = {k: v for k, v in CLIP_REPLY.items() if k != "editingActions"}
    assert parse_clip_suggestion(reply).editing_actions == ()


def test_parse_clip_suggestion_rejects_missing_required_field():
    reply = {k: v for k, v in CLIP_REPLY.items() if k != "reason"}
    with pytest.raises(ValueError, match="reason"):
        parse_clip_suggestion(reply)


def test_parse_clip_suggestion_rejects_unknown_potential():
    with pytest.raises(ValueError):
        parse_clip_suggestion({**CLIP_REPLY, "viralPotential": "legendary"})


def test_parse_clip_suggestion_rejects_bad_json():
    with pytest.raises(ValueError):
        parse_clip_suggestion("The model says hello")
    with pytest.raises(ValueError):
        parse_clip_suggestion("[1, 2, 3]")


def test_parse_suggestions():
    reply = '[{"frameIndex": 1.5, "suggestion": "Add confetti"}, {"frameIndex": 4, "suggestion": "Zoom in"}]'
    assert parse_suggestions(reply) == [AISuggestion(1.5, "Add confetti"), AISuggestion(4.0, "Zoom in")]
    with pytest.raises(ValueError):
        parse_suggestions('[{"frameIndex": 2}]')
    with pytest.raises(ValueError):
        parse_suggestions('{"frameIndex": 2, "suggestion": "x"}')


@pytest.mark.parametrize("value, expected", [
    (2, 2.0),
    ("2.5", 2.5),
    ("01:30", 90.0),
    ("1:02:03.5", 3723.5),
    (None, None),
    ("", None),
    ("soon", None),
    (True, None),
    (math.nan, None),
])
def test_to_seconds(value, expected):
    assert to_seconds(value) == expected


@pytest.mark.parametrize("field", ["startTime", "endTime", "duration", "reason", "viralPotential", "editingSuggestions"])
def test_parse_clip_suggestion_rejects_null_required_field(field):
    with pytest.raises(ValueError, match=field):
        parse_clip_suggestion({**CLIP_REPLY, field: None})


@pytest.mark.parametrize("reply", [
    {**CLIP_REPLY, "startTime": "soon"},
    {**CLIP_REPLY, "duration": [7.5]},
    {**CLIP_REPLY, "editingSuggestions": "Add a caption"},
    {**CLIP_REPLY, "editingActions": {"tool": "trim"}},
])
def test_parse_clip_suggestion_rejects_wrong_types(reply):
    with pytest.raises(ValueError):
        parse_clip_suggestion(reply)


def test_parse_clip_suggestion_allows_null_actions():
    assert parse_clip_suggestion({**CLIP_REPLY, "editingActions": None}).editing_actions == ()


def test_parse_suggestions_rejects_null_frame_index():
    with pytest.raises(ValueError):
        parse_suggestions('[{"frameIndex": null, "suggestion": "Zoom in"}]')
