import asyncio
import time

import pytest

from clipedit import CONFIG, Frame
from clipedit.FramePrimitives import (
    apply_speed_change,
    apply_text_overlay,
    apply_trim,
    resolve_trim_bounds,
    select_range_key_frames,
    select_spread_key_frames,
)


def make_frames(count):
    return [Frame(id=i, data=f"f{i}", mime_type="image/jpeg") for i in range(count)]


def assert_dense_ids(frames):
    assert [f.id for f in frames] == list(range(len(frames)))


class RecordingEditor:
    """Async edit callback that tags the frame data and records each call."""

    def __init__(self, fail_on=()):
        self.calls = []
        self.fail_on = set(fail_on)

    async def __call__(self, frame, prompt, prev_frame=None, next_frame=None):
        self.calls.append((frame.id, prompt, prev_frame, next_frame))
        if frame.id in self.fail_on:
            raise RuntimeError(f"edit service failed on frame {frame.id}")
        return f"edited-{frame.data}"


# --- trim ---

def test_trim_keeps_inclusive_frame_range():
    result = asyncio.run(apply_trim(make_frames(100), 1, 3, fps=10))
    assert len(result) == 21
    assert result[0].data == "f10"
    assert result[-1].data == "f30"
    assert_dense_ids(result)


def test_trim_from_zero_matches_expected_length():
    result = asyncio.run(apply_trim(make_frames(100), 0, 2, fps=10))
    assert len(result) == 21
    assert_dense_ids(result)


def test_trim_with_start_after_end_is_noop():
    frames = make_frames(100)
    result = asyncio.run(apply_trim(frames, 5, 3, fps=10))
    assert result == frames


def test_trim_clamps_missing_and_out_of_range_end():
    frames = make_frames(100)
    missing_end = asyncio.run(apply_trim(frames, 2, None, fps=10))
    beyond_end = asyncio.run(apply_trim(frames, 2, 50, fps=10))
    assert len(missing_end) == 80
    assert missing_end == beyond_end
    assert missing_end[0].data == "f20"
    assert missing_end[-1].data == "f99"


def test_trim_treats_zero_end_as_missing():
    assert resolve_trim_bounds(make_frames(40), 1, 0, fps=10) == (1, 4.0)


def test_trim_invalid_start_defaults_to_zero():
    assert resolve_trim_bounds(make_frames(40), None, 2, fps=10) == (0.0, 2)
    assert resolve_trim_bounds(make_frames(40), "not a time", 2, fps=10) == (0.0, 2)
    assert resolve_trim_bounds(make_frames(40), 0, 2, fps=10) == (0.0, 2)


def test_trim_does_not_touch_input():
    frames = make_frames(50)
    asyncio.run(apply_trim(frames, 1, 2, fps=10))
    assert_dense_ids(frames)
    assert len(frames) == 50


# --- speed ---

def test_speed_of_one_is_identity():
    frames = make_frames(30)
    assert asyncio.run(apply_speed_change(frames, 0, 2, 1, fps=10)) == frames


@pytest.mark.parametrize("multiplier, kept_from_range", [(2, 11), (3, 7), (2.5, 11)])
def test_speed_up_decimates_range(multiplier, kept_from_range):
    # Range 0-2s covers frames 0..20 (21 frames); the other 79 pass through.
    result = asyncio.run(apply_speed_change(make_frames(100), 0, 2, multiplier, fps=10))
    assert len(result) == kept_from_range + 79
    assert_dense_ids(result)


def test_speed_up_keeps_frames_outside_range():
    result = asyncio.run(apply_speed_change(make_frames(100), 0, 2, 2, fps=10))
    assert [f.data for f in result[:3]] == ["f0", "f2", "f4"]
    assert result[11].data == "f21"


@pytest.mark.parametrize("multiplier, copies", [(0.5, 2), (0.25, 4), (0.4, 2)])
def test_slow_down_duplicates_range(multiplier, copies):
    # Range 0-1s covers frames 0..10 (11 frames); the other 89 pass through.
    result = asyncio.run(apply_speed_change(make_frames(100), 0, 1, multiplier, fps=10))
    assert len(result) == 11 * copies + 89
    assert_dense_ids(result)
    assert [f.data for f in result[:copies + 1]] == ["f0"] * copies + ["f1"]


def test_speed_rejects_non_positive_multiplier():
    with pytest.raises(ValueError):
        asyncio.run(apply_speed_change(make_frames(10), 0, 1, 0, fps=10))


# --- key frames ---

def test_range_key_frames_are_first_middle_last():
    assert select_range_key_frames(10, 30, 100) == [10, 20, 30]


def test_range_key_frames_are_deduplicated_and_bounded():
    assert select_range_key_frames(5, 55, 10) == [5, 9]
    assert select_range_key_frames(4, 4, 10) == [4]
    assert select_range_key_frames(-3, 1, 10) == [1]


def test_spread_key_frames():
    assert select_spread_key_frames(100) == [0, 25, 50, 75, 99]
    assert select_spread_key_frames(3) == [0, 1, 2]
    assert select_spread_key_frames(1) == [0]
    assert select_spread_key_frames(0) == []


# --- text overlay ---

def test_text_overlay_edits_only_key_frames():
    frames = make_frames(100)
    editor = RecordingEditor()
    result = asyncio.run(apply_text_overlay(frames, "Wow", {"x": 50, "y": 80}, 1.0, 2.0, 10, editor))

    assert [call[0] for call in editor.calls] == [10, 20, 30]
    edited = [f.id for f in result if f.data.startswith("edited-")]
    assert edited == [10, 20, 30]
    assert result[15].data == "f15"
    assert_dense_ids(result)


def test_text_overlay_prompt_and_neighbours():
    frames = make_frames(100)
    editor = RecordingEditor()
    asyncio.run(apply_text_overlay(frames, "Wow", {"x": 50, "y": 80}, 1.0, 2.0, 10, editor))

    frame_id, prompt, prev_frame, next_frame = editor.calls[0]
    assert prompt == 'Add text overlay "Wow" at position 50%, 80% from top-left. Make it clearly visible with good contrast.'
    assert prev_frame.id == 9
    assert next_frame.id == 11


def test_text_overlay_never_edits_past_the_end():
    editor = RecordingEditor()
    asyncio.run(apply_text_overlay(make_frames(10), "Hi", {"x": 10, "y": 10}, 0.5, 5.0, 10, editor))
    called = [call[0] for call in editor.calls]
    assert len(called) <= 3
    assert all(index < 10 for index in called)


def test_text_overlay_first_and_last_frames_have_no_outer_neighbour():
    editor = RecordingEditor()
    asyncio.run(apply_text_overlay(make_frames(5), "Hi", {"x": 0, "y": 0}, 0, 1.0, 10, editor))
    by_id = {call[0]: call for call in editor.calls}
    assert by_id[0][2] is None
    assert by_id[4][3] is None


def test_text_overlay_continues_after_frame_failure():
    editor = RecordingEditor(fail_on={20})
    result = asyncio.run(apply_text_overlay(make_frames(100), "Wow", {"x": 50, "y": 50}, 1.0, 2.0, 10, editor))
    assert len(editor.calls) == 3
    assert result[10].data == "edited-f10"
    assert result[20].data == "f20"
    assert result[30].data == "edited-f30"


def test_text_overlay_accepts_sync_callback():
    def editor(frame, prompt, prev_frame, next_frame):
        return "sync-" + frame.data

    result = asyncio.run(apply_text_overlay(make_frames(20), "Hi", {"x": 1, "y": 2}, 0, 1.0, 10, editor))
    assert result[0].data == "sync-f0"


def test_text_overlay_gives_up_on_slow_callback(monkeypatch):
    monkeypatch.setitem(CONFIG, "EDIT_FRAME_TIMEOUT_SEC", 0.01)

    async def slow_editor(frame, prompt, prev_frame, next_frame):
        await asyncio.sleep(1)
        return "too-late"

    frames = make_frames(20)
    result = asyncio.run(apply_text_overlay(frames, "Hi", {"x": 1, "y": 2}, 0, 1.0, 10, slow_editor))
    assert result == frames


def test_text_overlay_gives_up_on_slow_sync_callback(monkeypatch):
    monkeypatch.setitem(CONFIG, "EDIT_FRAME_TIMEOUT_SEC", 0.01)

    def slow_editor(frame, prompt, prev_frame, next_frame):
        time.sleep(0.2)
        return "too-late"

    frames = make_frames(20)
    result = asyncio.run(apply_text_overlay(frames, "Hi", {"x": 1, "y": 2}, 0, 1.0, 10, slow_editor))
    assert result == frames


def test_speed_up_decimates_by_absolute_index():
    # At 1fps the range 1-3s covers frames 1..3; with stride 2 only frame 2 survives,
    # because the stride counts from frame 0, not from the start of the range.
    result = asyncio.run(apply_speed_change(make_frames(10), 1, 3, 2, fps=1))
    assert [f.data for f in result] == ["f0", "f2", "f4", "f5", "f6", "f7", "f8", "f9"]
    assert_dense_ids(result)
