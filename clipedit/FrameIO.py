import base64
import json
import logging
import mimetypes
import os
from typing import Any, List, Optional, Sequence, Tuple

from .DataModel import ClipSuggestion, EditingAction, Frame

logger = logging.getLogger(f"clipedit.{__name__}")

IMAGE_EXTENSIONS = ('.jpg', '.jpeg', '.png', '.webp')


def load_frames_from_dir(frames_dir: str) -> List[Frame]:
    """
    Loads every image in a directory as a base64-encoded Frame.

    Files are taken in filename order, so zero-padded names (frame_0001.jpg, ...)
    keep their playback order. Non-image files are ignored.

    Args:
        frames_dir (str): Directory containing the extracted frames.

    Returns:
        List[Frame]: Frames with ids 0..n-1.

    Raises:
        FileNotFoundError: If the directory does not exist.
    """
    if not os.path.isdir(frames_dir):
        raise FileNotFoundError(f"Frames directory not found: {frames_dir}")

    filenames = sorted(f for f in os.listdir(frames_dir) if f.lower().endswith(IMAGE_EXTENSIONS))
    frames: List[Frame] = []
    for index, filename in enumerate(filenames):
        path = os.path.join(frames_dir, filename)
        with open(path, 'rb') as f:
            encoded = base64.b64encode(f.read()).decode('ascii')
        mime_type = mimetypes.guess_type(filename)[0] or 'image/jpeg'
        frames.append(Frame(id=index, data=encoded, mime_type=mime_type))

    logger.info(f"🖼️ Loaded {len(frames)} frames from {frames_dir}")
    return frames


def write_frames_to_dir(frames: Sequence[Frame], output_dir: str) -> Optional[str]:
    """
    Decodes frames back to image files named frame_<id>.<ext>.

    Returns:
        Optional[str]: The output directory, or None if writing failed.
    """
    try:
        os.makedirs(output_dir, exist_ok=True)
        for frame in frames:
            extension = mimetypes.guess_extension(frame.mime_type) or '.jpg'
            path = os.path.join(output_dir, f"frame_{frame.id:05d}{extension}")
            with open(path, 'wb') as f:
                f.write(base64.b64decode(frame.data))
    except (OSError, ValueError) as e:
        logger.error(f"❌ Could not write frames to {output_dir}: {e}", exc_info=True)
        return None

    logger.info(f"✅ Wrote {len(frames)} frames to {output_dir}")
    return output_dir


def load_actions_file(actions_path: str) -> Tuple[List[EditingAction], Optional[ClipSuggestion]]:
    """
    Reads editing actions from a JSON file.

    The file may hold either a bare list of actions or a full clip suggestion
    (as returned by the model), in which case its editingActions are used.

    Returns:
        Tuple[List[EditingAction], Optional[ClipSuggestion]]: The actions, and the
        clip suggestion when the file contained one.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file is not valid JSON or has an unexpected shape.
    """
    with open(actions_path, 'r', encoding='utf-8') as f:
        data: Any = json.load(f)

    if isinstance(data, list):
        return [EditingAction.from_dict(a) for a in data if isinstance(a, dict)], None
    if isinstance(data, dict):
        suggestion = ClipSuggestion.from_dict(data)
        return list(suggestion.editing_actions), suggestion
    raise ValueError(f"Unexpected JSON in {actions_path}: expected a list of actions or a clip suggestion.")
