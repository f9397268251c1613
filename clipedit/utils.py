import json
import logging
import math
import os
from typing import Any, Dict, Hashable, Iterable, List, Optional

from .config import CONFIG

logger = logging.getLogger(f"clipedit.{__name__}")


def to_seconds(value: Any) -> Optional[float]:
    """
    Loosely coerces an AI-supplied time value into seconds.

    Accepts numbers, numeric strings and "HH:MM:SS.ss" / "MM:SS.ss" strings.
    Anything that is missing or unparseable (None, "", NaN, garbage) comes back
    as None so callers can apply their own default.

    Args:
        value (Any): The raw value from an action's params.

    Returns:
        Optional[float]: The time in seconds, or None.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        seconds = float(value)
        return None if math.isnan(seconds) else seconds

    if not isinstance(value, str) or not value.strip():
        return None

    parts: List[str] = value.strip().split(':')
    if len(parts) > 3:
        return None
    try:
        seconds = 0.0
        for part in parts:
            seconds = seconds * 60 + float(part)
    except ValueError:
        logger.debug(f"Could not parse time value '{value}'.")
        return None
    return None if math.isnan(seconds) else seconds


def to_float(value: Any, default: float) -> float:
    """Returns value as a float, or default when it is missing or not numeric."""
    if value is None or isinstance(value, bool):
        return default
    try:
        result = float(value)
    except (TypeError, ValueError):
        return default
    return default if math.isnan(result) else result


def dedupe_preserving_order(items: Iterable[Hashable]) -> List[Any]:
    seen = set()
    unique = []
    for item in items:
        if item not in seen:
            seen.add(item)
            unique.append(item)
    return unique


def format_number(value: float) -> str:
    """Formats a number the way a person would write it (2 -> '2', 0.5 -> '0.5')."""
    return f"{value:g}"


def log_run_summary(run_output_dir: str, config: Dict[str, Any], processed_video: Dict[str, Any]) -> Optional[str]:
    """
    Saves a JSON summary of a run's configuration and its edit results.

    Args:
        run_output_dir (str): The output directory for the run.
        config (Dict[str, Any]): The configuration dictionary used for the run.
        processed_video (Dict[str, Any]): The ProcessedVideo record as a dict
                                          (frames omitted, metadata kept).

    Returns:
        Optional[str]: The path of the written summary, or None if it could not be saved.
    """
    summary: Dict[str, Any] = {
        "run_configuration": config,
        "result": processed_video,
    }
    summary_path: str = os.path.join(run_output_dir, config.get("RUN_SUMMARY_FILENAME", CONFIG["RUN_SUMMARY_FILENAME"]))
    try:
        os.makedirs(run_output_dir, exist_ok=True)
        with open(summary_path, 'w', encoding='utf-8') as f:
            # Sets are written as lists; anything else unknown as its string form.
            json.dump(summary, f, indent=4, default=lambda o: list(o) if isinstance(o, set) else str(o))
        logger.info(f"📋 Run summary saved to {summary_path}")
        return summary_path
    except OSError as e:
        logger.error(f"❌ Could not save run summary to {summary_path}: {e}", exc_info=True)
        return None
