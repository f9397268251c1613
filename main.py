# main.py
"""
Command-line entry point for applying AI editing actions to extracted frames.

Workflow:
1.  Parses command-line arguments for the frames, actions and run configuration.
2.  Sets up a dedicated output directory for the current run.
3.  Initializes logging.
4.  Loads the frames and the editing actions (a bare action list, or a full
    clip suggestion as returned by the model).
5.  Runs the edit pipeline. Frame edits go through a pass-through editor that
    records each prompt and leaves the image untouched, so a run can be
    inspected before wiring in a real image-edit model.
6.  Writes the resulting frames and a run summary.
"""

import argparse
import asyncio
import json
import logging
import os
import shutil
import time
from typing import Dict, List, Optional

import clipedit
from clipedit import setup_logging, log_run_summary


class PromptRecorder:
    """Frame edit callback that keeps the frame as-is and remembers what it was asked to do."""

    def __init__(self) -> None:
        self.prompts: List[Dict[str, object]] = []

    async def __call__(self, frame: clipedit.Frame, prompt: str,
                       prev_frame: Optional[clipedit.Frame] = None,
                       next_frame: Optional[clipedit.Frame] = None) -> str:
        self.prompts.append({"frame": frame.id, "prompt": prompt})
        return frame.data


def run_edits(frames_dir: str, actions_path: str, output_dir: str, run_name: str, fps: int) -> Optional[clipedit.ProcessedVideo]:
    """
    Loads frames and actions, applies the edits, and writes the results.

    Args:
        frames_dir: Directory of extracted frame images.
        actions_path: JSON file with editing actions or a clip suggestion.
        output_dir: Base output directory.
        run_name: Name of the run sub-directory.
        fps: Frame rate the frames were sampled at.

    Returns:
        The ProcessedVideo, or None if the inputs could not be loaded.
    """
    CONFIG = clipedit.CONFIG
    run_dir: str = os.path.join(output_dir, run_name)

    # Ensure a clean run by removing previous outputs
    if os.path.exists(run_dir):
        print(f"-> Found existing run '{run_name}'. Deleting old outputs.")
        shutil.rmtree(run_dir)
    os.makedirs(run_dir)

    setup_logging(run_dir)
    logger = logging.getLogger('clipedit.main')

    logger.info("--- EDIT RUN ---")
    logger.info(f"Frames:  {frames_dir}")
    logger.info(f"Actions: {actions_path}")
    logger.info(f"FPS:     {fps}")
    logger.info("----------------")

    try:
        frames = clipedit.load_frames_from_dir(frames_dir)
        actions, suggestion = clipedit.load_actions_file(actions_path)
    except FileNotFoundError as e:
        logger.critical(f"A required input is missing: {e}")
        return None
    except json.JSONDecodeError as e:
        logger.critical(f"Error parsing actions file: {e}. Please check file integrity.")
        return None
    except ValueError as e:
        logger.critical(f"Actions file has an unexpected shape: {e}")
        return None

    if suggestion is not None:
        logger.info(f"Clip suggestion: {suggestion.start_time:.2f}s - {suggestion.end_time:.2f}s "
                    f"({suggestion.viral_potential.value} potential). {suggestion.reason}")

    editor = PromptRecorder()
    processed = asyncio.run(clipedit.process_video_with_edits(frames, actions, fps, editor))

    clipedit.write_frames_to_dir(processed.frames or [], os.path.join(run_dir, CONFIG["FRAMES_SUBDIR"]))

    summary = processed.to_dict(include_frames=False)
    summary["framePrompts"] = editor.prompts
    log_run_summary(run_dir, CONFIG, summary)

    for entry in processed.metadata.applied_edits:
        logger.info(f"  • {entry}")
    logger.info(f"🎉 Done. {len(processed.frames or [])} frames ({processed.metadata.duration:.1f}s) in {run_dir}")
    return processed


if __name__ == "__main__":
    parser = argparse.ArgumentParser(
        description="Apply AI editing actions to a sequence of video frames.",
        formatter_class=argparse.RawTextHelpFormatter
    )
    parser.add_argument(
        "--frames-dir",
        type=str,
        help="Directory of extracted frame images, in filename order."
    )
    parser.add_argument(
        "--actions",
        type=str,
        help="JSON file with a list of editing actions or a full clip suggestion."
    )
    parser.add_argument(
        "--output-dir",
        type=str,
        default="output",
        help="Base directory for run outputs. Defaults to 'output'."
    )
    parser.add_argument(
        "--run-name",
        type=str,
        default=f"run_{int(time.time())}",
        help="A unique name for this run. Defaults to a timestamp."
    )
    parser.add_argument(
        "--fps",
        type=int,
        default=clipedit.CONFIG["DEFAULT_FPS"],
        help="Frame rate the frames were sampled at."
    )
    parser.add_argument(
        "--list-tools",
        action="store_true",
        help="Print the editing tools as they are described to the model, then exit."
    )
    args = parser.parse_args()

    if args.list_tools:
        print(clipedit.get_tool_descriptions())
    elif not args.frames_dir or not args.actions:
        parser.error("--frames-dir and --actions are required unless --list-tools is given.")
    else:
        start_time = time.time()
        run_edits(
            frames_dir=args.frames_dir,
            actions_path=args.actions,
            output_dir=args.output_dir,
            run_name=args.run_name,
            fps=args.fps,
        )
        logging.getLogger('clipedit').info(f"Total execution time: {time.time() - start_time:.2f} seconds.")
