import logging
import os
import sys
from typing import Optional

from .config import CONFIG


def setup_logging(run_output_dir: Optional[str] = None) -> logging.Logger:
    """
    Configures logging for the 'clipedit' package.

    Console gets INFO and above. When a run directory is given, DEBUG and above
    also go to a log file inside it.

    Args:
        run_output_dir (Optional[str]): Directory for the log file. If None,
                                        only console logging is configured.

    Returns:
        logging.Logger: The package root logger.
    """
    logger = logging.getLogger('clipedit')
    logger.setLevel(logging.DEBUG)

    # Clear existing handlers to prevent duplicate logs if called multiple times
    if logger.hasHandlers():
        logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))
    logger.addHandler(console_handler)

    if run_output_dir is None:
        return logger

    log_file_path = os.path.join(run_output_dir, CONFIG["LOG_FILENAME"])
    try:
        os.makedirs(run_output_dir, exist_ok=True)
        file_handler = logging.FileHandler(log_file_path, encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
        logger.addHandler(file_handler)
        logger.info(f"Logging initialized. Detailed log file at: {log_file_path}")
    except OSError as e:
        logger.error(f"Failed to set up file logging to {log_file_path}: {e}")
        logger.info("Proceeding without file logging. All logs will go to console.")

    return logger
