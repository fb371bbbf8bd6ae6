import logging
import os
import sys

from core.constants import AppConstants

logger = logging.getLogger(AppConstants.LOGGER_NAME)

LOG_FORMAT = "%(asctime)s - [%(levelname)s] - (%(filename)s:%(lineno)d) - %(message)s"

def get_log_directory() -> str:
    if sys.platform == "win32":
        base_dir = os.getenv("APPDATA")
        if not base_dir:
            base_dir = os.path.expanduser("~")
            logger.warning("Could not find APPDATA env variable, falling back to home directory.")
    elif sys.platform == "darwin":
        base_dir = os.path.expanduser("~/Library/Application Support")
    else:
        base_dir = os.getenv("XDG_DATA_HOME", os.path.expanduser("~/.local/share"))
    return os.path.join(base_dir, AppConstants.APP_NAME)

def _resolve_level(debug_enabled: bool) -> int:
    if os.getenv("NEON_LENS_SUPPRESS_DEBUG", "0") == "1":
        debug_enabled = False
    elif os.getenv("NEON_LENS_DEBUG", "0") == "1":
        debug_enabled = True
    return logging.DEBUG if debug_enabled else logging.INFO

def _add_file_handler(formatter: logging.Formatter, level: int) -> None:
    try:
        log_dir = get_log_directory()
        os.makedirs(log_dir, exist_ok=True)
        log_file_path = os.path.join(log_dir, "log.txt")
        file_handler = logging.FileHandler(log_file_path, mode="w", encoding="utf-8")
    except OSError:
        logger.error("Failed to set up file logger. Continuing with console-only logging.", exc_info=True)
        return

    file_handler.setFormatter(formatter)
    file_handler.setLevel(level)
    logger.addHandler(file_handler)
    logger.debug(f"File logging set up. Log file at: {log_file_path}")

def setup_logging(debug_enabled: bool = False, log_to_file: bool = True):
    """Configures the application logger; later calls only change its level."""
    level = _resolve_level(debug_enabled)

    if logger.handlers:
        logger.setLevel(level)
        for handler in logger.handlers:
            handler.setLevel(level)
        logger.debug(f"Logger level updated to {logging.getLevelName(level)}.")
        return

    logger.setLevel(level)
    formatter = logging.Formatter(LOG_FORMAT)

    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(formatter)
    stream_handler.setLevel(level)
    logger.addHandler(stream_handler)

    if log_to_file:
        _add_file_handler(formatter, level)

    logger.info(f"Logging initialized. Level: {logging.getLevelName(level)}.")
