"""Logging configuration utilities."""

import logging
from typing import List, Optional, Tuple

# Debug levels accepted on the command line, lowest to highest.
DEBUG_ERROR = 0
DEBUG_INFO = 1
DEBUG_VERBOSE = 2
DEBUG_NOISY = 3

_DEBUG_LEVEL_NAMES = {
    DEBUG_ERROR: "ERROR",
    DEBUG_INFO: "INFO",
    DEBUG_VERBOSE: "DEBUG",
    DEBUG_NOISY: "DEBUG",
}


def setup_logging(
    level: str = "INFO",
    format_string: Optional[str] = None,
    quiet_loggers: Optional[List[str]] = None,
) -> None:
    """Configure logging for netkeeper services.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        format_string: Custom format string for log messages.
        quiet_loggers: List of logger names to set to WARNING level.
    """
    if format_string is None:
        format_string = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    # Convert string to logging level
    log_level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        level=log_level,
        format=format_string,
    )

    for logger_name in quiet_loggers or []:
        logging.getLogger(logger_name).setLevel(logging.WARNING)


def clamp_debug_level(level: int) -> Tuple[int, bool]:
    """Clamp a numeric debug level into the supported 0-3 range.

    Returns:
        Tuple of (clamped level, whether clamping was needed).
    """
    clamped = min(max(level, DEBUG_ERROR), DEBUG_NOISY)
    return clamped, clamped != level


def setup_debug_logging(debug_level: int) -> None:
    """Configure logging from a numeric debug level.

    Levels below NOISY keep third-party loggers at WARNING so only
    netkeeper's own debug output shows up.
    """
    level_name = _DEBUG_LEVEL_NAMES[debug_level]
    quiet = [] if debug_level >= DEBUG_NOISY else ["paho", "inotify_simple"]
    setup_logging(level_name, quiet_loggers=quiet)

