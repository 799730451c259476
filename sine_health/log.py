"""Logging configuration.

Per-sample messages (every decoded reading and every dropped frame) go to a
separate logger, so debug output for connections and clients stays readable
at one notification per heartbeat.
"""

import logging
import sys

APP_LOGGER = "sine_health"
SAMPLE_LOGGER = "sine_health.samples"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%H:%M:%S"

VALID_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def sample_logger() -> logging.Logger:
    """Logger for per-sample messages."""
    return logging.getLogger(SAMPLE_LOGGER)


def setup_logging(level: str = "INFO", log_samples: bool = False) -> None:
    """Configure logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_samples: Emit a DEBUG line per received sample, regardless of level
    """
    level_upper = level.upper()
    invalid_level = None
    if level_upper not in VALID_LEVELS:
        invalid_level = level
        level_upper = "INFO"

    # Root at WARNING keeps bleak and websockets quiet; stderr leaves stdout
    # to the device selection prompt
    logging.basicConfig(
        level=logging.WARNING,
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
        stream=sys.stderr,
        force=True,
    )

    app_logger = logging.getLogger(APP_LOGGER)
    app_logger.setLevel(getattr(logging, level_upper))
    sample_logger().setLevel(logging.DEBUG if log_samples else logging.WARNING)

    if invalid_level:
        app_logger.warning("Unknown log level '%s', defaulting to INFO", invalid_level)
