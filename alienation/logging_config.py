"""
Logging configuration for Alienation.

Configures the root logger to write to stdout (or stderr for the
interactive CLI, so log lines do not tear the drawn frame).
"""

import logging
import os
import sys


def setup_logging(verbose: bool = False, stream=None):
    """Configure the root logger.

    Args:
        verbose: If True, log at DEBUG instead of INFO
        stream: Output stream; defaults to stdout
    """
    logger = logging.getLogger()

    env_verbose = os.getenv("ALIENATION_VERBOSE", "").lower() in ("1", "true", "yes")
    log_level = logging.DEBUG if (verbose or env_verbose) else logging.INFO
    logger.setLevel(log_level)

    if logger.hasHandlers():
        logger.handlers.clear()

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setLevel(log_level)
    handler.setFormatter(logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    ))
    logger.addHandler(handler)

    logging.debug("Logging initialized at %s", logging.getLevelName(log_level))
