"""Logging setup. Diagnostics go to stderr through loguru; user-facing output does not."""

import os
import sys

from loguru import logger

LOG_LEVEL_ENV = "CAT_LOG_LEVEL"
LEVELS = {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}


def setup_logger(verbose: bool = False) -> str:
    """Replace loguru's default sink with a stderr sink at the resolved level.

    Precedence: --verbose > CAT_LOG_LEVEL > WARNING
    """
    level = "DEBUG" if verbose else os.environ.get(LOG_LEVEL_ENV, "WARNING").upper()
    if level not in LEVELS:
        level = "WARNING"

    # Clear existing sinks to avoid duplicates
    logger.remove()
    logger.add(
        sys.stderr,
        level=level,
        format="<dim>{time:HH:mm:ss}</dim> <level>{level: <7}</level> <cyan>{name}</cyan> {message}",
        catch=True,
    )
    logger.debug(f"Logger initialized at {level}")
    return level
