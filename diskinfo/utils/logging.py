"""
Logging configuration utilities.

This module provides functions for setting up and configuring logging.
"""
import logging

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def resolve_level(name: str, debug: bool = False) -> int:
    """
    Map a level name such as ``"info"`` to its logging constant.

    Args:
        name: Level name, case-insensitive
        debug: Force DEBUG regardless of *name*

    Returns:
        The numeric logging level

    Raises:
        ValueError: If *name* is not a known level
    """
    if debug:
        return logging.DEBUG
    level = logging.getLevelName(name.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {name}")
    return level


def setup_logging(level_name: str = "info", debug: bool = False) -> None:
    """
    Configure logging for the application.

    Args:
        level_name: Root level name (debug, info, warning, error)
        debug: Whether to enable debug logging
    """
    level = resolve_level(level_name, debug)

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
    )

    logging.getLogger("diskinfo").setLevel(level)
