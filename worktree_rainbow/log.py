"""Logging setup for Worktree Rainbow using loguru."""

import os
import sys

from loguru import logger

FMT = "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan> | {message}"


def setup_logging() -> None:
    dbg = os.getenv("WORKTREE_RAINBOW_DEBUG", "").lower() in ("1", "true")
    lvl = os.getenv("WORKTREE_RAINBOW_LOG_LEVEL", "DEBUG" if dbg else "INFO").upper()
    logger.remove()
    logger.add(sys.stderr, format=FMT, level=lvl, colorize=True, diagnose=False)

    log_file = os.getenv("WORKTREE_RAINBOW_LOG_FILE")
    if log_file:
        logger.add(
            log_file,
            format=FMT,
            level=lvl,
            rotation="5 MB",
            retention=3,
            diagnose=False,
        )
