"""
Logging setup for the Kickabout backend

All modules import `logger` from here. Sinks:
- stdout, coloured, DEBUG when DEBUG_LEVEL > 0
- <LOG_DIR>/errors.log for ERROR and above
- <LOG_DIR>/debug.log when DEBUG_LEVEL > 0

Context bound with `logger.bind(key=value)` is appended to file lines.
"""

import os
import sys

from loguru import logger

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message} | {extra}"


def configure_logging(debug_level: int = 0, log_dir: str = "logs") -> None:
    logger.remove()
    logger.add(
        sys.stdout,
        format=CONSOLE_FORMAT,
        level="DEBUG" if debug_level > 0 else "INFO",
        colorize=True,
    )

    os.makedirs(log_dir, exist_ok=True)
    logger.add(
        os.path.join(log_dir, "errors.log"),
        format=FILE_FORMAT,
        level="ERROR",
        rotation="10 MB",
        retention="30 days",
        compression="zip",
    )
    if debug_level > 0:
        logger.add(
            os.path.join(log_dir, "debug.log"),
            format=FILE_FORMAT,
            level="DEBUG",
            rotation="50 MB",
            retention="7 days",
            compression="zip",
        )


# Read from the environment directly: config.py imports this module
configure_logging(
    debug_level=int(os.environ.get("DEBUG_LEVEL", 0)),
    log_dir=os.environ.get("LOG_DIR", "logs"),
)

__all__ = ["logger", "configure_logging"]
