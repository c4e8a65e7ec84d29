"""Logging configuration using loguru, always to stderr so command output stays clean."""

import sys

from loguru import logger


def setup_logging(log_level: str = "WARNING") -> None:
    """Configure loguru for a CLI process.

    Colour is left to loguru, which only emits it when stderr is a terminal.

    Args:
        log_level: Minimum log level to output
    """
    # Remove default handler
    logger.remove()
    logger.add(
        sys.stderr,
        format=(
            "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
        ),
        level=log_level,
    )


__all__ = ["logger", "setup_logging"]
