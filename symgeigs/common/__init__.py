"""
Common utilities shared by the eigensolvers: console and file logging.

Example:
    >>> from symgeigs.common import get_global_logger
    >>> logger = get_global_logger()
    >>> logger.info("Shift set to sigma = 0.0", lvl=1)
"""

from .flog import Logger, Colors, get_global_logger

__all__ = ["Logger", "Colors", "get_global_logger"]
