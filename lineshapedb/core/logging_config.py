"""
Logging configuration for lineshapedb.

All loggers live under the ``lineshapedb`` namespace so that applications
embedding the library can tune them with a single ``logging.getLogger``
call. The command-line tool calls :func:`setup_logging` once at start-up.
"""

import logging
import sys
from typing import Optional, Union

DEFAULT_FORMAT = "[%(asctime)s] %(name)s - %(levelname)s - %(message)s"
DEFAULT_DATEFMT = "%Y-%m-%d %H:%M:%S"


def _resolve_level(level: Union[str, int]) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown logging level: {level}")
    return resolved


def setup_logging(
    level: Union[str, int] = "INFO",
    format_string: Optional[str] = None,
    stream: Optional[object] = None,
) -> None:
    """
    Configure logging for lineshapedb.

    Parameters
    ----------
    level : str or int
        Logging level: 'DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'
        or the numeric equivalent
    format_string : str, optional
        Custom format string. If None, uses :data:`DEFAULT_FORMAT`.
    stream : file-like object, optional
        Stream to write logs to. If None, uses sys.stderr.
    """
    logging.basicConfig(
        level=_resolve_level(level),
        format=format_string or DEFAULT_FORMAT,
        stream=stream if stream is not None else sys.stderr,
        datefmt=DEFAULT_DATEFMT,
        force=True,
    )


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a module.

    Parameters
    ----------
    name : str
        Logger name relative to the package (e.g. 'morph.engine')

    Returns
    -------
    logging.Logger
        Logger instance named ``lineshapedb.<name>``
    """
    return logging.getLogger(f"lineshapedb.{name}")
