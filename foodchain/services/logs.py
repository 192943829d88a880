import logging
import os
import sys
from typing import Optional, Union

_FORMAT = "%(asctime)s [%(name)s] %(levelname)s: %(message)s"


def parse_level(value: Union[str, int, None]) -> int:
    """Numeric level for "debug", "WARN", 20, ...; INFO for anything unknown."""
    if isinstance(value, int):
        return value
    level = logging.getLevelName((value or "INFO").strip().upper())
    return level if isinstance(level, int) else logging.INFO


def get_logger(name: str, level: Union[str, int, None] = None) -> logging.Logger:
    """Stdout logger for name.

    The handler is attached once. level wins over LOG_LEVEL, which is only
    read the first time the logger is set up.
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(_FORMAT, "%Y-%m-%d %H:%M:%S"))
        logger.addHandler(handler)
        logger.propagate = False
        if level is None:
            level = os.environ.get("LOG_LEVEL")
    if level is not None or logger.level == logging.NOTSET:
        logger.setLevel(parse_level(level))
    return logger
