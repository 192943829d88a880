import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Optional

from foodchain.services.logs import get_logger

_MAX_LOGS = 200


@dataclass
class StatusStore:
    """Recent server events, newest last. Every line is mirrored to stdout logging."""
    logs: Deque[str] = field(default_factory=lambda: deque(maxlen=_MAX_LOGS))
    logger_name: str = "foodchain"
    log_level: Optional[str] = None
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self):
        self._logger = get_logger(self.logger_name, self.log_level)

    def log(self, msg: str):
        # deque.append is atomic, so worker threads can log without a lock
        self.logs.append(msg)
        self._logger.info(msg)
