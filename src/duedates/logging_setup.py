from __future__ import annotations

import logging
import sys
from typing import Union

_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def setup_logging(level: Union[int, str] = logging.INFO) -> logging.Logger:
    """
    Attach a console handler to the 'duedates' logger.

    Safe to call more than once: the handler is only installed the first time,
    later calls just adjust the level.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logger = logging.getLogger("duedates")
    logger.setLevel(level)
    if not any(getattr(h, "_duedates", False) for h in logger.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(_FORMAT))
        handler._duedates = True  # type: ignore[attr-defined]
        logger.addHandler(handler)
    return logger
