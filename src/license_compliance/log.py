import logging
import sys
from typing import Optional, TextIO

LOG_FORMAT = "%(levelname)s | %(name)s | %(message)s"

_LEVELS = {0: logging.WARNING, 1: logging.INFO}


def configure_logging(verbosity: int = 0, stream: Optional[TextIO] = None) -> None:
    """Send license_compliance logs to stderr.

    ``verbosity`` is the number of ``-v`` flags: 0 shows warnings and errors,
    1 adds progress messages, 2 or more adds debug output.
    """
    level = _LEVELS.get(verbosity, logging.DEBUG)
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    logger = logging.getLogger("license_compliance")
    for existing in list(logger.handlers):
        logger.removeHandler(existing)
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False
