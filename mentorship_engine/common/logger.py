import functools
import logging
import os

from mentorship_engine.common.environment_constants import LOG_LEVEL

ENGINE_LOGGER_NAME = "mentorship_engine"
LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


@functools.cache
def _configure(level_name: str) -> int:
    """
    Install the root handler once per process. Unknown level names fall back
    to INFO.
    """
    level = logging.getLevelNamesMapping().get(level_name.upper(), logging.INFO)
    logging.basicConfig(level=level, format=LOG_FORMAT)
    return level


def get_logger(name=ENGINE_LOGGER_NAME):
    """
    Return a logger with the process-wide configuration applied.

    Services receive this logger through their constructors and prefix their
    messages with `[ServiceName]`.

    Environment Variables:
        LOG_LEVEL (str): DEBUG, INFO, WARNING, ERROR or CRITICAL; default INFO.
    """
    _configure(os.environ.get(LOG_LEVEL, "INFO"))
    return logging.getLogger(name)
