"""Logger setup. Modules log through `logging.getLogger(__name__)`, which all hang under the 'chessbattle' logger."""

import logging

LOGGER_NAME = "chessbattle"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logger(level: str = "INFO") -> logging.Logger:
    """
    Attach a single stream handler to the package logger.

    Calling it again replaces the handler instead of stacking a second one.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level.upper())
    logger.handlers.clear()

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    logger.addHandler(handler)
    logger.propagate = False
    return logger
