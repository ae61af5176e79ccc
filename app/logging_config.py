"""Root logger setup for the API process."""

import sys

from deps import logging

from .config import get_log_level

DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(module)s:%(funcName)s:%(lineno)d - %(message)s"


def setup_logging(stream=None) -> None:
    """
    Configures the root logger from LOG_LEVEL with one console handler.
    Existing root handlers are replaced, so repeated calls leave exactly one.
    The handler writes to stream, or sys.stdout if stream is None.
    """
    numeric_level = getattr(logging, get_log_level(), None)
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(stream if stream is not None else sys.stdout)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(logging.Formatter(DEFAULT_LOG_FORMAT))
    root_logger.addHandler(console_handler)
