"""Logging setup for the vanity server: stderr plus an optional log file."""

import logging
from pathlib import Path

LOGGER_NAME = "vanitypkg"


def get_logger(name=None):
    """Return a logger under the vanitypkg hierarchy."""
    full_name = f"{LOGGER_NAME}.{name}" if name else LOGGER_NAME
    return logging.getLogger(full_name)


def configure_logging(log_file=None, verbose=False):
    """Send vanitypkg logs to stderr and, if given, append them to log_file."""
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    # configure_logging may run more than once per process (tests, gunicorn reload)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(level)
    stream_handler.setFormatter(formatter)
    logger.addHandler(stream_handler)

    if log_file:
        file_handler = logging.FileHandler(Path(log_file), mode="a", encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger
