import logging
from logging import Logger

from .config import Settings

LOGGER_NAME = "docbuild"

DEFAULT_FORMAT = "[%(levelname)s] %(asctime)s | %(name)s | %(message)s"
HUMAN_FORMAT = "%(asctime)s %(levelname)-8s %(name)s (%(module)s:%(lineno)d) %(message)s"


def configure_logging(settings: Settings) -> Logger:
    """Set up the single application logger; child loggers propagate to it."""
    logger = logging.getLogger(LOGGER_NAME)
    if logger.handlers:
        return logger

    logger.setLevel(logging.DEBUG if settings.debug else logging.INFO)

    handler = logging.StreamHandler()
    formatter = logging.Formatter(HUMAN_FORMAT if settings.human_logs else DEFAULT_FORMAT)
    handler.setFormatter(formatter)

    logger.addHandler(handler)
    logger.propagate = False

    return logger


def get_logger(name: str) -> Logger:
    """Child of the application logger, e.g. ``docbuild.merge``."""
    return logging.getLogger(f"{LOGGER_NAME}.{name}")
