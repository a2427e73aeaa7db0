import copy
import logging
import os

from rich.logging import RichHandler

from utils import config

ROOT_LOGGER = "catalog"


class CenteredFormatter(logging.Formatter):
    """Pads logger names to the longest one seen so messages line up."""

    name_width = 14

    def format(self, record):
        CenteredFormatter.name_width = max(CenteredFormatter.name_width, len(record.name))
        # other handlers share the record, so pad a copy
        record = copy.copy(record)
        record.name = record.name.center(CenteredFormatter.name_width)
        return super().format(record)


def _log_level() -> int:
    if os.getenv("DEBUG"):
        return logging.DEBUG
    return getattr(logging, config.LOG_LEVEL, logging.INFO)


def _file_handler(path: str) -> logging.Handler:
    folder = os.path.dirname(path)
    if folder:
        os.makedirs(folder, exist_ok=True)
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)-7s [%(name)s] %(message)s")
    )
    return handler


def get_logger(name=None) -> logging.Logger:
    """
    Return a logger writing through rich's RichHandler, plus
    CATALOG_LOG_FILE when it is set.
    Handlers are attached once per logger name.
    """
    logger = logging.getLogger(name or ROOT_LOGGER)
    log_level = _log_level()
    logger.setLevel(log_level)

    if logger.handlers:
        return logger

    console_handler = RichHandler(
        show_time=True,
        show_level=True,
        show_path=False,
        rich_tracebacks=True,
        log_time_format="[%X]",
    )
    console_handler.setFormatter(CenteredFormatter("[%(name)s]  %(message)s"))
    handlers = [console_handler]
    if config.LOG_FILE:
        handlers.append(_file_handler(config.LOG_FILE))

    for handler in handlers:
        handler.setLevel(log_level)
        logger.addHandler(handler)
    logger.propagate = False
    logger.debug(f"Logger for '{logger.name}' initialized.")

    return logger
