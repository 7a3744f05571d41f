"""
logging_setup.py

Configures the root logger for the exporter: a console handler always, and
a size-rotating file handler when a log directory is given.
"""

import logging
import os
from logging.handlers import RotatingFileHandler

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
MAX_LOG_BYTES = 1_000_000
LOG_BACKUP_COUNT = 3
CONSOLE_HANDLER_NAME = "temperature_exporter.console"
FILE_HANDLER_NAME = "temperature_exporter.file"


def setup_logging(
    log_dir: str | None = None,
    log_file_name: str = "temperature_exporter.log",
    log_level: str = "INFO",
) -> logging.Logger:
    """
    Configure and return the root logger.

    Calling this more than once only updates the level; the exporter's
    handlers are added the first time. Handlers installed by anyone else
    are left alone.
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, str(log_level).upper(), logging.INFO))

    if any(h.get_name() == CONSOLE_HANDLER_NAME for h in root.handlers):
        return root

    formatter = logging.Formatter(LOG_FORMAT)

    console = logging.StreamHandler()
    console.set_name(CONSOLE_HANDLER_NAME)
    console.setFormatter(formatter)
    root.addHandler(console)

    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        file_handler = RotatingFileHandler(
            os.path.join(log_dir, log_file_name),
            maxBytes=MAX_LOG_BYTES,
            backupCount=LOG_BACKUP_COUNT,
        )
        file_handler.set_name(FILE_HANDLER_NAME)
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    return root
