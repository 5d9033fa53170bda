"""Logging configuration for the assistant processes."""

from logging.handlers import RotatingFileHandler
from typing import Any, Dict, Optional
import logging
import sys


DEFAULT_FORMAT = '%(asctime)s %(levelname)s [%(name)s] %(message)s'
DEFAULT_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def setup_logging(logging_config: Optional[Dict[str, Any]] = None, console: bool = True) -> None:
    """Set up logging configuration.

    Configures the root logger with a rotating file handler and, optionally,
    a console handler. Existing root handlers are replaced.

    Args:
        logging_config: Logging configuration dictionary (the 'logging'
            section of the config file).
        console: Whether to also log to stdout.
    """
    logging_config = logging_config or {}

    log_file = logging_config.get('file')
    log_level = logging_config.get('level', 'INFO')
    max_bytes = logging_config.get('max_bytes', 10485760)
    backup_count = logging_config.get('backup_count', 5)
    log_format = logging_config.get('format', DEFAULT_FORMAT)
    date_format = logging_config.get('date_format', DEFAULT_DATE_FORMAT)
    formatter = logging.Formatter(log_format, date_format)

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, str(log_level).upper(), logging.INFO))

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    if log_file:
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=max_bytes,
            backupCount=backup_count,
        )
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    if console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    # httpx logs every request at INFO
    logging.getLogger('httpx').setLevel(logging.WARNING)
