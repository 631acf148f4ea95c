"""
Logging configuration for the NoteClerk service.
"""

import logging
import sys
from pathlib import Path

LOG_FILE_NAME = "noteclerk.log"


def setup_logging(log_path: str | None = None) -> logging.Logger:
    """
    Configure application logging.

    Logs go to stdout and, when ``log_path`` is given, to ``noteclerk.log``
    inside that directory. Calling this again after logging has been
    configured leaves the existing handlers in place.

    :param log_path: Directory that receives the log file
    :type log_path: str | None
    :return: Root logger for the NoteClerk application
    :rtype: logging.Logger
    """
    root = logging.getLogger()
    if root.handlers:
        return logging.getLogger('noteclerk')

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_path:
        log_dir = Path(log_path)
        log_dir.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_dir / LOG_FILE_NAME, encoding="utf-8"))

    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers
    )

    return logging.getLogger('noteclerk')


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger for a specific module.

    :param name: The module name for the logger
    :type name: str
    :return: Logger instance for the specified module
    :rtype: logging.Logger
    """
    return logging.getLogger(f'noteclerk.{name}')
