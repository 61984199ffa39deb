import logging
import os
import sys
from typing import Optional, TextIO

from tqdm import tqdm

LOGGER_NAME = "translation_sync"

FILE_FORMAT = '%(asctime)s - %(levelname)s - %(module)s - %(message)s'
CONSOLE_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'


class TqdmLoggingHandler(logging.Handler):
    """
    Console handler for runs that show per-file progress bars.

    Records go through ``tqdm.write`` so a log line printed mid-run lands
    above the active bar instead of splitting it.
    """
    def __init__(self, level=logging.NOTSET, stream: Optional[TextIO] = None):
        super().__init__(level)
        self.stream = stream

    def emit(self, record):
        try:
            tqdm.write(self.format(record), file=self.stream or sys.stderr)
        except (KeyboardInterrupt, SystemExit):
            raise
        except Exception:
            self.handleError(record)


def _file_handler(log_file_path: str) -> logging.Handler:
    log_dir = os.path.dirname(log_file_path)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
    handler = logging.FileHandler(log_file_path, encoding='utf-8')
    handler.setFormatter(logging.Formatter(FILE_FORMAT))
    return handler


def _console_handler() -> logging.Handler:
    handler = TqdmLoggingHandler()
    handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    return handler


def _reset_handlers(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


def setup_logger(log_level_str: str, log_file_path: Optional[str], log_to_console: bool) -> logging.Logger:
    """
    Configure the ``translation_sync`` logger every command module writes to.

    Calling it again replaces the previous handlers, so a config reload does
    not duplicate log lines. The logger does not propagate to the root logger.

    Args:
        log_level_str: Level name such as 'INFO' or 'DEBUG'; unknown names mean INFO.
        log_file_path: Log file to append to; empty or None disables file logging.
        log_to_console: Whether to log to stderr through the progress-bar aware handler.

    Returns:
        The configured logger.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, log_level_str.upper(), logging.INFO))
    logger.propagate = False
    _reset_handlers(logger)

    if log_file_path:
        logger.addHandler(_file_handler(log_file_path))
    if log_to_console:
        logger.addHandler(_console_handler())
    return logger
