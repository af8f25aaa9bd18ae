"""
Logging Configuration
=====================
Every mindcanvas module logs through `logging.getLogger(__name__)`, so all
records end up under the 'mindcanvas' logger configured here. `main()` calls
`setup_logging` once before the QApplication exists; `--debug` lowers the
level and `--log-file` adds a copy of the session log on disk.
"""
import logging
import sys
from typing import Optional

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_DATE_FORMAT = '%H:%M:%S'


def setup_logging(level: int = logging.INFO, log_file: Optional[str] = None) -> logging.Logger:
    """
    Configures the 'mindcanvas' logger and returns it.

    Args:
        level: Threshold for the logger and its handlers.
        log_file: Optional path; the file is truncated at start-up.
    """
    logger = logging.getLogger("mindcanvas")
    logger.setLevel(level)

    # Calling this twice (tests, re-opened windows) must not duplicate output
    if logger.hasHandlers():
        logger.handlers.clear()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    # Controller notices and store errors go to the terminal
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode='w', encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.info(f"Logging initialized at {logging.getLevelName(level)}.")
    return logger
